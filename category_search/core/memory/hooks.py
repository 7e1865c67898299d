from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Union

from category_search.core.errors import HookFailure
from category_search.core.model import FilterContext


Listener = Callable[[FilterContext], Union[FilterContext, Awaitable[FilterContext]]]


class HookRegistry:
    """Named hooks with listeners run in registration order.

    Each listener gets the context returned by the previous one. Whatever ids
    the last listener returns replace the ids the hook was fired with.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def register(self, name: str, listener: Listener) -> None:
        self._listeners.setdefault(name, []).append(listener)

    def listeners(self, name: str) -> list[Listener]:
        return list(self._listeners.get(name, []))

    async def fire(self, name: str, context: FilterContext) -> FilterContext:
        current = context
        for listener in self._listeners.get(name, []):
            result: Any = listener(current)
            if inspect.isawaitable(result):
                result = await result
            if not isinstance(result, FilterContext):
                raise HookFailure(
                    code="E_HOOK_BAD_RESULT",
                    message=f"listener {getattr(listener, '__name__', listener)!r} returned {type(result).__name__}, expected FilterContext",
                    path=name,
                )
            current = result
        return current
