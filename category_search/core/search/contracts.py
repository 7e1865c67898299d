from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol, TypeVar

from category_search.core.errors import SearchError, StoreUnavailable
from category_search.core.model import CategoryNode, FilterContext


T = TypeVar("T")


class TaxonomyStore(Protocol):
    async def name_scan(self, pattern: str, limit: int) -> list[str]:
        """Keys `<name><sep><id>` matching a glob pattern, at most `limit` of them."""
        ...

    async def child_ids_of(self, cid: int) -> list[int]:
        """Direct children only."""
        ...

    async def hydrate(self, ids: list[int]) -> dict[int, CategoryNode]:
        """Ids missing from the store are left out of the mapping."""
        ...


class HookDispatcher(Protocol):
    async def fire(self, name: str, context: FilterContext) -> FilterContext:
        """Run the listeners for `name`.

        The returned context's ids REPLACE the incoming ids.
        """
        ...


class Authorizer(Protocol):
    async def filter_ids(self, action: str, ids: list[int], uid: int) -> list[int]: ...


class RecentActivityAnnotator(Protocol):
    async def annotate(
        self, nodes: list[CategoryNode], uid: int, context_token: str
    ) -> list[CategoryNode]: ...


TreeBuilderFn = Callable[[list[CategoryNode], int], list[CategoryNode]]


@dataclass(frozen=True)
class SearchBackends:
    store: TaxonomyStore
    hooks: HookDispatcher
    authorizer: Authorizer
    build_tree: TreeBuilderFn
    annotator: RecentActivityAnnotator


async def call_store(operation: str, call: Callable[[], Awaitable[T]]) -> T:
    """Start and await a store call, reporting foreign exceptions as StoreUnavailable.

    `call` is invoked inside the guard, so a store method that fails before
    returning an awaitable is reported the same way.
    """
    try:
        return await call()
    except SearchError:
        raise
    except Exception as e:
        raise StoreUnavailable(
            code="E_STORE_UNAVAILABLE",
            message=f"{type(e).__name__}: {e}",
            path=operation,
        ) from e
