from __future__ import annotations

from bisect import insort
from fnmatch import fnmatchcase
from typing import Iterable

from category_search.core.config import DEFAULT_KEY_SEPARATOR
from category_search.core.errors import StoreUnavailable
from category_search.core.model import CategoryNode


class InMemoryTaxonomyStore:
    """Taxonomy held in process memory.

    Names are indexed as `<lowercased name><sep><id>` members kept in lexical
    order, the way a sorted set with equal scores would return them.
    """

    def __init__(self, categories: Iterable[CategoryNode], separator: str = DEFAULT_KEY_SEPARATOR) -> None:
        self._separator = separator
        self._by_id: dict[int, CategoryNode] = {}
        self._children: dict[int, list[CategoryNode]] = {}
        self._name_index: list[str] = []
        self._closed = False

        # Call counters for diagnostics and tests.
        self.calls: dict[str, int] = {"name_scan": 0, "child_ids_of": 0, "hydrate": 0}

        for c in categories:
            self._by_id[c.id] = c
            insort(self._name_index, f"{c.name.lower()}{separator}{c.id}")
            self._children.setdefault(c.parent_id, []).append(c)

        for siblings in self._children.values():
            siblings.sort(key=lambda c: (c.order, c.id))

    def close(self) -> None:
        self._closed = True

    def add_raw_key(self, key: str) -> None:
        """Insert a name-index member as-is. Lets callers reproduce damaged indexes."""
        insort(self._name_index, key)

    def _check_open(self, operation: str) -> None:
        if self._closed:
            raise StoreUnavailable(
                code="E_STORE_UNAVAILABLE",
                message="taxonomy store is closed",
                path=operation,
            )

    async def name_scan(self, pattern: str, limit: int) -> list[str]:
        self._check_open("name_scan")
        self.calls["name_scan"] += 1
        out: list[str] = []
        for member in self._name_index:
            if len(out) >= limit:
                break
            if fnmatchcase(member, pattern):
                out.append(member)
        return out

    async def child_ids_of(self, cid: int) -> list[int]:
        self._check_open("child_ids_of")
        self.calls["child_ids_of"] += 1
        if cid not in self._by_id:
            return []
        return [c.id for c in self._children.get(cid, [])]

    async def hydrate(self, ids: list[int]) -> dict[int, CategoryNode]:
        self._check_open("hydrate")
        self.calls["hydrate"] += 1
        return {cid: self._by_id[cid] for cid in ids if cid in self._by_id}
