from __future__ import annotations

from typing import Iterable, Mapping

from category_search.core.errors import AuthorizationFailure


SUPPORTED_ACTIONS = {"find"}


class PrivilegeTable:
    """Static "find" privileges.

    `public` ids are visible to every uid, guests (uid 0) included; `grants`
    adds ids per uid. Filtering keeps the order of the ids passed in.
    """

    def __init__(self, public: Iterable[int] = (), grants: Mapping[int, Iterable[int]] | None = None) -> None:
        self._public = frozenset(public)
        self._grants = {uid: frozenset(ids) for uid, ids in (grants or {}).items()}
        self.calls = 0

    def visible_ids(self, uid: int) -> frozenset[int]:
        return self._public | self._grants.get(uid, frozenset())

    async def filter_ids(self, action: str, ids: list[int], uid: int) -> list[int]:
        self.calls += 1
        if action not in SUPPORTED_ACTIONS:
            raise AuthorizationFailure(
                code="E_AUTHZ_UNKNOWN_ACTION",
                message=f"unknown privilege action: {action}",
                path="action",
            )
        visible = self.visible_ids(uid)
        return [cid for cid in ids if cid in visible]
