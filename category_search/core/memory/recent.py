from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Mapping

from category_search.core.model import CategoryNode, RecentReply


class RecentActivityIndex:
    """Recent replies per category, newest first."""

    def __init__(self, replies: Mapping[int, Iterable[RecentReply]] | None = None) -> None:
        self._replies = {
            cid: sorted(items, key=lambda r: (-r.timestamp, -r.pid))
            for cid, items in (replies or {}).items()
        }

    def latest(self, cid: int, count: int) -> list[RecentReply]:
        if count <= 0:
            return []
        return list(self._replies.get(cid, [])[:count])

    async def annotate(
        self, nodes: list[CategoryNode], uid: int, context_token: str
    ) -> list[CategoryNode]:
        return [self._annotate(n, context_token) for n in nodes]

    def _annotate(self, node: CategoryNode, context_token: str) -> CategoryNode:
        replies = tuple(
            replace(r, url=_with_token(r.url, context_token))
            for r in self.latest(node.id, node.num_recent_replies)
        )
        children = tuple(self._annotate(c, context_token) for c in node.children)
        return replace(node, recent_replies=replies, children=children)


def _with_token(url: str, token: str) -> str:
    if not token:
        return url
    token = token.lstrip("?")
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{token}"
