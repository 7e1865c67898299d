from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from category_search.core.config import (
    DEFAULT_CANDIDATE_CAP,
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    SearchSettings,
)
from category_search.core.errors import QueryError


ROOT_PARENT_ID = 0
DEFAULT_SUBCATEGORIES_PER_PAGE = 10
DEFAULT_NUM_RECENT_REPLIES = 1


@dataclass(frozen=True)
class SearchQuery:
    text: str
    uid: int = 0
    page: int = DEFAULT_PAGE
    paginate: bool = True
    candidate_cap: int = DEFAULT_CANDIDATE_CAP
    page_size: int = DEFAULT_PAGE_SIZE
    # Opaque to the pipeline; handed to the recent-activity annotator.
    context_token: str = ""

    def __post_init__(self) -> None:
        if self.candidate_cap <= 0:
            raise QueryError(
                code="E_QUERY_INVALID",
                message=f"candidate_cap must be > 0, got {self.candidate_cap}",
                path="candidate_cap",
            )
        if self.page_size <= 0:
            raise QueryError(
                code="E_QUERY_INVALID",
                message=f"page_size must be > 0, got {self.page_size}",
                path="page_size",
            )

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any], settings: Optional[SearchSettings] = None
    ) -> "SearchQuery":
        """Build a query from a loose request mapping.

        Missing or falsy values fall back to the settings (page 0 means page 1,
        a cap of 0 means the default cap). `paginate` is only taken when present.
        """
        s = settings or SearchSettings()
        paginate = data["paginate"] if "paginate" in data else s.paginate
        return cls(
            text=str(data.get("query") or ""),
            uid=int(data.get("uid") or 0),
            page=int(data.get("page") or s.default_page),
            paginate=bool(paginate),
            candidate_cap=int(data.get("candidate_cap") or s.candidate_cap),
            page_size=int(data.get("page_size") or s.page_size),
            context_token=str(data.get("context_token") or ""),
        )


@dataclass(frozen=True)
class FilterContext:
    """State handed to the search hook.

    A listener returns a FilterContext whose `ids` REPLACE the candidate ids;
    they are not intersected with what the name scan found.
    """

    query: SearchQuery
    ids: tuple[int, ...]
    uid: int


@dataclass(frozen=True)
class RecentReply:
    pid: int
    title: str
    timestamp: int
    url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"pid": self.pid, "title": self.title, "timestamp": self.timestamp, "url": self.url}


@dataclass(frozen=True)
class CategoryNode:
    id: int
    name: str
    parent_id: int = ROOT_PARENT_ID
    order: int = 0
    subcategories_per_page: int = DEFAULT_SUBCATEGORIES_PER_PAGE
    num_recent_replies: int = DEFAULT_NUM_RECENT_REPLIES
    # Display-only data (description, icon, color, ...); never read by the pipeline.
    fields: Mapping[str, Any] = field(default_factory=dict)
    recent_replies: tuple[RecentReply, ...] = ()
    children: tuple["CategoryNode", ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "parent_id": self.parent_id,
            "order": self.order,
            "subcategories_per_page": self.subcategories_per_page,
            "fields": dict(self.fields),
            "recent_replies": [r.to_dict() for r in self.recent_replies],
            "children": [c.to_dict() for c in self.children],
        }


@dataclass(frozen=True)
class SearchResult:
    match_count: int
    page_count: int
    timing: str
    categories: list[CategoryNode]

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_count": self.match_count,
            "page_count": self.page_count,
            "timing": self.timing,
            "categories": [c.to_dict() for c in self.categories],
        }


@dataclass(frozen=True)
class TaxonomyGraph:
    categories_by_id: dict[int, CategoryNode]
    roots: list[int]
    public: list[int]
    grants: dict[int, list[int]]
    recent: dict[int, list[RecentReply]]
