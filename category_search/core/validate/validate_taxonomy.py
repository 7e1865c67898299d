from __future__ import annotations

from typing import Any, Iterable, Optional, cast

from category_search.core.errors import TaxonomyValidationError
from category_search.core.model import (
    DEFAULT_NUM_RECENT_REPLIES,
    DEFAULT_SUBCATEGORIES_PER_PAGE,
    ROOT_PARENT_ID,
    CategoryNode,
    RecentReply,
    TaxonomyGraph,
)


CATEGORY_KEYS: set[str] = {
    "id",
    "name",
    "parent_id",
    "order",
    "subcategories_per_page",
    "num_recent_replies",
}


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _is_list_of_int(v: Any) -> bool:
    return isinstance(v, list) and all(_is_int(x) for x in v)


def _as_id_key(k: Any) -> Optional[int]:
    # YAML gives int keys, JSON gives strings.
    if _is_int(k):
        return cast(int, k)
    if isinstance(k, str) and k.isascii() and k.isdigit():
        return int(k)
    return None


def validate_taxonomy(
    data: dict[str, Any],
) -> tuple[Optional[TaxonomyGraph], list[TaxonomyValidationError]]:
    """Validate a loaded taxonomy document.

    Returns (graph, errors). Graph is None when errors exist.
    """

    file = cast(Optional[str], data.get("__file__"))
    errors: list[TaxonomyValidationError] = []

    categories = data.get("categories")
    if not isinstance(categories, list):
        errors.append(
            TaxonomyValidationError(
                code="E_REQUIRED_FIELD",
                message="categories is required and must be an array",
                file=file,
                path="categories",
            )
        )
        return None, _sorted(errors)

    nodes_by_id: dict[int, CategoryNode] = {}
    index_by_id: dict[int, int] = {}

    for i, raw in enumerate(categories):
        node_path = f"categories[{i}]"
        if not isinstance(raw, dict):
            errors.append(
                TaxonomyValidationError(
                    code="E_INVALID_TYPE",
                    message="category must be an object",
                    file=file,
                    path=node_path,
                )
            )
            continue

        cid = raw.get("id")
        if not _is_int(cid) or cid <= 0:
            errors.append(
                TaxonomyValidationError(
                    code="E_REQUIRED_FIELD",
                    message="id is required and must be a positive integer",
                    file=file,
                    path=f"{node_path}.id",
                )
            )
            continue

        if cid in nodes_by_id:
            errors.append(
                TaxonomyValidationError(
                    code="E_DUPLICATE_ID",
                    message=f"duplicate category id: {cid}",
                    file=file,
                    path=f"{node_path}.id",
                )
            )
            continue

        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            errors.append(
                TaxonomyValidationError(
                    code="E_REQUIRED_FIELD",
                    message="name is required and must be a non-empty string",
                    file=file,
                    path=f"{node_path}.name",
                )
            )
            continue

        defaults = {
            "parent_id": ROOT_PARENT_ID,
            "order": 0,
            "subcategories_per_page": DEFAULT_SUBCATEGORIES_PER_PAGE,
            "num_recent_replies": DEFAULT_NUM_RECENT_REPLIES,
        }
        ints: dict[str, int] = {}
        bad = False
        for key, default in defaults.items():
            value = raw.get(key, default)
            if not _is_int(value) or value < 0:
                errors.append(
                    TaxonomyValidationError(
                        code="E_INVALID_TYPE",
                        message=f"{key} must be a non-negative integer",
                        file=file,
                        path=f"{node_path}.{key}",
                    )
                )
                bad = True
            else:
                ints[key] = value
        if bad:
            continue

        index_by_id[cid] = i
        nodes_by_id[cid] = CategoryNode(
            id=cid,
            name=name,
            parent_id=ints["parent_id"],
            order=ints["order"],
            subcategories_per_page=ints["subcategories_per_page"],
            num_recent_replies=ints["num_recent_replies"],
            fields={k: v for k, v in raw.items() if k not in CATEGORY_KEYS},
        )

    # Referential integrity checks.
    for cid, node in nodes_by_id.items():
        if node.parent_id == ROOT_PARENT_ID:
            continue
        if node.parent_id == cid or node.parent_id not in nodes_by_id:
            errors.append(
                TaxonomyValidationError(
                    code="E_UNKNOWN_PARENT",
                    message=f"parent_id references unknown id: {node.parent_id}",
                    file=file,
                    path=f"categories[{index_by_id[cid]}].parent_id",
                )
            )

    for cid in _cycle_members(nodes_by_id):
        errors.append(
            TaxonomyValidationError(
                code="E_PARENT_CYCLE",
                message=f"category {cid} is its own ancestor",
                file=file,
                path=f"categories[{index_by_id[cid]}].parent_id",
            )
        )

    public, grants = _validate_privileges(data.get("privileges"), nodes_by_id, file, errors)
    recent = _validate_recent(data.get("recent"), nodes_by_id, file, errors)

    if errors:
        return None, _sorted(errors)

    roots = sorted(cid for cid, n in nodes_by_id.items() if n.parent_id == ROOT_PARENT_ID)
    graph = TaxonomyGraph(
        categories_by_id=nodes_by_id,
        roots=roots,
        public=public,
        grants=grants,
        recent=recent,
    )
    return graph, []


def _cycle_members(nodes_by_id: dict[int, CategoryNode]) -> list[int]:
    out: list[int] = []
    for cid in nodes_by_id:
        if nodes_by_id[cid].parent_id == cid:
            # Reported as E_UNKNOWN_PARENT.
            continue
        seen: set[int] = set()
        cur = nodes_by_id[cid].parent_id
        while cur in nodes_by_id and cur not in seen and cur != cid:
            seen.add(cur)
            cur = nodes_by_id[cur].parent_id
        if cur == cid:
            out.append(cid)
    return sorted(out)


def _validate_privileges(
    raw: Any,
    nodes_by_id: dict[int, CategoryNode],
    file: Optional[str],
    errors: list[TaxonomyValidationError],
) -> tuple[list[int], dict[int, list[int]]]:
    if raw is None:
        return [], {}
    if not isinstance(raw, dict):
        errors.append(
            TaxonomyValidationError(
                code="E_INVALID_TYPE",
                message="privileges must be an object",
                file=file,
                path="privileges",
            )
        )
        return [], {}

    public = raw.get("public", [])
    if not _is_list_of_int(public):
        errors.append(
            TaxonomyValidationError(
                code="E_INVALID_TYPE",
                message="privileges.public must be an array of integers",
                file=file,
                path="privileges.public",
            )
        )
        public = []

    grants: dict[int, list[int]] = {}
    raw_grants = raw.get("grants", {})
    if not isinstance(raw_grants, dict):
        errors.append(
            TaxonomyValidationError(
                code="E_INVALID_TYPE",
                message="privileges.grants must be a mapping of uid -> ids",
                file=file,
                path="privileges.grants",
            )
        )
        raw_grants = {}

    for k, ids in raw_grants.items():
        uid = _as_id_key(k)
        if uid is None or not _is_list_of_int(ids):
            errors.append(
                TaxonomyValidationError(
                    code="E_INVALID_TYPE",
                    message="privileges.grants entries must map an integer uid to an array of integers",
                    file=file,
                    path=f"privileges.grants.{k}",
                )
            )
            continue
        grants[uid] = list(ids)

    for path, ids in [("privileges.public", public)] + [
        (f"privileges.grants.{uid}", ids) for uid, ids in grants.items()
    ]:
        for i, cid in enumerate(ids):
            if cid not in nodes_by_id:
                errors.append(
                    TaxonomyValidationError(
                        code="E_UNKNOWN_CATEGORY",
                        message=f"privilege references unknown category id: {cid}",
                        file=file,
                        path=f"{path}[{i}]",
                    )
                )
    return list(public), grants


def _validate_recent(
    raw: Any,
    nodes_by_id: dict[int, CategoryNode],
    file: Optional[str],
    errors: list[TaxonomyValidationError],
) -> dict[int, list[RecentReply]]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        errors.append(
            TaxonomyValidationError(
                code="E_INVALID_TYPE",
                message="recent must be a mapping of category id -> replies",
                file=file,
                path="recent",
            )
        )
        return {}

    out: dict[int, list[RecentReply]] = {}
    for k, items in raw.items():
        cid = _as_id_key(k)
        if cid is None or cid not in nodes_by_id:
            errors.append(
                TaxonomyValidationError(
                    code="E_UNKNOWN_CATEGORY",
                    message=f"recent references unknown category id: {k}",
                    file=file,
                    path=f"recent.{k}",
                )
            )
            continue
        if not isinstance(items, list):
            errors.append(
                TaxonomyValidationError(
                    code="E_INVALID_TYPE",
                    message="recent replies must be an array",
                    file=file,
                    path=f"recent.{k}",
                )
            )
            continue

        replies: list[RecentReply] = []
        for i, item in enumerate(items):
            if (
                not isinstance(item, dict)
                or not _is_int(item.get("pid"))
                or not isinstance(item.get("title"), str)
                or not _is_int(item.get("timestamp"))
                or not isinstance(item.get("url", ""), str)
            ):
                errors.append(
                    TaxonomyValidationError(
                        code="E_INVALID_TYPE",
                        message="reply must have integer pid, string title, integer timestamp and optional string url",
                        file=file,
                        path=f"recent.{k}[{i}]",
                    )
                )
                continue
            replies.append(
                RecentReply(
                    pid=item["pid"],
                    title=item["title"],
                    timestamp=item["timestamp"],
                    url=item.get("url", ""),
                )
            )
        out[cid] = replies
    return out


def summarize_taxonomy(graph: TaxonomyGraph) -> str:
    nested = len(graph.categories_by_id) - len(graph.roots)
    return (
        f"OK: {len(graph.categories_by_id)} categories "
        f"(top-level={len(graph.roots)}, nested={nested})\n"
        f"Public: {len(graph.public)}, grants: {len(graph.grants)} uids"
    )


def _sorted(errors: Iterable[TaxonomyValidationError]) -> list[TaxonomyValidationError]:
    return sorted(
        list(errors),
        key=lambda e: (
            e.file or "",
            e.path or "",
            e.code,
        ),
    )
