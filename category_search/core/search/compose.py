from __future__ import annotations

import logging
import time
from dataclasses import replace

from category_search.core.model import ROOT_PARENT_ID, CategoryNode, SearchQuery, SearchResult
from category_search.core.search.contracts import SearchBackends, call_store
from category_search.core.search.paginate import Page

logger = logging.getLogger(__name__)


def trim_children(nodes: list[CategoryNode]) -> list[CategoryNode]:
    """Cap each node's children at its own subcategories_per_page, one level deep.

    Nodes are visited in the given order. Each visit truncates first, then
    strips the kept children of their own children. A node stripped by an
    earlier visit is skipped, and it has no children wherever it shows up.
    """
    # None marks a node whose children were stripped by an earlier visit.
    current: dict[int, tuple[CategoryNode, ...] | None] = {n.id: n.children for n in nodes}
    for node in nodes:
        children = current[node.id]
        if children is None:
            continue
        kept = children[: node.subcategories_per_page]
        current[node.id] = kept
        for child in kept:
            current[child.id] = None

    out: list[CategoryNode] = []
    for node in nodes:
        children = current[node.id]
        if not children:
            out.append(replace(node, children=()) if node.children else node)
        else:
            out.append(replace(node, children=tuple(replace(c, children=()) for c in children)))
    return out


def sort_categories(nodes: list[CategoryNode]) -> list[CategoryNode]:
    return sorted(nodes, key=lambda c: (c.parent_id, c.order))


def format_timing(started: float) -> str:
    return f"{time.perf_counter() - started:.2f}"


async def compose_result(
    *,
    query: SearchQuery,
    page: Page,
    hydrate_ids: list[int],
    backends: SearchBackends,
    started: float,
) -> SearchResult:
    """Hydrate, shape and order the categories for one page of results.

    `page.total` is reported as the match count; only `page.ids` are listed
    at the top level, with any hydrated children nested under them.
    """
    by_id: dict[int, CategoryNode] = {}
    if hydrate_ids:
        by_id = await call_store("hydrate", lambda: backends.store.hydrate(list(hydrate_ids)))
    nodes = [by_id[cid] for cid in hydrate_ids if cid in by_id]

    nodes = backends.build_tree(nodes, ROOT_PARENT_ID)
    nodes = await backends.annotator.annotate(nodes, query.uid, query.context_token)
    nodes = sort_categories(trim_children(nodes))

    timing = format_timing(started)
    page_ids = set(page.ids)
    categories = [c for c in nodes if c.id in page_ids]
    logger.debug(
        "composed %d categories from %d hydrated nodes in %ss", len(categories), len(nodes), timing
    )
    return SearchResult(
        match_count=page.total,
        page_count=page.page_count,
        timing=timing,
        categories=categories,
    )
