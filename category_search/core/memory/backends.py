from __future__ import annotations

from typing import Optional

from category_search.core.config import DEFAULT_KEY_SEPARATOR
from category_search.core.memory.hooks import HookRegistry
from category_search.core.memory.privileges import PrivilegeTable
from category_search.core.memory.recent import RecentActivityIndex
from category_search.core.memory.store import InMemoryTaxonomyStore
from category_search.core.memory.tree import build_tree
from category_search.core.model import TaxonomyGraph
from category_search.core.search.contracts import SearchBackends


def backends_from_graph(
    graph: TaxonomyGraph,
    *,
    hooks: Optional[HookRegistry] = None,
    separator: str = DEFAULT_KEY_SEPARATOR,
) -> SearchBackends:
    return SearchBackends(
        store=InMemoryTaxonomyStore(graph.categories_by_id.values(), separator=separator),
        hooks=hooks or HookRegistry(),
        authorizer=PrivilegeTable(public=graph.public, grants=graph.grants),
        build_tree=build_tree,
        annotator=RecentActivityIndex(graph.recent),
    )
