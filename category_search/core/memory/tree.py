from __future__ import annotations

from dataclasses import replace

from category_search.core.model import ROOT_PARENT_ID, CategoryNode


def build_tree(nodes: list[CategoryNode], parent_id: int = ROOT_PARENT_ID) -> list[CategoryNode]:
    """Attach each node under its parent when the parent is in `nodes`.

    Returns every input node, in input order, with `children` filled in
    recursively. Siblings are ordered by (order, id). Nodes hanging off
    `parent_id`, or off a parent that is not in the collection, stay
    unattached.
    """
    by_id = {n.id: n for n in nodes}
    children_of: dict[int, list[CategoryNode]] = {}
    for n in nodes:
        if n.parent_id == parent_id or n.parent_id == n.id:
            continue
        if n.parent_id in by_id:
            children_of.setdefault(n.parent_id, []).append(n)
    for siblings in children_of.values():
        siblings.sort(key=lambda c: (c.order, c.id))

    built: dict[int, CategoryNode] = {}

    def build(node: CategoryNode, path: frozenset[int]) -> CategoryNode:
        if node.id in built:
            return built[node.id]
        kids = tuple(
            build(k, path | {node.id}) for k in children_of.get(node.id, []) if k.id not in path
        )
        shaped = replace(node, children=kids)
        built[node.id] = shaped
        return shaped

    return [build(n, frozenset()) for n in nodes]
