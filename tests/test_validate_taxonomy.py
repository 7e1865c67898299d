from category_search.core.io.load_taxonomy import load_taxonomy
from category_search.core.model import CategoryNode
from category_search.core.validate.validate_taxonomy import summarize_taxonomy, validate_taxonomy


def _codes(errors):
    return {e.code for e in errors}


def test_example_taxonomy_is_valid(news_graph):
    assert news_graph.roots == [1, 2, 5]
    assert news_graph.grants == {7: [9, 12, 13]}
    assert [r.pid for r in news_graph.recent[5]] == [100, 90]
    assert news_graph.categories_by_id[12] == CategoryNode(id=12, name="Tech News", parent_id=1, order=1)
    assert summarize_taxonomy(news_graph).startswith("OK: 10 categories (top-level=3, nested=7)")


def test_json_keys_are_coerced(examples_dir):
    graph, errors = validate_taxonomy(load_taxonomy(str(examples_dir / "taxonomy.json")))
    assert errors == []
    assert graph.grants == {3: [1]}
    assert list(graph.recent) == [1]


def test_unknown_parent(examples_dir):
    graph, errors = validate_taxonomy(load_taxonomy(str(examples_dir / "invalid-unknown-parent.yaml")))
    assert graph is None
    assert [(e.code, e.path) for e in errors] == [("E_UNKNOWN_PARENT", "categories[0].parent_id")]


def test_categories_required():
    graph, errors = validate_taxonomy({"categories": None})
    assert graph is None
    assert _codes(errors) == {"E_REQUIRED_FIELD"}


def test_field_errors():
    data = {
        "categories": [
            {"id": 0, "name": "zero"},
            {"id": 1, "name": ""},
            {"id": 2, "name": "ok", "order": -1},
            {"id": 3, "name": "ok", "subcategories_per_page": "ten"},
            {"id": 4, "name": "ok"},
            {"id": 4, "name": "again"},
            "nope",
        ]
    }
    _, errors = validate_taxonomy(data)
    got = [(e.code, e.path) for e in errors]
    assert got == [
        ("E_REQUIRED_FIELD", "categories[0].id"),
        ("E_REQUIRED_FIELD", "categories[1].name"),
        ("E_INVALID_TYPE", "categories[2].order"),
        ("E_INVALID_TYPE", "categories[3].subcategories_per_page"),
        ("E_DUPLICATE_ID", "categories[5].id"),
        ("E_INVALID_TYPE", "categories[6]"),
    ]


def test_parent_cycle():
    data = {
        "categories": [
            {"id": 1, "name": "a", "parent_id": 2},
            {"id": 2, "name": "b", "parent_id": 1},
            {"id": 3, "name": "c", "parent_id": 3},
        ]
    }
    _, errors = validate_taxonomy(data)
    got = [(e.code, e.path) for e in errors]
    assert ("E_PARENT_CYCLE", "categories[0].parent_id") in got
    assert ("E_PARENT_CYCLE", "categories[1].parent_id") in got
    assert ("E_UNKNOWN_PARENT", "categories[2].parent_id") in got
    assert ("E_PARENT_CYCLE", "categories[2].parent_id") not in got


def test_privileges_and_recent_must_reference_known_categories():
    data = {
        "categories": [{"id": 1, "name": "a"}],
        "privileges": {"public": [1, 2], "grants": {"x": [1], 5: [9]}},
        "recent": {1: [{"pid": 1, "title": "t"}], 8: []},
    }
    _, errors = validate_taxonomy(data)
    got = {(e.code, e.path) for e in errors}
    assert got == {
        ("E_UNKNOWN_CATEGORY", "privileges.public[1]"),
        ("E_INVALID_TYPE", "privileges.grants.x"),
        ("E_UNKNOWN_CATEGORY", "privileges.grants.5[0]"),
        ("E_INVALID_TYPE", "recent.1[0]"),
        ("E_UNKNOWN_CATEGORY", "recent.8"),
    }
