import json

from category_search.core.errors import TaxonomyLoadError
from category_search.core.io.load_taxonomy import load_taxonomy


def test_load_yaml_success(examples_dir):
    data = load_taxonomy(str(examples_dir / "taxonomy.yaml"))
    assert isinstance(data["categories"], list)
    assert data["privileges"]["public"][0] == 1
    assert data["__file__"].endswith("taxonomy.yaml")


def test_load_json_success(examples_dir):
    data = load_taxonomy(str(examples_dir / "taxonomy.json"))
    assert [c["id"] for c in data["categories"]] == [1, 2]
    assert data["privileges"]["grants"] == {3: [1]}


def test_missing_sections_default_to_empty(tmp_path):
    p = tmp_path / "tiny.yml"
    p.write_text("categories: []\n", encoding="utf-8")
    data = load_taxonomy(str(p))
    assert data["privileges"] == {"public": [], "grants": {}}
    assert data["recent"] == {}


def test_null_sections_and_string_ids_are_normalized(tmp_path):
    p = tmp_path / "taxonomy.json"
    p.write_text(
        json.dumps({"categories": [], "privileges": {"public": None, "grants": {"7": [1], "x": [2]}}, "recent": {"5": []}}),
        encoding="utf-8",
    )
    data = load_taxonomy(str(p))
    assert data["privileges"] == {"public": [], "grants": {7: [1], "x": [2]}}
    assert data["recent"] == {5: []}


def test_wrong_section_types_pass_through_to_the_validator(tmp_path):
    p = tmp_path / "taxonomy.yaml"
    p.write_text("categories: []\nprivileges: [1]\nrecent: nope\n", encoding="utf-8")
    data = load_taxonomy(str(p))
    assert data["privileges"] == [1]
    assert data["recent"] == "nope"


def test_undecodable_file_is_a_read_error(tmp_path):
    p = tmp_path / "taxonomy.yaml"
    p.write_bytes(b"categories: [\xff\xfe]\n")
    try:
        load_taxonomy(str(p))
        assert False, "expected TaxonomyLoadError"
    except TaxonomyLoadError as e:
        assert e.code == "E_FILE_READ"
        assert e.message.startswith("cannot read taxonomy")


def test_load_missing_file(examples_dir):
    try:
        load_taxonomy(str(examples_dir / "does-not-exist.yaml"))
        assert False, "expected TaxonomyLoadError"
    except TaxonomyLoadError as e:
        assert e.code == "E_FILE_NOT_FOUND"


def test_load_unsupported_format(tmp_path):
    p = tmp_path / "taxonomy.txt"
    p.write_text("hello", encoding="utf-8")
    try:
        load_taxonomy(str(p))
        assert False, "expected TaxonomyLoadError"
    except TaxonomyLoadError as e:
        assert e.code == "E_UNSUPPORTED_FORMAT"


def test_load_bad_json(tmp_path):
    p = tmp_path / "taxonomy.json"
    p.write_text("{not json", encoding="utf-8")
    try:
        load_taxonomy(str(p))
        assert False, "expected TaxonomyLoadError"
    except TaxonomyLoadError as e:
        assert e.code == "E_JSON_PARSE"
        assert str(e).startswith(str(p))


def test_load_non_mapping(tmp_path):
    p = tmp_path / "taxonomy.yaml"
    p.write_text("- 1\n- 2\n", encoding="utf-8")
    try:
        load_taxonomy(str(p))
        assert False, "expected TaxonomyLoadError"
    except TaxonomyLoadError as e:
        assert e.code == "E_INVALID_TOP_LEVEL"
