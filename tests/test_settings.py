import pytest

from category_search.core.config import (
    SearchSettings,
    SettingsConfigError,
    load_settings,
    load_settings_file,
    merged_settings,
    settings_from_env,
)


def test_defaults():
    s = SearchSettings()
    assert (s.candidate_cap, s.page_size, s.default_page) == (500, 50, 1)
    assert s.paginate is True
    assert s.min_query_length == 2
    assert s.key_separator == ":"
    assert s.hook_name == "filter:categories.search"


def test_load_settings_file(examples_dir):
    assert load_settings_file(examples_dir / "settings.yaml") == {"candidate_cap": 100, "page_size": 1}


def test_empty_settings_file(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    assert load_settings_file(p) == {}


@pytest.mark.parametrize(
    "body, fragment",
    [
        ("- 1\n", "mapping"),
        ("page_limit: 3\n", "unknown setting"),
        ("page_size: 0\n", "> 0"),
        ("page_size: true\n", "integer"),
        ("paginate: 1\n", "boolean"),
        ("key_separator: ''\n", "non-empty string"),
        ("min_query_length: -1\n", ">= 0"),
    ],
)
def test_invalid_settings_file(tmp_path, body, fragment):
    p = tmp_path / "bad.yaml"
    p.write_text(body, encoding="utf-8")
    with pytest.raises(SettingsConfigError) as ei:
        load_settings_file(p)
    assert fragment in str(ei.value)


def test_env_overrides():
    env = {
        "CATEGORY_SEARCH_PAGE_SIZE": "20",
        "CATEGORY_SEARCH_PAGINATE": "no",
        "CATEGORY_SEARCH_HOOK_NAME": "filter:custom",
        "UNRELATED": "1",
    }
    assert settings_from_env(env) == {"page_size": 20, "paginate": False, "hook_name": "filter:custom"}


def test_bad_env_value():
    with pytest.raises(SettingsConfigError):
        settings_from_env({"CATEGORY_SEARCH_CANDIDATE_CAP": "lots"})


def test_env_wins_over_file(examples_dir):
    s = load_settings(str(examples_dir / "settings.yaml"), environ={"CATEGORY_SEARCH_PAGE_SIZE": "5"})
    assert s.candidate_cap == 100
    assert s.page_size == 5


def test_merged_settings_skips_empty_overrides():
    assert merged_settings(None, {}, {"page_size": 3}) == SearchSettings(page_size=3)
