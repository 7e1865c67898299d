import json

import pytest
import typer
from typer.testing import CliRunner

from category_search import cli
from category_search.cli import app
from category_search.core.errors import TaxonomyLoadError, TaxonomyValidationError, UsageError

runner = CliRunner()


def test_cli_validate_text(examples_dir):
    r = runner.invoke(app, ["validate", str(examples_dir / "taxonomy.yaml")])
    assert r.exit_code == 0, r.output
    assert r.stdout.startswith("OK: 10 categories")


def test_cli_validate_json_success(examples_dir):
    r = runner.invoke(app, ["validate", str(examples_dir / "taxonomy.yaml"), "--format", "json"])
    assert r.exit_code == 0
    payload = json.loads(r.stdout)
    assert payload["command"] == "validate"
    assert payload["ok"] is True
    assert payload["errors"] == []
    assert payload["summary"]["roots"] == [1, 2, 5]
    assert payload["summary"]["grant_uids"] == [7]


def test_cli_validate_json_failure_contains_codes(examples_dir):
    r = runner.invoke(app, ["validate", str(examples_dir / "invalid-unknown-parent.yaml"), "--format", "json"])
    assert r.exit_code == 2
    payload = json.loads(r.stdout)
    assert payload["ok"] is False
    assert {e["code"] for e in payload["errors"]} == {"E_UNKNOWN_PARENT"}
    assert payload["errors"][0]["source"] == "validate"


def test_cli_validate_json_load_error(examples_dir):
    r = runner.invoke(app, ["validate", str(examples_dir / "missing.json"), "--format", "json"])
    assert r.exit_code == 1
    payload = json.loads(r.stdout)
    assert payload["errors"][0]["source"] == "load"


def test_cli_settings_lists_effective_values(examples_dir, monkeypatch):
    monkeypatch.delenv("CATEGORY_SEARCH_PAGE_SIZE", raising=False)
    r = runner.invoke(app, ["settings", "--settings-file", str(examples_dir / "settings.yaml")])
    assert r.exit_code == 0, r.output
    assert "- candidate_cap: 100" in r.stdout
    assert "- page_size: 1" in r.stdout


def test_cli_settings_missing_file(examples_dir):
    r = runner.invoke(app, ["settings", "--settings-file", str(examples_dir / "nope.yaml")])
    assert r.exit_code == 1
    assert "E_SETTINGS_FILE_NOT_FOUND" in r.output


def test_settings_and_format_problems_are_usage_errors(examples_dir, tmp_path, monkeypatch):
    reported = []
    monkeypatch.setattr(cli, "_print_errors", reported.extend)

    bad = tmp_path / "settings.yaml"
    bad.write_text("page_size: -1\n", encoding="utf-8")
    for settings_file, code in [(str(examples_dir / "nope.yaml"), 1), (str(bad), 2)]:
        with pytest.raises(typer.Exit) as ei:
            cli._load_settings_or_exit(settings_file)
        assert ei.value.exit_code == code

    reported.append(cli._unknown_format("xml", "E_VALIDATE_UNKNOWN_FORMAT"))
    assert [e.code for e in reported] == [
        "E_SETTINGS_FILE_NOT_FOUND",
        "E_SETTINGS_INVALID",
        "E_VALIDATE_UNKNOWN_FORMAT",
    ]
    assert all(isinstance(e, UsageError) for e in reported)
    assert not any(isinstance(e, (TaxonomyLoadError, TaxonomyValidationError)) for e in reported)
