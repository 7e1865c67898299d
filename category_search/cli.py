from __future__ import annotations

import json
import logging
import sys

import typer
from rich.console import Console
from rich.table import Table

from category_search.core.config import SearchSettings, SettingsConfigError, load_settings
from category_search.core.errors import (
    QueryError,
    SearchError,
    TaxonomyLoadError,
    UsageError,
)
from category_search.core.io.load_taxonomy import load_taxonomy
from category_search.core.memory.backends import backends_from_graph
from category_search.core.model import SearchQuery, SearchResult, TaxonomyGraph
from category_search.core.search.pipeline import search as run_search
from category_search.core.validate.validate_taxonomy import summarize_taxonomy, validate_taxonomy

app = typer.Typer(add_completion=False, no_args_is_help=True)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


@app.callback()
def _callback() -> None:
    """Category search CLI."""
    return


@app.command("validate")
def validate(
    path: str = typer.Argument(..., help="Path to a taxonomy file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Validate a taxonomy file."""
    if format not in ("text", "json"):
        _print_errors([_unknown_format(format, "E_VALIDATE_UNKNOWN_FORMAT")])
        raise typer.Exit(code=2)

    def _to_item(e: SearchError) -> dict:
        source = "load" if isinstance(e, TaxonomyLoadError) else "validate"
        return {
            "code": e.code,
            "message": e.message,
            "file": e.file,
            "path": e.path,
            "severity": "error",
            "source": source,
        }

    def _emit_json(ok: bool, *, exit_code: int, errors: list[SearchError], summary: dict | None) -> None:
        payload = {
            "tool": "category-search",
            "command": "validate",
            "ok": ok,
            "error_count": len(errors),
            "errors": [_to_item(e) for e in errors],
            "summary": summary,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        raise typer.Exit(code=exit_code)

    try:
        data = load_taxonomy(path)
    except TaxonomyLoadError as e:
        if format == "json":
            _emit_json(False, exit_code=1, errors=[e], summary=None)
        _print_errors([e])
        raise typer.Exit(code=1)

    graph, errors = validate_taxonomy(data)
    if errors:
        if format == "json":
            _emit_json(False, exit_code=2, errors=list(errors), summary=None)
        _print_errors(list(errors))
        raise typer.Exit(code=2)

    assert graph is not None

    if format == "text":
        typer.echo(summarize_taxonomy(graph))
        return

    summary = {
        "category_count": len(graph.categories_by_id),
        "roots": list(graph.roots),
        "public_count": len(graph.public),
        "grant_uids": sorted(graph.grants.keys()),
    }
    _emit_json(True, exit_code=0, errors=[], summary=summary)


@app.command("search")
def search_cmd(
    path: str = typer.Argument(..., help="Path to a taxonomy file (.yaml/.yml/.json)"),
    query: str = typer.Argument(..., help="Text to match against category names"),
    uid: int = typer.Option(0, "--uid", help="Acting user id (0 = guest)"),
    page: int = typer.Option(0, "--page", help="Page number (default from settings)"),
    page_size: int = typer.Option(0, "--page-size", help="Categories per page (default from settings)"),
    cap: int = typer.Option(0, "--cap", help="Max name-scan candidates (default from settings)"),
    paginate: bool | None = typer.Option(None, "--paginate/--no-paginate", help="Paginate results"),
    context_token: str = typer.Option("", "--context-token", help="Query string appended to reply links"),
    settings_file: str | None = typer.Option(None, "--settings-file", help="Optional YAML settings overrides"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline stages to stderr"),
) -> None:
    """Search a taxonomy file for categories matching QUERY."""
    if format not in ("text", "json"):
        _print_errors([_unknown_format(format, "E_SEARCH_UNKNOWN_FORMAT")])
        raise typer.Exit(code=2)

    if verbose:
        _configure_logging()

    settings = _load_settings_or_exit(settings_file)
    graph = _load_graph_or_exit(path)

    request: dict = {
        "query": query,
        "uid": uid,
        "page": page,
        "page_size": page_size,
        "candidate_cap": cap,
        "context_token": context_token,
    }
    if paginate is not None:
        request["paginate"] = paginate

    try:
        search_query = SearchQuery.from_mapping(request, settings)
    except QueryError as e:
        _print_errors([e])
        raise typer.Exit(code=2)

    backends = backends_from_graph(graph, separator=settings.key_separator)
    try:
        result = run_search(search_query, backends=backends, settings=settings)
    except SearchError as e:
        _print_errors([e])
        raise typer.Exit(code=1)

    if format == "json":
        typer.echo(json.dumps(result.to_dict(), indent=2, sort_keys=True))
        return

    _print_result(result, search_query)


@app.command("settings")
def settings_cmd(
    settings_file: str | None = typer.Option(
        None,
        "--settings-file",
        help="Optional YAML file to override defaults",
    ),
) -> None:
    """Show the effective search settings (defaults <- file <- environment)."""
    settings = _load_settings_or_exit(settings_file)
    typer.echo("Settings:")
    for name, value in sorted(settings.to_dict().items()):
        typer.echo(f"- {name}: {value}")


def _load_settings_or_exit(settings_file: str | None) -> SearchSettings:
    try:
        return load_settings(settings_file)
    except FileNotFoundError:
        _print_errors(
            [
                UsageError(
                    code="E_SETTINGS_FILE_NOT_FOUND",
                    message=f"settings file not found: {settings_file}",
                    file=None,
                    path="settings_file",
                )
            ]
        )
        raise typer.Exit(code=1)
    except SettingsConfigError as e:
        _print_errors(
            [
                UsageError(
                    code="E_SETTINGS_INVALID",
                    message=str(e),
                    file=settings_file,
                    path="settings_file",
                )
            ]
        )
        raise typer.Exit(code=2)


def _load_graph_or_exit(path: str) -> TaxonomyGraph:
    try:
        data = load_taxonomy(path)
    except TaxonomyLoadError as e:
        _print_errors([e])
        raise typer.Exit(code=1)

    graph, errors = validate_taxonomy(data)
    if errors or graph is None:
        _print_errors(list(errors))
        raise typer.Exit(code=2)
    return graph


def _print_result(result: SearchResult, query: SearchQuery) -> None:
    console = Console()
    table = Table(title=f"categories matching {query.text!r}")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Parent", justify="right")
    table.add_column("Order", justify="right")
    table.add_column("Children")
    for c in result.categories:
        children = ", ".join(f"{k.name} ({k.id})" for k in c.children)
        table.add_row(str(c.id), c.name, str(c.parent_id), str(c.order), children or "-")
    console.print(table)

    if result.page_count:
        paging = f"page {query.page}/{result.page_count}"
    else:
        paging = "unpaginated"
    console.print(f"{result.match_count} matches, {paging}, {result.timing}s")


def _configure_logging() -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root = logging.getLogger("category_search")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def _unknown_format(format: str, code: str) -> UsageError:
    return UsageError(
        code=code,
        message=f"unknown format: {format} (choose one of: text, json)",
        file=None,
        path="format",
    )


def _print_errors(errors: list[SearchError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="category-search")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
