"""Read a category taxonomy document from disk.

The loader decodes the file and reshapes the optional sections so the
validator always sees the same layout. Type and reference checks belong to
`validate_taxonomy`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import yaml

from category_search.core.errors import TaxonomyLoadError

_DECODERS: dict[str, tuple[str, Callable[[str], Any]]] = {
    ".yaml": ("E_YAML_PARSE", yaml.safe_load),
    ".yml": ("E_YAML_PARSE", yaml.safe_load),
    ".json": ("E_JSON_PARSE", json.loads),
}


def _id_keyed(mapping: dict[Any, Any]) -> dict[Any, Any]:
    # JSON object keys are strings; uids and category ids are ints.
    return {
        int(k) if isinstance(k, str) and k.isascii() and k.isdigit() else k: v
        for k, v in mapping.items()
    }


def _privileges_section(raw: Any) -> Any:
    if raw is None:
        return {"public": [], "grants": {}}
    if not isinstance(raw, dict):
        return raw
    grants = raw.get("grants")
    if grants is None:
        grants = {}
    elif isinstance(grants, dict):
        grants = _id_keyed(grants)
    return {
        "public": [] if raw.get("public") is None else raw["public"],
        "grants": grants,
    }


def _recent_section(raw: Any) -> Any:
    if raw is None:
        return {}
    return _id_keyed(raw) if isinstance(raw, dict) else raw


def load_taxonomy(path: str) -> dict[str, Any]:
    """Load a `.yaml`/`.yml`/`.json` taxonomy.

    Returns `{categories, privileges, recent, __file__}`. A missing or empty
    `privileges` section becomes `{"public": [], "grants": {}}` and a missing
    `recent` section becomes `{}`. Numeric string keys under `grants` and
    `recent` become ints. Anything of the wrong type is passed through for
    the validator to report.
    """
    p = Path(path)
    file = str(p)
    decoder = _DECODERS.get(p.suffix.lower())
    if decoder is None:
        raise TaxonomyLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message=f"taxonomy must be a .yaml, .yml or .json file, got {p.suffix or 'no extension'!r}",
            file=file,
        )
    if not p.is_file():
        raise TaxonomyLoadError(code="E_FILE_NOT_FOUND", message="taxonomy file not found", file=file)

    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TaxonomyLoadError(code="E_FILE_READ", message=f"cannot read taxonomy: {e}", file=file) from e

    parse_code, decode = decoder
    try:
        doc = decode(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise TaxonomyLoadError(code=parse_code, message=str(e), file=file) from e

    if not isinstance(doc, dict):
        raise TaxonomyLoadError(
            code="E_INVALID_TOP_LEVEL",
            message=f"taxonomy must be a mapping with a 'categories' list, got {type(doc).__name__}",
            file=file,
        )

    return {
        "categories": doc.get("categories"),
        "privileges": _privileges_section(doc.get("privileges")),
        "recent": _recent_section(doc.get("recent")),
        "__file__": file,
    }
