from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml


DEFAULT_CANDIDATE_CAP = 500
DEFAULT_PAGE_SIZE = 50
DEFAULT_PAGE = 1
DEFAULT_MIN_QUERY_LENGTH = 2
DEFAULT_KEY_SEPARATOR = ":"
DEFAULT_HOOK_NAME = "filter:categories.search"
DEFAULT_CHILD_LOOKUP_CONCURRENCY = 10

ENV_PREFIX = "CATEGORY_SEARCH_"


class SettingsConfigError(ValueError):
    pass


@dataclass(frozen=True)
class SearchSettings:
    """Tunables for the search pipeline.

    - candidate_cap: max keys requested from the name scan (500).
    - page_size: categories per page when paginating (50).
    - default_page: page used when a query does not name one (1).
    - paginate: whether queries paginate unless they say otherwise.
    - min_query_length: shorter text returns an empty result without a scan (2).
    - key_separator: separator between name and id in scanned keys (":").
    - hook_name: extension hook fired with the candidate ids.
    - child_lookup_concurrency: max concurrent child-id lookups (10).
    """

    candidate_cap: int = DEFAULT_CANDIDATE_CAP
    page_size: int = DEFAULT_PAGE_SIZE
    default_page: int = DEFAULT_PAGE
    paginate: bool = True
    min_query_length: int = DEFAULT_MIN_QUERY_LENGTH
    key_separator: str = DEFAULT_KEY_SEPARATOR
    hook_name: str = DEFAULT_HOOK_NAME
    child_lookup_concurrency: int = DEFAULT_CHILD_LOOKUP_CONCURRENCY

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


_POSITIVE_INT_FIELDS = {"candidate_cap", "page_size", "default_page", "child_lookup_concurrency"}
_NON_NEGATIVE_INT_FIELDS = {"min_query_length"}
_BOOL_FIELDS = {"paginate"}
_STR_FIELDS = {"key_separator", "hook_name"}


def _field_names() -> set[str]:
    return {f.name for f in fields(SearchSettings)}


def _check_value(key: str, value: Any) -> Any:
    if key in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise SettingsConfigError(f"setting '{key}' must be a boolean")
        return value
    if key in _STR_FIELDS:
        if not isinstance(value, str) or not value:
            raise SettingsConfigError(f"setting '{key}' must be a non-empty string")
        return value
    # bool is an int subclass; reject it for numeric settings.
    if not isinstance(value, int) or isinstance(value, bool):
        raise SettingsConfigError(f"setting '{key}' must be an integer")
    if key in _POSITIVE_INT_FIELDS and value <= 0:
        raise SettingsConfigError(f"setting '{key}' must be > 0")
    if key in _NON_NEGATIVE_INT_FIELDS and value < 0:
        raise SettingsConfigError(f"setting '{key}' must be >= 0")
    return value


def load_settings_file(path: str | Path) -> dict[str, Any]:
    """Load setting overrides from a YAML file.

    Format:
      candidate_cap: 200
      page_size: 20

    Returns only the keys present in the file. Unknown keys are an error.
    """
    p = Path(path)
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SettingsConfigError("settings file must be a mapping of name -> value")

    known = _field_names()
    out: dict[str, Any] = {}
    for k, v in raw.items():
        if not isinstance(k, str) or k not in known:
            raise SettingsConfigError(f"unknown setting: {k} (choose from: {', '.join(sorted(known))})")
        out[k] = _check_value(k, v)
    return out


def settings_from_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Read CATEGORY_SEARCH_<FIELD> overrides, e.g. CATEGORY_SEARCH_PAGE_SIZE=20."""
    env = os.environ if environ is None else environ
    out: dict[str, Any] = {}
    for name in sorted(_field_names()):
        raw = (env.get(ENV_PREFIX + name.upper(), "") or "").strip()
        if not raw:
            continue
        if name in _BOOL_FIELDS:
            if raw.lower() not in ("1", "true", "yes", "0", "false", "no"):
                raise SettingsConfigError(f"{ENV_PREFIX}{name.upper()} must be a boolean")
            out[name] = raw.lower() in ("1", "true", "yes")
        elif name in _STR_FIELDS:
            out[name] = raw
        else:
            try:
                value = int(raw)
            except ValueError as e:
                raise SettingsConfigError(f"{ENV_PREFIX}{name.upper()} must be an integer") from e
            out[name] = _check_value(name, value)
    return out


def merged_settings(*overrides: Mapping[str, Any] | None) -> SearchSettings:
    """Return the default settings with each override mapping applied in order."""
    settings = SearchSettings()
    for o in overrides:
        if o:
            settings = replace(settings, **dict(o))
    return settings


def load_settings(
    settings_file: str | None = None, environ: Mapping[str, str] | None = None
) -> SearchSettings:
    file_overrides = load_settings_file(settings_file) if settings_file else {}
    return merged_settings(file_overrides, settings_from_env(environ))
