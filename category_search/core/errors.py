from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SearchError(Exception):
    """Base error envelope. Raise one of the subclasses, never this class directly."""

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<search>"
        return f"{loc}: {self.code}: {self.message}"


class StoreUnavailable(SearchError):
    pass


class StoreCorruption(SearchError):
    pass


class HookFailure(SearchError):
    pass


class AuthorizationFailure(SearchError):
    pass


class QueryError(SearchError):
    pass


class TaxonomyLoadError(SearchError):
    pass


class TaxonomyValidationError(SearchError):
    pass


class UsageError(SearchError):
    """Bad command-line input or settings, as opposed to a bad taxonomy."""
