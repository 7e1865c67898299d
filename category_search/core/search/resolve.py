from __future__ import annotations

import logging
import re
from typing import Optional

from category_search.core.config import SearchSettings
from category_search.core.errors import StoreCorruption
from category_search.core.search.contracts import TaxonomyStore, call_store

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"[0-9]+")


def name_pattern(text: str) -> str:
    return f"*{text.lower()}*"


def parse_candidate_id(key: str, separator: str) -> int:
    suffix = key.split(separator)[-1]
    if not _DIGITS.fullmatch(suffix):
        raise StoreCorruption(
            code="E_STORE_CORRUPT_KEY",
            message=f"malformed id suffix in scanned key {key!r}",
            path="name_scan",
        )
    return int(suffix)


async def find_candidate_ids(
    text: Optional[str],
    cap: Optional[int],
    *,
    store: TaxonomyStore,
    settings: SearchSettings,
) -> list[int]:
    """Scan the category name index for `*text*`.

    Text shorter than `settings.min_query_length` returns [] without touching
    the store. Ids keep the scan's order.
    """
    if not text or len(text) < settings.min_query_length:
        return []

    limit = cap or settings.candidate_cap
    keys = await call_store("name_scan", lambda: store.name_scan(name_pattern(text), limit))
    ids = [parse_candidate_id(k, settings.key_separator) for k in keys]
    logger.debug("name scan %r matched %d of cap %d", text, len(ids), limit)
    return ids
