from __future__ import annotations

import asyncio
import logging

from category_search.core.search.contracts import Authorizer, TaxonomyStore, call_store
from category_search.core.search.filter_ids import filter_visible_ids

logger = logging.getLogger(__name__)


async def child_ids_for_page(
    page_ids: list[int], *, store: TaxonomyStore, max_concurrency: int
) -> list[int]:
    """Look up each page id's direct children concurrently.

    Results are flattened in page-id order, whatever order the lookups finish in.
    """
    sem = asyncio.Semaphore(max(1, max_concurrency))

    async def lookup(cid: int) -> list[int]:
        async with sem:
            return list(await call_store("child_ids_of", lambda: store.child_ids_of(cid)))

    tasks = [asyncio.ensure_future(lookup(cid)) for cid in page_ids]
    try:
        per_parent = await asyncio.gather(*tasks)
    except BaseException:
        # One failed lookup (or cancellation) sinks the whole search.
        for t in tasks:
            t.cancel()
        raise

    return [child for children in per_parent for child in children]


async def expand_children(
    page_ids: list[int],
    uid: int,
    *,
    store: TaxonomyStore,
    authorizer: Authorizer,
    max_concurrency: int,
) -> list[int]:
    """Return page ids followed by their visible children, deduplicated.

    Children go through a single batched "find" check.
    """
    children = await child_ids_for_page(page_ids, store=store, max_concurrency=max_concurrency)
    visible = await filter_visible_ids(children, uid, authorizer=authorizer)
    logger.debug("expanded %d page ids: %d children, %d visible", len(page_ids), len(children), len(visible))
    return list(dict.fromkeys([*page_ids, *visible]))
