from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

from category_search.core.config import SearchSettings
from category_search.core.model import SearchQuery, SearchResult
from category_search.core.search.compose import compose_result
from category_search.core.search.contracts import SearchBackends
from category_search.core.search.expand import expand_children
from category_search.core.search.filter_ids import filter_visible_ids, run_search_hook
from category_search.core.search.paginate import paginate_ids
from category_search.core.search.resolve import find_candidate_ids

logger = logging.getLogger(__name__)


async def search_categories(
    query: SearchQuery,
    *,
    backends: SearchBackends,
    settings: Optional[SearchSettings] = None,
) -> SearchResult:
    """Run one category search.

    Filtering (hook, then authorization) happens before counting and paging,
    so match_count is the size of the visible set, not of the scan. Children
    are only expanded for the ids on the requested page.
    """
    s = settings or SearchSettings()
    started = time.perf_counter()

    ids = await find_candidate_ids(query.text, query.candidate_cap, store=backends.store, settings=s)
    ids = await run_search_hook(query, ids, hooks=backends.hooks, settings=s)
    ids = await filter_visible_ids(ids, query.uid, authorizer=backends.authorizer)

    page = paginate_ids(ids, page=query.page, page_size=query.page_size, paginate=query.paginate)
    logger.debug("uid=%s matched %d, page %d holds %d", query.uid, page.total, query.page, len(page.ids))

    hydrate_ids = await expand_children(
        page.ids,
        query.uid,
        store=backends.store,
        authorizer=backends.authorizer,
        max_concurrency=s.child_lookup_concurrency,
    )
    return await compose_result(
        query=query,
        page=page,
        hydrate_ids=hydrate_ids,
        backends=backends,
        started=started,
    )


def search(
    query: SearchQuery,
    *,
    backends: SearchBackends,
    settings: Optional[SearchSettings] = None,
) -> SearchResult:
    return asyncio.run(search_categories(query, backends=backends, settings=settings))
