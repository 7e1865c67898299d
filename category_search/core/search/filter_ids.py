from __future__ import annotations

import logging

from category_search.core.config import SearchSettings
from category_search.core.model import FilterContext, SearchQuery
from category_search.core.search.contracts import Authorizer, HookDispatcher

logger = logging.getLogger(__name__)

FIND = "find"


async def run_search_hook(
    query: SearchQuery,
    ids: list[int],
    *,
    hooks: HookDispatcher,
    settings: SearchSettings,
) -> list[int]:
    """Fire the search hook and return the ids it hands back.

    REPLACE semantics: the hook's ids become the candidate set outright, so a
    listener may add ids the name scan never saw, or drop all of them.
    """
    context = FilterContext(query=query, ids=tuple(ids), uid=query.uid)
    result = await hooks.fire(settings.hook_name, context)
    logger.debug("hook %s: %d ids in, %d ids out", settings.hook_name, len(ids), len(result.ids))
    return list(result.ids)


async def filter_visible_ids(ids: list[int], uid: int, *, authorizer: Authorizer) -> list[int]:
    return list(await authorizer.filter_ids(FIND, list(ids), uid))
