from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Page:
    ids: list[int]
    total: int
    page_count: int


def paginate_ids(ids: list[int], *, page: int, page_size: int, paginate: bool) -> Page:
    """Slice `ids` down to one page.

    With pagination off the whole list passes through and page_count is 0.
    A page past the end is an empty slice, not an error.
    """
    total = len(ids)
    if not paginate:
        return Page(ids=list(ids), total=total, page_count=0)

    start = max(0, page - 1) * page_size
    stop = start + page_size
    return Page(ids=list(ids[start:stop]), total=total, page_count=math.ceil(total / page_size))
