from __future__ import annotations

import math


def page_count(length: int, per_page: int) -> int:
    per_page = max(1, per_page)
    return math.ceil(length / per_page)


def paginate(items: list, per_page: int, reverse_pages: bool = True) -> list[dict]:
    """Split ``items`` into pages of ``per_page``.

    Pages are sliced in input order; with ``reverse_pages`` each page lists
    its own items last-to-first. The final page holds whatever remains.
    """
    per_page = max(1, per_page)
    total_pages = page_count(len(items), per_page)
    pages = []
    for page in range(1, total_pages + 1):
        start = (page - 1) * per_page
        page_items = list(items[start : start + per_page])
        if reverse_pages:
            page_items.reverse()
        pages.append({"items": page_items, "page": page, "total_pages": total_pages})
    return pages
