"""
Derived views over a resource collection.

Search, field filters and pagination are recomputed from scratch on every
call; nothing here caches or mutates the collection it is given.
"""
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Sequence, Tuple, Union

from core.config import ITEMS_PER_PAGE

ALL = "All"
MAX_PAGE_LINKS = 5

FilterValue = Union[str, int, bool, None, Callable[[dict], bool]]


@dataclass(frozen=True)
class ViewFilters:
    search: str = ""
    search_fields: Tuple[str, ...] = ()
    # field name -> required value, "All"/None to disable, or a predicate
    field_filters: Dict[str, FilterValue] = field(default_factory=dict)


@dataclass(frozen=True)
class ViewSlice:
    items: List[dict]
    page: int
    total_pages: int
    total_items: int
    page_numbers: List[int]

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def matches_search(item: dict, search: str, fields: Sequence[str]) -> bool:
    """Case-insensitive substring match over the given fields."""
    needle = (search or "").strip().lower()
    if not needle:
        return True
    for name in fields:
        value = item.get(name)
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        if any(needle in str(v).lower() for v in values):
            return True
    return False


def matches_filters(item: dict, field_filters: Dict[str, FilterValue]) -> bool:
    for name, wanted in field_filters.items():
        if wanted is None or wanted == ALL:
            continue
        if callable(wanted):
            if not wanted(item):
                return False
        elif item.get(name) != wanted:
            return False
    return True


def filter_items(items: Sequence[dict], filters: ViewFilters) -> List[dict]:
    return [
        item for item in items
        if matches_search(item, filters.search, filters.search_fields)
        and matches_filters(item, filters.field_filters)
    ]


def page_window(page: int, total_pages: int, size: int = MAX_PAGE_LINKS) -> List[int]:
    """Up to ``size`` page numbers centred on ``page``."""
    if total_pages <= size:
        return list(range(1, total_pages + 1))
    half = size // 2
    if page <= half + 1:
        start = 1
    elif page >= total_pages - half:
        start = total_pages - size + 1
    else:
        start = page - half
    return list(range(start, start + size))


def paginate(items: Sequence[dict], page: int, per_page: int = ITEMS_PER_PAGE) -> ViewSlice:
    if per_page < 1:
        raise ValueError("per_page must be positive")
    total_items = len(items)
    total_pages = max(1, math.ceil(total_items / per_page))
    page = min(max(1, int(page or 1)), total_pages)
    start = (page - 1) * per_page
    return ViewSlice(
        items=list(items[start:start + per_page]),
        page=page,
        total_pages=total_pages,
        total_items=total_items,
        page_numbers=page_window(page, total_pages),
    )


def derive_view(items: Sequence[dict], filters: ViewFilters = None, page: int = 1,
                per_page: int = ITEMS_PER_PAGE) -> ViewSlice:
    """Filter then paginate; the input sequence is left untouched."""
    return paginate(filter_items(items, filters or ViewFilters()), page, per_page)
