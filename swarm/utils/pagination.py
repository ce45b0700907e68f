import math
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.orm import Query

from swarm.config import get_settings
from swarm.schemas.common import PaginationMeta


@dataclass
class Page:
    entries: list[Any]
    page_number: int
    page_size: int
    total_entries: int
    total_pages: int

    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1

    @property
    def next_page(self) -> Optional[int]:
        return self.page_number + 1 if self.has_next_page else None

    @property
    def previous_page(self) -> Optional[int]:
        return self.page_number - 1 if self.has_previous_page else None

    def meta(self) -> PaginationMeta:
        return PaginationMeta(
            current_page=self.page_number,
            per_page=self.page_size,
            total_entries=self.total_entries,
            total_pages=self.total_pages,
            has_next_page=self.has_next_page,
            has_previous_page=self.has_previous_page,
        )


def _positive_int(value: Any) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def paginate(query: Query, page: Any = None, page_size: Any = None) -> Page:
    """
    Slice an ordered query into one page.

    Missing, non-numeric or non-positive values fall back to page 1 and the
    configured default size. Sizes above the configured maximum are capped,
    and pages past the end are clamped to the last page.
    """
    settings = get_settings()
    size = min(_positive_int(page_size) or settings.default_page_size, settings.max_page_size)

    total_entries = query.order_by(None).count()
    total_pages = max(1, math.ceil(total_entries / size))
    page_number = min(_positive_int(page) or 1, total_pages)
    entries = query.offset((page_number - 1) * size).limit(size).all()

    return Page(
        entries=entries,
        page_number=page_number,
        page_size=size,
        total_entries=total_entries,
        total_pages=total_pages,
    )
