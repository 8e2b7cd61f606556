"""
Pagination

Parses the client's requested window (page/limit or offset/limit), clamps
it to the server maximum, and computes the pagination descriptor returned
next to every list.

Example:
    >>> Pagination.from_offset(total=95, limit=20, offset=40).to_dict()
    {'total': 95, 'limit': 20, 'offset': 40, 'page': 3, 'pages': 5,
     'totalPages': 5, 'hasNext': True, 'hasPrev': True}
"""

import math
from dataclasses import dataclass
from typing import Any, Optional

# Largest OFFSET every supported backend accepts (signed 32-bit)
MAX_OFFSET = 2**31 - 1


@dataclass(frozen=True)
class PageParams:
    """A validated result window."""
    limit: int
    offset: int

    @property
    def page(self) -> int:
        return self.offset // self.limit + 1


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_page_params(
    page: Any = None,
    limit: Any = None,
    offset: Any = None,
    *,
    default_limit: int = 20,
    max_limit: int = 100,
) -> PageParams:
    """
    Turn raw query values into a safe window.

    ``limit`` is clamped to [1, max_limit] and never trusted as sent.
    An explicit ``offset`` wins over ``page``; non-numeric values fall back
    to the defaults. The resulting offset never exceeds MAX_OFFSET, so an
    absurd page number yields an empty page rather than a driver error.
    """
    size = _to_int(limit)
    if size is None or size < 1:
        size = default_limit
    size = max(1, min(size, max_limit))

    start = _to_int(offset)
    if start is None:
        number = _to_int(page)
        if number is None or number < 1:
            number = 1
        start = (number - 1) * size
    return PageParams(limit=size, offset=max(0, min(start, MAX_OFFSET)))


@dataclass(frozen=True)
class Pagination:
    """Derived metadata describing a result window within a total count."""
    total: int
    limit: int
    offset: int
    current_page: int
    total_pages: int
    has_more: bool
    has_previous: bool

    @classmethod
    def from_offset(cls, total: int, limit: int, offset: int) -> "Pagination":
        limit = max(1, limit)
        offset = max(0, offset)
        return cls(
            total=total,
            limit=limit,
            offset=offset,
            current_page=offset // limit + 1,
            total_pages=math.ceil(total / limit) if total > 0 else 0,
            has_more=offset + limit < total,
            has_previous=offset > 0,
        )

    @classmethod
    def from_page(cls, total: int, page: int, limit: int) -> "Pagination":
        limit = max(1, limit)
        return cls.from_offset(total, limit, (max(1, page) - 1) * limit)

    @classmethod
    def for_window(cls, total: int, window: PageParams) -> "Pagination":
        return cls.from_offset(total, window.limit, window.offset)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape used in response envelopes."""
        return {
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
            "page": self.current_page,
            "pages": self.total_pages,
            "totalPages": self.total_pages,
            "hasNext": self.has_more,
            "hasPrev": self.has_previous,
        }
