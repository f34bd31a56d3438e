"""
Page window arithmetic for product listings.

Turns a requested (page, size) pair into a clamped window against the
current item count. Pages are 0-indexed; the reported start/end bounds are
1-indexed and inclusive so they can be shown as "Showing 11-12 of 12".
"""

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PageWindow:
    """Clamped pagination window."""

    page: int
    page_size: int
    total_items: int
    total_pages: int

    @property
    def offset(self) -> int:
        return self.page * self.page_size

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def has_next(self) -> bool:
        return self.total_pages > 0 and self.page + 1 < self.total_pages

    def bounds(self, returned: int) -> tuple[int, int]:
        """
        1-indexed inclusive bounds of the rows actually returned.

        Args:
            returned: Number of rows the page query produced

        Returns:
            Tuple of (page_start, page_end); (0, 0) for an empty store
        """
        if self.total_items == 0:
            return 0, 0
        page_start = self.offset + 1
        if returned == 0:
            # Rows vanished between count and fetch
            return page_start, max(page_start - 1, 0)
        return page_start, page_start + returned - 1


def clamp_page_size(requested: Optional[int], default_size: int, max_size: int) -> int:
    """Fall back to the default for missing/non-positive sizes, cap at max."""
    if requested is None or requested <= 0:
        return default_size
    return min(requested, max_size)


def resolve_page_window(
    requested_page: Optional[int],
    requested_size: Optional[int],
    total_items: int,
    default_size: int,
    max_size: int,
) -> PageWindow:
    """
    Clamp a requested page against the number of stored items.

    Args:
        requested_page: 0-indexed page number, may be None or negative
        requested_size: Page size, may be None or non-positive
        total_items: Current item count
        default_size: Size used when none/non-positive is requested
        max_size: Upper bound for the page size

    Returns:
        PageWindow with the page clamped into [0, total_pages - 1]
    """
    page_size = clamp_page_size(requested_size, default_size, max_size)
    page = max(requested_page or 0, 0)

    total_pages = math.ceil(total_items / page_size) if total_items > 0 else 0

    if total_pages == 0:
        page = 0
    elif page >= total_pages:
        page = total_pages - 1

    return PageWindow(
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
    )
