"""Filtering, sorting and pagination of process snapshots."""

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, TypeVar

from sysguard.errors import ConfigError
from sysguard.models import PageState, ProcessRecord, SortDirection, SortKey

T = TypeVar("T")


# --- Filter ---------------------------------------------------------------


def matches(record: ProcessRecord, query: str) -> bool:
    """Case-insensitive name match, or substring match on the decimal pid."""
    return query.lower() in record.name.lower() or query in str(record.pid)


def filter_records(records: Sequence[ProcessRecord], query: str) -> list[ProcessRecord]:
    """Return the records matching ``query``, in input order."""
    if not query:
        return list(records)
    return [record for record in records if matches(record, query)]


# --- Sort -----------------------------------------------------------------


def _compare_cpu(a: ProcessRecord, b: ProcessRecord) -> int:
    # NaN never orders against anything; report it as equal.
    x, y = a.cpu_percent, b.cpu_percent
    if math.isnan(x) or math.isnan(y):
        return 0
    return (x > y) - (x < y)


_SORT_KEYS: dict[SortKey, Callable[[ProcessRecord], Any]] = {
    SortKey.PID: lambda p: p.pid,
    SortKey.NAME: lambda p: p.name.casefold(),
    SortKey.CPU: cmp_to_key(_compare_cpu),
    SortKey.MEMORY: lambda p: p.memory_bytes,
}


def sort_records(
    records: Sequence[ProcessRecord],
    key: SortKey,
    direction: SortDirection,
) -> list[ProcessRecord]:
    """
    Stable sort of ``records`` by ``key``.

    Equal entries keep their input order in both directions, so refreshing
    an unchanged table does not shuffle rows.
    """
    return sorted(
        records,
        key=_SORT_KEYS[key],
        reverse=direction is SortDirection.DESCENDING,
    )


@dataclass(slots=True, frozen=True)
class SortState:
    """Active sort key and direction."""

    key: SortKey = SortKey.CPU
    direction: SortDirection = SortDirection.DESCENDING

    def select(self, key: SortKey) -> "SortState":
        """
        Return the state after the user picks ``key``.

        Picking the active key flips the direction; picking another key makes
        it active and sorts descending, heaviest consumer first.
        """
        if key is self.key:
            return SortState(key, self.direction.flipped())
        return SortState(key, SortDirection.DESCENDING)

    def apply(self, records: Sequence[ProcessRecord]) -> list[ProcessRecord]:
        """Sort ``records`` by this state."""
        return sort_records(records, self.key, self.direction)


# --- Pagination -----------------------------------------------------------


def total_pages(count: int, page_size: int) -> int:
    """Number of pages needed for ``count`` items; 0 when there are none."""
    if count <= 0 or page_size <= 0:
        return 0
    return -(-count // page_size)


def page_slice(items: Sequence[T], page_index: int, page_size: int) -> list[T]:
    """Items on page ``page_index``; empty when the page does not exist."""
    if page_size <= 0 or page_index < 0:
        return []
    start = page_index * page_size
    return list(items[start : min(start + page_size, len(items))])


def paginate(items: Sequence[T], page_size: int) -> list[list[T]]:
    """Split ``items`` into consecutive pages of ``page_size``."""
    if page_size <= 0:
        return []
    return [list(items[i : i + page_size]) for i in range(0, len(items), page_size)]


class Paginator:
    """
    Tracks the current page of a list whose length changes between passes.

    The page index is kept within ``[0, total_pages - 1]``, or at 0 when
    there are no pages.
    """

    def __init__(self, page_size: int) -> None:
        """
        Initialize the Paginator.

        Args:
            page_size: Rows per page. Must be positive.
        """
        if page_size <= 0:
            raise ConfigError(f"page_size must be positive, got {page_size}")
        self._state = PageState(page_size=page_size)

    @property
    def page_size(self) -> int:
        """Rows per page."""
        return self._state.page_size

    @property
    def current_page(self) -> int:
        """Index of the page being shown."""
        return self._state.current_page

    def reset(self) -> None:
        """Go back to the first page."""
        self._state.current_page = 0

    def clamp(self, count: int) -> int:
        """Pull the current page back into range for ``count`` items."""
        pages = total_pages(count, self._state.page_size)
        self._state.current_page = max(0, min(self._state.current_page, pages - 1))
        return self._state.current_page

    def next_page(self, count: int) -> int:
        """Advance one page; no-op on the last page."""
        if self._state.current_page < total_pages(count, self._state.page_size) - 1:
            self._state.current_page += 1
        return self.clamp(count)

    def prev_page(self, count: int) -> int:
        """Go back one page; no-op on the first page."""
        if self._state.current_page > 0:
            self._state.current_page -= 1
        return self.clamp(count)

    def page(self, items: Sequence[T]) -> list[T]:
        """Items on the current page, after clamping to ``len(items)``."""
        self.clamp(len(items))
        return page_slice(items, self._state.current_page, self._state.page_size)
