"""Data models for sysguard."""

from dataclasses import dataclass
from enum import Enum

# Sequence number assigned when a recompute is initiated.
RefreshTicket = int


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable record of one process, captured during a scan."""

    pid: int
    name: str
    cpu_percent: float  # 0.0 - 100.0 * core_count
    memory_bytes: int  # RSS


class SortKey(Enum):
    """Sort keys for the process table."""

    PID = "pid"
    NAME = "name"
    CPU = "cpu"
    MEMORY = "memory"


class SortDirection(Enum):
    """Sort direction for the process table."""

    ASCENDING = "asc"
    DESCENDING = "desc"

    def flipped(self) -> "SortDirection":
        """Return the opposite direction."""
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING


class View(Enum):
    """Screens the consumer can navigate between."""

    HOME = "home"
    PROCESSES = "processes"
    SETTINGS = "settings"


@dataclass(slots=True)
class PageState:
    """Page size and the index of the page being shown."""

    page_size: int
    current_page: int = 0


@dataclass(slots=True, frozen=True)
class DisplayModel:
    """
    Everything the renderer needs to draw one page of the process table.

    Derived from a snapshot on every pipeline pass and replaced wholesale.
    """

    visible_records: tuple[ProcessRecord, ...]
    current_page: int
    total_pages: int
    total_filtered: int
    ticket: RefreshTicket = 0
    query: str = ""
    sort_key: SortKey = SortKey.CPU
    sort_direction: SortDirection = SortDirection.DESCENDING

    @classmethod
    def empty(cls) -> "DisplayModel":
        """Model shown before the first scan result arrives."""
        return cls(visible_records=(), current_page=0, total_pages=0, total_filtered=0)
