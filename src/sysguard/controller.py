"""Pipeline controller: owns the view state and turns snapshots into display models."""

import os
from collections.abc import Callable, Sequence
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from queue import Empty, Queue

from sysguard.config import Settings
from sysguard.logging_setup import get_logger
from sysguard.models import DisplayModel, ProcessRecord, RefreshTicket, SortKey, View
from sysguard.monitor import SnapshotCollector
from sysguard.pipeline import Paginator, SortState, filter_records, total_pages
from sysguard.scheduler import RefreshScheduler, RefreshTimer

log = get_logger(__name__)

Publisher = Callable[[DisplayModel], None]


@dataclass(slots=True)
class PipelineContext:
    """All mutable pipeline state, owned by a single controller."""

    paginator: Paginator
    snapshot: list[ProcessRecord] = field(default_factory=list)
    query: str = ""
    sort: SortState = field(default_factory=SortState)
    view: View = View.PROCESSES
    issued_ticket: RefreshTicket = 0
    applied_ticket: RefreshTicket = 0
    # Scan started by the timer that has not come back yet.
    timer_ticket: RefreshTicket | None = None
    closed: bool = False


class ProcessViewController:
    """
    Serializes user intents and refresh results into display models.

    Every method except the collector job runs on one thread (the UI event
    loop). Scans run on a worker pool and come back through a queue that
    drain() empties. Each scan carries the ticket it was started with, and
    a result older than the newest applied one is thrown away.
    """

    def __init__(
        self,
        settings: Settings,
        timer: RefreshTimer,
        publish: Publisher,
        collector: SnapshotCollector | None = None,
        executor: Executor | None = None,
        own_pid: int | None = None,
    ) -> None:
        """
        Initialize the ProcessViewController.

        Args:
            settings: Page size and refresh interval.
            timer: One-shot timer for the refresh scheduler.
            publish: Called with every new DisplayModel.
            collector: Snapshot source. Defaults to a psutil-backed collector.
            executor: Where scans run. Defaults to a small thread pool.
            own_pid: Pid excluded from snapshots. Defaults to this process.
        """
        self._publish = publish
        self._collector = collector if collector is not None else SnapshotCollector()
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="SnapshotCollector"
        )
        self._own_pid = os.getpid() if own_pid is None else own_pid
        # A None payload marks a scan that failed.
        self._results: Queue[tuple[RefreshTicket, list[ProcessRecord] | None]] = Queue()
        self.context = PipelineContext(paginator=Paginator(settings.page_size))
        self._model = DisplayModel.empty()
        self.scheduler = RefreshScheduler(
            timer,
            settings.refresh_interval,
            on_tick=self._on_tick,
            is_live=self.is_live,
        )

    @property
    def model(self) -> DisplayModel:
        """The most recently published display model."""
        return self._model

    @property
    def closed(self) -> bool:
        return self.context.closed

    def is_live(self) -> bool:
        """Whether the process view is the one being observed."""
        return not self.context.closed and self.context.view is View.PROCESSES

    # --- lifecycle ----------------------------------------------------------

    def start(self) -> None:
        """Arm the refresh timer and kick off the first scan."""
        self.scheduler.start()
        self.request_refresh()

    def close(self) -> None:
        """Stop refreshing. Scans still in flight are discarded when they land."""
        if self.context.closed:
            return
        self.context.closed = True
        self.scheduler.stop()
        self._executor.shutdown(wait=False, cancel_futures=True)
        log.info("controller.closed", last_ticket=self.context.issued_ticket)

    # --- refresh ------------------------------------------------------------

    def request_refresh(self) -> RefreshTicket | None:
        """
        Start a scan in the background.

        Used for manual refreshes and scheduler ticks alike; a manual refresh
        leaves the scheduler's next tick where it was.

        Returns:
            The ticket for the scan, or None once the controller is closed.
        """
        if self.context.closed:
            return None
        self.context.issued_ticket += 1
        ticket = self.context.issued_ticket
        self._executor.submit(self._collect, ticket)
        return ticket

    @property
    def timer_scan_pending(self) -> bool:
        """True while a scan started by the timer has not come back."""
        return self.context.timer_ticket is not None

    def _on_tick(self) -> None:
        # Only one timer-driven scan at a time; manual refreshes don't count.
        if self.context.timer_ticket is not None:
            log.debug("refresh.tick_skipped", in_flight=self.context.timer_ticket)
            return
        self.context.timer_ticket = self.request_refresh()

    def _collect(self, ticket: RefreshTicket) -> None:
        # Runs on a worker thread; must not touch the context.
        try:
            records = self._collector.collect(self._own_pid)
        except Exception:
            log.exception("refresh.collect_failed", ticket=ticket)
            self._results.put((ticket, None))
            return
        self._results.put((ticket, records))

    def drain(self) -> int:
        """
        Apply every scan result waiting in the queue.

        Returns:
            How many results were applied (stale and failed ones are not counted).
        """
        applied = 0
        while True:
            try:
                ticket, records = self._results.get_nowait()
            except Empty:
                break
            if ticket == self.context.timer_ticket:
                self.context.timer_ticket = None
            if records is not None and self.apply_result(ticket, records):
                applied += 1
        return applied

    def apply_result(self, ticket: RefreshTicket, records: Sequence[ProcessRecord]) -> bool:
        """
        Replace the snapshot with ``records`` if ``ticket`` is the newest yet.

        Returns:
            True if the result was applied and a model published.
        """
        if self.context.closed or ticket <= self.context.applied_ticket:
            log.debug(
                "refresh.stale_discarded",
                ticket=ticket,
                applied=self.context.applied_ticket,
                closed=self.context.closed,
            )
            return False
        self.context.applied_ticket = ticket
        self.context.snapshot = list(records)
        self._recompute()
        return True

    # --- intents ------------------------------------------------------------

    def navigate(self, view: View) -> None:
        """Switch the observed screen. Only the process view receives refreshes."""
        self.context.view = view

    def set_query(self, query: str) -> None:
        """Filter by ``query``; a changed query returns to the first page."""
        if query == self.context.query:
            return
        self.context.query = query
        self.context.paginator.reset()
        self._recompute()

    def select_sort(self, key: SortKey) -> None:
        """Sort by ``key``, flipping direction if it is already active."""
        self.context.sort = self.context.sort.select(key)
        self._recompute()

    def next_page(self) -> None:
        self.context.paginator.next_page(self._model.total_filtered)
        self._recompute()

    def prev_page(self) -> None:
        self.context.paginator.prev_page(self._model.total_filtered)
        self._recompute()

    # --- pipeline -----------------------------------------------------------

    def _recompute(self) -> None:
        ctx = self.context
        filtered = filter_records(ctx.snapshot, ctx.query)
        ordered = ctx.sort.apply(filtered)
        visible = ctx.paginator.page(ordered)

        self._model = DisplayModel(
            visible_records=tuple(visible),
            current_page=ctx.paginator.current_page,
            total_pages=total_pages(len(ordered), ctx.paginator.page_size),
            total_filtered=len(ordered),
            ticket=ctx.applied_ticket,
            query=ctx.query,
            sort_key=ctx.sort.key,
            sort_direction=ctx.sort.direction,
        )
        self._publish(self._model)
