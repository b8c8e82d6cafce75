"""Process table sampling for sysguard."""

import math
import time
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Protocol

import psutil

from sysguard.logging_setup import get_logger
from sysguard.models import ProcessRecord

log = get_logger(__name__)

RawProcess = Mapping[str, Any]


class ProcessTableProvider(Protocol):
    """Source of raw, unordered process entries."""

    def snapshot(self, exclude_pid: int) -> Iterable[RawProcess]:
        """Yield ``{pid, name, cpu_percent, memory_bytes}`` mappings."""
        ...


class PsutilProvider:
    """
    Process table provider backed by psutil.

    psutil.process_iter() keeps its Process instances between calls, so
    cpu_percent is 0.0 for a process on the first scan that sees it and a
    real figure on every scan after that.
    """

    ATTRS = ["pid", "name", "cpu_percent", "memory_info"]

    def snapshot(self, exclude_pid: int) -> Iterator[RawProcess]:
        """
        Yield one mapping per readable process.

        Processes that exit mid-scan, deny access, or are zombies are
        skipped.
        """
        for proc in psutil.process_iter(attrs=self.ATTRS):
            if proc.pid == exclude_pid:
                continue
            try:
                with proc.oneshot():
                    info = proc.info
                    mem_info = info.get("memory_info")
                    entry = {
                        "pid": info.get("pid", proc.pid),
                        "name": info.get("name"),
                        "cpu_percent": info.get("cpu_percent"),
                        "memory_bytes": mem_info.rss if mem_info else 0,
                    }
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
            yield entry


def normalize(entry: RawProcess) -> ProcessRecord:
    """
    Build a ProcessRecord from a raw provider entry.

    Missing or unusable values fall back to empty/zero and a non-text name is
    converted with str(). A missing pid raises KeyError; a non-numeric or
    negative one raises TypeError or ValueError.
    """
    pid = int(entry["pid"])
    if pid < 0:
        raise ValueError(f"negative pid {pid}")

    cpu = entry.get("cpu_percent")
    try:
        cpu = float(cpu) if cpu is not None else 0.0
    except (TypeError, ValueError):
        cpu = 0.0
    if math.isnan(cpu) or cpu < 0:
        cpu = 0.0

    name = entry.get("name")
    memory = entry.get("memory_bytes") or 0
    return ProcessRecord(
        pid=pid,
        name="" if name is None else str(name),
        cpu_percent=cpu,
        memory_bytes=max(0, int(memory)),
    )


class SnapshotCollector:
    """
    Collects a fresh snapshot of the process table on every call.

    Nothing is cached between calls. Entries that cannot be read or
    normalized are dropped individually; collect() never fails because of
    a single process.
    """

    def __init__(self, provider: ProcessTableProvider | None = None) -> None:
        """
        Initialize the SnapshotCollector.

        Args:
            provider: Where raw entries come from. Defaults to PsutilProvider.
        """
        self._provider = provider if provider is not None else PsutilProvider()

    @property
    def provider(self) -> ProcessTableProvider:
        """The provider this collector reads from."""
        return self._provider

    def collect(self, exclude_pid: int) -> list[ProcessRecord]:
        """
        Rescan the process table.

        Args:
            exclude_pid: Pid to leave out, normally the monitoring process.

        Returns:
            Records in provider order, which is unspecified.
        """
        started = time.perf_counter()
        records: list[ProcessRecord] = []
        dropped = 0

        for entry in self._provider.snapshot(exclude_pid):
            try:
                record = normalize(entry)
            except (KeyError, TypeError, ValueError):
                dropped += 1
                continue
            if record.pid == exclude_pid:
                continue
            records.append(record)

        log.debug(
            "collector.scan",
            count=len(records),
            dropped=dropped,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return records
