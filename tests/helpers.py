"""Test doubles shared by the sysguard test modules."""

from concurrent.futures import Executor, Future

from sysguard.models import ProcessRecord


class StaticProvider:
    """Provider returning a fixed list of raw entries."""

    def __init__(self, entries: list[dict]) -> None:
        self.entries = entries
        self.calls = 0

    def snapshot(self, exclude_pid: int) -> list[dict]:
        self.calls += 1
        return list(self.entries)


class InlineExecutor(Executor):
    """Executor that runs each job immediately on the calling thread."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


class DeferredExecutor(Executor):
    """Executor that holds jobs until the test runs them, in any order."""

    def __init__(self) -> None:
        self.jobs: list[tuple] = []

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        self.jobs.append((future, fn, args, kwargs))
        return future

    def run(self, index: int) -> None:
        future, fn, args, kwargs = self.jobs[index]
        future.set_result(fn(*args, **kwargs))


class ManualTimer:
    """One-shot timer driven by advance() instead of a clock."""

    def __init__(self) -> None:
        self.now = 0.0
        self.starts = 0
        self._due: float | None = None
        self._callback = None

    @property
    def pending(self) -> bool:
        return self._due is not None

    @property
    def due(self) -> float | None:
        return self._due

    def start(self, interval: float, callback) -> None:
        self.starts += 1
        self._due = self.now + interval
        self._callback = callback

    def cancel(self) -> None:
        self._due = None
        self._callback = None

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every callback that falls due."""
        target = self.now + seconds
        while self._due is not None and self._due <= target:
            self.now = self._due
            callback = self._callback
            self._due = None
            self._callback = None
            callback()
        self.now = target


def make_record(pid: int, name: str = "", cpu: float = 0.0, memory: int = 0) -> ProcessRecord:
    return ProcessRecord(pid=pid, name=name or f"proc{pid}", cpu_percent=cpu, memory_bytes=memory)


def raw_entries(count: int) -> list[dict]:
    """``count`` raw entries with pids 1..count and memory growing with pid."""
    return [
        {
            "pid": pid,
            "name": f"worker-{pid}",
            "cpu_percent": float(pid % 7),
            "memory_bytes": pid * 1024,
        }
        for pid in range(1, count + 1)
    ]
