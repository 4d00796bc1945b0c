"""
Buffered, batched delivery of log entries to a sink
"""

import asyncio
import dataclasses
import sys
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TextIO

from .diagnostics import ErrorCallback, report_error
from .entry import LogEntry
from .exceptions import ConfigurationError, SinkError
from .levels import Severity, SeverityLike, parse_severity

FlushCallback = Callable[[List[LogEntry]], None]


def _positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")


@dataclass
class BufferConfig:
    """Configuration for buffered log delivery"""

    max_entries: int = 100  # Buffer capacity before a forced flush
    flush_interval_ms: int = 1000  # Periodic flush interval
    immediate_flush_at_or_above: SeverityLike = Severity.ERROR
    enabled: bool = True  # False writes every entry straight through

    def __post_init__(self):
        """Validate configuration values"""
        _positive_int("max_entries", self.max_entries)
        _positive_int("flush_interval_ms", self.flush_interval_ms)
        self.immediate_flush_at_or_above = parse_severity(
            self.immediate_flush_at_or_above
        )


class LogBuffer:
    """Accumulate entries and hand them to a flush callback in batches

    A batch is flushed when the buffer reaches capacity, when an entry at or
    above ``immediate_flush_at_or_above`` arrives, when the periodic timer
    fires, or on an explicit ``flush()`` / ``stop()``. Only one flush runs at
    a time; entries arriving meanwhile go into a fresh buffer.

    Reaching capacity never discards entries: the buffered entries and the
    one that found the buffer full are flushed together. ``forced_flushes``
    counts those events.

    After ``stop()`` the buffer no longer batches; entries are written
    straight through.
    """

    def __init__(
        self,
        config: Optional[BufferConfig] = None,
        flush_callback: Optional[FlushCallback] = None,
        error_callback: Optional[ErrorCallback] = None,
        fallback_stream: Optional[TextIO] = None,
    ):
        self.config = config or BufferConfig()
        self._flush_callback = flush_callback
        self._error_callback = error_callback
        self._fallback_stream = fallback_stream

        self._buffer: List[LogEntry] = []
        self._cond = threading.Condition()
        self._flushing = False
        self._flush_owner: Optional[int] = None
        self._stopped = False
        self._last_flush_time = time.monotonic()

        self._timer_thread: Optional[threading.Thread] = None
        self._timer_stop: Optional[threading.Event] = None

        self._stats = {
            "total_seen": 0,
            "forced_flushes": 0,
            "batch_flushes": 0,
            "flushed_entries": 0,
            "sink_errors": 0,
        }

        if self.config.enabled:
            self._start_timer()

    def set_flush_callback(self, callback: Optional[FlushCallback]) -> None:
        self._flush_callback = callback

    @property
    def buffer_size(self) -> int:
        with self._cond:
            return len(self._buffer)

    @property
    def running(self) -> bool:
        """True while the periodic flush timer is active"""
        thread = self._timer_thread
        return thread is not None and thread.is_alive()

    @property
    def stopped(self) -> bool:
        return self._stopped

    # ------------------------------------------------------------------
    # Adding entries
    # ------------------------------------------------------------------

    def add_entry(self, entry: LogEntry) -> None:
        """Add an entry, flushing inline when a trigger fires"""
        batch: Optional[List[LogEntry]] = None
        write_through = False

        with self._cond:
            self._stats["total_seen"] += 1

            if not self.config.enabled or self._stopped:
                write_through = True
            elif len(self._buffer) >= self.config.max_entries:
                self._stats["forced_flushes"] += 1
                self._buffer.append(entry)
                batch = self._claim_batch()
            else:
                self._buffer.append(entry)
                if entry.severity >= self.config.immediate_flush_at_or_above:
                    batch = self._claim_batch()

        if write_through:
            self._deliver([entry])
        elif batch is not None:
            self._run_flush(batch)

    # ------------------------------------------------------------------
    # Flushing
    # ------------------------------------------------------------------

    def _claim_batch(self) -> Optional[List[LogEntry]]:
        """Swap out the live buffer; caller must hold the lock"""
        if self._flushing or not self._buffer:
            return None
        batch = self._buffer
        self._buffer = []
        self._flushing = True
        self._flush_owner = threading.get_ident()
        return batch

    def _run_flush(self, batch: List[LogEntry]) -> int:
        """Deliver a claimed batch, then any overflow that built up meanwhile"""
        delivered = 0
        try:
            while True:
                self._deliver(batch)
                delivered += len(batch)
                with self._cond:
                    if len(self._buffer) >= self.config.max_entries:
                        batch = self._buffer
                        self._buffer = []
                        continue
                    self._release_flush()
                    return delivered
        except BaseException:
            with self._cond:
                self._release_flush()
            raise

    def _release_flush(self) -> None:
        """Clear flush ownership; caller must hold the lock"""
        self._flushing = False
        self._flush_owner = None
        self._last_flush_time = time.monotonic()
        self._cond.notify_all()

    def flush_now(self) -> int:
        """Flush synchronously; a no-op while another flush is running

        Returns:
            Number of entries handed to the sink
        """
        with self._cond:
            batch = self._claim_batch()
        if batch is None:
            return 0
        return self._run_flush(batch)

    async def flush(self) -> None:
        """Flush all buffered entries"""
        self.flush_now()

    def _deliver(self, entries: List[LogEntry]) -> None:
        callback = self._flush_callback
        try:
            if callback is not None:
                callback(entries)
            else:
                self._write_fallback(entries)
        except Exception as e:
            with self._cond:
                self._stats["sink_errors"] += 1
            error = SinkError(
                f"Sink failed to write {len(entries)} log entries: {e}",
                entries=len(entries),
            )
            error.__cause__ = e
            self._report_error(error)
            return

        with self._cond:
            self._stats["batch_flushes"] += 1
            self._stats["flushed_entries"] += len(entries)

    def _write_fallback(self, entries: List[LogEntry]) -> None:
        """Best-effort output used when no flush callback is configured"""
        stream = self._fallback_stream or sys.stderr
        for entry in entries:
            values = " ".join(str(value) for value in entry.payload)
            stream.write(f"[{entry.severity.name}] {values}\n")
        if hasattr(stream, "flush"):
            stream.flush()

    def _report_error(self, error: Exception) -> None:
        report_error(error, self._error_callback)

    # ------------------------------------------------------------------
    # Periodic timer
    # ------------------------------------------------------------------

    def _start_timer(self) -> None:
        self._stop_timer()
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._run_timer,
            args=(stop_event, self.config.flush_interval_ms / 1000),
            name="logshield-flush-timer",
            daemon=True,
        )
        self._timer_stop = stop_event
        self._timer_thread = thread
        thread.start()

    def _stop_timer(self, wait: bool = True) -> Optional[threading.Thread]:
        """Signal the timer thread to exit

        With ``wait=False`` the thread is returned unjoined so the caller can
        join it elsewhere.
        """
        stop_event, thread = self._timer_stop, self._timer_thread
        self._timer_stop = None
        self._timer_thread = None
        if stop_event is not None:
            stop_event.set()
        if thread is None or thread is threading.current_thread():
            return None
        if wait:
            thread.join()
            return None
        return thread

    def _run_timer(self, stop_event: threading.Event, interval: float) -> None:
        while not stop_event.wait(interval):
            try:
                self.flush_now()
            except Exception as e:
                self._report_error(e)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _wait_idle(self) -> None:
        """Block until no flush owned by another thread is running"""
        with self._cond:
            while self._flushing and self._flush_owner != threading.get_ident():
                self._cond.wait()

    def stop_now(self) -> None:
        """Cancel the timer, let an in-flight flush finish, then flush once more"""
        self._stopped = True
        self._stop_timer()
        self._wait_idle()
        self.flush_now()

    async def stop(self) -> None:
        """Async variant of ``stop_now``; joins the timer and waits for
        in-flight flushes off the event loop"""
        self._stopped = True
        thread = self._stop_timer(wait=False)
        if thread is not None:
            await asyncio.to_thread(thread.join)
        if self._flushing:
            await asyncio.to_thread(self._wait_idle)
        self.flush_now()

    def update_config(
        self, config: Optional[BufferConfig] = None, **changes: Any
    ) -> BufferConfig:
        """Replace or amend the configuration and restart the timer"""
        new_config = dataclasses.replace(config or self.config, **changes)
        self.config = new_config

        if new_config.enabled and not self._stopped:
            self._start_timer()
            if self.buffer_size >= new_config.max_entries:
                self.flush_now()
        else:
            self._stop_timer()
            self.flush_now()

        return new_config

    def get_stats(self) -> Dict[str, Any]:
        """Get buffer statistics"""
        with self._cond:
            total = self._stats["total_seen"]
            return {
                **self._stats,
                "buffer_size": len(self._buffer),
                "forced_flush_rate": self._stats["forced_flushes"] / total if total else 0.0,
                "flushing": self._flushing,
                "running": self.running,
                "time_since_last_flush_ms": int(
                    (time.monotonic() - self._last_flush_time) * 1000
                ),
            }
