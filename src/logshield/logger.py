"""
Logger front-end: level filtering, sampling, redaction and buffered delivery
"""

import atexit
import dataclasses
import os
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Union

from .buffer import BufferConfig, LogBuffer
from .config import LoggerConfig, get_default_config
from .diagnostics import ErrorCallback, diagnostics, report_error
from .entry import LogEntry
from .exceptions import ConfigurationError, SinkError
from .filtering import FilterEngine, LevelFilter, Sampler
from .formatter import create_formatter
from .levels import Severity, SeverityLike, is_severity_name, parse_severity
from .redaction import Redactor
from .sinks import LoggingSink, Sink


class Logger:
    """Structured logger with sampling, redaction and batched sink writes

    Entries pass the level filter, then the sampler (when a sampling key is
    given), are redacted, and are buffered for batch delivery. Fatal entries
    skip the buffer: older buffered entries are flushed first and the fatal
    entry is then written synchronously, so it is on the sink before the
    call returns.

    Logging calls never raise. They return False when the entry was
    filtered out, the logger is disabled or destroyed, or writing failed.

    A logger lives until ``destroy()`` (or the end of ``async with``): the
    exit hook registered with ``register_atexit`` and the flush timer thread
    both hold it. Call ``destroy()`` on loggers you are done with.

    Args:
        name: Logger name; the default sink writes through its own child of
            the stdlib logger ``<name>.output``
        config: Pipeline configuration (default: ``get_default_config()``)
        sink: Destination for formatted lines; a console/file
            ``LoggingSink`` is created (and owned) when omitted
        error_callback: Receives internal errors such as sink failures
    """

    def __init__(
        self,
        name: str = "logshield",
        config: Optional[LoggerConfig] = None,
        sink: Optional[Sink] = None,
        error_callback: Optional[ErrorCallback] = None,
    ):
        self.name = name
        self.config = config or get_default_config()
        self._error_callback = error_callback

        self._sensitive_fields = set(self.config.sensitive_fields)
        self.level_filter = LevelFilter(self.config.min_level)
        self.sampler = Sampler(self.config.sample_rates)
        self.filter_engine = FilterEngine([self.level_filter, self.sampler])
        self.redactor = Redactor(
            self._sensitive_fields, max_depth=self.config.max_redaction_depth
        )
        self.formatter = create_formatter(
            self.config.formatter_type, self.config.sanitize_newlines
        )

        # Owned sink is created only after every setting above has validated
        self._owns_sink = sink is None
        self.sink: Sink = sink if sink is not None else LoggingSink(
            name=f"{name}.output", log_file_path=self.config.log_file_path
        )
        self.buffer = LogBuffer(
            dataclasses.replace(self.config.buffer),
            flush_callback=self._write_entries,
            error_callback=error_callback,
        )

        self._enabled = True
        self._closed = False
        self._warned_closed = False

        if self.config.register_atexit:
            atexit.register(self._close_at_exit)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _write_entries(self, entries: List[LogEntry]) -> None:
        """Format and write entries in order; re-raise the first sink error"""
        first_error: Optional[Exception] = None
        for entry in entries:
            try:
                self.sink.write(entry.severity, self.formatter.format(entry))
            except Exception as e:
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error

    def _write_fatal(self, entry: LogEntry) -> bool:
        self.buffer.flush_now()
        try:
            self._write_entries([entry])
        except Exception as e:
            error = SinkError(f"Sink failed to write fatal entry: {e}", entries=1)
            error.__cause__ = e
            report_error(error, self._error_callback)
            return False
        return True

    def _dispatch(
        self,
        severity: Severity,
        label: str,
        values: tuple,
        sample_key: Optional[str] = None,
    ) -> bool:
        if self._closed:
            if not self._warned_closed:
                self._warned_closed = True
                diagnostics.warning("Logger %r is destroyed; dropping log calls", self.name)
            return False
        if not self._enabled:
            return False

        try:
            if not self.filter_engine.should_log(severity, sample_key).should_log:
                return False

            entry = LogEntry(
                severity=severity,
                payload=self.redactor.redact(values),
                label=label,
            )

            if severity is Severity.FATAL:
                return self._write_fatal(entry)

            self.buffer.add_entry(entry)
            return True
        except Exception as e:
            report_error(e, self._error_callback)
            return False

    def debug(self, *values: Any, sample_key: Optional[str] = None) -> bool:
        return self._dispatch(Severity.DEBUG, "", values, sample_key)

    def info(self, *values: Any, sample_key: Optional[str] = None) -> bool:
        return self._dispatch(Severity.INFO, "", values, sample_key)

    def warning(self, *values: Any, sample_key: Optional[str] = None) -> bool:
        return self._dispatch(Severity.WARNING, "", values, sample_key)

    warn = warning

    def error(self, *values: Any, sample_key: Optional[str] = None) -> bool:
        return self._dispatch(Severity.ERROR, "", values, sample_key)

    def fatal(self, *values: Any, sample_key: Optional[str] = None) -> bool:
        """Write synchronously, bypassing the buffer"""
        return self._dispatch(Severity.FATAL, "", values, sample_key)

    def log(
        self,
        level_or_label: Union[Severity, str],
        *values: Any,
        sample_key: Optional[str] = None,
    ) -> bool:
        """Log with an explicit level, or at info level under a custom label

        ``log("error", "msg")`` logs at error level; ``log("payments", "msg")``
        logs at info level with the label ``payments``.
        """
        if isinstance(level_or_label, Severity) or is_severity_name(level_or_label):
            return self._dispatch(parse_severity(level_or_label), "", values, sample_key)
        return self._dispatch(Severity.INFO, str(level_or_label), values, sample_key)

    def debug_sampled(self, key: str, *values: Any) -> bool:
        return self.debug(*values, sample_key=key)

    def info_sampled(self, key: str, *values: Any) -> bool:
        return self.info(*values, sample_key=key)

    def warning_sampled(self, key: str, *values: Any) -> bool:
        return self.warning(*values, sample_key=key)

    def error_sampled(self, key: str, *values: Any) -> bool:
        return self.error(*values, sample_key=key)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure_buffering(
        self, config: Optional[BufferConfig] = None, **changes: Any
    ) -> BufferConfig:
        """Replace or amend the buffer configuration; restarts the flush timer"""
        return self.buffer.update_config(config, **changes)

    def configure_sampling(self, key: str, rate: float) -> None:
        self.sampler.set_sample_rate(key, rate)

    def set_min_level(self, level: SeverityLike) -> None:
        self.level_filter.set_min_level(level)

    def get_min_level(self) -> Severity:
        return self.level_filter.min_level

    @property
    def sensitive_fields(self) -> FrozenSet[str]:
        return frozenset(self._sensitive_fields)

    def set_sensitive_fields(self, fields: Iterable[str]) -> None:
        """Add field names to the sensitive set"""
        self._sensitive_fields.update(fields)

    def reset_sensitive_fields(self, fields: Iterable[str]) -> None:
        """Replace the sensitive set"""
        fields = list(fields)
        self._sensitive_fields.clear()
        self._sensitive_fields.update(fields)

    def clear_sensitive_fields(self) -> None:
        self._sensitive_fields.clear()

    def enable(self, flag: bool = True) -> None:
        self._enabled = flag

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def closed(self) -> bool:
        return self._closed

    def set_log_file_path(self, path: Union[str, os.PathLike]) -> None:
        """Point the sink's file output at ``path`` after validating it"""
        setter = getattr(self.sink, "set_log_file_path", None)
        if setter is None:
            raise ConfigurationError(
                f"{type(self.sink).__name__} does not support log file paths"
            )
        setter(path)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def flush_now(self) -> None:
        self.buffer.flush_now()

    async def flush(self) -> None:
        """Flush all pending entries"""
        await self.buffer.flush()

    async def stop(self) -> None:
        """Cancel the flush timer and drain the buffer

        The logger stays usable; later entries are written straight through.
        """
        await self.buffer.stop()

    def destroy(self) -> None:
        """Drain the buffer, release the sink and reject further log calls"""
        if self._closed:
            return
        self.buffer.stop_now()
        self._closed = True
        if self._owns_sink:
            close = getattr(self.sink, "close", None)
            if close is not None:
                close()
        atexit.unregister(self._close_at_exit)

    def _close_at_exit(self) -> None:
        try:
            self.destroy()
        except Exception as e:
            report_error(e, self._error_callback)

    async def fatal_and_exit(self, *values: Any, exit_code: int = 1) -> None:
        """Log a fatal entry, drain everything and exit the process"""
        self.fatal(*values)
        await self.stop()
        self.destroy()
        raise SystemExit(exit_code)

    def get_stats(self) -> Dict[str, Any]:
        """Get logger statistics"""
        return {
            "buffer": self.buffer.get_stats(),
            "sampling": self.sampler.get_stats(),
            "filtering": self.filter_engine.get_metrics(),
            "min_level": self.level_filter.min_level.label,
        }

    async def __aenter__(self) -> "Logger":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.stop()
        self.destroy()
