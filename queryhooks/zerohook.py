"""A hook that writes queries as JSON log lines through a small leveled logger."""

from __future__ import annotations

import contextvars
import json
from contextlib import contextmanager
from datetime import datetime, timedelta
from enum import IntEnum
from typing import Any, Callable, Iterator, TextIO

from queryhooks.events import NoRowsError, QueryEvent, QueryHook, format_duration


class Level(IntEnum):
    """Log levels, lowest first."""

    TRACE = -1
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    FATAL = 4
    PANIC = 5
    NO_LEVEL = 6
    DISABLED = 7


_LABELS = {
    Level.TRACE: "trace",
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARN: "warn",
    Level.ERROR: "error",
    Level.FATAL: "fatal",
    Level.PANIC: "panic",
}


class JsonEvent:
    """One log line being built; written by send(). A disabled event does nothing."""

    def __init__(self, stream: TextIO | None, level: Level, enabled: bool = True) -> None:
        self._stream = stream
        self._enabled = enabled and stream is not None
        self._fields: dict[str, Any] = {}
        if level in _LABELS:
            self._fields["level"] = _LABELS[level]

    def err(self, error: BaseException | None) -> JsonEvent:
        if self._enabled and error is not None:
            self._fields["error"] = str(error)
        return self

    def str(self, key: str, value: str) -> JsonEvent:
        if self._enabled:
            self._fields[key] = value
        return self

    def send(self) -> None:
        if not self._enabled:
            return
        self._stream.write(json.dumps(self._fields, separators=(",", ":")) + "\n")
        self._enabled = False


class JsonLogger:
    """Writes events at or above its level to a stream, one JSON object per line."""

    def __init__(self, stream: TextIO | None, level: Level = Level.TRACE) -> None:
        self.stream = stream
        self.level = Level(level)

    def with_level(self, level: Level) -> JsonEvent:
        level = Level(level)
        enabled = (
            self.stream is not None
            and self.level != Level.DISABLED
            and level != Level.DISABLED
            and level >= self.level
        )
        return JsonEvent(self.stream, level, enabled)


_DISABLED_LOGGER = JsonLogger(None, Level.DISABLED)
_current: contextvars.ContextVar[JsonLogger] = contextvars.ContextVar(
    "queryhooks_json_logger", default=_DISABLED_LOGGER
)


@contextmanager
def bind_logger(logger: JsonLogger) -> Iterator[JsonLogger]:
    """Make a logger the current one for the duration of the block."""
    token = _current.set(logger)
    try:
        yield logger
    finally:
        _current.reset(token)


def current_logger() -> JsonLogger:
    """The bound logger, or a disabled one when none is bound."""
    return _current.get()


LogFormat = Callable[[Any, QueryEvent, JsonEvent], JsonEvent]


class ZeroLogHook(QueryHook):
    """Logs each query as JSON at a level chosen by its duration and outcome."""

    def __init__(
        self,
        *,
        logger: JsonLogger | None = None,
        query_log_level: Level = Level.DEBUG,
        slow_query_log_level: Level = Level.WARN,
        error_log_level: Level = Level.ERROR,
        slow_query_threshold: timedelta = timedelta(0),
        log_format: LogFormat | None = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.logger = logger
        self.query_log_level = query_log_level
        self.slow_query_log_level = slow_query_log_level
        self.error_log_level = error_log_level
        self.slow_query_threshold = slow_query_threshold
        self.log_format = log_format if log_format is not None else self._default_format
        self.now = now

    def _default_format(self, ctx: Any, event: QueryEvent, log_event: JsonEvent) -> JsonEvent:
        duration = self.now() - event.start_time
        return (
            log_event.err(event.err)
            .str("query", event.query)
            .str("operation", event.operation())
            .str("duration", format_duration(duration))
        )

    def before_query(self, ctx: Any, event: QueryEvent) -> Any:
        return ctx

    def after_query(self, ctx: Any, event: QueryEvent) -> None:
        level = self.query_log_level
        duration = self.now() - event.start_time
        if self.slow_query_threshold > timedelta(0) and self.slow_query_threshold <= duration:
            level = self.slow_query_log_level
        if event.err is not None and not isinstance(event.err, NoRowsError):
            level = self.error_log_level

        logger = self.logger if self.logger is not None else current_logger()
        self.log_format(ctx, event, logger.with_level(level)).send()