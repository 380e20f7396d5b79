"""A hook that logs queries through the standard logging module."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable

from queryhooks.events import NoRowsError, QueryEvent, QueryHook, format_duration

LogFormat = Callable[[QueryEvent], dict]


class LoggingHook(QueryHook):
    """Logs each query at a level chosen by its duration and outcome."""

    def __init__(
        self,
        *,
        logger: logging.Logger | None = None,
        query_log_level: int = logging.DEBUG,
        slow_query_log_level: int = logging.WARNING,
        error_log_level: int = logging.ERROR,
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

    def _default_format(self, event: QueryEvent) -> dict:
        duration = self.now() - event.start_time
        return {
            "error": event.err,
            "operation": event.operation(),
            "query": event.query,
            "duration": format_duration(duration),
        }

    def before_query(self, ctx: Any, event: QueryEvent) -> Any:
        return ctx

    def after_query(self, ctx: Any, event: QueryEvent) -> None:
        """Log the event; its attributes become attributes of the log record."""
        level = self.query_log_level
        duration = self.now() - event.start_time
        if self.slow_query_threshold > timedelta(0) and self.slow_query_threshold <= duration:
            level = self.slow_query_log_level
        if event.err is not None and not isinstance(event.err, NoRowsError):
            level = self.error_log_level

        attrs = dict(self.log_format(event))
        logger = self.logger if self.logger is not None else logging.getLogger()
        logger.log(level, "", extra=attrs)