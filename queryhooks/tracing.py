"""A hook that traces queries as spans and records their timing in a histogram."""

from __future__ import annotations

import inspect
import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Mapping

from queryhooks.events import NoRowsError, QueryEvent, QueryHook, TxDoneError

INSTRUMENTATION_NAME = "queryhooks"

_SOFT_QUERY_LIMIT = 8000
_HARD_QUERY_LIMIT = 16000
_CALLER_DEPTH = 16
_MILLISECOND = timedelta(milliseconds=1)

_SPAN_KEY = object()

_DB_SYSTEMS = {
    "pg": "postgresql",
    "mysql": "mysql",
    "sqlite": "sqlite",
    "mssql": "mssql",
}


@dataclass
class Span:
    """One traced operation: its name, attributes, errors and status."""

    name: str = ""
    kind: str = "internal"
    recording: bool = True
    attributes: dict = field(default_factory=dict)
    errors: list = field(default_factory=list)
    status: tuple[str, str] | None = None
    ended: bool = False

    def is_recording(self) -> bool:
        return self.recording and not self.ended

    def set_name(self, name: str) -> None:
        if self.is_recording():
            self.name = name

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        if self.is_recording():
            self.attributes.update(attributes)

    def record_error(self, error: BaseException) -> None:
        if self.is_recording():
            self.errors.append(error)

    def set_status(self, code: str, description: str = "") -> None:
        if self.is_recording():
            self.status = (code, description)

    def end(self) -> None:
        self.ended = True


_NON_RECORDING_SPAN = Span(recording=False)


def span_from_context(ctx: Mapping | None) -> Span:
    """The span stored in a context, or a span that records nothing."""
    if ctx is None:
        return _NON_RECORDING_SPAN
    return ctx.get(_SPAN_KEY, _NON_RECORDING_SPAN)


class Tracer:
    """Starts spans and keeps every span it started."""

    def __init__(self, name: str = INSTRUMENTATION_NAME, *, recording: bool = True) -> None:
        self.name = name
        self.recording = recording
        self.spans: list[Span] = []

    def start(self, ctx: Mapping | None, name: str) -> tuple[dict, Span]:
        """Start a span and return a new context that carries it."""
        span = Span(name=name, recording=self.recording)
        self.spans.append(span)
        new_ctx = dict(ctx or {})
        new_ctx[_SPAN_KEY] = span
        return new_ctx, span


@dataclass
class Histogram:
    """An integer histogram that keeps every recorded value with its attributes."""

    name: str
    description: str = ""
    unit: str = ""
    records: list = field(default_factory=list)

    def record(self, ctx: Any, value: int, attributes: Mapping[str, Any] | None = None) -> None:
        self.records.append((int(value), dict(attributes or {})))


class Meter:
    """Creates named instruments; asking twice for a name gives the same one."""

    def __init__(self, name: str = INSTRUMENTATION_NAME) -> None:
        self.name = name
        self.histograms: dict[str, Histogram] = {}

    def int64_histogram(self, name: str, description: str = "", unit: str = "") -> Histogram:
        if name not in self.histograms:
            self.histograms[name] = Histogram(name, description, unit)
        return self.histograms[name]


def db_system(dialect_name: str | None) -> tuple[str, str] | None:
    """The ``db.system`` attribute for a dialect name, or None if it is unknown."""
    system = _DB_SYSTEMS.get(dialect_name or "")
    if system is None:
        return None
    return ("db.system", system)


def _dialect_name(db: Any) -> str | None:
    name = getattr(db, "dialect_name", None)
    if callable(name):
        name = name()
    return name


def _frame_module_name(frame: Any) -> str:
    module = inspect.getmodule(frame)
    if module is None:
        return ""
    return module.__name__


def func_file_line(pkg: str) -> tuple[str, str, int]:
    """Function, file and line of the nearest caller outside the named package."""
    frame = sys._getframe(1)
    fn, file, line = "", "", 0
    depth = 0
    while frame is not None and depth < _CALLER_DEPTH:
        module = _frame_module_name(frame)
        fn = f"{module}.{frame.f_code.co_name}"
        file = frame.f_code.co_filename
        line = frame.f_lineno
        if pkg not in module:
            break
        frame = frame.f_back
        depth += 1
    return fn.rsplit("/", 1)[-1], file, line


def unformatted_query(event: QueryEvent) -> str:
    """The query with its placeholders kept, falling back to the template."""
    append_query = getattr(event.iquery, "append_query", None)
    if append_query is not None:
        try:
            text = append_query(None)
        except Exception:
            text = None
        if isinstance(text, (bytes, bytearray)):
            return bytes(text).decode(errors="replace")
        if isinstance(text, str):
            return text
    return event.query_template


class TracingHook(QueryHook):
    """Wraps each query in a client span and records its duration in milliseconds."""

    def __init__(
        self,
        *,
        attributes: Mapping[str, Any] | None = None,
        db_name: str | None = None,
        format_queries: bool = False,
        tracer: Tracer | None = None,
        meter: Meter | None = None,
    ) -> None:
        self.attrs: dict[str, Any] = dict(attributes or {})
        if db_name is not None:
            self.attrs["db.name"] = db_name
        self.format_queries = format_queries
        self.tracer = tracer if tracer is not None else Tracer()
        self.meter = meter if meter is not None else Meter()
        self.query_histogram = self.meter.int64_histogram(
            "go.sql.query_timing",
            description="Timing of processed queries",
            unit="milliseconds",
        )
        self.db_stats_labels: dict[str, Any] = {}

    def init(self, db: Any) -> dict[str, Any]:
        """Work out the labels for the database's connection statistics."""
        labels = dict(self.attrs)
        system = db_system(_dialect_name(db))
        if system is not None:
            labels[system[0]] = system[1]
        self.db_stats_labels = labels
        return labels

    def before_query(self, ctx: Any, event: QueryEvent) -> Any:
        ctx, span = self.tracer.start(ctx, "")
        span.kind = "client"
        return ctx

    def after_query(self, ctx: Any, event: QueryEvent) -> None:
        operation = event.operation()

        labels = dict(self.attrs)
        labels["db.operation"] = operation
        get_table_name = getattr(event.iquery, "get_table_name", None)
        if get_table_name is not None:
            table_name = get_table_name()
            if table_name:
                labels["db.sql.table"] = table_name

        elapsed = datetime.now(event.start_time.tzinfo) - event.start_time
        self.query_histogram.record(ctx, elapsed // _MILLISECOND, labels)

        span = span_from_context(ctx)
        if not span.is_recording():
            return

        span.set_name(operation)
        try:
            query = self.event_query(event)
            fn, file, line = func_file_line(INSTRUMENTATION_NAME)

            attrs = dict(self.attrs)
            attrs.update(
                {
                    "db.operation": operation,
                    "db.statement": query,
                    "code.function": fn,
                    "code.filepath": file,
                    "code.lineno": line,
                }
            )
            system = db_system(_dialect_name(event.db))
            if system is not None:
                attrs[system[0]] = system[1]
            if event.result is not None:
                rows = getattr(event.result, "rowcount", 0) or 0
                if rows > 0:
                    attrs["db.rows_affected"] = rows

            err = event.err
            if err is not None and not isinstance(err, (NoRowsError, TxDoneError)):
                span.record_error(err)
                span.set_status("error", str(err))

            span.set_attributes(attrs)
        finally:
            span.end()

    def event_query(self, event: QueryEvent) -> str:
        """The statement to put on the span, cut to at most 16000 characters."""
        if self.format_queries and len(event.query) <= _SOFT_QUERY_LIMIT:
            query = event.query
        else:
            query = unformatted_query(event)
        return query[:_HARD_QUERY_LIMIT]