"""Query events and the machinery that runs query hooks around them."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

_MAX_OPERATION_LEN = 16


class NoRowsError(Exception):
    """Raised when a query that expects a row returns none."""


class TxDoneError(Exception):
    """Raised when a transaction is used after commit or rollback."""


def query_operation(query: str) -> str:
    """Return the leading keyword of a query, at most 16 characters long."""
    op = query.lstrip()
    idx = op.find(" ")
    if idx > 0:
        op = op[:idx]
    return op[:_MAX_OPERATION_LEN]


def _format_fraction(value: int, precision: int) -> str:
    whole, frac = divmod(value, 10**precision)
    if frac == 0:
        return str(whole)
    digits = str(frac).rjust(precision, "0").rstrip("0")
    return f"{whole}.{digits}"


def format_duration(delta: timedelta) -> str:
    """Format a duration the way ``1h2m3.5s`` or ``150ms`` reads."""
    ns = (delta.days * 86400 + delta.seconds) * 10**9 + delta.microseconds * 1000
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns == 0:
        return "0s"
    if ns < 1000:
        return f"{sign}{ns}ns"
    if ns < 10**6:
        return f"{sign}{_format_fraction(ns, 3)}µs"
    if ns < 10**9:
        return f"{sign}{_format_fraction(ns, 6)}ms"
    total_seconds, frac_ns = divmod(ns, 10**9)
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    text = _format_fraction(seconds * 10**9 + frac_ns, 9) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{text}"
    if minutes:
        return f"{sign}{minutes}m{text}"
    return sign + text


@dataclass
class QueryEvent:
    """Everything known about one query, passed to every hook."""

    db: Any = None
    iquery: Any = None
    query: str = ""
    query_template: str = ""
    query_args: list = field(default_factory=list)
    model: Any = None
    start_time: datetime = field(default_factory=datetime.now)
    result: Any = None
    err: BaseException | None = None
    stash: dict = field(default_factory=dict)

    def operation(self) -> str:
        """The query's operation, taken from the query object if there is one."""
        if self.iquery is not None:
            return self.iquery.operation()
        return query_operation(self.query)


class QueryHook:
    """Base for hooks called before and after each query."""

    def before_query(self, ctx: Any, event: QueryEvent) -> Any:
        return ctx

    def after_query(self, ctx: Any, event: QueryEvent) -> None:
        return None


@dataclass
class QueryStats:
    """Counters of queries run and queries that failed."""

    queries: int = 0
    errors: int = 0


class HookRunner:
    """Holds query hooks and calls them around each query."""

    def __init__(self, db: Any = None) -> None:
        self.db = db
        self.query_hooks: list[QueryHook] = []
        self.stats = QueryStats()
        self._lock = threading.Lock()

    def add_query_hook(self, hook: QueryHook) -> None:
        self.query_hooks.append(hook)

    def before_query(self, ctx, iquery, query_template, query_args, query, model):
        """Count the query and run before-hooks; return (ctx, event or None)."""
        with self._lock:
            self.stats.queries += 1
        if not self.query_hooks:
            return ctx, None
        event = QueryEvent(
            db=self.db,
            iquery=iquery,
            query=query,
            query_template=query_template,
            query_args=list(query_args or []),
            model=model,
            start_time=datetime.now(),
        )
        for hook in self.query_hooks:
            ctx = hook.before_query(ctx, event)
        return ctx, event

    def after_query(self, ctx, event, result, err) -> None:
        """Count a failure and run after-hooks in reverse order."""
        if err is not None and not isinstance(err, NoRowsError):
            with self._lock:
                self.stats.errors += 1
        if event is None:
            return
        event.result = result
        event.err = err
        for hook in reversed(self.query_hooks):
            hook.after_query(ctx, event)