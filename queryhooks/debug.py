"""A hook that prints queries to a stream, coloured by operation."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TextIO

from queryhooks.events import (
    NoRowsError,
    QueryEvent,
    QueryHook,
    TxDoneError,
    format_duration,
)

_FG_HI_BLACK = 90
_FG_HI_WHITE = 97
_BG_RED = 41
_BG_GREEN = 42
_BG_YELLOW = 43
_BG_BLUE = 44
_BG_MAGENTA = 45
_BG_WHITE = 47


@dataclass(frozen=True)
class _Color:
    codes: tuple[int, ...]

    def wrap(self, text: str, enabled: bool) -> str:
        if not enabled:
            return text
        seq = ";".join(str(code) for code in self.codes)
        return f"\x1b[{seq}m{text}\x1b[0m"


_OPERATION_COLORS = {
    "SELECT": _Color((_BG_GREEN, _FG_HI_WHITE)),
    "INSERT": _Color((_BG_BLUE, _FG_HI_WHITE)),
    "UPDATE": _Color((_BG_YELLOW, _FG_HI_BLACK)),
    "DELETE": _Color((_BG_MAGENTA, _FG_HI_WHITE)),
}
_DEFAULT_COLOR = _Color((_BG_WHITE, _FG_HI_BLACK))
_ERROR_COLOR = _Color((_BG_RED,))


def _supports_color(stream: Any) -> bool:
    if "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb":
        return False
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        return False


def operation_color(operation: str) -> _Color:
    """The colour used to highlight an operation name."""
    return _OPERATION_COLORS.get(operation, _DEFAULT_COLOR)


def _format_operation(event: QueryEvent, colored: bool) -> str:
    operation = event.operation()
    return operation_color(operation).wrap(f" {operation:<16} ", colored)


def format_operation(event: QueryEvent) -> str:
    """The event's operation padded to 16 characters, coloured on a terminal."""
    return _format_operation(event, _supports_color(sys.stdout))


class DebugHook(QueryHook):
    """Prints failed queries, or every query in verbose mode."""

    def __init__(
        self,
        *,
        enabled: bool = True,
        verbose: bool = False,
        writer: TextIO | None = None,
        colored: bool | None = None,
    ) -> None:
        self.enabled = enabled
        self.verbose = verbose
        self.writer = writer if writer is not None else sys.stderr
        self.colored = colored

    def apply_env(self, *args: str) -> DebugHook:
        """Configure from the first set variable: 0 off, 1 on, 2 on and verbose."""
        keys = args or ("BUNDEBUG",)
        for key in keys:
            value = os.environ.get(key)
            if value is not None:
                self.enabled = value not in ("", "0")
                self.verbose = value == "2"
                break
        return self

    def before_query(self, ctx: Any, event: QueryEvent) -> Any:
        return ctx

    def after_query(self, ctx: Any, event: QueryEvent) -> None:
        if not self.enabled:
            return
        err = event.err
        if not self.verbose and (err is None or isinstance(err, (NoRowsError, TxDoneError))):
            return

        colored = self.colored if self.colored is not None else _supports_color(self.writer)
        now = datetime.now(event.start_time.tzinfo)
        duration = format_duration(now - event.start_time)

        parts = [
            "[bun]",
            f" {now:%H:%M:%S}.{now.microsecond // 1000:03d} ",
            _format_operation(event, colored),
            f" {duration:>10} ",
            event.query,
        ]
        if err is not None:
            parts.append("\t")
            parts.append(_ERROR_COLOR.wrap(f" {type(err).__name__}: {err} ", colored))

        print(*parts, file=self.writer)