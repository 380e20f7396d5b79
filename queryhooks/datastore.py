"""A hook that times queries as datastore segments."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping

from queryhooks.events import QueryEvent, QueryHook

_SEGMENT_KEY = object()

_COMMENT_RE = re.compile(r"/\*.*?\*/|--[^\n]*", re.S)
_FIRST_WORD_RE = re.compile(r"^\s*(\w+)")
_IDENT = r"([^\s,;()]+)"
_COLLECTION_RES = {
    "select": re.compile(r"\bfrom\s+" + _IDENT, re.I),
    "delete": re.compile(r"\bfrom\s+" + _IDENT, re.I),
    "insert": re.compile(r"\binto\s+" + _IDENT, re.I),
    "update": re.compile(r"^\s*update\s+" + _IDENT, re.I),
}
_QUOTES = "\"`[]'"


@dataclass
class DatastoreSegment:
    """Timing and description of one datastore call."""

    product: str = ""
    collection: str = ""
    operation: str = ""
    host: str = ""
    port_path_or_id: str = ""
    database_name: str = ""
    start_time: float | None = None
    duration: float | None = None
    recorder: Callable[[DatastoreSegment], None] | None = None

    def end(self) -> None:
        """Stop the segment's clock and hand it to the recorder."""
        if self.start_time is not None:
            self.duration = time.monotonic() - self.start_time
        if self.recorder is not None:
            self.recorder(self)


def parse_query(segment: DatastoreSegment, query: str) -> None:
    """Fill in a segment's operation and collection from the text of a query."""
    text = _COMMENT_RE.sub(" ", query)
    match = _FIRST_WORD_RE.match(text)
    if match is None:
        return
    operation = match.group(1).lower()
    pattern = _COLLECTION_RES.get(operation)
    if pattern is None:
        return
    segment.operation = operation
    found = pattern.search(text)
    if found is not None:
        segment.collection = found.group(1).strip(_QUOTES).replace("`", "").replace('"', "")


class DatastoreHook(QueryHook):
    """Opens a segment before each query and ends it afterwards."""

    def __init__(
        self,
        *,
        database_name: str = "",
        product: str = "",
        host: str = "",
        port_path_or_id: str = "",
        recorder: Callable[[DatastoreSegment], None] | None = None,
    ) -> None:
        self.base_segment = DatastoreSegment(
            product=product,
            host=host,
            port_path_or_id=port_path_or_id,
            database_name=database_name,
            recorder=recorder,
        )

    def before_query(self, ctx: Mapping | None, event: QueryEvent) -> dict:
        segment = replace(self.base_segment)
        table = getattr(event.model, "table", None) if event.model is not None else None
        if callable(table):
            segment.operation = event.operation()
            segment.collection = table().name
        else:
            parse_query(segment, event.query)
        segment.start_time = time.monotonic()
        new_ctx = dict(ctx or {})
        new_ctx[_SEGMENT_KEY] = segment
        return new_ctx

    def after_query(self, ctx: Mapping, event: QueryEvent) -> None:
        """End the segment opened for this query; a missing one raises KeyError."""
        segment: Any = ctx[_SEGMENT_KEY]
        segment.end()