"""Query hooks for SQL databases: debug printing, logging, tracing and datastore
segments, with big-number and time-of-day column types, an SQLite handle and
cursor pagination."""

__version__ = "0.1.0"

__all__ = [
    "events",
    "bignum",
    "jsonprovider",
    "debug",
    "sloghook",
    "zerohook",
    "tracing",
    "datastore",
    "timeofday",
    "wherefields",
    "sqlitedb",
    "pagination",
]