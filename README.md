# queryhooks

Hooks that observe every SQL query a database handle runs, together with
a few column types and helpers that go with them.

A hook receives two calls for each query. `before_query(ctx, event)` is
called just before the statement runs and returns the context to pass on.
`after_query(ctx, event)` is called once the statement has finished. The
`QueryEvent` carries the query text, its template and arguments, the
model, the start time, the result and the error, if there was one.
`event.operation()` returns the leading SQL keyword, such as `SELECT` or
`INSERT`, cut to 16 characters at most.

## Installing

```
pip install .
```

The package needs nothing outside the standard library. To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

| Module | Contents |
| --- | --- |
| `queryhooks.events` | `QueryEvent`, the `QueryHook` base class, `HookRunner`, `QueryStats`, the `NoRowsError` and `TxDoneError` exceptions, `query_operation` and `format_duration`. `HookRunner` counts queries and errors, calls the hooks in order before a query and in reverse order after it. `NoRowsError` is not counted as an error. |
| `queryhooks.debug` | `DebugHook`. It prints failed queries to stderr, or to any writer you give it. In verbose mode it prints every query. Each line shows the time, the operation, the duration and the query, coloured by operation when the output is a terminal. `apply_env("BUNDEBUG")` configures the hook from an environment variable: `0` turns it off, `1` turns it on, and `2` turns it on in verbose mode. |
| `queryhooks.sloghook` | `LoggingHook`. It logs through the standard `logging` module, using separate levels for ordinary, slow and failed queries. `slow_query_threshold` sets when a query counts as slow. `log_format` can supply the attributes of each record. |
| `queryhooks.zerohook` | `ZeroLogHook`. It writes one JSON line per query through a `JsonLogger`. The logger is either passed in or bound with `bind_logger` and read back with `current_logger`. `Level` holds the log levels. |
| `queryhooks.tracing` | `TracingHook`. It starts a client `Span` for each query and names it after the operation. The span gets attributes for the statement, the database system, the table, the calling code and the affected rows, and failures are recorded on it. The timing is recorded in milliseconds in a `Histogram` taken from a `Meter`. `db_system` maps a dialect name to its `db.system` value. |
| `queryhooks.datastore` | `DatastoreHook`. It opens a `DatastoreSegment` before each query and ends it afterwards, handing the segment to an optional `recorder` callback. `parse_query` fills in a segment's operation and collection from the SQL text. |
| `queryhooks.bignum` | `BigInt`, an integer of any size, and `BigFloat`, a double-precision float. Both store themselves as strings through `value()` and read values back with `scan()`. Both support arithmetic and `cmp()`, which returns a `Comparison`. Values are made with `parse_int`, `int_from_int64`, `int_from_uint64` and `parse_float`. `BigInt` also has `to_json` and `from_json`. |
| `queryhooks.jsonprovider` | `JsonProvider`, `StreamEncoder` and `StreamDecoder`, and the module-level functions `marshal`, `unmarshal`, `new_encoder` and `new_decoder`. These functions go through whatever provider `set_provider` installed last. |
| `queryhooks.timeofday` | `TimeOfDay`, a UTC time of day stored as text `HH:MM:SS`, with a fraction of up to six digits when there is one. `scan` accepts datetimes, text, bytes or `None`. `now()` returns the current time. |
| `queryhooks.wherefields` | `get_where_fields`, which returns the conditions joined by `AND` after the first `WHERE`, with their parentheses removed. |
| `queryhooks.sqlitedb` | `Database`, an SQLite connection that sends every statement through the query hooks. It offers `execute`, `query` (rows as dictionaries), `run_in_tx` (a context manager that commits or rolls back), and `close`. It also has `User` and `Profile` records and the helpers `reset_schema`, `insert_user`, `insert_profile` and `insert_user_and_profile`. |
| `queryhooks.pagination` | Cursor-based paging over a table of `Entry` rows, ten at a time: `reset_db`, `select_next_page`, `select_prev_page`, `Cursor` and `new_cursor`. |

## Examples

Attaching a hook to a database:

```python
from queryhooks.debug import DebugHook
from queryhooks.sqlitedb import Database, reset_schema

with Database() as db:
    db.add_query_hook(DebugHook(verbose=True))
    reset_schema(db)
    rows = db.query("SELECT id, name FROM users ORDER BY id")
    print(db.stats.queries, db.stats.errors)
```

Big integers:

```python
from queryhooks.bignum import parse_int

x = parse_int("100")
y = parse_int("200")

print(x.mul(y))             # 20000
print(x.sub(y).to_int64())  # -100
print(x.cmp(y).lt())        # True
```

Conditions from a `WHERE` clause:

```python
from queryhooks.wherefields import get_where_fields

get_where_fields('SELECT "item"."id" FROM "items" AS "item" WHERE (id > 0) AND (id < 10)')
# ['id > 0', 'id < 10']
```

Operation names:

```python
from queryhooks.events import query_operation

query_operation("  SELECT * FROM users")  # 'SELECT'
```

## Commands

```
queryhooks-where-fields   # print a sample query and the conditions of its WHERE clause
queryhooks-demo           # seed users and profiles in SQLite and run a few queries (--database FILE, default in memory)
queryhooks-pagination     # page forwards and backwards through 100 rows
```

The demo commands print every query they run. Set `BUNDEBUG=0` to turn this off.

## What it does not do

- `Database` runs SQL text against SQLite only. It has no query builder, no mapping between tables and classes, no relations and no migrations. The tables that `reset_schema` and `reset_db` create are written out as plain SQL.
- `TracingHook` keeps its spans and histogram values in memory, in its `Tracer` and `Meter`. It does not export them to any tracing or metrics service.
- `DatastoreHook` only times segments and passes them to your `recorder`. It does not report them anywhere else.