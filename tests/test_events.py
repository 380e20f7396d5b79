from datetime import timedelta

from queryhooks.events import (
    HookRunner,
    NoRowsError,
    QueryEvent,
    QueryHook,
    format_duration,
    query_operation,
)


class Recorder(QueryHook):
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def before_query(self, ctx, event):
        self.log.append(("before", self.name))
        return ctx + [self.name]

    def after_query(self, ctx, event):
        self.log.append(("after", self.name))


def test_query_operation_takes_first_word():
    assert query_operation("   SELECT * FROM users") == "SELECT"


def test_query_operation_truncates():
    long_word = "X" * 40
    assert query_operation(long_word) == long_word[:16]


def test_event_operation_prefers_iquery():
    class Q:
        def operation(self):
            return "INSERT"

    assert QueryEvent(iquery=Q(), query="SELECT 1").operation() == "INSERT"
    assert QueryEvent(query="DELETE FROM t").operation() == "DELETE"


def test_format_duration_seconds():
    assert format_duration(timedelta(seconds=3)) == "3s"
    assert format_duration(timedelta(seconds=2)) == "2s"
    assert format_duration(timedelta(0)) == "0s"


def test_runner_without_hooks_counts_only():
    runner = HookRunner()
    ctx, event = runner.before_query("ctx", None, "q", [], "q", None)
    assert (ctx, event) == ("ctx", None)
    runner.after_query(ctx, event, None, RuntimeError("x"))
    assert runner.stats.queries == 1
    assert runner.stats.errors == 1


def test_runner_hook_order_and_event():
    log = []
    runner = HookRunner(db="db")
    runner.add_query_hook(Recorder("a", log))
    runner.add_query_hook(Recorder("b", log))
    ctx, event = runner.before_query([], None, "SELECT ?", [1], "SELECT 1", None)
    assert ctx == ["a", "b"]
    assert event.query_args == [1]
    err = NoRowsError()
    runner.after_query(ctx, event, "res", err)
    assert log == [("before", "a"), ("before", "b"), ("after", "b"), ("after", "a")]
    assert event.result == "res" and event.err is err
    assert runner.stats.errors == 0