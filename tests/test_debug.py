import io
from datetime import datetime

import pytest

from queryhooks.debug import DebugHook, format_operation, operation_color
from queryhooks.events import NoRowsError, QueryEvent, TxDoneError

QUERY = "SELECT * FROM users"


def _event(err=None, query=QUERY):
    return QueryEvent(query=query, start_time=datetime.now(), err=err)


def _hook(**kwargs):
    buf = io.StringIO()
    kwargs.setdefault("colored", False)
    return DebugHook(writer=buf, **kwargs), buf


def test_success_not_logged_when_not_verbose():
    hook, buf = _hook()
    hook.after_query(None, _event())
    assert buf.getvalue() == ""


@pytest.mark.parametrize("err", [NoRowsError(), TxDoneError()])
def test_ignored_errors_not_logged_when_not_verbose(err):
    hook, buf = _hook()
    hook.after_query(None, _event(err))
    assert buf.getvalue() == ""


def test_verbose_logs_query():
    hook, buf = _hook(verbose=True)
    hook.after_query(None, _event())
    line = buf.getvalue()
    assert line.startswith("[bun] ")
    assert line.endswith(QUERY + "\n")
    assert line.count("\n") == 1
    assert "SELECT" in line.split(QUERY)[0]


def test_error_logged_with_type():
    hook, buf = _hook()
    hook.after_query(None, _event(ValueError("boom")))
    line = buf.getvalue()
    assert "ValueError: boom" in line
    assert "\t" in line


def test_verbose_logs_ignored_errors_too():
    hook, buf = _hook(verbose=True)
    hook.after_query(None, _event(NoRowsError("none")))
    assert "NoRowsError: none" in buf.getvalue()


def test_disabled_hook_prints_nothing():
    hook, buf = _hook(enabled=False, verbose=True)
    hook.after_query(None, _event(ValueError("boom")))
    assert buf.getvalue() == ""


def test_colored_output_uses_escape_codes():
    hook, buf = _hook(verbose=True, colored=True)
    hook.after_query(None, _event())
    out = buf.getvalue()
    assert "\x1b[42;97m" in out
    assert "\x1b[0m" in out


def test_before_query_returns_context():
    hook, _ = _hook()
    ctx = object()
    assert hook.before_query(ctx, _event()) is ctx


def test_format_operation_pads(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    text = format_operation(_event(query="INSERT INTO t VALUES (1)"))
    assert len(text) == 18
    assert text.strip() == "INSERT"
    assert text.startswith(" INSERT")


def test_operation_color_choices():
    assert operation_color("SELECT").codes == (42, 97)
    assert operation_color("CREATE") == operation_color("DROP")
    assert operation_color("SELECT") != operation_color("INSERT")
    assert operation_color("UPDATE") != operation_color("DELETE")


def test_apply_env_verbose(monkeypatch):
    monkeypatch.setenv("BUNDEBUG", "2")
    hook, _ = _hook(enabled=False)
    assert hook.apply_env() is hook
    assert hook.enabled is True
    assert hook.verbose is True


def test_apply_env_enable_only(monkeypatch):
    monkeypatch.setenv("BUNDEBUG", "1")
    hook, _ = _hook(enabled=False, verbose=True)
    hook.apply_env()
    assert hook.enabled is True
    assert hook.verbose is False


@pytest.mark.parametrize("value", ["0", ""])
def test_apply_env_disable(monkeypatch, value):
    monkeypatch.setenv("BUNDEBUG", value)
    hook, _ = _hook()
    hook.apply_env()
    assert hook.enabled is False


def test_apply_env_missing_keeps_settings(monkeypatch):
    monkeypatch.delenv("BUNDEBUG", raising=False)
    hook, _ = _hook(enabled=False, verbose=True)
    hook.apply_env()
    assert hook.enabled is False
    assert hook.verbose is True


def test_apply_env_first_found_key_wins(monkeypatch):
    monkeypatch.delenv("MISSING_KEY", raising=False)
    monkeypatch.setenv("FIRST_KEY", "2")
    monkeypatch.setenv("SECOND_KEY", "0")
    hook, _ = _hook(enabled=False)
    hook.apply_env("MISSING_KEY", "FIRST_KEY", "SECOND_KEY")
    assert hook.enabled is True
    assert hook.verbose is True