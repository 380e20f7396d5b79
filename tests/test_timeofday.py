import datetime as dt

import pytest

from queryhooks.timeofday import TimeOfDay, now


def test_value_with_fraction_trims_zeros():
    assert TimeOfDay(dt.time(12, 34, 56, 500000)).value() == "12:34:56.5"


def test_value_whole_seconds_has_no_fraction():
    assert TimeOfDay(dt.time(7, 8, 9)).value() == "07:08:09"


@pytest.mark.parametrize(
    "clock",
    [dt.time(0, 0, 0), dt.time(23, 59, 59, 999999), dt.time(1, 2, 3, 40)],
)
def test_value_scan_round_trip(clock):
    original = TimeOfDay(clock)
    copy = TimeOfDay()
    copy.scan(original.value())
    assert copy == original


def test_scan_bytes_round_trip():
    original = TimeOfDay(dt.time(10, 11, 12, 130000))
    copy = TimeOfDay()
    copy.scan(original.value().encode())
    assert copy == original


def test_scan_aware_datetime_converts_to_utc():
    src = dt.datetime(2020, 1, 1, 10, 0, tzinfo=dt.timezone(dt.timedelta(hours=2)))
    tod = TimeOfDay()
    tod.scan(src)
    assert tod.time == dt.time(8, 0)


def test_scan_truncates_nanoseconds():
    text = "01:02:03.123456789"
    tod = TimeOfDay()
    tod.scan(text)
    assert text.startswith(tod.value())
    assert len(tod.value()) == len(text) - 3


def test_scan_none_resets_to_midnight():
    tod = TimeOfDay(dt.time(5, 6, 7))
    tod.scan(None)
    assert tod == TimeOfDay()


def test_scan_unsupported_type():
    with pytest.raises(TypeError, match="unsupported data type"):
        TimeOfDay().scan(12)


@pytest.mark.parametrize("text", ["25:00:00", "12:3:00", "noon", "12:00:60"])
def test_scan_invalid_text(text):
    with pytest.raises(ValueError):
        TimeOfDay().scan(text)


def test_now_round_trips():
    current = now()
    copy = TimeOfDay()
    copy.scan(current.value())
    assert copy == current
    assert str(current) == current.value()