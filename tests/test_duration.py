from datetime import timedelta

import pytest

from cometkit.duration import parse_duration


def test_duration_text():
    assert parse_duration(b"10s") == timedelta(seconds=10)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("10s", timedelta(seconds=10)),
        ("500ms", timedelta(milliseconds=500)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5s", timedelta(seconds=1.5)),
        (".5s", timedelta(milliseconds=500)),
        ("1.s", timedelta(seconds=1)),
        ("-2m", timedelta(minutes=-2)),
        ("+3h", timedelta(hours=3)),
        ("0", timedelta(0)),
        ("7us", timedelta(microseconds=7)),
        ("7\u00b5s", timedelta(microseconds=7)),
        ("2000ns", timedelta(microseconds=2)),
    ],
)
def test_valid(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize(
    "text", ["", "+", "10", "00", "1x", ".s", "s", "1.2.3s", "10000000h"]
)
def test_invalid(text):
    with pytest.raises(ValueError):
        parse_duration(text)