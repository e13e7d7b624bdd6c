from __future__ import annotations

import math

import pytest

from tradebook.ingest.normalize import (
    RowMappingError,
    parse_flag,
    parse_trade_date,
    resolve_is_win,
    sanitize_number,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("$125.50", 125.5),
        ("$1,234.56", 1234.56),
        ("-40", -40.0),
        ("12.5 USD", 12.5),
        ("", 0.0),
        ("n/a", 0.0),
        ("-", 0.0),
        ("1.2.3", 0.0),
        (None, 0.0),
        (7, 7.0),
        (2.5, 2.5),
    ],
)
def test_sanitize_number(raw, expected):
    assert sanitize_number(raw) == pytest.approx(expected)


def test_sanitize_number_passes_nan_through():
    assert math.isnan(sanitize_number(float("nan")))


def test_parse_flag_tokens():
    assert parse_flag("Win") is True
    assert parse_flag(" PROFIT ") is True
    assert parse_flag("yes") is True
    assert parse_flag("Loss") is False
    assert parse_flag("false") is False
    assert parse_flag(True) is True
    assert parse_flag(False) is False
    assert parse_flag("maybe") is None
    assert parse_flag(None) is None


def test_explicit_flag_overrides_profit_sign():
    assert resolve_is_win("Loss", 25.0) is False
    assert resolve_is_win("Win", -25.0) is True


def test_unrecognized_flag_falls_back_to_profit_sign():
    assert resolve_is_win("scratch", 10.0) is True
    assert resolve_is_win(None, 0.0) is False


def test_parse_trade_date_defaults_to_now(fixed_now):
    assert parse_trade_date(None, now=fixed_now) == fixed_now.isoformat()


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2024-01-15T09:30:00Z", "2024-01-15T09:30:00+00:00"),
        ("2024-01-15 09:30:00", "2024-01-15T09:30:00+00:00"),
        ("01/15/2024 09:30:00", "2024-01-15T09:30:00+00:00"),
        ("01/15/2024 02:30:00 PM", "2024-01-15T14:30:00+00:00"),
        ("15.01.2024 09:30", "2024-01-15T09:30:00+00:00"),
        ("1705311000000", "2024-01-15T09:30:00+00:00"),
        ("1705311000", "2024-01-15T09:30:00+00:00"),
        ("20240105", "2024-01-05T00:00:00+00:00"),
    ],
)
def test_parse_trade_date_formats(raw, expected, fixed_now):
    assert parse_trade_date(raw, now=fixed_now) == expected


def test_parse_trade_date_rejects_garbage(fixed_now):
    with pytest.raises(RowMappingError):
        parse_trade_date("next tuesday", now=fixed_now)


@pytest.mark.parametrize("raw", ["12345", "170531100", "17053110000000"])
def test_short_or_long_digit_strings_are_not_epochs(raw, fixed_now):
    with pytest.raises(RowMappingError):
        parse_trade_date(raw, now=fixed_now)
