from __future__ import annotations

import logging

import pytest

from tradebook.ingest.formats import TradeFormat
from tradebook.ingest.importer import import_batch, import_rows, iter_batches


def test_import_rows_routes_by_format(fixed_now):
    rows = [
        {"Contract": "ES", "P/L": "$125.50", "Initial Risk": "50"},
        {"Symbol": "EURUSD", "Result": "Loss", "Profit": "-40"},
        {"symbol": "GC", "rrAchieved": "2"},
    ]
    records = import_rows(rows, clock=lambda: fixed_now)
    assert [record.symbol for record in records] == ["ES", "EURUSD", "GC"]
    assert records[0].rr_achieved == pytest.approx(2.51)
    assert records[2].rr_achieved == 2.0


def test_unknown_rows_can_fall_back_to_tradovate(fixed_now):
    records = import_rows([{"Initial Risk": "10", "pnl": "30"}], clock=lambda: fixed_now, fallback=TradeFormat.TRADOVATE)
    assert records[0].rr_achieved == pytest.approx(3.0)


def test_bad_rows_are_dropped_and_logged(fixed_now, caplog):
    rows = [
        {"Symbol": "ES", "Date": "not a date"},
        "garbage",
        {"Symbol": "NQ", "P/L": "10"},
    ]
    with caplog.at_level(logging.WARNING, logger="tradebook.ingest.importer"):
        result = import_batch(rows, clock=lambda: fixed_now)
    assert [record.symbol for record in result.records] == ["NQ"]
    assert result.skipped == 2
    assert result.processed == 3
    assert "Dropping import row 0" in caplog.text
    assert "Dropping import row 1" in caplog.text


def test_empty_and_all_failing_input(fixed_now):
    assert import_rows([], clock=lambda: fixed_now) == []
    assert import_rows([None, 5], clock=lambda: fixed_now) == []


def test_batch_cap(fixed_now):
    rows = [{"Symbol": f"S{index}", "P/L": "1"} for index in range(120)]
    result = import_batch(rows, clock=lambda: fixed_now)
    assert result.imported == 50
    assert result.processed == 50
    assert result.remaining == 70
    assert result.records[-1].symbol == "S49"


def test_clock_is_called_once_per_batch(fixed_now):
    calls = []

    def clock():
        calls.append(1)
        return fixed_now

    records = import_rows([{"Symbol": "A"}, {"Symbol": "B"}], clock=clock)
    assert len(calls) == 1
    assert {record.date for record in records} == {fixed_now.isoformat()}


def test_invalid_batch_size():
    with pytest.raises(ValueError):
        import_batch([], batch_size=0)


def test_iter_batches():
    chunks = list(iter_batches(list(range(7)), 3))
    assert chunks == [[0, 1, 2], [3, 4, 5], [6]]


def test_dropped_row_index_counts_from_offset(fixed_now, caplog):
    rows = [{"Symbol": "ES", "P/L": "1"}, {"Symbol": "NQ", "Date": "not a date"}]
    with caplog.at_level(logging.WARNING, logger="tradebook.ingest.importer"):
        import_batch(rows, clock=lambda: fixed_now, offset=100)
    assert "Dropping import row 101" in caplog.text
