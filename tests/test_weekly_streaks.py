from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from tradebook.metrics.streaks import streak_status
from tradebook.metrics.weekly import weekly_summary


def test_weekly_summary_counts_inclusive_range(make_trade):
    records = [
        make_trade(10, rr_achieved=2.0, date="2024-03-04T00:00:00+00:00"),
        make_trade(-5, rr_achieved=-1.0, date="2024-03-10T23:59:00+00:00"),
        make_trade(20, rr_achieved=3.0, date="2024-03-11T00:00:00+00:00"),
        make_trade(1, rr_achieved=5.0, date=""),
    ]
    summary = weekly_summary(records, date(2024, 3, 4), date(2024, 3, 10))
    assert summary.trade_count == 2
    assert summary.total_rr == pytest.approx(1.0)
    assert summary.win_rate == 50.0
    assert summary.week_start == "2024-03-04T00:00:00+00:00"


def test_weekly_summary_rejects_reversed_range():
    with pytest.raises(ValueError):
        weekly_summary([], date(2024, 3, 10), date(2024, 3, 4))


def test_streak_status_empty():
    status = streak_status([])
    assert status.current_streak == 0
    assert status.longest_streak == 0
    assert status.badges == []
    assert status.last_trade_date is None


def test_streak_status_tracks_trailing_wins(trade_sequence):
    records = trade_sequence([True] * 6 + [False] + [True, True])
    status = streak_status(list(reversed(records)))
    assert status.current_streak == 2
    assert status.longest_streak == 6
    assert status.total_wins == 8
    assert status.total_losses == 1
    assert status.last_trade_date == records[-1].date
    assert status.badges == ["first_trade", "winning_streak_5"]


def test_perfect_week_and_volume_badges(make_trade):
    monday = datetime(2024, 3, 4, 9, tzinfo=timezone.utc)
    records = [make_trade(10, date=(monday + timedelta(days=index % 5)).isoformat()) for index in range(5)]
    records += [
        make_trade(-1, date=(monday + timedelta(weeks=1 + index // 5, hours=index)).isoformat())
        for index in range(45)
    ]
    status = streak_status(records)
    assert "perfect_week" in status.badges
    assert "trade_master_50" in status.badges
    assert "trade_master_100" not in status.badges
