from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from tradebook.metrics.summary import win_rate
from tradebook.models import TradeRecord, range_bound


@dataclass(frozen=True)
class WeeklySummary:
    week_start: str
    week_end: str
    total_rr: float
    trade_count: int
    win_rate: float


def weekly_summary(
    records: Iterable[TradeRecord],
    week_start: date | datetime,
    week_end: date | datetime,
) -> WeeklySummary:
    start = range_bound(week_start, end=False)
    end = range_bound(week_end, end=True)
    if end < start:
        raise ValueError("week_end is before week_start")

    in_range = []
    for record in records:
        stamp = record.timestamp()
        if stamp is not None and start <= stamp <= end:
            in_range.append(record)

    return WeeklySummary(
        week_start=start.isoformat(),
        week_end=end.isoformat(),
        total_rr=sum(record.rr_achieved for record in in_range),
        trade_count=len(in_range),
        win_rate=win_rate(in_range),
    )

