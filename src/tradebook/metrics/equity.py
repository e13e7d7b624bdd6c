from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Iterable

from tradebook.models import TradeRecord


@dataclass(frozen=True)
class EquityPoint:
    index: int
    cumulative_profit_loss: float


@dataclass(frozen=True)
class DrawdownPoint:
    drawdown: float
    max_drawdown_so_far: float


@dataclass(frozen=True)
class DailyPerformance:
    day: str
    trades: int
    profit_loss: float
    rr: float


def equity_curve(records: Iterable[TradeRecord]) -> list[EquityPoint]:
    points: list[EquityPoint] = []
    running = 0.0
    for index, record in enumerate(records):
        running += record.profit_loss
        points.append(EquityPoint(index=index, cumulative_profit_loss=running))
    return points


def drawdown(curve: Iterable[EquityPoint], *, initial_balance: float = 0.0) -> list[DrawdownPoint]:
    output: list[DrawdownPoint] = []
    peak: float | None = None
    max_dd = 0.0
    for point in curve:
        equity = initial_balance + point.cumulative_profit_loss
        if peak is None or equity > peak:
            peak = equity
        current = 0.0
        # No percentage base until the peak is positive.
        if peak > 0:
            current = (peak - equity) / peak * 100.0
        if current > max_dd:
            max_dd = current
        output.append(DrawdownPoint(drawdown=current, max_drawdown_so_far=max_dd))
    return output


def daily_performance(records: Iterable[TradeRecord], tz: tzinfo | None = None) -> list[DailyPerformance]:
    buckets: dict[str, list[TradeRecord]] = {}
    for record in records:
        stamp = record.timestamp()
        if stamp is None:
            continue
        day = (stamp.astimezone(tz) if tz is not None else stamp).date().isoformat()
        buckets.setdefault(day, []).append(record)

    return [
        DailyPerformance(
            day=day,
            trades=len(items),
            profit_loss=sum(item.profit_loss for item in items),
            rr=sum(item.rr_achieved for item in items),
        )
        for day, items in sorted(buckets.items())
    ]
