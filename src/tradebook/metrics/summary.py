from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from tradebook.metrics.equity import drawdown, equity_curve
from tradebook.models import TradeRecord

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass(frozen=True)
class TradeSummary:
    total_trades: int
    wins: int
    losses: int
    win_rate: float
    avg_win: float
    avg_loss: float
    profit_factor: float
    average_rr: float
    total_profit_loss: float
    total_rr: float
    best_trade: float | None
    worst_trade: float | None
    max_consecutive_wins: int
    max_consecutive_losses: int
    max_drawdown_pct: float


def win_rate(records: Iterable[TradeRecord]) -> float:
    record_list = list(records)
    if not record_list:
        return 0.0
    wins = sum(1 for record in record_list if record.is_win)
    return 100.0 * wins / len(record_list)


def profit_factor(records: Iterable[TradeRecord]) -> float:
    record_list = list(records)
    avg_loss = _avg_loss(record_list)
    # Undefined without losses.
    if avg_loss == 0:
        return 0.0
    return _avg_win(record_list) / avg_loss


def average_rr(records: Iterable[TradeRecord]) -> float:
    values = [record.rr_achieved for record in records]
    if not values:
        return 0.0
    return sum(values) / len(values)


def max_consecutive(records: Iterable[TradeRecord], is_win: bool) -> int:
    max_count = 0
    current = 0
    for record in chronological(records):
        if record.is_win == is_win:
            current += 1
            max_count = max(max_count, current)
        else:
            current = 0
    return max_count


def chronological(records: Iterable[TradeRecord]) -> list[TradeRecord]:
    return sorted(records, key=sort_timestamp)


def sort_timestamp(record: TradeRecord) -> datetime:
    return record.timestamp() or _EPOCH


def compute_summary(records: Iterable[TradeRecord]) -> TradeSummary:
    record_list = list(records)
    wins = sum(1 for record in record_list if record.is_win)
    profits = [record.profit_loss for record in record_list]
    curve = equity_curve(chronological(record_list))
    drawdowns = drawdown(curve)

    return TradeSummary(
        total_trades=len(record_list),
        wins=wins,
        losses=len(record_list) - wins,
        win_rate=win_rate(record_list),
        avg_win=_avg_win(record_list),
        avg_loss=_avg_loss(record_list),
        profit_factor=profit_factor(record_list),
        average_rr=average_rr(record_list),
        total_profit_loss=sum(profits),
        total_rr=sum(record.rr_achieved for record in record_list),
        best_trade=max(profits, default=None),
        worst_trade=min(profits, default=None),
        max_consecutive_wins=max_consecutive(record_list, True),
        max_consecutive_losses=max_consecutive(record_list, False),
        max_drawdown_pct=drawdowns[-1].max_drawdown_so_far if drawdowns else 0.0,
    )


def _avg_win(records: list[TradeRecord]) -> float:
    values = [record.profit_loss for record in records if record.is_win]
    if not values:
        return 0.0
    return sum(values) / len(values)


def _avg_loss(records: list[TradeRecord]) -> float:
    values = [abs(record.profit_loss) for record in records if not record.is_win]
    if not values:
        return 0.0
    return sum(values) / len(values)
