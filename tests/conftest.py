from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from tradebook.models import TradeRecord

FIXED_NOW = datetime(2024, 3, 4, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def make_trade() -> Callable[..., TradeRecord]:
    def _make(profit_loss: float = 0.0, *, is_win: bool | None = None, **fields) -> TradeRecord:
        if is_win is None:
            is_win = profit_loss > 0
        return TradeRecord(profit_loss=profit_loss, is_win=is_win, **fields)

    return _make


@pytest.fixture
def trade_sequence(make_trade) -> Callable[[list[bool]], list[TradeRecord]]:
    def _sequence(outcomes: list[bool], start: datetime = FIXED_NOW) -> list[TradeRecord]:
        trades = []
        for offset, won in enumerate(outcomes):
            stamp = start + timedelta(hours=offset)
            trades.append(make_trade(100.0 if won else -50.0, date=stamp.isoformat()))
        return trades

    return _sequence
