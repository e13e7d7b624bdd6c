from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from tradebook.ingest.normalize import (
    parse_trade_date,
    pick,
    pick_number,
    pick_text,
    resolve_is_win,
    sanitize_number,
)
from tradebook.models import TradeRecord

SYMBOL_KEYS = ("Contract", "Symbol", "Product")
SETUP_KEYS = ("Setup", "Strategy")
MAIN_TREND_KEYS = ("Main Trend M15", "mainTrendM15", "main_trend_m15")
INTERNAL_TREND_KEYS = ("Internal Trend M5", "internalTrendM5", "internal_trend_m5")
ENTRY_TYPE_KEYS = ("B/S", "Side", "Entry Type", "Order Type", "Type")
ENTRY_LEVEL_KEYS = ("Entry Level", "Avg Fill Price", "Entry Price", "buyPrice", "Price")
LIQUIDATION_KEYS = ("Liquidation", "Stop Price", "Stop")
LOCATION_KEYS = ("Location",)
RR_POTENTIAL_KEYS = ("RR Potential", "Planned R:R", "rrPotential", "rr_potential")
PROFIT_KEYS = ("P/L", "pnl", "Net P/L")
INITIAL_RISK_KEY = "Initial Risk"
RESULT_KEYS = ("Result", "Outcome", "Win/Loss", "isWin", "is_win", "Win")
DATE_KEYS = ("Fill Time", "Timestamp", "soldTimestamp", "Date", "Time")


def map_tradovate(row: Mapping[str, Any], *, now: datetime) -> TradeRecord:
    profit_loss = pick_number(row, PROFIT_KEYS)
    return TradeRecord(
        symbol=pick_text(row, SYMBOL_KEYS),
        setup=pick_text(row, SETUP_KEYS),
        main_trend_m15=pick_text(row, MAIN_TREND_KEYS),
        internal_trend_m5=pick_text(row, INTERNAL_TREND_KEYS),
        entry_type=pick_text(row, ENTRY_TYPE_KEYS),
        entry_level=pick_text(row, ENTRY_LEVEL_KEYS),
        liquidation=pick_text(row, LIQUIDATION_KEYS),
        location=pick_text(row, LOCATION_KEYS),
        rr_achieved=_rr_from_risk(profit_loss, row),
        rr_potential=pick_number(row, RR_POTENTIAL_KEYS),
        profit_loss=profit_loss,
        is_win=resolve_is_win(pick(row, RESULT_KEYS), profit_loss),
        date=parse_trade_date(pick(row, DATE_KEYS), now=now),
    )


def _rr_from_risk(profit_loss: float, row: Mapping[str, Any]) -> float:
    initial_risk = 1.0
    if INITIAL_RISK_KEY in row:
        initial_risk = sanitize_number(row[INITIAL_RISK_KEY])
    if initial_risk == 0:
        return 0.0
    return abs(profit_loss / initial_risk)
