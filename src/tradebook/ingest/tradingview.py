from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from tradebook.ingest.normalize import parse_trade_date, pick, pick_number, pick_text, resolve_is_win
from tradebook.models import TradeRecord

SYMBOL_KEYS = ("Symbol", "symbol", "Ticker", "Instrument")
SETUP_KEYS = ("Setup", "setup", "Strategy", "strategy")
MAIN_TREND_KEYS = ("Main Trend M15", "Main Trend", "M15 Trend", "mainTrendM15", "main_trend_m15")
INTERNAL_TREND_KEYS = ("Internal Trend M5", "Internal Trend", "M5 Trend", "internalTrendM5", "internal_trend_m5")
ENTRY_TYPE_KEYS = ("Entry Type", "Type", "Side", "Direction", "entryType", "entry_type")
ENTRY_LEVEL_KEYS = ("Entry Level", "Entry", "Entry Price", "entryLevel", "entry_level")
LIQUIDATION_KEYS = ("Liquidation", "Liquidity", "liquidation")
LOCATION_KEYS = ("Location", "Zone", "location")
RR_ACHIEVED_KEYS = (
    "RR Achieved",
    "R:R",
    "Risk/Reward Achieved",
    "rrAchieved",
    "rr_achieved",
    "Actual R:R",
    "Real R:R",
)
RR_POTENTIAL_KEYS = (
    "RR Potential",
    "Potential R:R",
    "Risk/Reward Potential",
    "rrPotential",
    "rr_potential",
    "Planned R:R",
    "Target R:R",
)
PROFIT_KEYS = ("P/L", "PL", "Profit", "Profit/Loss", "Net P/L")
RESULT_KEYS = ("isWin", "is_win", "Win", "Result", "Outcome", "Win/Loss")
DATE_KEYS = ("Date", "date", "Time", "time")


def map_tradingview(row: Mapping[str, Any], *, now: datetime) -> TradeRecord:
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
        rr_achieved=pick_number(row, RR_ACHIEVED_KEYS),
        rr_potential=pick_number(row, RR_POTENTIAL_KEYS),
        profit_loss=profit_loss,
        is_win=resolve_is_win(pick(row, RESULT_KEYS), profit_loss),
        date=parse_trade_date(pick(row, DATE_KEYS), now=now),
    )
