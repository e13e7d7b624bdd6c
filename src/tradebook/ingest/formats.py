from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

TRADOVATE_HEADERS = ("Contract", "Account ID", "P/L", "Commission")
TRADINGVIEW_HEADERS = ("Symbol", "Setup", "Strategy")


class TradeFormat(str, Enum):
    TRADOVATE = "tradovate"
    TRADINGVIEW = "tradingview"
    UNKNOWN = "unknown"


def detect_format(row: Mapping[str, Any]) -> TradeFormat:
    # Tradovate wins when a row carries headers from both exports.
    if any(header in row for header in TRADOVATE_HEADERS):
        return TradeFormat.TRADOVATE
    if any(header in row for header in TRADINGVIEW_HEADERS):
        return TradeFormat.TRADINGVIEW
    return TradeFormat.UNKNOWN


def parse_format(value: str | None) -> TradeFormat:
    text = (value or "").strip().lower()
    for item in TradeFormat:
        if item.value == text:
            return item
    raise ValueError(f"Unknown trade format: {value}")
