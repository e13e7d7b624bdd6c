from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Mapping

RawRow = Mapping[str, Any]

_PAYLOAD_KEYS = {
    "symbol": "symbol",
    "setup": "setup",
    "main_trend_m15": "mainTrendM15",
    "internal_trend_m5": "internalTrendM5",
    "entry_type": "entryType",
    "entry_level": "entryLevel",
    "liquidation": "liquidation",
    "location": "location",
    "rr_achieved": "rrAchieved",
    "rr_potential": "rrPotential",
    "profit_loss": "profitLoss",
    "is_win": "isWin",
    "date": "date",
}

_TEXT_FIELDS = (
    "symbol",
    "setup",
    "main_trend_m15",
    "internal_trend_m5",
    "entry_type",
    "entry_level",
    "liquidation",
    "location",
)
_NUMERIC_FIELDS = ("rr_achieved", "rr_potential", "profit_loss")


@dataclass(frozen=True)
class TradeRecord:
    symbol: str = ""
    setup: str = ""
    main_trend_m15: str = ""
    internal_trend_m5: str = ""
    entry_type: str = ""
    entry_level: str = ""
    liquidation: str = ""
    location: str = ""
    rr_achieved: float = 0.0
    rr_potential: float = 0.0
    profit_loss: float = 0.0
    is_win: bool = False
    date: str = ""

    def timestamp(self) -> datetime | None:
        return parse_iso(self.date)

    def to_payload(self) -> dict[str, Any]:
        return {wire: getattr(self, name) for name, wire in _PAYLOAD_KEYS.items()}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TradeRecord":
        values: dict[str, Any] = {}
        for name in _TEXT_FIELDS:
            raw = _lookup(payload, name)
            values[name] = "" if raw is None else str(raw)
        for name in _NUMERIC_FIELDS:
            raw = _lookup(payload, name)
            try:
                values[name] = float(raw) if raw not in (None, "") else 0.0
            except (TypeError, ValueError):
                values[name] = 0.0
        is_win = _lookup(payload, "is_win")
        if isinstance(is_win, str):
            values["is_win"] = is_win.strip().lower() in {"true", "1", "yes"}
        else:
            values["is_win"] = bool(is_win)
        date = _lookup(payload, "date")
        values["date"] = "" if date is None else str(date)
        return cls(**values)

    def merged(self, payload: Mapping[str, Any]) -> "TradeRecord":
        current = self.to_payload()
        for name, wire in _PAYLOAD_KEYS.items():
            if wire in payload:
                current[wire] = payload[wire]
            elif name in payload:
                current[wire] = payload[name]
        return TradeRecord.from_payload(current)


def parse_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def _lookup(payload: Mapping[str, Any], name: str) -> Any:
    wire = _PAYLOAD_KEYS[name]
    if wire in payload:
        return payload[wire]
    return payload.get(name)


def range_bound(value: date | datetime, *, end: bool) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    boundary = datetime.max.time() if end else datetime.min.time()
    return datetime.combine(value, boundary, tzinfo=timezone.utc)
