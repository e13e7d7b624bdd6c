from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any, Mapping

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_EPOCH_TEXT = re.compile(r"^\d{10}(\d{3})?(\.\d+)?$")

WIN_TOKENS = frozenset({"true", "win", "yes", "profit"})
LOSS_TOKENS = frozenset({"false", "loss", "lose", "no"})

_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y %H:%M",
    "%d.%m.%Y",
    "%Y%m%d",
)


class RowMappingError(ValueError):
    pass


def sanitize_number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    cleaned = _NON_NUMERIC.sub("", str(value))
    if not cleaned:
        return 0.0
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def parse_flag(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in WIN_TOKENS:
        return True
    if text in LOSS_TOKENS:
        return False
    return None


def resolve_is_win(flag_value: Any, profit_loss: float) -> bool:
    flag = parse_flag(flag_value)
    if flag is not None:
        return flag
    return profit_loss > 0


def pick(row: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in row and row[key] not in (None, ""):
            return row[key]
    return None


def pick_text(row: Mapping[str, Any], keys: tuple[str, ...]) -> str:
    value = pick(row, keys)
    if value is None:
        return ""
    return str(value).strip()


def pick_number(row: Mapping[str, Any], keys: tuple[str, ...]) -> float:
    return sanitize_number(pick(row, keys))


def parse_trade_date(value: Any, *, now: datetime) -> str:
    if value is None:
        return _as_utc(now).isoformat()
    if isinstance(value, datetime):
        return _as_utc(value).isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _timestamp_from_number(float(value)).isoformat()

    text = str(value).strip()
    if _EPOCH_TEXT.match(text):
        return _timestamp_from_number(float(text)).isoformat()

    iso_text = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return _as_utc(datetime.fromisoformat(iso_text)).isoformat()
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return _as_utc(datetime.strptime(text, fmt)).isoformat()
        except ValueError:
            continue
    raise RowMappingError(f"Unsupported date format: {text}")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _timestamp_from_number(value: float) -> datetime:
    if math.isnan(value) or math.isinf(value):
        raise RowMappingError("Non-finite timestamp")
    seconds = value / 1000.0 if value > 1e12 else value
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise RowMappingError("Timestamp out of range") from exc
