from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Callable, Hashable, Iterable

from tradebook.models import TradeRecord

UNKNOWN_LABEL = "Unbekannt"
WEEKDAY_LABELS = ("Mo", "Di", "Mi", "Do", "Fr", "Sa", "So")

RR_BUCKETS: tuple[tuple[float | None, str], ...] = (
    (0.0, "≤ 0"),
    (0.5, "0 - 0.5"),
    (1.0, "0.5 - 1"),
    (1.5, "1 - 1.5"),
    (2.0, "1.5 - 2"),
    (3.0, "2 - 3"),
    (None, "> 3"),
)
PNL_BUCKETS: tuple[tuple[float | None, str], ...] = (
    (-500.0, "< -500"),
    (-250.0, "-500 bis -250"),
    (-100.0, "-250 bis -100"),
    (0.0, "-100 bis 0"),
    (100.0, "0 bis 100"),
    (250.0, "100 bis 250"),
    (500.0, "250 bis 500"),
    (None, "> 500"),
)

KeyFn = Callable[[TradeRecord], Any]


@dataclass
class GroupStats:
    count: int = 0
    total_profit: float = 0.0
    wins: int = 0
    total_rr: float = 0.0

    @property
    def win_rate(self) -> float:
        return 100.0 * self.wins / self.count if self.count else 0.0

    @property
    def avg_profit(self) -> float:
        return self.total_profit / self.count if self.count else 0.0


def group_by(
    records: Iterable[TradeRecord],
    key_fn: KeyFn,
    *,
    unknown_label: str = UNKNOWN_LABEL,
) -> dict[Hashable, GroupStats]:
    groups: dict[Hashable, GroupStats] = {}
    for record in records:
        key = key_fn(record)
        if key is None or (isinstance(key, str) and not key.strip()):
            key = unknown_label
        stats = groups.get(key)
        if stats is None:
            stats = groups[key] = GroupStats()
        stats.count += 1
        stats.total_profit += record.profit_loss
        stats.total_rr += record.rr_achieved
        if record.is_win:
            stats.wins += 1
    return groups


def by_symbol(record: TradeRecord) -> str:
    return record.symbol


def by_setup(record: TradeRecord) -> str:
    return record.setup


def by_entry_type(record: TradeRecord) -> str:
    return record.entry_type


def weekday_key(tz: tzinfo | None = None) -> KeyFn:
    def _key(record: TradeRecord) -> str | None:
        stamp = record.timestamp()
        if stamp is None:
            return None
        if tz is not None:
            stamp = stamp.astimezone(tz)
        return WEEKDAY_LABELS[stamp.weekday()]

    return _key


def hour_key(tz: tzinfo | None = None) -> KeyFn:
    def _key(record: TradeRecord) -> str | None:
        stamp = record.timestamp()
        if stamp is None:
            return None
        if tz is not None:
            stamp = stamp.astimezone(tz)
        return f"{stamp.hour}:00"

    return _key


def symbol_breakdown(records: Iterable[TradeRecord], *, unknown_label: str = UNKNOWN_LABEL) -> list[dict[str, Any]]:
    return _rows_by_profit(group_by(records, by_symbol, unknown_label=unknown_label), "symbol")


def setup_breakdown(records: Iterable[TradeRecord], *, unknown_label: str = UNKNOWN_LABEL) -> list[dict[str, Any]]:
    return _rows_by_profit(group_by(records, by_setup, unknown_label=unknown_label), "setup")


def entry_type_breakdown(
    records: Iterable[TradeRecord], *, unknown_label: str = UNKNOWN_LABEL
) -> list[dict[str, Any]]:
    return _rows_by_profit(group_by(records, by_entry_type, unknown_label=unknown_label), "type")


def weekday_breakdown(
    records: Iterable[TradeRecord],
    tz: tzinfo | None = None,
    *,
    unknown_label: str = UNKNOWN_LABEL,
) -> list[dict[str, Any]]:
    groups = group_by(records, weekday_key(tz), unknown_label=unknown_label)
    order = [*WEEKDAY_LABELS, unknown_label]
    return [_group_row("day", key, groups[key]) for key in order if key in groups]


def hour_breakdown(
    records: Iterable[TradeRecord],
    tz: tzinfo | None = None,
    *,
    unknown_label: str = UNKNOWN_LABEL,
) -> list[dict[str, Any]]:
    groups = group_by(records, hour_key(tz), unknown_label=unknown_label)
    ordered = sorted(groups, key=lambda key: (key == unknown_label, _hour_of(key)))
    return [_group_row("time_slot", key, groups[key]) for key in ordered]


def setup_win_rates(records: Iterable[TradeRecord], *, unknown_label: str = UNKNOWN_LABEL) -> list[dict[str, Any]]:
    groups = group_by(records, by_setup, unknown_label=unknown_label)
    return [
        {"setup": key, "win_rate": stats.win_rate, "trades": stats.count}
        for key, stats in sorted(groups.items(), key=lambda item: (-item[1].win_rate, str(item[0])))
    ]


def rr_distribution(records: Iterable[TradeRecord]) -> list[dict[str, Any]]:
    return _bucket_rows(records, RR_BUCKETS, lambda record: record.rr_achieved)


def pnl_distribution(records: Iterable[TradeRecord]) -> list[dict[str, Any]]:
    return _bucket_rows(records, PNL_BUCKETS, lambda record: record.profit_loss)


def _bucket_rows(
    records: Iterable[TradeRecord],
    buckets: tuple[tuple[float | None, str], ...],
    value_fn: Callable[[TradeRecord], float],
) -> list[dict[str, Any]]:
    groups = group_by(records, lambda record: _bucket_label(value_fn(record), buckets))
    rows = []
    for _, label in buckets:
        stats = groups.get(label)
        if stats is None:
            continue
        rows.append(
            {
                "group": label,
                "count": stats.count,
                "total_profit": stats.total_profit,
                "avg_profit": stats.avg_profit,
            }
        )
    return rows


def _bucket_label(value: float, buckets: tuple[tuple[float | None, str], ...]) -> str:
    for upper, label in buckets:
        if upper is None or value <= upper:
            return label
    return buckets[-1][1]


def _rows_by_profit(groups: dict[Hashable, GroupStats], name: str) -> list[dict[str, Any]]:
    ordered = sorted(groups.items(), key=lambda item: item[1].total_profit, reverse=True)
    return [_group_row(name, key, stats) for key, stats in ordered]


def _group_row(name: str, key: Hashable, stats: GroupStats) -> dict[str, Any]:
    return {
        name: key,
        "trades": stats.count,
        "wins": stats.wins,
        "profit": stats.total_profit,
        "win_rate": stats.win_rate,
        "avg_profit": stats.avg_profit,
        "total_rr": stats.total_rr,
    }


def _hour_of(key: Hashable) -> int:
    try:
        return int(str(key).split(":", 1)[0])
    except ValueError:
        return 24
