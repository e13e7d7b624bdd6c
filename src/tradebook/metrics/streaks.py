from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from tradebook.metrics.summary import chronological, max_consecutive
from tradebook.models import TradeRecord

STREAK_BADGES = ((5, "winning_streak_5"), (10, "winning_streak_10"), (20, "winning_streak_20"))
VOLUME_BADGES = ((50, "trade_master_50"), (100, "trade_master_100"))
PERFECT_WEEK_MIN_TRADES = 5


@dataclass(frozen=True)
class StreakStatus:
    current_streak: int
    longest_streak: int
    total_wins: int
    total_losses: int
    last_trade_date: str | None
    badges: list[str] = field(default_factory=list)


def streak_status(records: Iterable[TradeRecord]) -> StreakStatus:
    ordered = chronological(records)
    wins = sum(1 for record in ordered if record.is_win)
    longest = max_consecutive(ordered, True)

    current = 0
    for record in reversed(ordered):
        if not record.is_win:
            break
        current += 1

    badges: list[str] = []
    if ordered:
        badges.append("first_trade")
    badges.extend(name for threshold, name in STREAK_BADGES if longest >= threshold)
    badges.extend(name for threshold, name in VOLUME_BADGES if len(ordered) >= threshold)
    if _has_perfect_week(ordered):
        badges.append("perfect_week")

    return StreakStatus(
        current_streak=current,
        longest_streak=longest,
        total_wins=wins,
        total_losses=len(ordered) - wins,
        last_trade_date=ordered[-1].date if ordered else None,
        badges=badges,
    )


def _has_perfect_week(records: list[TradeRecord]) -> bool:
    weeks: dict[tuple[int, int], list[bool]] = {}
    for record in records:
        stamp = record.timestamp()
        if stamp is None:
            continue
        iso = stamp.isocalendar()
        weeks.setdefault((iso[0], iso[1]), []).append(record.is_win)
    return any(len(outcomes) >= PERFECT_WEEK_MIN_TRADES and all(outcomes) for outcomes in weeks.values())
