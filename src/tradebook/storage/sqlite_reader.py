from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from tradebook.models import TradeRecord

FILTER_COLUMNS = ("symbol", "setup", "main_trend_m15", "internal_trend_m5", "entry_type")


def connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


def load_trades(
    conn: sqlite3.Connection,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    **filters: str | None,
) -> list[TradeRecord]:
    return [record for _, record in load_trade_rows(conn, start=start, end=end, **filters)]


def load_trade_rows(
    conn: sqlite3.Connection,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    **filters: str | None,
) -> list[tuple[int, TradeRecord]]:
    rows = _fetch(conn, filters, start, end)
    return [(row["id"], _record_from_row(row)) for row in rows]


def load_trade(conn: sqlite3.Connection, trade_id: int) -> TradeRecord | None:
    row = conn.execute("SELECT * FROM trades WHERE id = ?", (trade_id,)).fetchone()
    if row is None:
        return None
    return _record_from_row(row)


def _fetch(
    conn: sqlite3.Connection,
    filters: dict[str, str | None],
    start: datetime | None,
    end: datetime | None,
) -> list[sqlite3.Row]:
    clauses: list[str] = []
    params: list[Any] = []
    for column, value in filters.items():
        if column not in FILTER_COLUMNS:
            raise ValueError(f"Unsupported trade filter: {column}")
        if value is None or value == "":
            continue
        clauses.append(f"{column} = ?")
        params.append(value)
    # Undated rows have a NULL traded_at and drop out of any date range.
    if start is not None:
        clauses.append("traded_at >= ?")
        params.append(start.timestamp())
    if end is not None:
        clauses.append("traded_at <= ?")
        params.append(end.timestamp())
    where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
    query = f"SELECT * FROM trades{where} ORDER BY traded_at, id"
    return conn.execute(query, params).fetchall()


def _record_from_row(row: sqlite3.Row) -> TradeRecord:
    return TradeRecord(
        symbol=row["symbol"],
        setup=row["setup"],
        main_trend_m15=row["main_trend_m15"],
        internal_trend_m5=row["internal_trend_m5"],
        entry_type=row["entry_type"],
        entry_level=row["entry_level"],
        liquidation=row["liquidation"],
        location=row["location"],
        rr_achieved=row["rr_achieved"],
        rr_potential=row["rr_potential"],
        profit_loss=row["profit_loss"],
        is_win=bool(row["is_win"]),
        date=row["date"],
    )
