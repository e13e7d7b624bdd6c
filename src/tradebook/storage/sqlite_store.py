from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from tradebook.models import TradeRecord

_COLUMNS = (
    "symbol",
    "setup",
    "main_trend_m15",
    "internal_trend_m5",
    "entry_type",
    "entry_level",
    "liquidation",
    "location",
    "rr_achieved",
    "rr_potential",
    "profit_loss",
    "is_win",
    "date",
    "traded_at",
)

_PLACEHOLDERS = ", ".join(":" + column for column in _COLUMNS)
_INSERT_SQL = (
    f"INSERT INTO trades ({', '.join(_COLUMNS)}, created_at, updated_at) "
    f"VALUES ({_PLACEHOLDERS}, :created_at, :updated_at)"
)


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS trades (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            symbol TEXT NOT NULL,
            setup TEXT NOT NULL,
            main_trend_m15 TEXT NOT NULL,
            internal_trend_m5 TEXT NOT NULL,
            entry_type TEXT NOT NULL,
            entry_level TEXT NOT NULL,
            liquidation TEXT NOT NULL,
            location TEXT NOT NULL,
            rr_achieved REAL NOT NULL,
            rr_potential REAL NOT NULL,
            profit_loss REAL NOT NULL,
            is_win INTEGER NOT NULL,
            date TEXT NOT NULL,
            traded_at REAL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_trades_traded_at ON trades(traded_at)")
    conn.commit()


def insert_trades(conn: sqlite3.Connection, records: Iterable[TradeRecord]) -> int:
    stamp = _utc_stamp()
    rows = [{**_trade_params(record), "created_at": stamp, "updated_at": stamp} for record in records]
    if not rows:
        return 0
    cursor = conn.executemany(_INSERT_SQL, rows)
    conn.commit()
    return cursor.rowcount


def insert_trade(conn: sqlite3.Connection, record: TradeRecord) -> int:
    stamp = _utc_stamp()
    cursor = conn.execute(_INSERT_SQL, {**_trade_params(record), "created_at": stamp, "updated_at": stamp})
    conn.commit()
    return int(cursor.lastrowid)


def update_trade(conn: sqlite3.Connection, trade_id: int, record: TradeRecord) -> bool:
    assignments = ", ".join(f"{column} = :{column}" for column in _COLUMNS)
    cursor = conn.execute(
        f"UPDATE trades SET {assignments}, updated_at = :updated_at WHERE id = :id",
        {**_trade_params(record), "updated_at": _utc_stamp(), "id": trade_id},
    )
    conn.commit()
    return cursor.rowcount > 0


def delete_trade(conn: sqlite3.Connection, trade_id: int) -> bool:
    cursor = conn.execute("DELETE FROM trades WHERE id = ?", (trade_id,))
    conn.commit()
    return cursor.rowcount > 0


def _trade_params(record: TradeRecord) -> dict[str, Any]:
    stamp = record.timestamp()
    return {
        "symbol": record.symbol,
        "setup": record.setup,
        "main_trend_m15": record.main_trend_m15,
        "internal_trend_m5": record.internal_trend_m5,
        "entry_type": record.entry_type,
        "entry_level": record.entry_level,
        "liquidation": record.liquidation,
        "location": record.location,
        "rr_achieved": record.rr_achieved,
        "rr_potential": record.rr_potential,
        "profit_loss": record.profit_loss,
        "is_win": 1 if record.is_win else 0,
        "date": record.date,
        "traded_at": None if stamp is None else stamp.timestamp(),
    }


def _utc_stamp() -> str:
    return datetime.now(timezone.utc).isoformat()
