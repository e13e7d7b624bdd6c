from __future__ import annotations

import argparse
import json
import sqlite3
import sys
from dataclasses import asdict
from pathlib import Path

from tradebook.config.app_config import configure_logging, load_app_config
from tradebook.metrics.breakdown import setup_breakdown, symbol_breakdown
from tradebook.metrics.summary import TradeSummary, compute_summary
from tradebook.storage import sqlite_reader


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compute aggregate metrics for journaled trades.")
    parser.add_argument("--config", type=Path, default=None, help="Path to app.toml.")
    parser.add_argument("--db", type=Path, default=None, help="SQLite DB path (overrides config).")
    parser.add_argument("--symbol", type=str, default=None, help="Only include this symbol.")
    parser.add_argument("--setup", type=str, default=None, help="Only include this setup.")
    parser.add_argument("--json", action="store_true", help="Print JSON output.")
    args = parser.parse_args(argv)

    app_config = load_app_config(args.config)
    configure_logging(app_config.logging)

    db_path = args.db or app_config.app.db_path
    if not db_path.exists():
        print(f"Database not found: {db_path}", file=sys.stderr)
        return 2

    conn = sqlite_reader.connect(db_path)
    try:
        records = sqlite_reader.load_trades(conn, symbol=args.symbol, setup=args.setup)
    except sqlite3.OperationalError as exc:
        print(f"Unable to read trades: {exc}", file=sys.stderr)
        return 2
    finally:
        conn.close()

    summary = compute_summary(records)
    label = app_config.analytics.unknown_label
    if args.json:
        payload = {
            "summary": asdict(summary),
            "symbols": symbol_breakdown(records, unknown_label=label),
            "setups": setup_breakdown(records, unknown_label=label),
        }
        print(json.dumps(payload, indent=2, sort_keys=True))
        return 0

    for line in _format_summary(summary):
        print(line)
    for row in setup_breakdown(records, unknown_label=label):
        print(f"setup {row['setup']} trades {row['trades']} win_rate {row['win_rate']:.1f} pnl {row['profit']:.2f}")
    return 0


def _format_summary(summary: TradeSummary) -> list[str]:
    return [
        f"total_trades {summary.total_trades}",
        f"wins {summary.wins}",
        f"losses {summary.losses}",
        f"win_rate {summary.win_rate:.2f}",
        f"avg_win {summary.avg_win:.2f}",
        f"avg_loss {summary.avg_loss:.2f}",
        f"profit_factor {summary.profit_factor:.2f}",
        f"average_rr {summary.average_rr:.2f}",
        f"total_rr {summary.total_rr:.2f}",
        f"total_profit_loss {summary.total_profit_loss:.2f}",
        f"best_trade {_format_metric(summary.best_trade)}",
        f"worst_trade {_format_metric(summary.worst_trade)}",
        f"max_consecutive_wins {summary.max_consecutive_wins}",
        f"max_consecutive_losses {summary.max_consecutive_losses}",
        f"max_drawdown_pct {summary.max_drawdown_pct:.2f}",
    ]


def _format_metric(value: float | None) -> str:
    return "na" if value is None else f"{value:.6g}"


if __name__ == "__main__":
    raise SystemExit(main())
