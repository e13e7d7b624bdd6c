from __future__ import annotations

import argparse
import sys
from pathlib import Path

from tradebook.config.app_config import configure_logging, load_app_config
from tradebook.ingest.csv_rows import load_csv
from tradebook.ingest.importer import import_batch, iter_batches, utc_now
from tradebook.metrics.summary import compute_summary
from tradebook.models import TradeRecord
from tradebook.storage.sqlite_store import connect, init_db, insert_trades


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import trades from a TradingView or Tradovate CSV export.")
    parser.add_argument("csv_path", type=Path, help="Path to the CSV/TSV export.")
    parser.add_argument("--config", type=Path, default=None, help="Path to app.toml.")
    parser.add_argument("--db", type=Path, default=None, help="SQLite DB path (overrides config).")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Map the rows and print the summary without writing to the database.",
    )
    args = parser.parse_args(argv)

    app_config = load_app_config(args.config)
    configure_logging(app_config.logging)

    if not args.csv_path.exists():
        print(f"File not found: {args.csv_path}", file=sys.stderr)
        return 2
    try:
        rows = load_csv(args.csv_path)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    now = utc_now()
    records: list[TradeRecord] = []
    skipped = 0
    batch_size = app_config.importer.batch_size
    for number, batch in enumerate(iter_batches(rows, batch_size)):
        result = import_batch(
            batch,
            clock=lambda: now,
            batch_size=batch_size,
            fallback=app_config.importer.default_format,
            offset=number * batch_size,
        )
        records.extend(result.records)
        skipped += result.skipped

    if skipped:
        print(f"Skipped {skipped} rows during normalization.", file=sys.stderr)
    print(f"{len(records)} of {len(rows)} rows imported")
    if not records:
        print("No importable trades found.", file=sys.stderr)
        return 1

    if not args.dry_run:
        db_path = args.db or app_config.app.db_path
        conn = connect(db_path)
        try:
            init_db(conn)
            stored = insert_trades(conn, records)
        finally:
            conn.close()
        print(f"stored {stored} trades in {db_path}")

    summary = compute_summary(records)
    print(
        f"trades {summary.total_trades} win_rate {summary.win_rate:.1f} "
        f"profit_factor {summary.profit_factor:.2f} avg_rr {summary.average_rr:.2f} "
        f"pnl {summary.total_profit_loss:.2f}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
