from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import asdict, replace
from datetime import date, datetime
from typing import Any, Iterator

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.responses import Response

from tradebook.config.app_config import AppConfig, configure_logging, load_app_config
from tradebook.ingest.csv_rows import parse_csv_text
from tradebook.ingest.importer import import_batch, utc_now
from tradebook.metrics.breakdown import (
    entry_type_breakdown,
    hour_breakdown,
    pnl_distribution,
    rr_distribution,
    setup_breakdown,
    setup_win_rates,
    symbol_breakdown,
    weekday_breakdown,
)
from tradebook.metrics.equity import daily_performance, drawdown, equity_curve
from tradebook.metrics.streaks import streak_status
from tradebook.metrics.summary import chronological, compute_summary
from tradebook.metrics.weekly import weekly_summary
from tradebook.models import TradeRecord, range_bound
from tradebook.storage import sqlite_reader
from tradebook.storage.sqlite_store import connect as sqlite_connect
from tradebook.storage.sqlite_store import delete_trade, init_db, insert_trade, insert_trades, update_trade

app = FastAPI(title="Tradebook")

_FILTER_PARAMS = {
    "symbol": "symbol",
    "setup": "setup",
    "mainTrendM15": "main_trend_m15",
    "internalTrendM5": "internal_trend_m5",
    "entryType": "entry_type",
}


@app.post("/api/import")
def import_api(payload: dict[str, Any] = Body(...)) -> dict[str, Any]:
    config = load_app_config()
    rows = _rows_from_payload(payload)
    offset = _int_param(payload.get("offset"), "offset", default=0)
    pending = rows[offset:]
    result = import_batch(
        pending,
        batch_size=config.importer.batch_size,
        fallback=config.importer.default_format,
        offset=offset,
    )
    if not result.records:
        raise HTTPException(status_code=422, detail="No importable trades found")

    with _db(config) as conn:
        stored = insert_trades(conn, result.records)

    next_offset = offset + result.processed if result.remaining else None
    return {
        "imported": stored,
        "total": result.processed,
        "skipped": result.skipped,
        "remaining": result.remaining,
        "next_offset": next_offset,
        "message": f"{stored} of {result.processed} rows imported",
    }


@app.get("/api/trades")
def trades_api(request: Request) -> list[dict[str, Any]]:
    config = load_app_config()
    with _db(config) as conn:
        rows = sqlite_reader.load_trade_rows(conn, **_query(request))
    return [{"id": trade_id, **record.to_payload()} for trade_id, record in rows]


@app.post("/api/trades", status_code=201)
def create_trade_api(payload: dict[str, Any] = Body(...)) -> dict[str, Any]:
    config = load_app_config()
    record = _dated(TradeRecord.from_payload(payload))
    with _db(config) as conn:
        trade_id = insert_trade(conn, record)
    return {"id": trade_id, **record.to_payload()}


@app.get("/api/trades/{trade_id}")
def trade_api(trade_id: int) -> dict[str, Any]:
    config = load_app_config()
    with _db(config) as conn:
        record = sqlite_reader.load_trade(conn, trade_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Trade not found")
    return {"id": trade_id, **record.to_payload()}


@app.put("/api/trades/{trade_id}")
def update_trade_api(trade_id: int, payload: dict[str, Any] = Body(...)) -> dict[str, Any]:
    config = load_app_config()
    with _db(config) as conn:
        current = sqlite_reader.load_trade(conn, trade_id)
        if current is None:
            raise HTTPException(status_code=404, detail="Trade not found")
        record = _dated(current.merged(payload))
        update_trade(conn, trade_id, record)
    return {"id": trade_id, **record.to_payload()}


@app.delete("/api/trades/{trade_id}", status_code=204)
def delete_trade_api(trade_id: int) -> Response:
    config = load_app_config()
    with _db(config) as conn:
        deleted = delete_trade(conn, trade_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Trade not found")
    return Response(status_code=204)


@app.get("/api/summary")
def summary_api(request: Request) -> dict[str, Any]:
    _, records = _load_records(request)
    return asdict(compute_summary(records))


@app.get("/api/breakdowns")
def breakdowns_api(request: Request) -> dict[str, Any]:
    config, records = _load_records(request)
    tz = config.analytics.tzinfo()
    label = config.analytics.unknown_label
    return {
        "symbols": symbol_breakdown(records, unknown_label=label),
        "setups": setup_breakdown(records, unknown_label=label),
        "entry_types": entry_type_breakdown(records, unknown_label=label),
        "weekdays": weekday_breakdown(records, tz, unknown_label=label),
        "hours": hour_breakdown(records, tz, unknown_label=label),
        "rr_distribution": rr_distribution(records),
        "pnl_distribution": pnl_distribution(records),
    }


@app.get("/api/equity")
def equity_api(request: Request) -> dict[str, Any]:
    config, records = _load_records(request)
    initial_balance = _float_param(request.query_params.get("initialBalance"), "initialBalance")
    curve = equity_curve(chronological(records))
    drawdowns = drawdown(curve, initial_balance=initial_balance)
    return {
        "equity_curve": [asdict(point) for point in curve],
        "drawdown": [asdict(point) for point in drawdowns],
        "daily": [asdict(item) for item in daily_performance(records, config.analytics.tzinfo())],
    }


@app.get("/api/weekly-summary")
def weekly_summary_api(request: Request) -> dict[str, Any]:
    week_start = _date_param(request.query_params.get("weekStart"), "weekStart")
    week_end = _date_param(request.query_params.get("weekEnd"), "weekEnd")
    _, records = _load_records(request)
    try:
        summary = weekly_summary(records, week_start, week_end)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return asdict(summary)


@app.get("/api/setup-win-rates")
def setup_win_rates_api(request: Request) -> list[dict[str, Any]]:
    config, records = _load_records(request)
    return setup_win_rates(records, unknown_label=config.analytics.unknown_label)


@app.get("/api/trading-streak")
def trading_streak_api(request: Request) -> dict[str, Any]:
    _, records = _load_records(request)
    return asdict(streak_status(records))


@contextmanager
def _db(config: AppConfig) -> Iterator[sqlite3.Connection]:
    conn = sqlite_connect(config.app.db_path)
    try:
        init_db(conn)
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()


def _load_records(request: Request) -> tuple[AppConfig, list[TradeRecord]]:
    config = load_app_config()
    with _db(config) as conn:
        records = sqlite_reader.load_trades(conn, **_query(request))
    return config, records


def _query(request: Request) -> dict[str, Any]:
    params = request.query_params
    query: dict[str, Any] = {column: params.get(param) for param, column in _FILTER_PARAMS.items()}
    query["start"] = _bound_param(params.get("startDate"), "startDate", end=False)
    query["end"] = _bound_param(params.get("endDate"), "endDate", end=True)
    return query


def _dated(record: TradeRecord) -> TradeRecord:
    if not record.date:
        return replace(record, date=utc_now().isoformat())
    if record.timestamp() is None:
        raise HTTPException(status_code=400, detail="Invalid date")
    return record


def _rows_from_payload(payload: dict[str, Any]) -> list[Any]:
    if isinstance(payload.get("csv"), str):
        return parse_csv_text(payload["csv"])
    rows = payload.get("rows")
    if isinstance(rows, list):
        return rows
    raise HTTPException(status_code=400, detail="Expected 'csv' text or a 'rows' list")


def _int_param(value: Any, name: str, *, default: int) -> int:
    if value in (None, ""):
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid {name}") from exc
    if parsed < 0:
        raise HTTPException(status_code=400, detail=f"Invalid {name}")
    return parsed


def _float_param(value: str | None, name: str) -> float:
    if value in (None, ""):
        return 0.0
    try:
        return float(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid {name}") from exc


def _date_param(value: str | None, name: str) -> date:
    if not value:
        raise HTTPException(status_code=400, detail="Week start and end dates are required")
    try:
        return date.fromisoformat(value[:10])
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid {name}") from exc


def _bound_param(value: str | None, name: str, *, end: bool) -> datetime | None:
    if not value:
        return None
    try:
        if len(value) == 10:
            parsed: date | datetime = date.fromisoformat(value)
        else:
            parsed = datetime.fromisoformat(value[:-1] + "+00:00" if value.endswith("Z") else value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid {name}") from exc
    return range_bound(parsed, end=end)


def main() -> None:
    import uvicorn

    app_config = load_app_config()
    configure_logging(app_config.logging)
    uvicorn.run(
        "tradebook.web.app:app",
        host=app_config.app.host,
        port=app_config.app.port,
        reload=app_config.app.reload,
    )


if __name__ == "__main__":
    main()
