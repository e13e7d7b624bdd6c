from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Iterator, Mapping, Sequence

from tradebook.ingest.formats import TradeFormat, detect_format
from tradebook.ingest.normalize import RowMappingError
from tradebook.ingest.tradingview import map_tradingview
from tradebook.ingest.tradovate import map_tradovate
from tradebook.models import TradeRecord

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class ImportResult:
    records: list[TradeRecord]
    skipped: int = 0
    processed: int = 0
    remaining: int = 0

    @property
    def imported(self) -> int:
        return len(self.records)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def import_rows(
    rows: Iterable[Any],
    *,
    clock: Clock | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    fallback: TradeFormat = TradeFormat.TRADINGVIEW,
) -> list[TradeRecord]:
    return import_batch(rows, clock=clock, batch_size=batch_size, fallback=fallback).records


def import_batch(
    rows: Iterable[Any],
    *,
    clock: Clock | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    fallback: TradeFormat = TradeFormat.TRADINGVIEW,
    offset: int = 0,
) -> ImportResult:
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    now = (clock or utc_now)()
    items = list(rows)
    batch = items[:batch_size]
    records: list[TradeRecord] = []
    skipped = 0
    for index, raw in enumerate(batch):
        try:
            records.append(map_row(raw, now=now, fallback=fallback))
        except (RowMappingError, TypeError, ValueError) as exc:
            skipped += 1
            logger.warning("Dropping import row %d: %s", offset + index, exc)

    remaining = len(items) - len(batch)
    logger.info(
        "Imported %d of %d rows (%d skipped, %d deferred)",
        len(records),
        len(batch),
        skipped,
        remaining,
    )
    return ImportResult(records=records, skipped=skipped, processed=len(batch), remaining=remaining)


def map_row(
    raw: Any,
    *,
    now: datetime,
    fallback: TradeFormat = TradeFormat.TRADINGVIEW,
) -> TradeRecord:
    if not isinstance(raw, Mapping):
        raise RowMappingError(f"Expected a mapping, got {type(raw).__name__}")
    row_format = detect_format(raw)
    if row_format is TradeFormat.UNKNOWN:
        row_format = fallback
    if row_format is TradeFormat.TRADOVATE:
        return map_tradovate(raw, now=now)
    return map_tradingview(raw, now=now)


def iter_batches(rows: Sequence[Any], size: int = DEFAULT_BATCH_SIZE) -> Iterator[Sequence[Any]]:
    if size <= 0:
        raise ValueError("size must be positive")
    for start in range(0, len(rows), size):
        yield rows[start : start + size]
