from __future__ import annotations

import csv
import io
from pathlib import Path

_CANDIDATE_DELIMITERS = ",;\t"


def load_csv(path: str | Path) -> list[dict[str, str]]:
    source_path = Path(path)
    suffix = source_path.suffix.lower()
    if suffix not in {".csv", ".tsv", ".txt"}:
        raise ValueError(f"Unsupported file type: {source_path.suffix}")
    text = source_path.read_text(encoding="utf-8-sig")
    return parse_csv_text(text, delimiter="\t" if suffix == ".tsv" else None)


def parse_csv_text(text: str, *, delimiter: str | None = None) -> list[dict[str, str]]:
    text = text.lstrip("\ufeff")
    if not text.strip():
        return []
    if delimiter is None:
        delimiter = _sniff_delimiter(text)
    reader = csv.DictReader(io.StringIO(text, newline=""), delimiter=delimiter)
    if reader.fieldnames is None:
        return []
    reader.fieldnames = [name.strip() if name else name for name in reader.fieldnames]

    rows: list[dict[str, str]] = []
    for raw in reader:
        values = {key: value for key, value in raw.items() if key is not None}
        if not any(isinstance(value, str) and value.strip() for value in values.values()):
            continue
        rows.append({key: (value.strip() if isinstance(value, str) else "") for key, value in values.items()})
    return rows


def _sniff_delimiter(text: str) -> str:
    header = text.splitlines()[0]
    counts = {candidate: header.count(candidate) for candidate in _CANDIDATE_DELIMITERS}
    best = max(counts, key=lambda candidate: counts[candidate])
    return best if counts[best] else ","
