from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import timezone, tzinfo
from pathlib import Path
from typing import Any, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tradebook.ingest.formats import TradeFormat, parse_format

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - Python <3.11
    import tomli as tomllib

CONFIG_ENV = "TRADEBOOK_CONFIG"
DB_PATH_ENV = "TRADEBOOK_DB_PATH"


@dataclass(frozen=True)
class AppSettings:
    db_path: Path
    host: str
    port: int
    reload: bool


@dataclass(frozen=True)
class ImporterSettings:
    batch_size: int
    default_format: TradeFormat


@dataclass(frozen=True)
class AnalyticsSettings:
    timezone: str
    unknown_label: str

    def tzinfo(self) -> tzinfo:
        if self.timezone in ("", "utc"):
            return timezone.utc
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {self.timezone}") from exc


@dataclass(frozen=True)
class LoggingSettings:
    level: str


@dataclass(frozen=True)
class AppConfig:
    app: AppSettings
    importer: ImporterSettings
    analytics: AnalyticsSettings
    logging: LoggingSettings


def load_app_config(path: Path | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    env = os.environ if env is None else env
    config_path = path or Path(env.get(CONFIG_ENV) or "config/app.toml")
    raw: Mapping[str, Any] = {}
    if config_path.exists():
        raw = tomllib.loads(config_path.read_text(encoding="utf-8"))

    app_raw = _section(raw, "app")
    importer_raw = _section(raw, "importer")
    analytics_raw = _section(raw, "analytics")
    logging_raw = _section(raw, "logging")

    db_path = env.get(DB_PATH_ENV) or app_raw.get("db_path", "data/tradebook.sqlite")
    app = AppSettings(
        db_path=Path(str(db_path)),
        host=str(app_raw.get("host", "127.0.0.1")),
        port=int(app_raw.get("port", 8000)),
        reload=bool(app_raw.get("reload", False)),
    )

    batch_size = int(importer_raw.get("batch_size", 50))
    if batch_size <= 0:
        raise ValueError(f"importer.batch_size must be positive, got {batch_size}")
    importer = ImporterSettings(
        batch_size=batch_size,
        default_format=parse_format(str(importer_raw.get("default_format", "tradingview"))),
    )

    analytics = AnalyticsSettings(
        timezone=str(analytics_raw.get("timezone", "utc")).strip() or "utc",
        unknown_label=str(analytics_raw.get("unknown_label", "Unbekannt")) or "Unbekannt",
    )

    level = str(logging_raw.get("level", "WARNING")).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown logging level: {level}")

    return AppConfig(
        app=app,
        importer=importer,
        analytics=analytics,
        logging=LoggingSettings(level=level),
    )


def configure_logging(settings: LoggingSettings) -> None:
    logging.basicConfig(
        level=settings.level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if isinstance(value, Mapping):
        return value
    return {}
