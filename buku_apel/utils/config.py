"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_path(name: str) -> Optional[Path]:
    raw = os.getenv(name, "").strip()
    return Path(raw) if raw else None


@dataclass(frozen=True)
class Settings:
    app_name: str = "Buku Apel Harian"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    database_path: Path = Path("data/buku_apel.db")
    storage_key: str = "lapas-buku-apel-state-v2"
    roster_import_path: Path = Path("data/wbp.json")

    # Shared secret for the report unlock gate; not a security boundary.
    unlock_secret: str = "azwarganteng"
    timezone: str = "Asia/Makassar"

    extra_room_dormitory: str = "Arjuna"
    extra_room_name: str = "F1"

    noon_shift_start_hour: int = 12
    night_shift_start_hour: int = 18

    report_label_width: int = 24
    report_number_width: int = 6
    # (printed label, dormitory lookup name)
    report_dormitories: tuple[tuple[str, str], ...] = (
        ("WISMA YUDISTIRA", "yudistira"),
        ("WISMA BIMA", "bima"),
        ("ARJUNA", "arjuna"),
        ("NAKULA", "nakula"),
        ("POLIKLINIK", "poliklinik"),
        ("DAPUR", "dapur"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once from the process environment."""
    defaults = Settings()
    return Settings(
        app_name=os.getenv("APP_NAME", defaults.app_name),
        app_version=os.getenv("APP_VERSION", defaults.app_version),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level),
        log_file=_env_path("LOG_FILE"),
        database_path=Path(os.getenv("DATABASE_PATH", str(defaults.database_path))),
        storage_key=os.getenv("STORAGE_KEY", defaults.storage_key),
        roster_import_path=Path(
            os.getenv("ROSTER_IMPORT_PATH", str(defaults.roster_import_path))
        ),
        unlock_secret=os.getenv("UNLOCK_SECRET", defaults.unlock_secret),
        timezone=os.getenv("APP_TIMEZONE", defaults.timezone),
        extra_room_dormitory=os.getenv("EXTRA_ROOM_DORMITORY", defaults.extra_room_dormitory),
        extra_room_name=os.getenv("EXTRA_ROOM_NAME", defaults.extra_room_name),
        noon_shift_start_hour=_env_int("NOON_SHIFT_START_HOUR", defaults.noon_shift_start_hour),
        night_shift_start_hour=_env_int("NIGHT_SHIFT_START_HOUR", defaults.night_shift_start_hour),
        report_label_width=_env_int("REPORT_LABEL_WIDTH", defaults.report_label_width),
        report_number_width=_env_int("REPORT_NUMBER_WIDTH", defaults.report_number_width),
    )
