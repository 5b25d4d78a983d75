"""Roster import from the dated inmate dump shipped with the register."""

from __future__ import annotations

import json
from collections import defaultdict
from datetime import date
from pathlib import Path
from typing import Any, Mapping, Optional

from buku_apel.domain.models import Dormitory, Room, Roster
from buku_apel.domain.roster import (
    SEED_ROSTER,
    ensure_room,
    normalize_dormitory_name,
    text_sort_key,
)
from buku_apel.utils.config import Settings, get_settings
from buku_apel.utils.logger import get_logger


logger = get_logger(__name__)

NAME_FIELD = "nama"
LABEL_FIELD = "wisma"
HEADER_TOKEN = "nama"
LABEL_SEPARATOR = " - "


def parse_date_key(key: str) -> int:
    """Map ``DD_MM_YYYY`` to a sortable day number; malformed keys give 0."""
    parts = key.split("_")
    if len(parts) < 3:
        return 0
    try:
        day, month, year = (int(part) for part in parts[:3])
    except ValueError:
        return 0
    if not day or not month or not year:
        return 0
    try:
        return date(year, month, day).toordinal()
    except ValueError:
        return 0


def _latest_key(raw_dataset: Mapping[Any, Any]) -> Any:
    # max() keeps the first key among equal dates
    return max(raw_dataset, key=lambda key: parse_date_key(str(key)))


def build_roster(raw_dataset: Any) -> list[Dormitory]:
    """Group the newest day's records into sorted dormitories and rooms.

    Anything structurally wrong is skipped rather than reported; an empty list
    tells the caller to fall back to the seed roster.
    """
    if not isinstance(raw_dataset, Mapping) or not raw_dataset:
        return []

    rows = raw_dataset[_latest_key(raw_dataset)]
    if not isinstance(rows, list):
        return []

    grouped: dict[str, dict[str, set[str]]] = defaultdict(lambda: defaultdict(set))
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        name = row.get(NAME_FIELD)
        label = row.get(LABEL_FIELD)
        name = name.strip() if isinstance(name, str) else ""
        label = label.strip() if isinstance(label, str) else ""
        if not name or not label or name.lower() == HEADER_TOKEN:
            continue

        raw_dormitory, *room_parts = label.split(LABEL_SEPARATOR)
        room_name = LABEL_SEPARATOR.join(room_parts).strip()
        if not raw_dormitory.strip() or not room_name:
            continue

        grouped[normalize_dormitory_name(raw_dormitory)][room_name].add(name)

    return [
        Dormitory(
            name=dormitory_name,
            rooms=tuple(
                Room(name=room_name, names=tuple(sorted(names, key=text_sort_key)))
                for room_name, names in sorted(
                    grouped[dormitory_name].items(), key=lambda item: text_sort_key(item[0])
                )
            ),
        )
        for dormitory_name in sorted(grouped, key=text_sort_key)
    ]


class RosterImportService:
    """Loads the startup roster from the import file, falling back to seed data."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    @property
    def import_path(self) -> Path:
        return Path(self._settings.roster_import_path)

    def read_dataset(self) -> Any:
        path = self.import_path
        if not path.exists():
            logger.warning("Roster import file %s not found", path)
            return {}
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Roster import file %s is unreadable: %s", path, exc)
            return {}

    def load_initial_roster(self) -> Roster:
        roster: Roster = tuple(build_roster(self.read_dataset()))
        if roster:
            logger.info(
                "Imported %s dormitories from %s", len(roster), self.import_path
            )
        else:
            logger.warning("Roster import is empty; using built-in seed roster")
            roster = SEED_ROSTER
        return self.with_extra_room(roster)

    def with_extra_room(self, roster: Roster) -> Roster:
        return ensure_room(
            roster,
            self._settings.extra_room_dormitory,
            self._settings.extra_room_name,
        )
