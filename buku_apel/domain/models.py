"""Domain records for the daily roll-call register."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from enum import Enum
from typing import Any, Mapping


ROOM_KEY_SEPARATOR = "||"


class Shift(str, Enum):
    MORNING = "morning"
    NOON = "noon"
    NIGHT = "night"


class Category(str, Enum):
    """Room annotation labels, stored with their printed value."""

    NEW = "Baru"
    RELEASED = "Bebas"
    HOSPITAL = "RS"
    TREATMENT = "Berobat"
    COURT = "Sidang"
    EXTERNAL_WORK = "Kerja Luar"
    OTHER = "Lainnya"


HEADCOUNT_FIELDS = ("morning", "noon", "evening", "night")
MOVEMENT_FIELDS = ("morning_out", "morning_in", "noon_out", "noon_in")


def room_key(dormitory: str, room: str) -> str:
    return f"{dormitory}{ROOM_KEY_SEPARATOR}{room}"


def split_room_key(key: str) -> tuple[str, str] | None:
    dormitory, separator, room = key.partition(ROOM_KEY_SEPARATOR)
    if not separator or not dormitory or not room:
        return None
    return dormitory, room


@dataclass(frozen=True)
class Room:
    name: str
    names: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "names": list(self.names)}


@dataclass(frozen=True)
class Dormitory:
    name: str
    rooms: tuple[Room, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "rooms": [room.to_dict() for room in self.rooms]}

    def find_room(self, room_name: str) -> Room | None:
        return next((room for room in self.rooms if room.name == room_name), None)


@dataclass(frozen=True)
class ShiftGridRow:
    """One room's line in the roll-call book; every value is raw form text."""

    morning: str = ""
    morning_out: str = ""
    morning_in: str = ""
    noon: str = ""
    noon_out: str = ""
    noon_in: str = ""
    evening: str = ""
    night: str = ""
    category: str = ""
    category_count: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(item.name for item in fields(cls))

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ShiftGridRow":
        values = {}
        for name in cls.field_names():
            value = payload.get(name)
            if value is None:
                continue
            values[name] = str(value)
        return cls(**values)


@dataclass(frozen=True)
class SavedShifts:
    morning: bool = False
    noon: bool = False
    night: bool = False

    def is_saved(self, shift: Shift) -> bool:
        return bool(getattr(self, shift.value))

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


Roster = tuple[Dormitory, ...]


@dataclass(frozen=True)
class RegisterState:
    """Everything the register persists between sessions."""

    roster: Roster = ()
    grid: Mapping[str, ShiftGridRow] = field(default_factory=dict)
    officer_name: str = ""
    activity_notes: str = ""
    day_team: str = ""
    night_team: str = ""
    inside_count: str = ""
    outside_count: str = ""
    saved_shifts: SavedShifts = field(default_factory=SavedShifts)
    report_locked: bool = False
    summary_text: str = ""

    def grid_row(self, dormitory: str, room: str) -> ShiftGridRow:
        return self.grid.get(room_key(dormitory, room), ShiftGridRow())

    def to_dict(self) -> dict[str, Any]:
        return {
            "roster": [dormitory.to_dict() for dormitory in self.roster],
            "grid": {key: row.to_dict() for key, row in self.grid.items()},
            "officer_name": self.officer_name,
            "activity_notes": self.activity_notes,
            "day_team": self.day_team,
            "night_team": self.night_team,
            "inside_count": self.inside_count,
            "outside_count": self.outside_count,
            "saved_shifts": self.saved_shifts.to_dict(),
            "report_locked": self.report_locked,
            "summary_text": self.summary_text,
        }


def roster_from_payload(payload: Any) -> Roster:
    """Rebuild a roster tree from its JSON form, dropping malformed entries."""
    if not isinstance(payload, list):
        return ()
    dormitories: dict[str, Dormitory] = {}
    for item in payload:
        if not isinstance(item, Mapping) or not isinstance(item.get("name"), str):
            continue
        if item["name"] in dormitories or not isinstance(item.get("rooms", []), list):
            continue
        rooms: dict[str, Room] = {}
        for room in item.get("rooms", []):
            if not isinstance(room, Mapping) or not isinstance(room.get("name"), str):
                continue
            names = room.get("names", [])
            # first occurrence of a room name wins
            if room["name"] in rooms or not isinstance(names, list):
                continue
            rooms[room["name"]] = Room(
                name=room["name"], names=tuple(name for name in names if isinstance(name, str))
            )
        dormitories[item["name"]] = Dormitory(name=item["name"], rooms=tuple(rooms.values()))
    return tuple(dormitories.values())


def state_from_payload(payload: Mapping[str, Any], base: RegisterState) -> RegisterState:
    """Overlay a persisted blob onto ``base``; absent or empty fields keep base values."""
    changes: dict[str, Any] = {}

    roster = roster_from_payload(payload.get("roster"))
    if roster:
        changes["roster"] = roster

    grid = payload.get("grid")
    if isinstance(grid, Mapping):
        changes["grid"] = {
            str(key): ShiftGridRow.from_dict(row)
            for key, row in grid.items()
            if isinstance(row, Mapping)
        }

    for name in (
        "officer_name",
        "activity_notes",
        "day_team",
        "night_team",
        "inside_count",
        "outside_count",
        "summary_text",
    ):
        value = payload.get(name)
        if isinstance(value, str) and value:
            changes[name] = value

    saved = payload.get("saved_shifts")
    if isinstance(saved, Mapping):
        changes["saved_shifts"] = SavedShifts(
            morning=bool(saved.get("morning", False)),
            noon=bool(saved.get("noon", False)),
            night=bool(saved.get("night", False)),
        )

    locked = payload.get("report_locked")
    if isinstance(locked, bool):
        changes["report_locked"] = locked

    return replace(base, **changes)
