"""Domain-level rules deciding which parts of the register are still editable."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from buku_apel.domain.models import SavedShifts, Shift


SHIFT_ORDER = {Shift.MORNING: 0, Shift.NOON: 1, Shift.NIGHT: 2}

_FIELD_SHIFTS = {
    "morning": Shift.MORNING,
    "morning_out": Shift.MORNING,
    "morning_in": Shift.MORNING,
    "noon": Shift.NOON,
    "noon_out": Shift.NOON,
    "noon_in": Shift.NOON,
    "evening": Shift.NOON,
    "night": Shift.NIGHT,
}


@dataclass(frozen=True)
class ShiftSchedule:
    noon_start_hour: int
    night_start_hour: int


def validate_shift_schedule(schedule: ShiftSchedule) -> None:
    if not 0 < schedule.noon_start_hour < 24:
        raise ValueError("noon_start_hour must be between 1 and 23")
    if not 0 < schedule.night_start_hour < 24:
        raise ValueError("night_start_hour must be between 1 and 23")
    if schedule.noon_start_hour >= schedule.night_start_hour:
        raise ValueError("noon_start_hour must be earlier than night_start_hour")


def current_shift(now: datetime, schedule: ShiftSchedule) -> Shift:
    if now.hour >= schedule.night_start_hour:
        return Shift.NIGHT
    if now.hour >= schedule.noon_start_hour:
        return Shift.NOON
    return Shift.MORNING


def field_shift(field: str) -> Shift | None:
    """Shift a grid column belongs to; ``None`` for the free annotation columns."""
    return _FIELD_SHIFTS.get(field)


def is_field_locked(field: str, active: Shift, saved: SavedShifts) -> bool:
    shift = field_shift(field)
    if shift is None:
        return False
    return saved.is_saved(shift) or SHIFT_ORDER[shift] < SHIFT_ORDER[active]


def editable_team(active: Shift) -> str:
    """Report field holding the roll-call team the active shift may set."""
    return "night_team" if active is Shift.NIGHT else "day_team"
