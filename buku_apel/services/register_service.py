"""Register workflow: owns the day's state and persists every change."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from threading import RLock
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo

from buku_apel.domain import roster as roster_ops
from buku_apel.domain.constraints import (
    ShiftSchedule,
    current_shift,
    editable_team,
    is_field_locked,
    validate_shift_schedule,
)
from buku_apel.domain.models import (
    Category,
    RegisterState,
    SavedShifts,
    Shift,
    ShiftGridRow,
    room_key,
    split_room_key,
    state_from_payload,
)
from buku_apel.repository.state_repository import StateRepository
from buku_apel.services.aggregation_service import RegisterTotals, summarize
from buku_apel.services.auth_service import UnlockService
from buku_apel.services.import_service import RosterImportService
from buku_apel.services.report_service import generate_report
from buku_apel.utils.config import Settings, get_settings
from buku_apel.utils.logger import get_logger


logger = get_logger(__name__)

REPORT_TEXT_FIELDS = (
    "officer_name",
    "activity_notes",
    "day_team",
    "night_team",
    "inside_count",
    "outside_count",
)


class RegisterError(Exception):
    """Base exception for register workflow failures."""


class RegisterValidationError(RegisterError):
    """Raised when an edit request is malformed."""


class RoomNotFoundError(RegisterError):
    """Raised when a dormitory/room pair is not in the roster."""


class ShiftLockedError(RegisterError):
    """Raised when editing a column whose shift is saved or already over."""


class ReportLockedError(RegisterError):
    """Raised when editing report fields after submission."""


class RegisterService:
    """Applies register transitions one at a time under a lock."""

    def __init__(
        self,
        repository: Optional[StateRepository] = None,
        import_service: Optional[RosterImportService] = None,
        unlock_service: Optional[UnlockService] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or StateRepository(self._settings)
        self._import_service = import_service or RosterImportService(self._settings)
        self._unlock_service = unlock_service or UnlockService(self._settings)
        self._schedule = ShiftSchedule(
            noon_start_hour=self._settings.noon_shift_start_hour,
            night_start_hour=self._settings.night_shift_start_hour,
        )
        validate_shift_schedule(self._schedule)
        self._clock = clock or self._local_now
        self._lock = RLock()
        self._state = RegisterState()

    def _local_now(self) -> datetime:
        return datetime.now(ZoneInfo(self._settings.timezone))

    def initialize(self) -> RegisterState:
        """Build the startup roster, overlay the persisted blob, then save."""
        self._repository.initialize_database()
        base = RegisterState(roster=self._import_service.load_initial_roster())
        payload = self._repository.load()
        state = base
        if payload is not None:
            try:
                state = state_from_payload(payload, base)
            except (TypeError, ValueError):
                logger.exception("Stored register state could not be applied; using defaults")
                state = base
            state = replace(state, roster=self._import_service.with_extra_room(state.roster))
            logger.info("Restored register state from %s", self._repository.database_path)
        with self._lock:
            self._state = state
            self._repository.save(state.to_dict())
        return state

    @property
    def state(self) -> RegisterState:
        with self._lock:
            return self._state

    def active_shift(self) -> Shift:
        return current_shift(self._clock(), self._schedule)

    def _commit(self, transition: Callable[[RegisterState], RegisterState]) -> RegisterState:
        with self._lock:
            updated = transition(self._state)
            if updated != self._state:
                self._repository.save(updated.to_dict())
                self._state = updated
            return self._state

    def _require_room(self, state: RegisterState, dormitory: str, room: str) -> None:
        if roster_ops.find_room(state.roster, dormitory, room) is None:
            raise RoomNotFoundError(f"Room {room!r} not found in dormitory {dormitory!r}")

    # --- roster -------------------------------------------------------------

    def add_occupant(self, *, dormitory: str, room: str, name: str) -> RegisterState:
        def _transition(state: RegisterState) -> RegisterState:
            self._require_room(state, dormitory, room)
            return replace(
                state, roster=roster_ops.add_occupant(state.roster, dormitory, room, name)
            )

        return self._commit(_transition)

    def rename_occupant(
        self, *, dormitory: str, room: str, old_name: str, new_name: str
    ) -> RegisterState:
        def _transition(state: RegisterState) -> RegisterState:
            self._require_room(state, dormitory, room)
            return replace(
                state,
                roster=roster_ops.rename_occupant(state.roster, dormitory, room, old_name, new_name),
            )

        return self._commit(_transition)

    def remove_occupant(self, *, dormitory: str, room: str, name: str) -> RegisterState:
        def _transition(state: RegisterState) -> RegisterState:
            self._require_room(state, dormitory, room)
            return replace(
                state, roster=roster_ops.remove_occupant(state.roster, dormitory, room, name)
            )

        return self._commit(_transition)

    def move_occupant(
        self, *, dormitory: str, room: str, name: str, target_key: str
    ) -> RegisterState:
        """Move is one transition and one save, so the occupant is never lost."""

        def _transition(state: RegisterState) -> RegisterState:
            self._require_room(state, dormitory, room)
            if not target_key:
                return state
            target = split_room_key(target_key)
            if target is None:
                raise RegisterValidationError(
                    "target_key must look like '<dormitory>||<room>'"
                )
            self._require_room(state, *target)
            return replace(
                state,
                roster=roster_ops.move_occupant(state.roster, dormitory, room, name, target_key),
            )

        return self._commit(_transition)

    # --- grid ---------------------------------------------------------------

    def update_grid(self, *, dormitory: str, room: str, field: str, value: str) -> RegisterState:
        if field not in ShiftGridRow.field_names():
            raise RegisterValidationError(f"Unknown grid field {field!r}")
        value = value.strip()
        if field == "category" and value and value not in {item.value for item in Category}:
            raise RegisterValidationError(f"Unknown category {value!r}")

        active = self.active_shift()

        def _transition(state: RegisterState) -> RegisterState:
            self._require_room(state, dormitory, room)
            if is_field_locked(field, active, state.saved_shifts):
                raise ShiftLockedError(
                    f"Column {field!r} is locked during the {active.value} shift"
                )
            key = room_key(dormitory, room)
            row = replace(state.grid_row(dormitory, room), **{field: value})
            return replace(state, grid={**state.grid, key: row})

        return self._commit(_transition)

    def locked_fields(self) -> list[str]:
        active = self.active_shift()
        saved = self.state.saved_shifts
        return [
            field for field in ShiftGridRow.field_names() if is_field_locked(field, active, saved)
        ]

    # --- report -------------------------------------------------------------

    def update_report_fields(self, **changes: Optional[str]) -> RegisterState:
        unknown = set(changes) - set(REPORT_TEXT_FIELDS)
        if unknown:
            raise RegisterValidationError(f"Unknown report fields: {sorted(unknown)}")
        updates = {name: value for name, value in changes.items() if value is not None}
        if not updates:
            return self.state

        allowed_team = editable_team(self.active_shift())
        for team in ("day_team", "night_team"):
            if team in updates and team != allowed_team:
                raise ShiftLockedError(f"{team} cannot be changed during this shift")

        def _transition(state: RegisterState) -> RegisterState:
            if state.report_locked:
                raise ReportLockedError("Report is locked; unlock it before editing")
            return replace(state, **updates)

        return self._commit(_transition)

    def render_report(self) -> str:
        report_date = self._clock().date()

        def _transition(state: RegisterState) -> RegisterState:
            text = generate_report(state, report_date=report_date, settings=self._settings)
            return replace(state, summary_text=text)

        return self._commit(_transition).summary_text

    def submit_report(self) -> RegisterState:
        """Generate the report, mark the active shift saved and lock the form."""
        now = self._clock()
        active = current_shift(now, self._schedule)

        def _transition(state: RegisterState) -> RegisterState:
            if state.report_locked:
                raise ReportLockedError("Report already submitted")
            text = generate_report(state, report_date=now.date(), settings=self._settings)
            return replace(
                state,
                summary_text=text,
                saved_shifts=replace(state.saved_shifts, **{active.value: True}),
                report_locked=True,
            )

        state = self._commit(_transition)
        logger.info("Report submitted for the %s shift", active.value)
        return state

    def unlock(self, secret: str) -> RegisterState:
        self._unlock_service.verify(secret)
        state = self._commit(
            lambda current: replace(current, saved_shifts=SavedShifts(), report_locked=False)
        )
        logger.info("Report unlocked")
        return state

    # --- read models --------------------------------------------------------

    def totals(self) -> RegisterTotals:
        return summarize(self.state)

    def snapshot(self) -> dict[str, Any]:
        state = self.state
        payload = state.to_dict()
        payload["roster"] = [
            {
                "name": dormitory.name,
                "rooms": [room.to_dict() for room in roster_ops.sorted_rooms(dormitory.rooms)],
            }
            for dormitory in state.roster
        ]
        payload["current_shift"] = self.active_shift().value
        payload["locked_fields"] = self.locked_fields()
        return payload
