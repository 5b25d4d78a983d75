"""Derived headcount totals over the roster tree and the shift grid.

Nothing here is cached: totals are recomputed from the current state on every
call so they always agree with the roster and grid they were read from.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from buku_apel.domain.models import (
    HEADCOUNT_FIELDS,
    MOVEMENT_FIELDS,
    Category,
    RegisterState,
    Roster,
    ShiftGridRow,
    room_key,
)
from buku_apel.domain.roster import find_room


Grid = Mapping[str, ShiftGridRow]

# Plain decimal notation only; Python extras such as "1_0" or "nan" are not counts.
_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_count(raw: object) -> Optional[int]:
    """Integer value of a form entry, or ``None`` when blank or not numeric."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    if not _NUMBER.fullmatch(text):
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return int(value)


def count_for(roster: Roster, grid: Grid, dormitory: str, room: str, field: str) -> int:
    """Recorded count for one grid cell; an unedited room counts as fully present."""
    row = grid.get(room_key(dormitory, room))
    if row is not None:
        recorded = parse_count(getattr(row, field, None))
        if recorded is not None:
            return recorded
    target = find_room(roster, dormitory, room)
    return len(target.names) if target is not None else 0


def dormitory_total(roster: Roster, grid: Grid, dormitory: str, field: str) -> int:
    for item in roster:
        if item.name == dormitory:
            return sum(count_for(roster, grid, item.name, room.name, field) for room in item.rooms)
    return 0


def dormitory_totals(roster: Roster, grid: Grid, field: str) -> dict[str, int]:
    """Totals keyed by lowercased dormitory name, the way the report looks them up."""
    return {
        item.name.lower(): dormitory_total(roster, grid, item.name, field)
        for item in roster
    }


def global_total(roster: Roster, grid: Grid, field: str) -> int:
    return sum(dormitory_total(roster, grid, item.name, field) for item in roster)


def category_totals(grid: Grid) -> dict[str, int]:
    totals = {category.value: 0 for category in Category}
    for row in grid.values():
        if row.category not in totals:
            continue
        totals[row.category] += parse_count(row.category_count) or 0
    return totals


def movement_total(grid: Grid, field: str) -> int:
    """Checkpoint traffic for one column; unset cells mean no movement."""
    return sum(parse_count(getattr(row, field)) or 0 for row in grid.values())


@dataclass(frozen=True)
class RegisterTotals:
    dormitories: dict[str, dict[str, int]]
    overall: dict[str, int]
    categories: dict[str, int]
    movements: dict[str, int]

    def to_dict(self) -> dict[str, dict]:
        return {
            "dormitories": self.dormitories,
            "overall": self.overall,
            "categories": self.categories,
            "movements": self.movements,
        }


def summarize(state: RegisterState) -> RegisterTotals:
    return RegisterTotals(
        dormitories={
            item.name: {
                field: dormitory_total(state.roster, state.grid, item.name, field)
                for field in HEADCOUNT_FIELDS
            }
            for item in state.roster
        },
        overall={field: global_total(state.roster, state.grid, field) for field in HEADCOUNT_FIELDS},
        categories=category_totals(state.grid),
        movements={field: movement_total(state.grid, field) for field in MOVEMENT_FIELDS},
    )
