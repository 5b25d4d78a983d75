"""Pure transitions over the dormitory -> room -> occupant tree.

Occupants are identified by their name string alone. Two inmates sharing a name
in one room cannot be told apart, so rename and move act on the first match
while remove drops every match.
"""

from __future__ import annotations

import re
import sys
from dataclasses import replace
from typing import Callable, Iterable

from buku_apel.domain.models import Dormitory, Room, Roster, split_room_key


_WISMA_PREFIX = re.compile(r"^wisma\s+", re.IGNORECASE)
_WORD_START = re.compile(r"\b\w")
_ROOM_ORDER = re.compile(r"^([A-Za-z]+)(\d+)")


SEED_ROSTER: Roster = (
    Dormitory(
        name="Yudistira",
        rooms=(
            Room(name="A1", names=("Putu Wira", "Gede Satria")),
            Room(name="A4", names=("Komang Sujana", "Made Arta")),
            Room(name="A7", names=("I Gede Putra", "Wayan Adi", "Kadek Surya")),
        ),
    ),
    Dormitory(
        name="Bima",
        rooms=(
            Room(name="B3", names=("Wayan Gita", "Made Darma")),
            Room(name="B5", names=("Ketut Yasa", "Gede Yudhi", "Putu Raka")),
        ),
    ),
    Dormitory(
        name="Arjuna",
        rooms=(
            Room(name="C2", names=("Made Jaya", "Nyoman Eka")),
            Room(name="C7", names=("I Komang Riko",)),
        ),
    ),
    Dormitory(
        name="Nakula",
        rooms=(
            Room(name="D1", names=("Putu Yoga", "Kadek Rama")),
            Room(name="D4", names=("Wayan Suka",)),
        ),
    ),
)


def normalize_dormitory_name(value: str) -> str:
    """Canonical dormitory label: ``" wisma ARJUNA "`` -> ``"Arjuna"``."""
    name = _WISMA_PREFIX.sub("", value.strip())
    return _WORD_START.sub(lambda match: match.group(0).upper(), name.lower())


def text_sort_key(value: str) -> tuple[str, str]:
    return value.casefold(), value


def room_sort_key(name: str) -> tuple:
    """Order rooms as A1 < A2 < A10 < B1; unparseable names go last."""
    match = _ROOM_ORDER.match(name)
    if match is None:
        return (1, "", sys.maxsize, name)
    return (0, match.group(1).upper(), int(match.group(2)), name)


def sorted_rooms(rooms: Iterable[Room]) -> list[Room]:
    return sorted(rooms, key=lambda room: room_sort_key(room.name))


def find_dormitory(roster: Roster, dormitory_name: str) -> Dormitory | None:
    return next((item for item in roster if item.name == dormitory_name), None)


def find_room(roster: Roster, dormitory_name: str, room_name: str) -> Room | None:
    dormitory = find_dormitory(roster, dormitory_name)
    if dormitory is None:
        return None
    return dormitory.find_room(room_name)


def ensure_room(roster: Roster, dormitory_name: str, room_name: str) -> Roster:
    """Append an empty room to the dormitory unless it already exists."""
    target = dormitory_name.lower()
    updated = []
    for dormitory in roster:
        if dormitory.name.lower() == target and dormitory.find_room(room_name) is None:
            dormitory = replace(dormitory, rooms=dormitory.rooms + (Room(name=room_name),))
        updated.append(dormitory)
    return tuple(updated)


def update_room_names(
    roster: Roster,
    dormitory_name: str,
    room_name: str,
    updater: Callable[[tuple[str, ...]], tuple[str, ...]],
) -> Roster:
    updated = []
    for dormitory in roster:
        if dormitory.name == dormitory_name:
            dormitory = replace(
                dormitory,
                rooms=tuple(
                    replace(room, names=updater(room.names)) if room.name == room_name else room
                    for room in dormitory.rooms
                ),
            )
        updated.append(dormitory)
    return tuple(updated)


def add_occupant(roster: Roster, dormitory_name: str, room_name: str, name: str) -> Roster:
    cleaned = name.strip()
    if not cleaned:
        return roster
    return update_room_names(roster, dormitory_name, room_name, lambda names: names + (cleaned,))


def rename_occupant(
    roster: Roster,
    dormitory_name: str,
    room_name: str,
    old_name: str,
    new_name: str,
) -> Roster:
    cleaned = new_name.strip()
    if not cleaned:
        return roster

    def _rename(names: tuple[str, ...]) -> tuple[str, ...]:
        if old_name not in names:
            return names
        index = names.index(old_name)
        return names[:index] + (cleaned,) + names[index + 1:]

    return update_room_names(roster, dormitory_name, room_name, _rename)


def remove_occupant(roster: Roster, dormitory_name: str, room_name: str, name: str) -> Roster:
    return update_room_names(
        roster,
        dormitory_name,
        room_name,
        lambda names: tuple(item for item in names if item != name),
    )


def _drop_first(names: tuple[str, ...], name: str) -> tuple[str, ...]:
    index = names.index(name)
    return names[:index] + names[index + 1:]


def move_occupant(
    roster: Roster,
    dormitory_name: str,
    room_name: str,
    name: str,
    target_key: str,
) -> Roster:
    """Move one occurrence of ``name`` to the room addressed by ``target_key``.

    Returns the roster unchanged unless both the source entry and the
    destination room exist, so an occupant is never dropped half-way.
    """
    if not target_key:
        return roster
    target = split_room_key(target_key)
    if target is None:
        return roster
    source = find_room(roster, dormitory_name, room_name)
    if source is None or name not in source.names:
        return roster
    target_dormitory, target_room = target
    if find_room(roster, target_dormitory, target_room) is None:
        return roster

    moved = update_room_names(
        roster, dormitory_name, room_name, lambda names: _drop_first(names, name)
    )
    return update_room_names(moved, target_dormitory, target_room, lambda names: names + (name,))


def occupant_count(roster: Roster) -> int:
    return sum(len(room.names) for dormitory in roster for room in dormitory.rooms)
