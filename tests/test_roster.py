from __future__ import annotations

from buku_apel.domain.models import Dormitory, Room, room_key
from buku_apel.domain.roster import (
    SEED_ROSTER,
    add_occupant,
    ensure_room,
    find_room,
    move_occupant,
    normalize_dormitory_name,
    occupant_count,
    remove_occupant,
    rename_occupant,
    room_sort_key,
    sorted_rooms,
)


def _roster():
    return (
        Dormitory(
            name="Yudistira",
            rooms=(
                Room(name="A1", names=("X", "Putu", "X")),
                Room(name="A2", names=("Made",)),
            ),
        ),
        Dormitory(name="Bima", rooms=(Room(name="B1", names=()),)),
    )


# --- name normalizer ---

def test_normalize_strips_wisma_prefix() -> None:
    assert normalize_dormitory_name("wisma arjuna") == "Arjuna"


def test_normalize_title_cases_uppercase_input() -> None:
    assert normalize_dormitory_name("BIMA") == "Bima"


def test_normalize_trims_and_handles_mixed_case_prefix() -> None:
    assert normalize_dormitory_name("  WiSmA   yudistira  ") == "Yudistira"
    assert normalize_dormitory_name("poli KLINIK umum") == "Poli Klinik Umum"


def test_normalize_keeps_wisma_when_it_is_the_whole_name() -> None:
    assert normalize_dormitory_name("wisma") == "Wisma"
    assert normalize_dormitory_name("") == ""


# --- room ordering ---

def test_room_order_uses_numeric_suffix() -> None:
    names = ["A10", "A2", "A1", "B1"]
    assert sorted(names, key=room_sort_key) == ["A1", "A2", "A10", "B1"]


def test_unparseable_room_names_sort_last() -> None:
    names = ["Dapur", "B2", "Aula", "A3"]
    assert sorted(names, key=room_sort_key) == ["A3", "B2", "Aula", "Dapur"]


def test_sorted_rooms_orders_room_records() -> None:
    rooms = [Room(name="C7"), Room(name="C10"), Room(name="C2")]
    assert [room.name for room in sorted_rooms(rooms)] == ["C2", "C7", "C10"]


# --- ensure room ---

def test_ensure_room_appends_missing_room_case_insensitively() -> None:
    roster = ensure_room(SEED_ROSTER, "arjuna", "F1")
    arjuna = next(item for item in roster if item.name == "Arjuna")
    assert arjuna.rooms[-1] == Room(name="F1")


def test_ensure_room_is_idempotent() -> None:
    once = ensure_room(SEED_ROSTER, "Arjuna", "F1")
    assert ensure_room(once, "Arjuna", "F1") == once


def test_ensure_room_ignores_unknown_dormitory() -> None:
    assert ensure_room(SEED_ROSTER, "Sadewa", "Z1") == SEED_ROSTER


# --- add / rename / remove ---

def test_add_trims_and_appends() -> None:
    roster = add_occupant(_roster(), "Bima", "B1", "  Ketut  ")
    assert find_room(roster, "Bima", "B1").names == ("Ketut",)


def test_add_blank_name_is_noop() -> None:
    original = _roster()
    assert add_occupant(original, "Bima", "B1", "   ") == original


def test_rename_changes_first_match_only() -> None:
    roster = rename_occupant(_roster(), "Yudistira", "A1", "X", " Wayan ")
    assert find_room(roster, "Yudistira", "A1").names == ("Wayan", "Putu", "X")


def test_rename_to_blank_is_noop() -> None:
    original = _roster()
    assert rename_occupant(original, "Yudistira", "A1", "X", "  ") == original


def test_remove_drops_every_duplicate() -> None:
    roster = remove_occupant(_roster(), "Yudistira", "A1", "X")
    assert find_room(roster, "Yudistira", "A1").names == ("Putu",)


def test_operations_do_not_mutate_input() -> None:
    original = _roster()
    remove_occupant(original, "Yudistira", "A1", "X")
    assert find_room(original, "Yudistira", "A1").names == ("X", "Putu", "X")


# --- move ---

def test_move_removes_one_occurrence_and_appends_one() -> None:
    original = _roster()
    roster = move_occupant(original, "Yudistira", "A1", "X", room_key("Bima", "B1"))

    assert find_room(roster, "Yudistira", "A1").names == ("Putu", "X")
    assert find_room(roster, "Bima", "B1").names == ("X",)
    assert occupant_count(roster) == occupant_count(original)


def test_move_without_destination_is_noop() -> None:
    original = _roster()
    assert move_occupant(original, "Yudistira", "A1", "X", "") == original


def test_move_to_unknown_room_keeps_occupant_in_place() -> None:
    original = _roster()
    assert move_occupant(original, "Yudistira", "A1", "X", room_key("Bima", "B9")) == original


def test_move_of_absent_name_is_noop() -> None:
    original = _roster()
    assert move_occupant(original, "Yudistira", "A2", "Nobody", room_key("Bima", "B1")) == original
