from __future__ import annotations

from buku_apel.domain.models import Dormitory, RegisterState, Room, ShiftGridRow, room_key
from buku_apel.services.aggregation_service import (
    category_totals,
    count_for,
    dormitory_total,
    dormitory_totals,
    global_total,
    movement_total,
    parse_count,
    summarize,
)


ROSTER = (
    Dormitory(
        name="Yudistira",
        rooms=(
            Room(name="A1", names=("Putu", "Gede", "Made")),
            Room(name="A2", names=("Wayan",)),
        ),
    ),
    Dormitory(name="Bima", rooms=(Room(name="B1", names=("Ketut", "Kadek")),)),
)


def test_parse_count_accepts_whole_and_decimal_numbers() -> None:
    assert parse_count("5") == 5
    assert parse_count(" 7 ") == 7
    assert parse_count("2.0") == 2


def test_parse_count_rejects_blank_and_garbage() -> None:
    assert parse_count("") is None
    assert parse_count("   ") is None
    assert parse_count("lima") is None
    assert parse_count("nan") is None
    assert parse_count(None) is None


def test_parse_count_rejects_python_only_number_syntax() -> None:
    assert parse_count("1_0") is None
    assert parse_count("infinity") is None
    assert parse_count("1e999") is None
    assert parse_count("0x10") is None
    assert parse_count("-3") == -3
    assert parse_count(".5") == 0


def test_count_for_defaults_to_occupancy() -> None:
    assert count_for(ROSTER, {}, "Yudistira", "A1", "evening") == 3


def test_count_for_uses_recorded_override() -> None:
    grid = {room_key("Yudistira", "A1"): ShiftGridRow(evening="5")}
    assert count_for(ROSTER, grid, "Yudistira", "A1", "evening") == 5
    assert count_for(ROSTER, grid, "Yudistira", "A1", "noon") == 3


def test_count_for_treats_invalid_entry_as_unset() -> None:
    grid = {room_key("Yudistira", "A1"): ShiftGridRow(evening="tiga")}
    assert count_for(ROSTER, grid, "Yudistira", "A1", "evening") == 3


def test_count_for_unknown_room_is_zero() -> None:
    assert count_for(ROSTER, {}, "Yudistira", "Z9", "evening") == 0


def test_dormitory_and_global_totals() -> None:
    grid = {
        room_key("Yudistira", "A2"): ShiftGridRow(noon="0"),
        room_key("Bima", "B1"): ShiftGridRow(noon="4"),
    }
    assert dormitory_total(ROSTER, grid, "Yudistira", "noon") == 3
    assert dormitory_total(ROSTER, grid, "Bima", "noon") == 4
    assert global_total(ROSTER, grid, "noon") == 7
    assert dormitory_totals(ROSTER, grid, "noon") == {"yudistira": 3, "bima": 4}


def test_category_totals_sum_known_labels() -> None:
    grid = {
        "a": ShiftGridRow(category="RS", category_count="2"),
        "b": ShiftGridRow(category="RS", category_count="1"),
        "c": ShiftGridRow(category="Sidang", category_count="x"),
        "d": ShiftGridRow(category="", category_count="9"),
        "e": ShiftGridRow(category="Piknik", category_count="3"),
    }
    totals = category_totals(grid)
    assert totals["RS"] == 3
    assert totals["Sidang"] == 0
    assert totals["Baru"] == 0
    assert "Piknik" not in totals
    assert set(totals) == {"Baru", "Bebas", "RS", "Berobat", "Sidang", "Kerja Luar", "Lainnya"}


def test_movement_total_has_no_occupancy_fallback() -> None:
    grid = {
        room_key("Yudistira", "A1"): ShiftGridRow(morning_out="2"),
        room_key("Bima", "B1"): ShiftGridRow(morning_out="", morning_in="1"),
    }
    assert movement_total(grid, "morning_out") == 2
    assert movement_total(grid, "morning_in") == 1
    assert movement_total(grid, "noon_out") == 0


def test_summarize_recomputes_from_state() -> None:
    state = RegisterState(roster=ROSTER)
    before = summarize(state)
    assert before.overall["evening"] == 6
    assert before.dormitories["Bima"]["night"] == 2

    after = summarize(
        RegisterState(roster=ROSTER, grid={room_key("Bima", "B1"): ShiftGridRow(night="1")})
    )
    assert after.overall["night"] == 5
    assert after.overall["evening"] == 6
