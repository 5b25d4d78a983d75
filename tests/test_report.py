from __future__ import annotations

from datetime import date

from buku_apel.domain.models import Dormitory, RegisterState, Room, ShiftGridRow, room_key
from buku_apel.services.report_service import format_long_date, generate_report
from buku_apel.utils.config import get_settings


REPORT_DATE = date(2026, 10, 19)


def _report(state: RegisterState) -> str:
    return generate_report(state, report_date=REPORT_DATE, settings=get_settings())


def test_format_long_date_in_indonesian() -> None:
    assert format_long_date(REPORT_DATE) == "SENIN, 19 OKTOBER 2026"
    assert format_long_date(date(2026, 3, 1)) == "MINGGU, 1 MARET 2026"


def test_zero_activity_renders_placeholders() -> None:
    text = _report(RegisterState())

    lines = text.splitlines()
    assert lines[0] == (
        "SELAMAT SORE, IJIN MELAPORKAN HASIL APEL SORE WBP ( SENIN, 19 OKTOBER 2026 )"
    )
    assert "REGU APEL PAGI/SIANG/SORE : -" in lines
    assert "REGU APEL MALAM           : -" in lines
    counted = [line for line in lines if line.endswith("ORANG")]
    assert counted
    for line in counted:
        assert line.endswith("- ORANG")
        assert " 0 ORANG" not in line


def test_numeric_fields_are_padded() -> None:
    state = RegisterState(
        roster=(Dormitory(name="Bima", rooms=(Room(name="B1", names=("Ketut", "Kadek")),)),),
        grid={room_key("Bima", "B1"): ShiftGridRow(category="Baru", category_count="1")},
        inside_count="12",
    )
    lines = _report(state).splitlines()

    assert "•  WISMA BIMA              : 2 ORANG" in lines
    assert "•  ISI LAPAS ( SORE )      :      2 ORANG" in lines
    assert "  BARU                    :      1 ORANG" in lines
    assert "•  ISI DALAM LAPAS         :     12 ORANG" in lines
    assert "•  DI LUAR LAPAS           :      - ORANG" in lines


def test_dormitory_lines_use_evening_headcount() -> None:
    state = RegisterState(
        roster=(
            Dormitory(name="Yudistira", rooms=(Room(name="A1", names=("Putu", "Gede")),)),
        ),
        grid={room_key("Yudistira", "A1"): ShiftGridRow(evening="1", noon="2")},
    )
    lines = _report(state).splitlines()
    assert "•  WISMA YUDISTIRA         : 1 ORANG" in lines
    assert "•  ISI LAPAS  ( SIANG )    :      2 ORANG" in lines


def test_teams_and_checkpoint_movements() -> None:
    state = RegisterState(
        roster=(Dormitory(name="Bima", rooms=(Room(name="B1", names=("Ketut",)),)),),
        grid={room_key("Bima", "B1"): ShiftGridRow(noon_out="3", noon_in="2")},
        day_team="2",
        night_team="4",
    )
    lines = _report(state).splitlines()
    assert "REGU APEL PAGI/SIANG/SORE : 2" in lines
    assert "REGU APEL MALAM           : 4" in lines
    assert "  KELUAR ( SIANG )        :      3 ORANG" in lines
    assert "  MASUK ( SIANG )         :      2 ORANG" in lines


def test_notes_block_only_when_present() -> None:
    assert "CATATAN KEGIATAN:" not in _report(RegisterState(activity_notes="   "))

    text = _report(RegisterState(activity_notes="  Deteksi dini blok A  "))
    assert text.endswith("\n\nCATATAN KEGIATAN:\nDeteksi dini blok A")
