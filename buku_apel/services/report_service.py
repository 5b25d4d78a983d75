"""Fixed-format evening roll-call report text."""

from __future__ import annotations

from datetime import date
from typing import Optional

from buku_apel.domain.models import Category, RegisterState
from buku_apel.services.aggregation_service import (
    category_totals,
    dormitory_totals,
    global_total,
    movement_total,
    parse_count,
)
from buku_apel.utils.config import Settings, get_settings


PLACEHOLDER = "-"

_DAY_NAMES = ("SENIN", "SELASA", "RABU", "KAMIS", "JUMAT", "SABTU", "MINGGU")
_MONTH_NAMES = (
    "JANUARI",
    "FEBRUARI",
    "MARET",
    "APRIL",
    "MEI",
    "JUNI",
    "JULI",
    "AGUSTUS",
    "SEPTEMBER",
    "OKTOBER",
    "NOVEMBER",
    "DESEMBER",
)


def format_long_date(value: date) -> str:
    """``SENIN, 19 OKTOBER 2026``"""
    return (
        f"{_DAY_NAMES[value.weekday()]}, {value.day} "
        f"{_MONTH_NAMES[value.month - 1]} {value.year}"
    )


def _count_or_placeholder(value: Optional[int]) -> str:
    return str(value) if value else PLACEHOLDER


class ReportFormatter:
    def __init__(self, label_width: int, number_width: int) -> None:
        self._label_width = label_width
        self._number_width = number_width

    def bullet(self, label: str) -> str:
        return f"•  {label.ljust(self._label_width)}: "

    def detail(self, label: str) -> str:
        return f"  {label.ljust(self._label_width)}: "

    def people(self, value: Optional[int]) -> str:
        return _count_or_placeholder(value).rjust(self._number_width) + " ORANG"


def generate_report(
    state: RegisterState,
    *,
    report_date: date,
    settings: Optional[Settings] = None,
) -> str:
    settings = settings or get_settings()
    fmt = ReportFormatter(settings.report_label_width, settings.report_number_width)

    evening_by_dormitory = dormitory_totals(state.roster, state.grid, "evening")
    categories = category_totals(state.grid)

    def dormitory_line(label: str, lookup: str) -> str:
        total = evening_by_dormitory.get(lookup.lower())
        return fmt.bullet(label) + f"{_count_or_placeholder(total)} ORANG"

    lines = [
        f"SELAMAT SORE, IJIN MELAPORKAN HASIL APEL SORE WBP ( {format_long_date(report_date)} )",
        "",
        f"REGU APEL PAGI/SIANG/SORE : {state.day_team or PLACEHOLDER}",
        f"REGU APEL MALAM           : {state.night_team or PLACEHOLDER}",
        "",
        *(dormitory_line(label, lookup) for label, lookup in settings.report_dormitories),
        "",
        fmt.bullet("ISI LAPAS  ( SIANG )") + fmt.people(global_total(state.roster, state.grid, "noon")),
        fmt.bullet("ISI LAPAS ( SORE )") + fmt.people(global_total(state.roster, state.grid, "evening")),
        "KETERANGAN :",
        fmt.detail("BARU") + fmt.people(categories[Category.NEW.value]),
        fmt.detail("BEBAS") + fmt.people(categories[Category.RELEASED.value]),
        "",
        fmt.bullet("ISI DALAM LAPAS") + fmt.people(parse_count(state.inside_count)),
        fmt.bullet("DI LUAR LAPAS") + fmt.people(parse_count(state.outside_count)),
        "KETERANGAN:",
        fmt.bullet("RS") + fmt.people(categories[Category.HOSPITAL.value]),
        fmt.bullet("BEROBAT") + fmt.people(categories[Category.TREATMENT.value]),
        fmt.bullet("SIDANG") + fmt.people(categories[Category.COURT.value]),
        fmt.bullet("KERJA LUAR") + fmt.people(categories[Category.EXTERNAL_WORK.value]),
        fmt.bullet("LAINNYA") + fmt.people(categories[Category.OTHER.value]),
        "",
        "PERGERAKAN P2U :",
        fmt.detail("KELUAR ( PAGI )") + fmt.people(movement_total(state.grid, "morning_out")),
        fmt.detail("MASUK ( PAGI )") + fmt.people(movement_total(state.grid, "morning_in")),
        fmt.detail("KELUAR ( SIANG )") + fmt.people(movement_total(state.grid, "noon_out")),
        fmt.detail("MASUK ( SIANG )") + fmt.people(movement_total(state.grid, "noon_in")),
    ]

    notes = state.activity_notes.strip()
    if notes:
        lines.extend(["", "CATATAN KEGIATAN:", notes])
    return "\n".join(lines)
