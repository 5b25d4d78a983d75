"""Streamlit operator dashboard for the daily roll-call register."""

from __future__ import annotations

import datetime
import os
from typing import Any, Dict, Optional

import pandas as pd
import requests
import streamlit as st

# ==========================================
# Configuration & Constants
# ==========================================
API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")

GRID_COLUMNS = [
    ("morning", "Isi Pagi"),
    ("morning_out", "Klr Pagi"),
    ("morning_in", "Msk Pagi"),
    ("noon", "Isi Siang"),
    ("noon_out", "Klr Siang"),
    ("noon_in", "Msk Siang"),
    ("evening", "Isi Sore"),
    ("night", "Isi Mlm"),
    ("category", "Ket"),
    ("category_count", "Jml Ket"),
]
TEAM_OPTIONS = ["", "1", "2", "3", "4"]

st.set_page_config(
    page_title="Buku Apel Harian",
    page_icon="📋",
    layout="wide",
)


# ==========================================
# API Helper Functions
# ==========================================
def _call(method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    try:
        response = requests.request(
            method,
            f"{API_BASE_URL}{path}",
            json=payload,
            timeout=5,
        )
    except requests.exceptions.RequestException as e:
        st.error(f"Backend connection failed: {e}")
        return None
    if response.status_code >= 400:
        try:
            detail = response.json().get("detail", response.text)
        except ValueError:
            detail = response.text
        st.error(f"{detail}")
        return None
    return response.json()


def fetch_state() -> Optional[Dict[str, Any]]:
    return _call("GET", "/state")


def fetch_totals() -> Optional[Dict[str, Any]]:
    return _call("GET", "/totals")


def fetch_categories() -> list[str]:
    result = _call("GET", "/categories")
    return result.get("categories", []) if result else []


# ==========================================
# UI Page Functions
# ==========================================
def render_register_page(state: Dict[str, Any]) -> None:
    st.header("📋 Buku Apel")
    st.caption(
        f"Tanggal: {datetime.date.today():%d/%m/%Y} | shift aktif: "
        f"{state['current_shift'].upper()}. Kolom terkunci: "
        f"{', '.join(state['locked_fields']) or '-'}"
    )

    grid = state.get("grid", {})
    for dormitory in state["roster"]:
        st.subheader(dormitory["name"].upper())
        rows = []
        for room in dormitory["rooms"]:
            values = grid.get(f"{dormitory['name']}||{room['name']}", {})
            row = {"Kmr": room["name"], "Penghuni": len(room["names"])}
            for field, label in GRID_COLUMNS:
                row[label] = values.get(field, "")
            rows.append(row)
        if rows:
            st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
        else:
            st.info("Belum ada kamar.")

    st.write("### Isi Kolom")
    room_options = [
        (dormitory["name"], room["name"])
        for dormitory in state["roster"]
        for room in dormitory["rooms"]
    ]
    if not room_options:
        return
    col1, col2, col3 = st.columns(3)
    with col1:
        target = st.selectbox(
            "Kamar",
            room_options,
            format_func=lambda item: f"{item[0]} - {item[1]}",
        )
    with col2:
        field = st.selectbox(
            "Kolom",
            [field for field, _ in GRID_COLUMNS],
            format_func=dict(GRID_COLUMNS).get,
        )
    with col3:
        if field == "category":
            value = st.selectbox("Nilai", [""] + fetch_categories())
        else:
            value = st.text_input("Nilai", "")

    if st.button("Simpan Kolom", type="primary"):
        result = _call(
            "PUT",
            "/grid",
            {"dormitory": target[0], "room": target[1], "field": field, "value": value},
        )
        if result:
            st.success("Kolom tersimpan.")


def render_rooms_page(state: Dict[str, Any]) -> None:
    st.header("🛏️ Kelola Kamar")
    dormitories = [dormitory["name"] for dormitory in state["roster"]]
    if not dormitories:
        st.info("Roster kosong.")
        return

    col1, col2 = st.columns(2)
    with col1:
        dormitory_name = st.selectbox("Wisma", dormitories)
    dormitory = next(item for item in state["roster"] if item["name"] == dormitory_name)
    with col2:
        room_name = st.selectbox("Kamar", [room["name"] for room in dormitory["rooms"]])
    room = next((item for item in dormitory["rooms"] if item["name"] == room_name), None)
    if room is None:
        return

    ref = {"dormitory": dormitory_name, "room": room_name}
    st.write(f"### {dormitory_name} - {room_name} ({len(room['names'])} orang)")
    st.table(pd.DataFrame({"Nama": room["names"]}))

    new_name = st.text_input("Tambah nama")
    if st.button("Tambah"):
        if _call("POST", "/occupants/add", {**ref, "name": new_name}):
            st.success("Nama ditambahkan.")

    if not room["names"]:
        return
    selected = st.selectbox("Pilih nama", room["names"])

    col_a, col_b, col_c = st.columns(3)
    with col_a:
        renamed = st.text_input("Ubah menjadi")
        if st.button("Ubah"):
            if _call(
                "POST",
                "/occupants/rename",
                {**ref, "old_name": selected, "new_name": renamed},
            ):
                st.success("Nama diubah.")
    with col_b:
        targets = [
            f"{item['name']}||{target['name']}"
            for item in state["roster"]
            for target in item["rooms"]
            if (item["name"], target["name"]) != (dormitory_name, room_name)
        ]
        target_key = st.selectbox(
            "Pindah ke",
            [""] + targets,
            format_func=lambda key: key.replace("||", " - ") or "Pilih kamar",
        )
        if st.button("Pindahkan"):
            if _call(
                "POST",
                "/occupants/move",
                {**ref, "name": selected, "target_key": target_key},
            ):
                st.success("Nama dipindahkan.")
    with col_c:
        if st.button("Hapus", type="secondary"):
            if _call("POST", "/occupants/remove", {**ref, "name": selected}):
                st.success("Nama dihapus.")


def render_report_page(state: Dict[str, Any]) -> None:
    st.header("📝 Laporan Apel")
    totals = fetch_totals()
    if totals:
        categories = totals.get("categories", {})
        metric_cols = st.columns(len(categories) or 1)
        for column, (label, count) in zip(metric_cols, categories.items()):
            column.metric(label, count)
        overall = totals.get("overall", {})
        col_a, col_b = st.columns(2)
        col_a.metric("Isi Lapas (Siang)", overall.get("noon", 0))
        col_b.metric("Isi Lapas (Sore)", overall.get("evening", 0))

    locked = state["report_locked"]
    night = state["current_shift"] == "night"

    col1, col2 = st.columns(2)
    with col1:
        inside_count = st.text_input("Isi Dalam Lapas", state["inside_count"], disabled=locked)
        day_team = st.selectbox(
            "Regu Apel Pagi/Siang/Sore",
            TEAM_OPTIONS,
            index=TEAM_OPTIONS.index(state["day_team"]) if state["day_team"] in TEAM_OPTIONS else 0,
            disabled=night or locked,
        )
        officer_name = st.text_input("Nama petugas", state["officer_name"], disabled=locked)
    with col2:
        outside_count = st.text_input("Di Luar Lapas", state["outside_count"], disabled=locked)
        night_team = st.selectbox(
            "Regu Apel Malam",
            TEAM_OPTIONS,
            index=TEAM_OPTIONS.index(state["night_team"]) if state["night_team"] in TEAM_OPTIONS else 0,
            disabled=not night or locked,
        )
    activity_notes = st.text_area(
        "Catatan Kegiatan Apel (Opsional)", state["activity_notes"], disabled=locked
    )

    if st.button("Simpan Isian", disabled=locked):
        fields = {
            "inside_count": inside_count,
            "outside_count": outside_count,
            "officer_name": officer_name,
            "activity_notes": activity_notes,
            ("night_team" if night else "day_team"): night_team if night else day_team,
        }
        if _call("PUT", "/report_fields", fields):
            st.success("Isian tersimpan.")

    col_gen, col_submit = st.columns(2)
    with col_gen:
        if st.button("Generate Laporan"):
            if _call("POST", "/report/generate"):
                st.success("Terima kasih, laporan berhasil dibuat.")
    with col_submit:
        if st.button("Simpan & Kunci", type="primary", disabled=locked):
            if _call("POST", "/report/submit"):
                st.success("Terima kasih, laporan sudah disimpan.")

    if locked:
        secret = st.text_input("Password buka kunci", type="password")
        if st.button("Buka Kunci"):
            if _call("POST", "/unlock", {"secret": secret}):
                st.success("Terima kasih, kunci sudah dibuka.")

    refreshed = fetch_state() or state
    st.text_area(
        "Hasil laporan",
        refreshed.get("summary_text", ""),
        height=360,
        placeholder="Hasil laporan akan muncul di sini.",
    )


# ==========================================
# Main App Router
# ==========================================
def main() -> None:
    st.sidebar.title("Buku Apel Harian")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Menu",
        ["Buku Apel", "Kelola Kamar", "Laporan"],
    )

    st.sidebar.markdown("---")
    st.sidebar.caption(f"API: {API_BASE_URL}")

    state = fetch_state()
    if state is None:
        st.stop()

    if page == "Buku Apel":
        render_register_page(state)
    elif page == "Kelola Kamar":
        render_rooms_page(state)
    elif page == "Laporan":
        render_report_page(state)


if __name__ == "__main__":
    main()
