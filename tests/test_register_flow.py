from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from datetime import datetime

from fastapi import FastAPI
from fastapi.testclient import TestClient

from buku_apel.controllers.register_controller import router as register_router
from buku_apel.repository.state_repository import StateRepository
from buku_apel.services.register_service import RegisterService
from buku_apel.utils.config import get_settings


class FakeClock:
    def __init__(self, hour: int) -> None:
        self.now = datetime(2026, 10, 19, hour, 0)

    def __call__(self) -> datetime:
        return self.now


def _build_test_settings(tmp_path, filename: str, unlock_secret: str):
    get_settings.cache_clear()
    base = get_settings()
    return replace(
        base,
        database_path=tmp_path / filename,
        roster_import_path=tmp_path / "wbp.json",
        unlock_secret=unlock_secret,
    )


def _build_test_app(tmp_path, unlock_secret: str = "buka-kunci", hour: int = 9):
    settings = _build_test_settings(tmp_path, "register_flow.db", unlock_secret)
    repository = StateRepository(settings)
    clock = FakeClock(hour)
    register_service = RegisterService(repository=repository, settings=settings, clock=clock)
    register_service.initialize()

    app = FastAPI()
    app.include_router(register_router)
    app.state.repository = repository
    app.state.register_service = register_service
    return app, repository, clock


def _room(payload, dormitory: str, room: str) -> list[str]:
    for item in payload["roster"]:
        if item["name"] == dormitory:
            for entry in item["rooms"]:
                if entry["name"] == room:
                    return entry["names"]
    raise AssertionError(f"{dormitory}/{room} missing from response")


def test_register_end_to_end_flow(tmp_path):
    app, repository, clock = _build_test_app(tmp_path)
    client = TestClient(app)

    state_response = client.get("/state")
    assert state_response.status_code == 200
    state = state_response.json()
    assert state["current_shift"] == "morning"
    assert state["locked_fields"] == []
    assert [room["name"] for room in state["roster"][2]["rooms"]] == ["C2", "C7", "F1"]

    added = client.post(
        "/occupants/add",
        json={"dormitory": "Bima", "room": "B3", "name": "  Nengah Sari  "},
    )
    assert added.status_code == 200
    assert _room(added.json(), "Bima", "B3")[-1] == "Nengah Sari"

    renamed = client.post(
        "/occupants/rename",
        json={"dormitory": "Bima", "room": "B3", "old_name": "Nengah Sari", "new_name": "Nengah S."},
    )
    assert renamed.status_code == 200
    assert "Nengah S." in _room(renamed.json(), "Bima", "B3")

    moved = client.post(
        "/occupants/move",
        json={
            "dormitory": "Bima",
            "room": "B3",
            "name": "Nengah S.",
            "target_key": "Arjuna||F1",
        },
    )
    assert moved.status_code == 200
    assert _room(moved.json(), "Arjuna", "F1") == ["Nengah S."]
    assert "Nengah S." not in _room(moved.json(), "Bima", "B3")

    removed = client.post(
        "/occupants/remove",
        json={"dormitory": "Arjuna", "room": "F1", "name": "Nengah S."},
    )
    assert removed.status_code == 200
    assert _room(removed.json(), "Arjuna", "F1") == []

    grid = client.put(
        "/grid",
        json={"dormitory": "Bima", "room": "B3", "field": "evening", "value": "1"},
    )
    assert grid.status_code == 200
    assert grid.json()["grid"]["Bima||B3"]["evening"] == "1"

    totals = client.get("/totals").json()
    assert totals["dormitories"]["Bima"]["evening"] == 4
    assert totals["categories"]["Baru"] == 0

    fields = client.put(
        "/report_fields",
        json={"officer_name": "Putu", "day_team": "2", "inside_count": "14"},
    )
    assert fields.status_code == 200
    assert fields.json()["inside_count"] == "14"

    generated = client.post("/report/generate")
    assert generated.status_code == 200
    assert "•  WISMA BIMA              : 4 ORANG" in generated.json()["summary_text"]
    assert generated.json()["report_locked"] is False

    submitted = client.post("/report/submit")
    assert submitted.status_code == 200
    assert submitted.json()["report_locked"] is True
    assert repository.load()["report_locked"] is True

    assert client.put("/report_fields", json={"officer_name": "Made"}).status_code == 409
    assert client.post("/report/submit").status_code == 409
    locked_grid = client.put(
        "/grid",
        json={"dormitory": "Bima", "room": "B3", "field": "morning", "value": "2"},
    )
    assert locked_grid.status_code == 409

    assert client.post("/unlock", json={"secret": "salah"}).status_code == 401

    unlocked = client.post("/unlock", json={"secret": "buka-kunci"})
    assert unlocked.status_code == 200
    assert unlocked.json()["report_locked"] is False
    assert unlocked.json()["saved_shifts"]["morning"] is False

    clock.now = datetime(2026, 10, 19, 13, 0)
    noon_state = client.get("/state").json()
    assert noon_state["current_shift"] == "noon"
    assert "morning_in" in noon_state["locked_fields"]


def test_unknown_room_and_bad_payloads(tmp_path):
    app, _, _ = _build_test_app(tmp_path)
    client = TestClient(app)

    missing = client.post(
        "/occupants/add",
        json={"dormitory": "Sadewa", "room": "Z1", "name": "Putu"},
    )
    assert missing.status_code == 404

    bad_target = client.post(
        "/occupants/move",
        json={"dormitory": "Bima", "room": "B3", "name": "Made Darma", "target_key": "B5"},
    )
    assert bad_target.status_code == 400

    bad_field = client.put(
        "/grid",
        json={"dormitory": "Bima", "room": "B3", "field": "lunch", "value": "1"},
    )
    assert bad_field.status_code == 422

    bad_count = client.put("/report_fields", json={"inside_count": "dua"})
    assert bad_count.status_code == 422


def test_unlock_without_configured_secret(tmp_path):
    app, _, _ = _build_test_app(tmp_path, unlock_secret="")
    client = TestClient(app)
    response = client.post("/unlock", json={"secret": "anything"})
    assert response.status_code == 503


def test_categories_are_fixed():
    app = FastAPI()
    app.include_router(register_router)
    client = TestClient(app)
    response = client.get("/categories")
    assert response.status_code == 200
    assert response.json()["categories"] == [
        "Baru",
        "Bebas",
        "RS",
        "Berobat",
        "Sidang",
        "Kerja Luar",
        "Lainnya",
    ]


def test_missing_service_returns_503():
    app = FastAPI()
    app.include_router(register_router)
    client = TestClient(app)
    assert client.get("/state").status_code == 503


def test_store_failure_returns_logged_500(tmp_path, monkeypatch, caplog):
    app, repository, _ = _build_test_app(tmp_path)
    client = TestClient(app)

    def failing_save(payload):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(repository, "save", failing_save)

    with caplog.at_level(logging.ERROR):
        moved = client.post(
            "/occupants/move",
            json={
                "dormitory": "Bima",
                "room": "B3",
                "name": "Made Darma",
                "target_key": "Bima||B5",
            },
        )
    assert moved.status_code == 500
    assert moved.json()["detail"] == "Failed to move occupant"
    assert "Unexpected move occupant failure" in caplog.text

    state = client.get("/state").json()
    assert "Made Darma" in _room(state, "Bima", "B3")
    assert "Made Darma" not in _room(state, "Bima", "B5")

    submitted = client.post("/report/submit")
    assert submitted.status_code == 500
    assert client.get("/state").json()["report_locked"] is False
