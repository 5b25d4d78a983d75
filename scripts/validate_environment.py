#!/usr/bin/env python3
"""Validate local register environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from datetime import datetime
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from buku_apel.repository.state_repository import StateRepository
from buku_apel.services.import_service import RosterImportService
from buku_apel.services.register_service import RegisterService
from buku_apel.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="buku-apel-env-")

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("pandas", "pandas"),
        ("streamlit", "streamlit"),
        ("requests", "requests"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except (ImportError, PackageNotFoundError) as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    base_settings = get_settings()

    # CHECK 3: Configured timezone resolves
    try:
        now = datetime.now(ZoneInfo(base_settings.timezone))
        ok, line = _print_result(
            "Timezone", True, f": {base_settings.timezone} ({now:%H:%M})"
        )
    except ZoneInfoNotFoundError as exc:
        ok, line = _print_result("Timezone", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    try:
        validation_settings = replace(
            base_settings,
            database_path=Path(temp_dir) / "buku_apel_validation.db",
        )

        # CHECK 4: Roster import
        try:
            roster = RosterImportService(validation_settings).load_initial_roster()
            rooms = sum(len(dormitory.rooms) for dormitory in roster)
            ok, line = _print_result(
                "Roster import",
                True,
                f": {len(roster)} dormitories, {rooms} rooms",
            )
        except Exception as exc:
            ok, line = _print_result("Roster import", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: State store round trip
        try:
            repository = StateRepository(validation_settings)
            service = RegisterService(repository=repository, settings=validation_settings)
            state = service.initialize()
            stored = repository.load()
            if stored is None or len(stored.get("roster", [])) != len(state.roster):
                raise RuntimeError("stored roster does not match the loaded roster")
            ok, line = _print_result("State store round trip", True)
        except Exception as exc:
            ok, line = _print_result("State store round trip", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Buku Apel Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
