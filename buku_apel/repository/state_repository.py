"""Repository layer responsible for the persisted register blob."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from buku_apel.utils.config import Settings, get_settings
from buku_apel.utils.logger import get_logger


logger = get_logger(__name__)


class StateRepository:
    """Stores the whole register as one JSON document under a fixed key.

    The service only sees ``load()`` and ``save()``; swapping SQLite for another
    store does not touch the register logic.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    @property
    def storage_key(self) -> str:
        return self._settings.storage_key

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        return connection

    def initialize_database(self) -> None:
        """Create the key/value table; safe to call on every startup."""
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS AppState (
                        key TEXT PRIMARY KEY,
                        payload TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );
                    """
                )
                conn.commit()
            logger.info("State store initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"State store initialization failed: {exc}") from exc

    def load(self) -> Optional[dict[str, Any]]:
        """Return the stored blob, or ``None`` when absent or unreadable."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT payload FROM AppState WHERE key = ?;",
                (self.storage_key,),
            ).fetchone()
        if row is None:
            return None
        try:
            payload = json.loads(row["payload"])
        except json.JSONDecodeError:
            logger.exception("Failed to parse stored register state")
            return None
        if not isinstance(payload, dict):
            logger.error("Stored register state is not a JSON object; ignoring it")
            return None
        return payload

    def save(self, payload: dict[str, Any]) -> None:
        """Overwrite the stored blob; the last write wins."""
        self.save_raw(json.dumps(payload, ensure_ascii=False))

    def save_raw(self, raw_payload: str) -> None:
        """Upsert the stored text unchanged; ``save`` serializes into this."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO AppState (key, payload, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    payload = excluded.payload,
                    updated_at = excluded.updated_at;
                """,
                (self.storage_key, raw_payload, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()
