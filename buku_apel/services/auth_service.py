"""Shared-secret gate that reopens a submitted report."""

from __future__ import annotations

import secrets
from typing import Optional

from buku_apel.utils.config import Settings, get_settings


class UnlockError(Exception):
    """Base unlock failure."""


class UnlockSecretNotConfiguredError(UnlockError):
    """Raised when UNLOCK_SECRET is empty."""


class InvalidUnlockSecretError(UnlockError):
    """Raised when the provided secret does not match."""


class UnlockService:
    """Checks the unlock secret. Guards against accidental edits, not attackers."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def _expected_secret(self) -> str:
        if not self._settings.unlock_secret:
            raise UnlockSecretNotConfiguredError(
                "UNLOCK_SECRET is not configured. Set UNLOCK_SECRET in environment variables."
            )
        return self._settings.unlock_secret

    def verify(self, provided_secret: str) -> None:
        expected = self._expected_secret()
        if not secrets.compare_digest(provided_secret.encode("utf-8"), expected.encode("utf-8")):
            raise InvalidUnlockSecretError("Password salah.")
