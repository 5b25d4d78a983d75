"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the register services, registers routers, and loads the day's
register state on startup.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from buku_apel.controllers.register_controller import router as register_router
from buku_apel.repository.state_repository import StateRepository
from buku_apel.services.auth_service import UnlockService
from buku_apel.services.import_service import RosterImportService
from buku_apel.services.register_service import RegisterService
from buku_apel.utils.config import Settings, get_settings
from buku_apel.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Every service is constructed here and handed to the routers through
    app.state, so each dependency is traceable from this function.
    """
    settings = settings or get_settings()

    # --- Repository (single JSON blob in SQLite) ---
    repository = StateRepository(settings)

    # --- Services ---
    import_service = RosterImportService(settings=settings)
    unlock_service = UnlockService(settings=settings)
    register_service = RegisterService(
        repository=repository,
        import_service=import_service,
        unlock_service=unlock_service,
        settings=settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(register_router)

    app.state.repository = repository
    app.state.register_service = register_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Order matters:
      1. The state table must exist before the stored blob is read.
      2. The imported roster is the base the stored blob is laid over.
    """
    register_service: RegisterService = app.state.register_service

    logger.info("Startup: loading roster and stored register state")
    state = register_service.initialize()

    logger.info(
        "Startup complete: %s dormitories, shift %s",
        len(state.roster),
        register_service.active_shift().value,
    )


# Module-level app object for uvicorn
app = create_app()
