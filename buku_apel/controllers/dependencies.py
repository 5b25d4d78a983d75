"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from buku_apel.services.register_service import RegisterService


def get_register_service(request: Request) -> RegisterService:
    service = getattr(request.app.state, "register_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Register service is not initialized",
        )
    return service
