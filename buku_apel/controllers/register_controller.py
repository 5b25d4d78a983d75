"""HTTP controller layer for the roll-call register."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from buku_apel.controllers.dependencies import get_register_service
from buku_apel.domain.models import Category, ShiftGridRow
from buku_apel.services.auth_service import InvalidUnlockSecretError, UnlockError
from buku_apel.services.register_service import (
    RegisterError,
    RegisterService,
    RegisterValidationError,
    ReportLockedError,
    RoomNotFoundError,
    ShiftLockedError,
)
from buku_apel.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["register"])


class RoomRef(BaseModel):
    dormitory: str = Field(min_length=1)
    room: str = Field(min_length=1)


class AddOccupantRequest(RoomRef):
    name: str


class RenameOccupantRequest(RoomRef):
    old_name: str = Field(min_length=1)
    new_name: str


class RemoveOccupantRequest(RoomRef):
    name: str = Field(min_length=1)


class MoveOccupantRequest(RoomRef):
    name: str = Field(min_length=1)
    target_key: str = ""


class GridUpdateRequest(RoomRef):
    field: str
    value: str = ""

    @field_validator("field")
    @classmethod
    def validate_field(cls, value: str) -> str:
        if value not in ShiftGridRow.field_names():
            raise ValueError(f"field must be one of {', '.join(ShiftGridRow.field_names())}")
        return value


class ReportFieldsRequest(BaseModel):
    officer_name: Optional[str] = None
    activity_notes: Optional[str] = None
    day_team: Optional[str] = None
    night_team: Optional[str] = None
    inside_count: Optional[str] = None
    outside_count: Optional[str] = None

    @field_validator("inside_count", "outside_count")
    @classmethod
    def validate_count(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return value
        if not value.strip().isdigit():
            raise ValueError("counts must be non-negative whole numbers")
        return value.strip()


class UnlockRequest(BaseModel):
    secret: str


class RoomResponse(BaseModel):
    name: str
    names: list[str]


class DormitoryResponse(BaseModel):
    name: str
    rooms: list[RoomResponse]


class SavedShiftsResponse(BaseModel):
    morning: bool
    noon: bool
    night: bool


class StateResponse(BaseModel):
    roster: list[DormitoryResponse]
    grid: dict[str, dict[str, str]]
    officer_name: str
    activity_notes: str
    day_team: str
    night_team: str
    inside_count: str
    outside_count: str
    saved_shifts: SavedShiftsResponse
    report_locked: bool
    summary_text: str
    current_shift: str
    locked_fields: list[str]


class TotalsResponse(BaseModel):
    dormitories: dict[str, dict[str, int]]
    overall: dict[str, int]
    categories: dict[str, int]
    movements: dict[str, int]


class ReportResponse(BaseModel):
    summary_text: str
    report_locked: bool


class CategoriesResponse(BaseModel):
    categories: list[str]


def _to_http_error(exc: RegisterError) -> HTTPException:
    if isinstance(exc, RoomNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (ShiftLockedError, ReportLockedError)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, RegisterValidationError):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(exc))


def _internal_error(action: str) -> HTTPException:
    logger.exception("Unexpected %s failure", action)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


def _state_response(service: RegisterService) -> StateResponse:
    return StateResponse(**service.snapshot())


@router.get("/state", response_model=StateResponse, status_code=status.HTTP_200_OK)
async def get_state(
    service: RegisterService = Depends(get_register_service),
) -> StateResponse:
    try:
        return _state_response(service)
    except Exception as exc:
        raise _internal_error("load state") from exc


@router.get("/totals", response_model=TotalsResponse, status_code=status.HTTP_200_OK)
async def get_totals(
    service: RegisterService = Depends(get_register_service),
) -> TotalsResponse:
    try:
        return TotalsResponse(**service.totals().to_dict())
    except Exception as exc:
        raise _internal_error("compute totals") from exc


@router.get("/categories", response_model=CategoriesResponse, status_code=status.HTTP_200_OK)
async def get_categories() -> CategoriesResponse:
    return CategoriesResponse(categories=[item.value for item in Category])


@router.post("/occupants/add", response_model=StateResponse, status_code=status.HTTP_200_OK)
async def add_occupant(
    payload: AddOccupantRequest,
    service: RegisterService = Depends(get_register_service),
) -> StateResponse:
    try:
        service.add_occupant(dormitory=payload.dormitory, room=payload.room, name=payload.name)
        return _state_response(service)
    except RegisterError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:
        raise _internal_error("add occupant") from exc


@router.post("/occupants/rename", response_model=StateResponse, status_code=status.HTTP_200_OK)
async def rename_occupant(
    payload: RenameOccupantRequest,
    service: RegisterService = Depends(get_register_service),
) -> StateResponse:
    try:
        service.rename_occupant(
            dormitory=payload.dormitory,
            room=payload.room,
            old_name=payload.old_name,
            new_name=payload.new_name,
        )
        return _state_response(service)
    except RegisterError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:
        raise _internal_error("rename occupant") from exc


@router.post("/occupants/remove", response_model=StateResponse, status_code=status.HTTP_200_OK)
async def remove_occupant(
    payload: RemoveOccupantRequest,
    service: RegisterService = Depends(get_register_service),
) -> StateResponse:
    try:
        service.remove_occupant(dormitory=payload.dormitory, room=payload.room, name=payload.name)
        return _state_response(service)
    except RegisterError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:
        raise _internal_error("remove occupant") from exc


@router.post("/occupants/move", response_model=StateResponse, status_code=status.HTTP_200_OK)
async def move_occupant(
    payload: MoveOccupantRequest,
    service: RegisterService = Depends(get_register_service),
) -> StateResponse:
    try:
        service.move_occupant(
            dormitory=payload.dormitory,
            room=payload.room,
            name=payload.name,
            target_key=payload.target_key,
        )
        return _state_response(service)
    except RegisterError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:
        raise _internal_error("move occupant") from exc


@router.put("/grid", response_model=StateResponse, status_code=status.HTTP_200_OK)
async def update_grid(
    payload: GridUpdateRequest,
    service: RegisterService = Depends(get_register_service),
) -> StateResponse:
    try:
        service.update_grid(
            dormitory=payload.dormitory,
            room=payload.room,
            field=payload.field,
            value=payload.value,
        )
        return _state_response(service)
    except RegisterError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:
        raise _internal_error("update grid") from exc


@router.put("/report_fields", response_model=StateResponse, status_code=status.HTTP_200_OK)
async def update_report_fields(
    payload: ReportFieldsRequest,
    service: RegisterService = Depends(get_register_service),
) -> StateResponse:
    try:
        service.update_report_fields(**payload.model_dump(exclude_unset=True))
        return _state_response(service)
    except RegisterError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:
        raise _internal_error("update report fields") from exc


@router.post("/report/generate", response_model=ReportResponse, status_code=status.HTTP_200_OK)
async def generate_report(
    service: RegisterService = Depends(get_register_service),
) -> ReportResponse:
    try:
        text = service.render_report()
        return ReportResponse(summary_text=text, report_locked=service.state.report_locked)
    except Exception as exc:
        raise _internal_error("generate report") from exc


@router.post("/report/submit", response_model=ReportResponse, status_code=status.HTTP_200_OK)
async def submit_report(
    service: RegisterService = Depends(get_register_service),
) -> ReportResponse:
    try:
        state = service.submit_report()
        return ReportResponse(summary_text=state.summary_text, report_locked=state.report_locked)
    except RegisterError as exc:
        raise _to_http_error(exc) from exc
    except Exception as exc:
        raise _internal_error("submit report") from exc


@router.post("/unlock", response_model=StateResponse, status_code=status.HTTP_200_OK)
async def unlock(
    payload: UnlockRequest,
    service: RegisterService = Depends(get_register_service),
) -> StateResponse:
    try:
        service.unlock(payload.secret)
        return _state_response(service)
    except InvalidUnlockSecretError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
    except UnlockError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    except Exception as exc:
        raise _internal_error("unlock report") from exc
