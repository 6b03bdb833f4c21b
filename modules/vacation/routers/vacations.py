"""
Vacation API Routers.

Public endpoints (employee submission, department list, timeline) and
manager endpoints under /manager/{department}. Manager requests carry the
department's manager token in the X-Manager-Token header, the token query
parameter or an Authorization: Bearer header.
"""

import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    Header,
    HTTPException,
    Path,
    Query,
    Request,
    status,
)
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import DBSession
from modules.vacation.core.config import VacationSettings, get_vacation_settings
from modules.vacation.models import Department, VacationStatus
from modules.vacation.schemas.vacation import (
    AlertListResponse,
    AlertOut,
    ManagerSessionResponse,
    ShiftRequest,
    TimelineResponse,
    VacationCreateRequest,
    VacationListResponse,
    VacationOut,
    VacationResponse,
    VacationUpdateRequest,
)
from modules.vacation.services.calendar import (
    ViewMode,
    add_days,
    is_valid_iso_date,
    parse_date,
)
from modules.vacation.services.clock import Clock, get_clock
from modules.vacation.services.errors import (
    VacationError,
    VacationValidationError,
)
from modules.vacation.services.manager_auth import (
    ManagerSession,
    ManagerTokens,
    authorize_update,
    ensure_in_scope,
    resolve_manager_session,
)
from modules.vacation.services.notifications import (
    VacationNotificationService,
    get_vacation_notification_service,
)
from modules.vacation.services.status import sorted_alerts
from modules.vacation.services.store import VacationStore
from modules.vacation.services.timeline import build_timeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vacations", tags=["Vacations"])
manager_router = APIRouter(prefix="/manager/{department}", tags=["Manager"])


# =============================================================================
# Helpers
# =============================================================================

def _http_error(error: VacationError) -> HTTPException:
    headers = {"WWW-Authenticate": "Bearer"} if error.status_code == 401 else None
    return HTTPException(status_code=error.status_code, detail=error.message, headers=headers)


def _parse_department(value: Optional[str]) -> Department:
    department = Department.parse(value)
    if department is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid department. Allowed: production, administration.",
        )
    return department


def _parse_request_date(value: Optional[str], field: str) -> date:
    if not is_valid_iso_date(value):
        raise VacationValidationError(
            f"Invalid {field.replace('_', ' ')}. Use YYYY-MM-DD.", field=field
        )
    return parse_date(value)


def _parse_view(anchor: Optional[str], mode: str, today: date) -> tuple[date, ViewMode]:
    try:
        view_mode = ViewMode(mode)
    except ValueError:
        raise VacationValidationError("mode must be 'month' or 'year'.", field="mode")
    anchor_date = _parse_request_date(anchor, "anchor") if anchor else today
    return anchor_date, view_mode


def _schedule_reminders(request: Request) -> None:
    """Ask the reminder scheduler for a sweep soon after a manager mutation."""
    scheduler = getattr(request.app.state, "reminder_scheduler", None)
    if scheduler is not None:
        scheduler.schedule_soon()


# =============================================================================
# Dependencies
# =============================================================================

def get_manager_tokens(request: Request) -> ManagerTokens:
    """Manager tokens resolved at startup and kept on app.state."""
    tokens = getattr(request.app.state, "manager_tokens", None)
    if tokens is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Manager access is not initialized.",
        )
    return tokens


async def get_manager_session(
    department: Annotated[str, Path(description="production or administration")],
    tokens: Annotated[ManagerTokens, Depends(get_manager_tokens)],
    x_manager_token: Annotated[str | None, Header(alias="X-Manager-Token")] = None,
    token: Annotated[str | None, Query(description="Manager token")] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> ManagerSession:
    """
    Authenticate the manager token for the path department.

    Token sources, first non-empty wins: X-Manager-Token header, token
    query parameter, Authorization: Bearer header.
    """
    path_department = _parse_department(department)

    supplied = x_manager_token or token
    if not supplied and authorization:
        scheme, _, credentials = authorization.strip().partition(" ")
        if scheme.lower() == "bearer":
            supplied = credentials.strip()

    try:
        return resolve_manager_session(tokens, path_department, supplied)
    except VacationError as e:
        logger.warning(f"Manager access denied for {path_department.value}: {e.message}")
        raise _http_error(e)


ClockDep = Annotated[Clock, Depends(get_clock)]
SettingsDep = Annotated[VacationSettings, Depends(get_vacation_settings)]
ManagerDep = Annotated[ManagerSession, Depends(get_manager_session)]


# =============================================================================
# Public Endpoints
# =============================================================================

@router.get(
    "",
    response_model=VacationListResponse,
    summary="List department vacations",
    description="Non-rejected vacations of a department, ordered by start date.",
)
async def list_vacations(
    db: DBSession,
    clock: ClockDep,
    settings: SettingsDep,
    department: Annotated[str | None, Query()] = None,
) -> VacationListResponse:
    scope = _parse_department(department)
    vacations = await VacationStore(db, clock).list_vacations(scope, include_rejected=False)
    today = clock.today()
    return VacationListResponse(
        vacations=[
            VacationOut.from_vacation(v, today, settings.signed_request_deadline_days)
            for v in vacations
        ]
    )


@router.post(
    "",
    response_model=VacationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a vacation request",
)
async def create_vacation(
    payload: VacationCreateRequest,
    background_tasks: BackgroundTasks,
    db: DBSession,
    clock: ClockDep,
    settings: SettingsDep,
    notifications: Annotated[
        VacationNotificationService, Depends(get_vacation_notification_service)
    ],
) -> VacationResponse:
    """
    Create a pending vacation request.

    A missing department defaults to production; an unknown one is rejected.
    The manager inbox is notified in the background once the record is stored.
    """
    department = (
        _parse_department(payload.department)
        if payload.department and payload.department.strip()
        else Department.PRODUCTION
    )

    try:
        start_date = _parse_request_date(payload.start_date, "start_date")
        end_date = _parse_request_date(payload.end_date, "end_date")
        vacation = await VacationStore(db, clock).create(
            employee_name=payload.employee_name,
            department=department,
            start_date=start_date,
            end_date=end_date,
        )
        await db.commit()
    except VacationError as e:
        raise _http_error(e)

    background_tasks.add_task(notifications.notify_new_request, vacation)

    return VacationResponse(
        vacation=VacationOut.from_vacation(
            vacation, clock.today(), settings.signed_request_deadline_days
        )
    )


@router.get(
    "/timeline",
    response_model=TimelineResponse,
    summary="Department timeline",
    description="Lane layout and daily overlap counts for the visible month or year.",
)
async def get_timeline(
    db: DBSession,
    clock: ClockDep,
    settings: SettingsDep,
    department: Annotated[str | None, Query()] = None,
    anchor: Annotated[str | None, Query(description="Any day of the visible period, YYYY-MM-DD")] = None,
    mode: Annotated[str, Query(description="month or year")] = ViewMode.MONTH.value,
) -> TimelineResponse:
    scope = _parse_department(department)
    today = clock.today()

    try:
        anchor_date, view_mode = _parse_view(anchor, mode, today)
    except VacationError as e:
        raise _http_error(e)

    vacations = await VacationStore(db, clock).list_vacations(scope, include_rejected=False)
    timeline = build_timeline(
        vacations, anchor_date, view_mode, today, settings.signed_request_deadline_days
    )
    return TimelineResponse.from_timeline(timeline, anchor_date)


# =============================================================================
# Manager Endpoints
# =============================================================================

@manager_router.get(
    "/session",
    response_model=ManagerSessionResponse,
    summary="Describe the manager session",
)
async def get_session(manager: ManagerDep) -> ManagerSessionResponse:
    return ManagerSessionResponse(**manager.to_dict())


@manager_router.get(
    "/vacations",
    response_model=VacationListResponse,
    summary="List vacations of the managed department",
)
async def list_manager_vacations(
    manager: ManagerDep,
    db: DBSession,
    clock: ClockDep,
    settings: SettingsDep,
    include_rejected: Annotated[bool, Query()] = False,
) -> VacationListResponse:
    vacations = await VacationStore(db, clock).list_vacations(
        manager.department, include_rejected=include_rejected
    )
    today = clock.today()
    return VacationListResponse(
        vacations=[
            VacationOut.from_vacation(v, today, settings.signed_request_deadline_days)
            for v in vacations
        ]
    )


@manager_router.get(
    "/timeline",
    response_model=TimelineResponse,
    summary="Managed department timeline",
)
async def get_manager_timeline(
    manager: ManagerDep,
    db: DBSession,
    clock: ClockDep,
    settings: SettingsDep,
    anchor: Annotated[str | None, Query()] = None,
    mode: Annotated[str, Query()] = ViewMode.MONTH.value,
    include_rejected: Annotated[bool, Query()] = False,
) -> TimelineResponse:
    today = clock.today()

    try:
        anchor_date, view_mode = _parse_view(anchor, mode, today)
    except VacationError as e:
        raise _http_error(e)

    vacations = await VacationStore(db, clock).list_vacations(
        manager.department, include_rejected=include_rejected
    )
    timeline = build_timeline(
        vacations, anchor_date, view_mode, today, settings.signed_request_deadline_days
    )
    return TimelineResponse.from_timeline(timeline, anchor_date)


@manager_router.get(
    "/alerts",
    response_model=AlertListResponse,
    summary="Missing signed-request alerts",
    description="Approved vacations starting soon without a signed paper request, most urgent first.",
)
async def list_alerts(
    manager: ManagerDep,
    db: DBSession,
    clock: ClockDep,
    settings: SettingsDep,
) -> AlertListResponse:
    today = clock.today()
    deadline = settings.signed_request_deadline_days
    vacations = await VacationStore(db, clock).list_vacations(manager.department)
    return AlertListResponse(
        alerts=[
            AlertOut.from_alert(vacation, alert, today, deadline)
            for vacation, alert in sorted_alerts(vacations, today, deadline)
        ]
    )


async def _apply_manager_update(
    request: Request,
    manager: ManagerSession,
    db: AsyncSession,
    clock: Clock,
    settings: VacationSettings,
    vacation_id: str,
    changes: dict,
) -> VacationResponse:
    store = VacationStore(db, clock)

    try:
        ensure_in_scope(manager, await store.get_by_id(vacation_id))
        authorize_update(manager, changes)
        updated = await store.update(vacation_id, changes)
        await db.commit()
    except VacationError as e:
        raise _http_error(e)

    _schedule_reminders(request)

    return VacationResponse(
        vacation=VacationOut.from_vacation(
            updated, clock.today(), settings.signed_request_deadline_days
        )
    )


@manager_router.patch(
    "/vacations/{vacation_id}",
    response_model=VacationResponse,
    summary="Edit a vacation",
    description=(
        "Partial update. Changing the department or the signed-request flag "
        "requires the administration manager token."
    ),
)
async def update_vacation(
    vacation_id: str,
    payload: VacationUpdateRequest,
    request: Request,
    manager: ManagerDep,
    db: DBSession,
    clock: ClockDep,
    settings: SettingsDep,
) -> VacationResponse:
    changes = payload.provided()

    try:
        for field in ("start_date", "end_date"):
            if field in changes:
                changes[field] = _parse_request_date(changes[field], field)
    except VacationError as e:
        raise _http_error(e)

    return await _apply_manager_update(
        request, manager, db, clock, settings, vacation_id, changes
    )


@manager_router.post(
    "/vacations/{vacation_id}/approve",
    response_model=VacationResponse,
    summary="Approve a vacation",
)
async def approve_vacation(
    vacation_id: str,
    request: Request,
    manager: ManagerDep,
    db: DBSession,
    clock: ClockDep,
    settings: SettingsDep,
) -> VacationResponse:
    return await _apply_manager_update(
        request, manager, db, clock, settings, vacation_id,
        {"status": VacationStatus.APPROVED.value},
    )


@manager_router.post(
    "/vacations/{vacation_id}/reject",
    response_model=VacationResponse,
    summary="Reject a vacation",
)
async def reject_vacation(
    vacation_id: str,
    request: Request,
    manager: ManagerDep,
    db: DBSession,
    clock: ClockDep,
    settings: SettingsDep,
) -> VacationResponse:
    return await _apply_manager_update(
        request, manager, db, clock, settings, vacation_id,
        {"status": VacationStatus.REJECTED.value},
    )


@manager_router.post(
    "/vacations/{vacation_id}/shift",
    response_model=VacationResponse,
    summary="Move a vacation",
    description="Move both dates by the same number of calendar days.",
)
async def shift_vacation(
    vacation_id: str,
    payload: ShiftRequest,
    request: Request,
    manager: ManagerDep,
    db: DBSession,
    clock: ClockDep,
    settings: SettingsDep,
) -> VacationResponse:
    store = VacationStore(db, clock)

    try:
        vacation = ensure_in_scope(manager, await store.get_by_id(vacation_id))
    except VacationError as e:
        raise _http_error(e)

    changes = {
        "start_date": add_days(vacation.start_date, payload.days),
        "end_date": add_days(vacation.end_date, payload.days),
    }
    return await _apply_manager_update(
        request, manager, db, clock, settings, vacation_id, changes
    )
