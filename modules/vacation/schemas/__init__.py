"""
Vacation Module Schemas.

Pydantic models for request/response validation.
"""

from modules.vacation.schemas.vacation import (
    AlertListResponse,
    AlertOut,
    ManagerSessionResponse,
    ShiftRequest,
    StatusViewOut,
    TimelineBarOut,
    TimelineDayOut,
    TimelineResponse,
    TimelineRowOut,
    VacationCreateRequest,
    VacationListResponse,
    VacationOut,
    VacationResponse,
    VacationUpdateRequest,
)

__all__ = [
    "AlertListResponse",
    "AlertOut",
    "ManagerSessionResponse",
    "ShiftRequest",
    "StatusViewOut",
    "TimelineBarOut",
    "TimelineDayOut",
    "TimelineResponse",
    "TimelineRowOut",
    "VacationCreateRequest",
    "VacationListResponse",
    "VacationOut",
    "VacationResponse",
    "VacationUpdateRequest",
]
