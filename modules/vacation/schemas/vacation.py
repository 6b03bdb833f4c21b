"""
Vacation Schemas.

Pydantic models for vacation request/response validation. Request bodies
accept the camelCase names used by the first web client as aliases.
Date fields arrive as strings and are checked by the router so that a
malformed date answers 400 like every other domain rule.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from modules.vacation.services.status import SignedRequestAlert, StatusView, classify
from modules.vacation.services.timeline import Timeline


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# =============================================================================
# Requests
# =============================================================================

class VacationCreateRequest(BaseSchema):
    """Employee submission of a new vacation request."""

    employee_name: str = Field(
        ...,
        description="Employee full name",
        validation_alias=AliasChoices("employee_name", "employeeName"),
    )
    department: Optional[str] = Field(
        None, description="production or administration (defaults to production)"
    )
    start_date: str = Field(
        ...,
        description="First day of leave, YYYY-MM-DD",
        validation_alias=AliasChoices("start_date", "startDate"),
    )
    end_date: str = Field(
        ...,
        description="Last day of leave, YYYY-MM-DD",
        validation_alias=AliasChoices("end_date", "endDate"),
    )


class VacationUpdateRequest(BaseSchema):
    """
    Manager partial update. Only the fields present in the body change;
    an explicit null is rejected by the domain validation.
    """

    employee_name: Optional[str] = Field(
        None, validation_alias=AliasChoices("employee_name", "employeeName")
    )
    department: Optional[str] = None
    start_date: Optional[str] = Field(
        None, validation_alias=AliasChoices("start_date", "startDate")
    )
    end_date: Optional[str] = Field(
        None, validation_alias=AliasChoices("end_date", "endDate")
    )
    status: Optional[str] = None
    signed_request_received: Optional[bool] = Field(
        None,
        validation_alias=AliasChoices("signed_request_received", "signedRequestReceived"),
    )

    def provided(self) -> dict[str, Any]:
        """Fields explicitly present in the request body."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class ShiftRequest(BaseModel):
    """Move a vacation by a number of calendar days (negative moves earlier)."""

    days: int = Field(..., ge=-3660, le=3660, description="Calendar days to move both dates")


# =============================================================================
# Responses
# =============================================================================

class StatusViewOut(BaseModel):
    key: str
    label: str

    @classmethod
    def from_view(cls, view: StatusView) -> "StatusViewOut":
        return cls(key=view.key, label=view.label)


class VacationOut(BaseSchema):
    """Stored vacation plus its display status for today."""

    id: str
    employee_name: str
    department: str
    start_date: date
    end_date: date
    status: str
    signed_request_received: bool
    signed_request_received_at: Optional[datetime] = None
    signed_request_reminder_sent_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    display_status: Optional[StatusViewOut] = None

    @classmethod
    def from_vacation(cls, vacation: Any, today: date, deadline_days: int) -> "VacationOut":
        out = cls.model_validate(vacation)
        out.display_status = StatusViewOut.from_view(classify(vacation, today, deadline_days))
        return out


class VacationResponse(BaseModel):
    vacation: VacationOut


class VacationListResponse(BaseModel):
    vacations: list[VacationOut]


class ManagerSessionResponse(BaseModel):
    ok: bool = True
    department: str
    manager_department: str
    manager_role: str
    can_manage_all_departments: bool
    can_edit_signed_request: bool


class AlertOut(BaseModel):
    key: str
    label: str
    days_until_start: int
    vacation: VacationOut

    @classmethod
    def from_alert(
        cls,
        vacation: Any,
        alert: SignedRequestAlert,
        today: date,
        deadline_days: int,
    ) -> "AlertOut":
        return cls(
            key=alert.key,
            label=alert.label,
            days_until_start=alert.days_until_start,
            vacation=VacationOut.from_vacation(vacation, today, deadline_days),
        )


class AlertListResponse(BaseModel):
    alerts: list[AlertOut]


class TimelineBarOut(BaseModel):
    vacation_id: str
    lane: int
    offset_days: int
    span_days: int
    start_date: date
    end_date: date
    status: str
    display_status: StatusViewOut


class TimelineRowOut(BaseModel):
    employee_name: str
    lane_count: int
    bars: list[TimelineBarOut]


class TimelineDayOut(BaseModel):
    day: date
    is_weekend: bool
    is_holiday: bool
    is_month_start: bool
    overlap: int


class TimelineResponse(BaseModel):
    mode: str
    anchor: date
    range_start: date
    range_end: date
    max_overlap: int
    rows: list[TimelineRowOut]
    days: list[TimelineDayOut]

    @classmethod
    def from_timeline(cls, timeline: Timeline, anchor: date) -> "TimelineResponse":
        return cls(
            mode=timeline.mode.value,
            anchor=anchor,
            range_start=timeline.range_start,
            range_end=timeline.range_end,
            max_overlap=timeline.max_overlap,
            rows=[
                TimelineRowOut(
                    employee_name=row.employee_name,
                    lane_count=row.lane_count,
                    bars=[
                        TimelineBarOut(
                            vacation_id=bar.vacation.id,
                            lane=bar.lane,
                            offset_days=bar.offset_days,
                            span_days=bar.span_days,
                            start_date=bar.vacation.start_date,
                            end_date=bar.vacation.end_date,
                            status=bar.vacation.status,
                            display_status=StatusViewOut.from_view(bar.status),
                        )
                        for bar in row.bars
                    ],
                )
                for row in timeline.rows
            ],
            days=[
                TimelineDayOut(
                    day=day.day,
                    is_weekend=day.is_weekend,
                    is_holiday=day.is_holiday,
                    is_month_start=day.is_month_start,
                    overlap=day.overlap,
                )
                for day in timeline.days
            ],
        )
