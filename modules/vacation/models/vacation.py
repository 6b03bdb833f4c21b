"""
Vacation Model.

SQLAlchemy model for vacation requests. Records are never deleted:
rejected requests stay in the table and are filtered out of default listings.
"""

from datetime import date, datetime

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from core.database.base import Base, TimestampMixin, UUIDPrimaryKey
from modules.vacation.models.enums import Department, VacationStatus


class Vacation(Base, TimestampMixin):
    """
    A single vacation request of one employee.

    Attributes:
        id: Opaque identifier (uuid4 string), assigned at creation.
        employee_name: Normalized free-text employee name.
        department: Department value (see Department enum).
        start_date: First day of leave (inclusive).
        end_date: Last day of leave (inclusive), never before start_date.
        status: pending / approved / rejected.
        signed_request_received: Paper request collected by administration.
        signed_request_received_at: When the flag was last set to true.
        signed_request_reminder_sent_at: When the (single) reminder email went out.
    """

    __tablename__ = "vacations"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_vacations_status",
        ),
        CheckConstraint("start_date <= end_date", name="ck_vacations_date_order"),
        Index("idx_vacations_dates", "start_date", "end_date"),
    )

    id: Mapped[UUIDPrimaryKey]

    employee_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    department: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=Department.PRODUCTION.value,
        index=True,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=VacationStatus.PENDING.value,
        index=True,
    )
    signed_request_received: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    signed_request_received_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    signed_request_reminder_sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Vacation(id={self.id}, employee={self.employee_name!r}, "
            f"{self.start_date}..{self.end_date}, status={self.status})>"
        )
