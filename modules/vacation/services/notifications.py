"""
Vacation Notification Service.

Builds the e-mails sent to the manager inbox and hands them to the core
EmailService. Sending requires the transport to be configured and a
manager recipient (MANAGER_NOTIFICATION_EMAIL) to be set.
"""

import logging
from typing import Optional

from core.services.email import EmailSendError, EmailService, get_email_service
from modules.vacation.core.config import VacationSettings, get_vacation_settings
from modules.vacation.models import Department, Vacation

logger = logging.getLogger(__name__)


def _department_label(value: str) -> str:
    department = Department.parse(value)
    return department.label if department else value


class VacationNotificationService:
    """Manager-facing e-mails about vacation requests."""

    def __init__(
        self,
        email_service: Optional[EmailService] = None,
        settings: Optional[VacationSettings] = None,
    ) -> None:
        self._email = email_service or get_email_service()
        self._settings = settings or get_vacation_settings()

    @property
    def recipient(self) -> str:
        return self._settings.manager_notification_email.strip()

    @property
    def can_send(self) -> bool:
        """Transport configured and enabled, and a recipient is known."""
        return self._email.can_send and bool(self.recipient)

    def _manager_link(self, vacation: Vacation) -> str:
        base_url = self._settings.frontend_url.rstrip("/")
        if not base_url:
            return ""
        return f"{base_url}/manager/{vacation.department}"

    async def send_signed_request_reminder(
        self,
        vacation: Vacation,
        days_until_start: int,
    ) -> bool:
        """
        Remind the manager that a signed paper request is still missing.

        Returns:
            bool: True if the e-mail was handed to the SMTP server.

        Raises:
            EmailSendError: SMTP delivery failed.
        """
        subject = f"Signed vacation request missing: {vacation.employee_name}"
        lines = [
            "A signed paper vacation request has not been received.",
            "",
            f"Employee: {vacation.employee_name}",
            f"Department: {_department_label(vacation.department)}",
            f"Leave: {vacation.start_date.isoformat()} - {vacation.end_date.isoformat()}",
            f"Days until start: {days_until_start}",
        ]
        link = self._manager_link(vacation)
        if link:
            lines += ["", f"Manager view: {link}"]

        return await self._email.send_async(
            to_email=self.recipient,
            subject=subject,
            text_content="\n".join(lines),
        )

    async def notify_new_request(self, vacation: Vacation) -> bool:
        """
        Tell the manager inbox about a newly submitted request.

        Delivery failures are logged and reported as False; the request
        itself is already stored.
        """
        if not self.can_send:
            logger.debug("New-request notification skipped: e-mail not configured")
            return False

        subject = f"New vacation request: {vacation.employee_name}"
        text = "\n".join([
            "A new vacation request is awaiting approval.",
            "",
            f"Employee: {vacation.employee_name}",
            f"Department: {_department_label(vacation.department)}",
            f"Leave: {vacation.start_date.isoformat()} - {vacation.end_date.isoformat()}",
        ])

        try:
            return await self._email.send_async(
                to_email=self.recipient,
                subject=subject,
                text_content=text,
            )
        except EmailSendError as e:
            logger.error(f"New-request notification for {vacation.id} failed: {e}")
            return False


def get_vacation_notification_service() -> VacationNotificationService:
    """FastAPI dependency returning a notification service over the shared EmailService."""
    return VacationNotificationService()
