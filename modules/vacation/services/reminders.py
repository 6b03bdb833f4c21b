"""
Signed-Request Reminder Sweep.

Finds approved vacations that start within the deadline window and still
lack a signed paper request, e-mails the manager inbox once per record and
stamps signed_request_reminder_sent_at.

Delivery is at-least-once: the e-mail is sent before the record is marked,
so a crash between the two steps can repeat a reminder but never lose one.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.database import get_session_factory
from modules.vacation.services.clock import Clock
from modules.vacation.services.notifications import VacationNotificationService
from modules.vacation.services.status import SIGNED_REQUEST_DEADLINE_DAYS, days_until_start
from modules.vacation.services.store import VacationStore

logger = logging.getLogger(__name__)


@dataclass
class ReminderSweepResult:
    candidates: int = 0
    sent: int = 0
    failed: int = 0
    skipped: bool = False


class ReminderService:
    """Runs one reminder sweep per call to run_sweep()."""

    def __init__(
        self,
        notifications: VacationNotificationService,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        clock: Optional[Clock] = None,
        deadline_days: int = SIGNED_REQUEST_DEADLINE_DAYS,
    ) -> None:
        self._notifications = notifications
        self._session_factory = session_factory
        self._clock = clock or Clock()
        self._deadline_days = deadline_days

    def _sessions(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory or get_session_factory()

    async def run_sweep(self) -> ReminderSweepResult:
        """
        Send every due reminder.

        A record whose e-mail fails stays eligible for the next sweep; the
        remaining candidates are still processed.
        """
        result = ReminderSweepResult()

        if not self._notifications.can_send:
            logger.debug("Reminder sweep skipped: e-mail notifications unavailable")
            result.skipped = True
            return result

        today = self._clock.today()
        sessions = self._sessions()

        async with sessions() as session:
            candidates = await VacationStore(session, self._clock).list_reminder_candidates(
                today, self._deadline_days
            )
        result.candidates = len(candidates)

        for vacation in candidates:
            remaining = days_until_start(vacation, today)
            try:
                delivered = await self._notifications.send_signed_request_reminder(
                    vacation, remaining
                )
            except Exception as e:
                result.failed += 1
                logger.error(f"Reminder for vacation {vacation.id} failed: {e}")
                continue

            if not delivered:
                result.failed += 1
                logger.warning(f"Reminder for vacation {vacation.id} was not sent")
                continue

            async with sessions() as session:
                await VacationStore(session, self._clock).mark_reminder_sent(
                    vacation.id, self._clock.now()
                )
                await session.commit()
            result.sent += 1

        if result.candidates:
            logger.info(
                f"Reminder sweep: {result.candidates} due, "
                f"{result.sent} sent, {result.failed} failed"
            )
        return result
