#!/usr/bin/env python3
"""
Send Test Email Script.

Sends one e-mail through the configured SMTP transport and prints
mail_sent=true|false.

Usage:
    python scripts/send_test_email.py [--to address] [--subject text] [--body text]
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.services.email import EmailSendError, EmailService
from modules.vacation.core.config import get_vacation_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "TEST: Vacation tracker e-mail"
DEFAULT_BODY = "If you received this message, e-mail delivery works."


async def send_test_email(to_email: str, subject: str, body: str) -> bool:
    """
    Send a single test e-mail.

    Returns:
        bool: True if the SMTP server accepted the message.
    """
    email_service = EmailService()
    if not email_service.can_send:
        logger.warning("SMTP is not configured or notifications are disabled")
    return await email_service.send_async(
        to_email=to_email,
        subject=subject,
        text_content=body,
    )


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Send a test e-mail with the configured SMTP settings"
    )
    parser.add_argument(
        "--to",
        default=None,
        help="Recipient (defaults to MANAGER_NOTIFICATION_EMAIL)"
    )
    parser.add_argument(
        "--subject",
        default=os.getenv("TEST_EMAIL_SUBJECT", DEFAULT_SUBJECT),
        help="Subject line"
    )
    parser.add_argument(
        "--body",
        default=os.getenv("TEST_EMAIL_BODY", DEFAULT_BODY),
        help="Plain-text body"
    )
    args = parser.parse_args()

    to_email = args.to or get_vacation_settings().manager_notification_email

    try:
        sent = asyncio.run(send_test_email(to_email, args.subject, args.body))
    except EmailSendError as e:
        print(f"mail_error={e}", file=sys.stderr)
        sys.exit(1)

    print(f"mail_sent={'true' if sent else 'false'}")


if __name__ == "__main__":
    main()
