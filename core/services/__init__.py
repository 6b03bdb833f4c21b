"""
Core Services Package.

Provides framework-level services used by all modules.
"""

from core.services.email import (
    EmailService,
    EmailSendError,
    EmailConfig,
    get_email_service,
    reset_email_service,
)

__all__ = [
    # Email
    "EmailService",
    "EmailSendError",
    "EmailConfig",
    "get_email_service",
    "reset_email_service",
]
