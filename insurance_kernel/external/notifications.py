"""
Notification sender port.

``send(recipient_email, subject, body)`` is fire-and-forget from the
kernel's point of view: no delivery receipt, no retry contract.  Delivery
mechanics (SMTP, SMS) live outside the kernel; ``LoggingNotificationSender``
records every notice in the structured log and is the default.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from insurance_kernel.logging_config import get_logger

logger = get_logger("external.notifications")


@runtime_checkable
class NotificationSender(Protocol):
    def send(self, recipient_email: str, subject: str, body: str) -> None: ...


class LoggingNotificationSender:
    """Writes each notice to the log instead of delivering it."""

    def send(self, recipient_email: str, subject: str, body: str) -> None:
        logger.info(
            "notification_sent",
            extra={
                "recipient": recipient_email,
                "subject": subject,
                "body_length": len(body),
            },
        )
