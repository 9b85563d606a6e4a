"""
Mock Notification Service

Simulates email sending for development.
No actual messages are sent - they are logged and kept in an
in-memory outbox so the code can be read back locally.

Version: 1.0.0
"""

import random
import uuid
import logging
from dataclasses import dataclass
from typing import Optional

from digital_menu.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
)

logger = logging.getLogger(__name__)


@dataclass
class SentMessage:
    to_email: str
    subject: str
    body_text: Optional[str]
    code: Optional[str] = None


class MockNotificationService(BaseNotificationService):
    """Mock notification service for development."""

    def __init__(self, failure_rate: float = 0.0):
        self.failure_rate = failure_rate
        self.outbox: list[SentMessage] = []
        logger.info(f"MockNotificationService initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
        code: Optional[str] = None,
    ) -> NotificationResult:
        """Simulate sending email."""
        if self._should_fail():
            logger.warning(f"Mock email failed (simulated) to {to_email}")
            return NotificationResult(
                success=False,
                error_message="Simulated email failure",
                provider="mock"
            )

        message_id = f"email_mock_{uuid.uuid4().hex[:12]}"
        self.outbox.append(SentMessage(to_email, subject, body_text, code))
        logger.info(f"Mock email sent to {to_email}: {subject} (ID: {message_id})")

        return NotificationResult(
            success=True,
            message_id=message_id,
            provider="mock"
        )

    def send_otp(
        self,
        to_email: str,
        code: str,
        ttl_minutes: int,
    ) -> NotificationResult:
        # Development stand-in for a real mailbox
        logger.info(f"Mock OTP for {to_email}: {code} (valid {ttl_minutes} min)")
        return self.send_email(
            to_email=to_email,
            subject="Your login code",
            body_html=f"<h1>{code}</h1>",
            body_text=f"Your Digital Menu login code is {code}.",
            code=code,
        )

    def last_code_for(self, email: str) -> Optional[str]:
        """Most recent code sent to ``email``, if any."""
        for message in reversed(self.outbox):
            if message.to_email == email and message.code:
                return message.code
        return None

    def health_check(self) -> bool:
        """Mock always returns healthy."""
        return True
