"""
Notification Service Abstract Base Class

Defines the interface for delivering login codes by e-mail.
Supports both Mock (development) and Real (production) implementations.

Methods are synchronous: they are called from the Celery worker, which
owns retries, never from the request path.

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class NotificationResult:
    """Result from sending a notification."""
    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    provider: str = "unknown"


class BaseNotificationService(ABC):
    """Abstract base class for notification services."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> NotificationResult:
        """Send an email."""
        pass

    def send_otp(
        self,
        to_email: str,
        code: str,
        ttl_minutes: int,
    ) -> NotificationResult:
        """Send a login code."""
        text = (
            f"Your Digital Menu login code is {code}.\n"
            f"It expires in {ttl_minutes} minutes. "
            f"If you did not request it, ignore this email."
        )
        html = (
            f"<p>Your Digital Menu login code is</p>"
            f"<h1 style=\"letter-spacing: 4px;\">{code}</h1>"
            f"<p>It expires in {ttl_minutes} minutes. "
            f"If you did not request it, ignore this email.</p>"
        )
        return self.send_email(
            to_email=to_email,
            subject="Your login code",
            body_html=html,
            body_text=text,
        )

    @abstractmethod
    def health_check(self) -> bool:
        """Check service connectivity."""
        pass
