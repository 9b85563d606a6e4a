"""
Identity Service

Email one-time-code login for restaurant owners.

Per email address the flow is:

    no code ──issue_otp──▶ code pending ──verify_otp──▶ verified
                               │
                               └─ (profile incomplete) needs name + country

Only the SHA-256 digest of a code is stored. A code is single-use, expires
after ``otp_ttl_minutes`` and is discarded after ``otp_max_attempts`` wrong
guesses. A new code cannot be requested more often than once every
``otp_resend_interval_seconds``.
"""

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from digital_menu.core.config import get_settings
from digital_menu.core.exceptions import (
    ExpiredCodeError,
    InvalidCodeError,
    RateLimitedError,
    UserNotFoundError,
)
from digital_menu.models import User
from digital_menu.schemas import VerifyOutcome

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_code() -> str:
    """Six-digit numeric code, never starting with 0."""
    return str(100000 + secrets.randbelow(900000))


def hash_code(code: str) -> str:
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


@dataclass
class VerifyResult:
    outcome: VerifyOutcome
    user: User

    @property
    def success(self) -> bool:
        return self.outcome != VerifyOutcome.NEEDS_PROFILE


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def issue_otp(db: AsyncSession, email: str) -> str:
    """
    Create or refresh the login code for ``email``.

    The user row is created on first request. Returns the plaintext code
    so the caller can hand it to the delivery task; it is not kept.

    Raises:
        RateLimitedError: A code was sent too recently
    """
    settings = get_settings()
    now = utcnow()
    email = email.lower()

    user = await get_user_by_email(db, email)
    if user is None:
        user = User(email=email, name="", country="")
        db.add(user)
    elif user.otp_sent_at is not None:
        elapsed = (now - _as_utc(user.otp_sent_at)).total_seconds()
        if elapsed < settings.otp_resend_interval_seconds:
            wait = int(settings.otp_resend_interval_seconds - elapsed) + 1
            raise RateLimitedError(f"Please wait {wait} seconds before requesting a new code")

    code = generate_code()
    user.otp_hash = hash_code(code)
    user.otp_expiry = now + timedelta(minutes=settings.otp_ttl_minutes)
    user.otp_attempts = 0
    user.otp_sent_at = now
    await db.commit()

    logger.info(f"Login code issued for user {email}")
    return code


async def cancel_otp(db: AsyncSession, email: str) -> None:
    """
    Drop an issued code that could not be delivered.

    Also clears the resend clock so the owner can ask again right away.
    """
    user = await get_user_by_email(db, email)
    if user is None:
        return
    _clear_code(user)
    user.otp_sent_at = None
    await db.commit()
    logger.info(f"Undelivered login code for {user.email} withdrawn")


def _clear_code(user: User) -> None:
    user.otp_hash = None
    user.otp_expiry = None
    user.otp_attempts = 0


async def verify_otp(
    db: AsyncSession,
    email: str,
    code: str,
    name: Optional[str] = None,
    country: Optional[str] = None,
) -> VerifyResult:
    """
    Check a login code and, when needed, complete the owner profile.

    Checks run in a fixed order: unknown email, wrong code, expired code.
    A wrong code is reported as such whether or not the stored code has
    also expired.

    Returns:
        VerifyResult with outcome ``existing_user`` (profile already on
        file), ``profile_completed`` (name and country stored now) or
        ``needs_profile`` (code is correct but the caller must resend it
        together with name and country; the code stays valid)

    Raises:
        UserNotFoundError: No code was ever requested for this email
        InvalidCodeError: Code does not match, or no code is outstanding
        ExpiredCodeError: Code matched but is past its expiry
    """
    settings = get_settings()
    user = await get_user_by_email(db, email)
    if user is None:
        raise UserNotFoundError()

    if not user.otp_hash or not hmac.compare_digest(user.otp_hash, hash_code(code)):
        if user.otp_hash:
            user.otp_attempts = (user.otp_attempts or 0) + 1
            if user.otp_attempts >= settings.otp_max_attempts:
                logger.warning(f"Too many wrong codes for {user.email}, code discarded")
                _clear_code(user)
                await db.commit()
                raise InvalidCodeError("Invalid OTP. Too many attempts, request a new code")
            await db.commit()
        raise InvalidCodeError()

    if user.otp_expiry is None or _as_utc(user.otp_expiry) < utcnow():
        raise ExpiredCodeError()

    if user.has_profile:
        user.is_verified = True
        _clear_code(user)
        await db.commit()
        logger.info(f"Existing user {user.email} verified")
        return VerifyResult(VerifyOutcome.EXISTING_USER, user)

    name = (name or "").strip()
    country = (country or "").strip()
    if not name or not country:
        return VerifyResult(VerifyOutcome.NEEDS_PROFILE, user)

    user.name = name
    user.country = country
    user.is_verified = True
    _clear_code(user)
    await db.commit()
    logger.info(f"New user {user.email} completed profile")
    return VerifyResult(VerifyOutcome.PROFILE_COMPLETED, user)
