"""
Auth Endpoints

Email one-time-code login:
    - POST /auth/otp/send: Issue a code and queue its delivery
    - POST /auth/otp/verify: Check a code, completing the profile if needed
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from digital_menu.core.exceptions import UpstreamError
from digital_menu.database import get_db
from digital_menu.schemas import (
    ErrorResponse,
    SendOtpRequest,
    SendOtpResponse,
    UserResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
    VerifyOutcome,
)
from digital_menu.services import identity
from digital_menu.tasks import send_otp_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/otp/send",
    response_model=SendOtpResponse,
    responses={429: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    summary="Send Login Code",
)
async def send_otp(
    payload: SendOtpRequest,
    db: AsyncSession = Depends(get_db),
) -> SendOtpResponse:
    """
    Create a login code for the email and hand it to the mail worker.

    If the code cannot be queued (or, with inline tasks, delivered) it is
    withdrawn and the owner may ask again without waiting.
    """
    email = payload.email.lower()
    code = await identity.issue_otp(db, email)
    try:
        send_otp_email.delay(email, code)
    except Exception as e:
        logger.error(f"Login code for {email} not sent: {type(e).__name__}: {e}")
        await identity.cancel_otp(db, email)
        raise UpstreamError("Could not send login code, please try again") from e
    return SendOtpResponse(success=True, message="OTP sent")


@router.post(
    "/otp/verify",
    response_model=VerifyOtpResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Verify Login Code",
)
async def verify_otp(
    payload: VerifyOtpRequest,
    db: AsyncSession = Depends(get_db),
) -> VerifyOtpResponse:
    """
    Verify a login code.

    Returning owners get ``existing_user: true``. New owners first get
    ``need_profile: true`` and resend the same code with ``name`` and
    ``country``.
    """
    result = await identity.verify_otp(
        db,
        email=payload.email,
        code=payload.otp,
        name=payload.name,
        country=payload.country,
    )

    if result.outcome == VerifyOutcome.NEEDS_PROFILE:
        return VerifyOtpResponse(
            success=False,
            need_profile=True,
            message="Profile incomplete",
        )

    return VerifyOtpResponse(
        success=True,
        existing_user=result.outcome == VerifyOutcome.EXISTING_USER,
        message="Verified",
        user=UserResponse.model_validate(result.user),
    )
