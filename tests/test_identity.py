from datetime import timedelta

import pytest

from digital_menu.core.exceptions import (
    ExpiredCodeError,
    InvalidCodeError,
    RateLimitedError,
    UserNotFoundError,
)
from digital_menu.schemas import VerifyOutcome
from digital_menu.services import identity
from digital_menu.services.notifications import get_notification_service


def travel(monkeypatch, **delta):
    """Move the identity service clock forward."""
    later = identity.utcnow() + timedelta(**delta)
    monkeypatch.setattr(identity, "utcnow", lambda: later)


def wrong(code: str) -> str:
    return "000000" if code != "000000" else "111111"


# =============================================================================
# SERVICE
# =============================================================================

async def test_issue_creates_user_and_stores_only_digest(db):
    code = await identity.issue_otp(db, "New.Owner@Example.com")

    user = await identity.get_user_by_email(db, "new.owner@example.com")
    assert user is not None
    assert len(code) == 6 and code.isdigit()
    assert user.otp_hash == identity.hash_code(code)
    assert code not in user.otp_hash
    assert user.otp_attempts == 0


async def test_new_user_needs_profile_then_completes(db):
    code = await identity.issue_otp(db, "asha@example.com")

    result = await identity.verify_otp(db, "asha@example.com", code)
    assert result.outcome == VerifyOutcome.NEEDS_PROFILE
    assert not result.success

    result = await identity.verify_otp(
        db, "asha@example.com", code, name="Asha", country="India"
    )
    assert result.outcome == VerifyOutcome.PROFILE_COMPLETED
    assert result.user.name == "Asha"
    assert result.user.country == "India"
    assert result.user.is_verified


async def test_code_is_single_use(db):
    code = await identity.issue_otp(db, "asha@example.com")
    await identity.verify_otp(db, "asha@example.com", code, name="Asha", country="India")

    with pytest.raises(InvalidCodeError):
        await identity.verify_otp(db, "asha@example.com", code)


async def test_existing_user_verifies_without_profile(db, owner):
    code = await identity.issue_otp(db, owner.email)

    result = await identity.verify_otp(db, owner.email, code)

    assert result.outcome == VerifyOutcome.EXISTING_USER
    assert result.user.id == owner.id


async def test_unknown_email(db):
    with pytest.raises(UserNotFoundError):
        await identity.verify_otp(db, "nobody@example.com", "123456")


async def test_expired_code(db, monkeypatch):
    code = await identity.issue_otp(db, "asha@example.com")
    travel(monkeypatch, minutes=6)

    with pytest.raises(ExpiredCodeError):
        await identity.verify_otp(db, "asha@example.com", code)


async def test_wrong_code_reported_even_when_expired(db, monkeypatch):
    code = await identity.issue_otp(db, "asha@example.com")
    travel(monkeypatch, minutes=6)

    with pytest.raises(InvalidCodeError):
        await identity.verify_otp(db, "asha@example.com", wrong(code))


async def test_code_discarded_after_max_attempts(db):
    code = await identity.issue_otp(db, "asha@example.com")

    for _ in range(5):
        with pytest.raises(InvalidCodeError):
            await identity.verify_otp(db, "asha@example.com", wrong(code))

    with pytest.raises(InvalidCodeError):
        await identity.verify_otp(db, "asha@example.com", code)


async def test_resend_is_throttled(db, monkeypatch):
    await identity.issue_otp(db, "asha@example.com")

    with pytest.raises(RateLimitedError):
        await identity.issue_otp(db, "asha@example.com")

    travel(monkeypatch, seconds=61)
    second = await identity.issue_otp(db, "asha@example.com")
    result = await identity.verify_otp(db, "asha@example.com", second)
    assert result.outcome == VerifyOutcome.NEEDS_PROFILE


async def test_blank_profile_fields_do_not_complete_profile(db):
    code = await identity.issue_otp(db, "asha@example.com")

    result = await identity.verify_otp(db, "asha@example.com", code, name="  ", country="India")
    assert result.outcome == VerifyOutcome.NEEDS_PROFILE

    result = await identity.verify_otp(
        db, "asha@example.com", code, name=" Asha ", country=" India "
    )
    assert result.outcome == VerifyOutcome.PROFILE_COMPLETED
    assert result.user.name == "Asha"
    assert result.user.country == "India"


async def test_cancelled_code_is_gone_and_resend_allowed(db):
    code = await identity.issue_otp(db, "asha@example.com")

    await identity.cancel_otp(db, "asha@example.com")

    with pytest.raises(InvalidCodeError):
        await identity.verify_otp(db, "asha@example.com", code)
    assert await identity.issue_otp(db, "asha@example.com")


async def test_new_code_replaces_old_one(db, monkeypatch):
    first = await identity.issue_otp(db, "asha@example.com")
    travel(monkeypatch, seconds=61)
    second = await identity.issue_otp(db, "asha@example.com")

    if first != second:
        with pytest.raises(InvalidCodeError):
            await identity.verify_otp(db, "asha@example.com", first)
    result = await identity.verify_otp(db, "asha@example.com", second)
    assert result.success is False


# =============================================================================
# HTTP
# =============================================================================

async def test_login_flow_over_http(client):
    response = await client.post("/auth/otp/send", json={"email": "chef@example.com"})
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "OTP sent"}

    code = get_notification_service().last_code_for("chef@example.com")
    assert code is not None

    response = await client.post(
        "/auth/otp/verify", json={"email": "chef@example.com", "otp": code}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["need_profile"] is True

    response = await client.post(
        "/auth/otp/verify",
        json={"email": "chef@example.com", "otp": code, "name": "Ravi", "country": "India"},
    )
    body = response.json()
    assert body["success"] is True
    assert body["existing_user"] is False
    assert body["user"]["name"] == "Ravi"


async def test_verify_errors_over_http(client):
    response = await client.post(
        "/auth/otp/verify", json={"email": "ghost@example.com", "otp": "123456"}
    )
    assert response.status_code == 404
    assert response.json()["error"] == "user_not_found"

    await client.post("/auth/otp/send", json={"email": "chef@example.com"})
    code = get_notification_service().last_code_for("chef@example.com")

    response = await client.post(
        "/auth/otp/verify", json={"email": "chef@example.com", "otp": wrong(code)}
    )
    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "invalid_code",
        "detail": "Invalid OTP",
    }


async def test_resend_too_soon_over_http(client):
    await client.post("/auth/otp/send", json={"email": "chef@example.com"})
    response = await client.post("/auth/otp/send", json={"email": "chef@example.com"})

    assert response.status_code == 429
    assert response.json()["error"] == "rate_limited"


async def test_bad_email_rejected(client):
    response = await client.post("/auth/otp/send", json={"email": "not-an-email"})
    assert response.status_code == 422
    assert response.json()["success"] is False


async def test_failed_delivery_can_be_retried_at_once(client):
    mailer = get_notification_service()
    mailer.failure_rate = 1.0

    response = await client.post("/auth/otp/send", json={"email": "chef@example.com"})
    assert response.status_code == 502
    assert response.json()["error"] == "upstream_error"
    assert mailer.last_code_for("chef@example.com") is None

    mailer.failure_rate = 0.0
    response = await client.post("/auth/otp/send", json={"email": "chef@example.com"})
    assert response.status_code == 200
    assert mailer.last_code_for("chef@example.com") is not None
