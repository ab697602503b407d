"""Tests for email verification, code re-issue and password reset."""
from datetime import timedelta

import pytest

from todo_api.core.auth import code_generator
from todo_api.core.exceptions import InvalidOrExpiredCodeError
from todo_api.schemas.auth import ResetPasswordRequest
from todo_api.services.auth_flow import AuthFlowController

from conftest import USER_PASSWORD, FakeEmailSender, find_user, make_user

VERIFY_URL = "/api/user/verify-email"
RESEND_URL = "/api/user/resend-verification"
FORGOT_URL = "/api/user/forgot-password"
RESET_URL = "/api/user/reset-password"
SIGNIN_URL = "/api/user/signin"


@pytest.fixture
async def pending_user(async_session, now):
    return await make_user(
        async_session,
        "pending@example.com",
        verified=False,
        code="a1b2c3",
        expires=now + timedelta(minutes=10),
    )


async def test_verify_email_success(client, async_session, pending_user):
    """Test email verification."""
    response = await client.post(VERIFY_URL, json={"email": pending_user.email, "code": "a1b2c3"})

    assert response.status_code == 200
    assert response.json() == {"message": "Email verified successfully"}

    user = await find_user(async_session, pending_user.email)
    assert user.verified is True
    assert user.verification_code is None
    assert user.verification_expires is None

    signin = await client.post(SIGNIN_URL, json={"email": user.email, "password": USER_PASSWORD})
    assert signin.status_code == 200


async def test_verify_email_wrong_code(client, async_session, pending_user):
    """Test email verification with a wrong code."""
    response = await client.post(VERIFY_URL, json={"email": pending_user.email, "code": "ffffff"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid or expired verification code"
    assert (await find_user(async_session, pending_user.email)).verified is False


async def test_verify_email_expired_code(client, async_session, now):
    """Test email verification with an expired code."""
    user = await make_user(
        async_session,
        "late@example.com",
        verified=False,
        code="a1b2c3",
        expires=now - timedelta(seconds=1),
    )

    response = await client.post(VERIFY_URL, json={"email": user.email, "code": "a1b2c3"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid or expired verification code"


async def test_verify_email_check_order(client, test_user):
    """Test email verification error precedence."""
    missing = await client.post(VERIFY_URL, json={"email": "pending@example.com"})
    unknown = await client.post(VERIFY_URL, json={"email": "ghost@example.com", "code": "a1b2c3"})
    already = await client.post(VERIFY_URL, json={"email": test_user.email, "code": "a1b2c3"})

    assert missing.status_code == 400
    assert missing.json()["message"] == "Email and verification code are required"
    assert unknown.status_code == 404
    assert unknown.json()["message"] == "User not found"
    assert already.status_code == 400
    assert already.json()["message"] == "Email is already verified"


async def test_code_is_rejected_at_the_expiry_instant(async_session, now):
    """A code is valid strictly before its expiry time."""
    user = await make_user(
        async_session,
        "edge@example.com",
        verified=False,
        code="a1b2c3",
        expires=now,
    )

    at_expiry = AuthFlowController(async_session, FakeEmailSender(), clock=lambda: now)
    with pytest.raises(InvalidOrExpiredCodeError):
        await at_expiry.verify_email(user.email, "a1b2c3")

    just_before = AuthFlowController(
        async_session,
        FakeEmailSender(),
        clock=lambda: now - timedelta(microseconds=1),
    )
    verified = await just_before.verify_email(user.email, "a1b2c3")
    assert verified.verified is True


async def test_resend_replaces_the_code(client, async_session, email_sender, pending_user, monkeypatch):
    """Re-issuing a code invalidates the one sent before it."""
    issued = iter(["0a0a0a", "0b0b0b"])
    monkeypatch.setattr(code_generator, "generate", lambda: next(issued))

    first = await client.post(RESEND_URL, json={"email": pending_user.email})
    first_code = (await find_user(async_session, pending_user.email)).verification_code
    second = await client.post(RESEND_URL, json={"email": pending_user.email})
    second_code = (await find_user(async_session, pending_user.email)).verification_code

    assert first.status_code == second.status_code == 200
    assert first.json() == {"message": "Verification code sent successfully"}
    assert len(email_sender.sent) == 2
    assert email_sender.sent[-1][1] == "Verify your Email"
    assert second_code in email_sender.sent[-1][2]

    assert (first_code, second_code) == ("0a0a0a", "0b0b0b")
    stale = await client.post(VERIFY_URL, json={"email": pending_user.email, "code": first_code})
    assert stale.status_code == 400
    assert stale.json()["message"] == "Invalid or expired verification code"

    fresh = await client.post(VERIFY_URL, json={"email": pending_user.email, "code": second_code})
    assert fresh.status_code == 200


async def test_resend_rejections(client, test_user):
    """Test resending a code for missing, unknown or verified emails."""
    missing = await client.post(RESEND_URL, json={})
    unknown = await client.post(RESEND_URL, json={"email": "ghost@example.com"})
    already = await client.post(RESEND_URL, json={"email": test_user.email})

    assert missing.json()["message"] == "Email is required"
    assert unknown.status_code == 404
    assert already.json()["message"] == "Email is already verified"


async def test_resend_reports_delivery_failure(client, async_session, email_sender, pending_user):
    """Test resending when email delivery fails."""
    email_sender.succeed = False

    response = await client.post(RESEND_URL, json={"email": pending_user.email})

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to send verification email"}
    # The new code is stored even though it was not delivered
    user = await find_user(async_session, pending_user.email)
    assert user.verification_code != "a1b2c3"


async def test_forgot_password_sends_reset_code(client, async_session, email_sender, test_user):
    """Test password reset request."""
    response = await client.post(FORGOT_URL, json={"email": test_user.email})

    assert response.status_code == 200
    assert response.json() == {"message": "Password reset instructions sent to your email"}
    user = await find_user(async_session, test_user.email)
    assert user.verification_code
    recipient, subject, body = email_sender.sent[-1]
    assert (recipient, subject) == (test_user.email, "Password Reset Request")
    assert user.verification_code in body


async def test_forgot_password_rejections(client, email_sender):
    """Test password reset request for missing or unknown emails."""
    missing = await client.post(FORGOT_URL, json={})
    unknown = await client.post(FORGOT_URL, json={"email": "ghost@example.com"})

    assert missing.status_code == 400
    assert missing.json()["message"] == "Email is required"
    assert unknown.status_code == 404
    assert unknown.json()["message"] == "User not found"


async def test_forgot_password_delivery_failure(client, email_sender, test_user):
    """Test password reset request when email delivery fails."""
    email_sender.succeed = False

    response = await client.post(FORGOT_URL, json={"email": test_user.email})

    assert response.status_code == 500
    assert response.json()["message"] == "Failed to send password reset email"


async def test_reset_password_flow(client, async_session, test_user):
    """Test password reset."""
    await client.post(FORGOT_URL, json={"email": test_user.email})
    code = (await find_user(async_session, test_user.email)).verification_code

    response = await client.post(RESET_URL, json={
        "email": test_user.email,
        "code": code,
        "newPassword": "NewPass9",
        "confirmPassword": "NewPass9",
    })

    assert response.status_code == 200
    assert response.json() == {"message": "Password reset successfully"}
    assert (await find_user(async_session, test_user.email)).verification_code is None

    old = await client.post(SIGNIN_URL, json={"email": test_user.email, "password": USER_PASSWORD})
    new = await client.post(SIGNIN_URL, json={"email": test_user.email, "password": "NewPass9"})
    assert old.status_code == 400
    assert new.status_code == 200

    reused = await client.post(RESET_URL, json={
        "email": test_user.email,
        "code": code,
        "newPassword": "Again123",
        "confirmPassword": "Again123",
    })
    assert reused.status_code == 400
    assert reused.json()["message"] == "Invalid or expired reset code"


async def test_reset_password_validation(client, test_user):
    """Test password reset input validation."""
    base = {
        "email": test_user.email,
        "code": "a1b2c3",
        "newPassword": "NewPass9",
        "confirmPassword": "NewPass9",
    }
    cases = [
        ({**base, "code": ""}, 400, "All fields are required"),
        ({**base, "confirmPassword": "NewPass8"}, 400, "Passwords do not match"),
        (
            {**base, "newPassword": "short", "confirmPassword": "short"},
            400,
            "Password must be 6-20 characters long and contain at least one number, "
            "one lowercase letter, and one uppercase letter",
        ),
        ({**base, "email": "ghost@example.com"}, 404, "User not found"),
        (base, 400, "Invalid or expired reset code"),
    ]
    for payload, status_code, message in cases:
        response = await client.post(RESET_URL, json=payload)
        assert response.status_code == status_code, payload
        assert response.json()["message"] == message


async def test_reset_password_keeps_account_unverified(client, async_session, pending_user):
    """Resetting a password does not stand in for email verification."""
    await client.post(FORGOT_URL, json={"email": pending_user.email})
    code = (await find_user(async_session, pending_user.email)).verification_code

    await client.post(RESET_URL, json={
        "email": pending_user.email,
        "code": code,
        "newPassword": "NewPass9",
        "confirmPassword": "NewPass9",
    })

    signin = await client.post(SIGNIN_URL, json={"email": pending_user.email, "password": "NewPass9"})
    assert signin.status_code == 403
    assert signin.json()["needsVerification"] is True


async def test_service_reset_uses_injected_clock(async_session, now):
    """Test password reset with an expired code."""
    user = await make_user(async_session, "clock@example.com", code="c0ffee", expires=now)
    flow = AuthFlowController(async_session, FakeEmailSender(), clock=lambda: now + timedelta(seconds=5))

    with pytest.raises(InvalidOrExpiredCodeError):
        await flow.reset_password(ResetPasswordRequest(
            email=user.email,
            code="c0ffee",
            newPassword="NewPass9",
            confirmPassword="NewPass9",
        ))


async def test_second_verification_reports_already_verified(client, pending_user):
    """Test verifying an email twice."""
    first = await client.post(VERIFY_URL, json={"email": pending_user.email, "code": "a1b2c3"})
    second = await client.post(VERIFY_URL, json={"email": pending_user.email, "code": "a1b2c3"})

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["message"] == "Email is already verified"


async def test_sign_up_to_sign_in_round_trip(client, async_session, email_sender):
    """Test the full sign-up, verification and login flow."""
    signup = await client.post("/api/user/signup", json={
        "personal_id": "P-200",
        "name": "Round Trip",
        "email": "trip@example.com",
        "password": "Secret1",
        "confirmPassword": "Secret1",
    })
    assert signup.status_code == 200

    resend = await client.post(RESEND_URL, json={"email": "trip@example.com"})
    assert resend.status_code == 200
    code = (await find_user(async_session, "trip@example.com")).verification_code
    assert code in email_sender.sent[-1][2]

    verify = await client.post(VERIFY_URL, json={"email": "trip@example.com", "code": code})
    assert verify.status_code == 200

    signin = await client.post(SIGNIN_URL, json={"email": "trip@example.com", "password": "Secret1"})
    assert signin.status_code == 200
    profile = await client.get(
        "/api/user/user-infor",
        headers={"Authorization": f"Bearer {signin.json()['access_token']}"},
    )
    assert profile.status_code == 200
    assert profile.json()["verified"] is True
