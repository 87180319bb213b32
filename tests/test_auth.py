"""
Tests for Authentication

Tests the authentication flow:
- Registration (validation, duplicates, verification email queued)
- Email verification
- Login (verified accounts only, cookies set)
- Token refresh from body or cookie
- Logout
- Current user and cookie-based auth
"""

import smtplib
from unittest.mock import patch

from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from mybook.config import get_settings
from mybook.dependencies import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from mybook.models import User
from mybook.services.email import build_verification_message, send_verification_email
from mybook.services.security import create_access_token, create_refresh_token
from tests.conftest import TEST_PASSWORD, get_auth_header

VALID_REGISTRATION = {
    "email": "newreader@example.com",
    "username": "NewReader",
    "password": "StrongPass1!",
}


def login(client: TestClient, email: str, password: str = TEST_PASSWORD):
    return client.post(
        "/api/v1/auth/login",
        data={"username": email, "password": password},
    )


# =============================================================================
# Registration
# =============================================================================


class TestRegister:
    """Tests for POST /api/v1/auth/register"""

    def test_register_creates_unverified_user(self, client: TestClient, db_session: Session):
        with patch("mybook.routers.auth.send_verification_email") as mock_send:
            response = client.post("/api/v1/auth/register", json=VALID_REGISTRATION)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["email"] == "newreader@example.com"
        assert data["username"] == "newreader"
        assert data["is_verified"] is False
        assert "password" not in data
        assert "hashed_password" not in data

        user = db_session.get(User, data["id"])
        assert user.verification_token is not None
        mock_send.assert_called_once_with(user.email, user.verification_token)

    def test_duplicate_email(self, client: TestClient, sample_user: User):
        with patch("mybook.routers.auth.send_verification_email"):
            response = client.post(
                "/api/v1/auth/register",
                json={**VALID_REGISTRATION, "email": sample_user.email},
            )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "Email already registered"

    def test_email_stored_lowercase(self, client: TestClient):
        with patch("mybook.routers.auth.send_verification_email"):
            response = client.post(
                "/api/v1/auth/register",
                json={**VALID_REGISTRATION, "email": "NewReader@Example.COM"},
            )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["email"] == "newreader@example.com"

    def test_duplicate_email_case_insensitive(self, client: TestClient, sample_user: User):
        with patch("mybook.routers.auth.send_verification_email"):
            response = client.post(
                "/api/v1/auth/register",
                json={**VALID_REGISTRATION, "email": "Reader@Example.com"},
            )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "Email already registered"

    def test_duplicate_username_case_insensitive(self, client: TestClient, sample_user: User):
        with patch("mybook.routers.auth.send_verification_email"):
            response = client.post(
                "/api/v1/auth/register",
                json={**VALID_REGISTRATION, "username": "READER"},
            )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "Username already taken"

    def test_password_without_symbol(self, client: TestClient):
        response = client.post(
            "/api/v1/auth/register",
            json={**VALID_REGISTRATION, "password": "StrongPass1"},
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_password_too_short(self, client: TestClient):
        response = client.post(
            "/api/v1/auth/register",
            json={**VALID_REGISTRATION, "password": "Ab1!"},
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_username_must_start_with_letter(self, client: TestClient):
        response = client.post(
            "/api/v1/auth/register",
            json={**VALID_REGISTRATION, "username": "1reader"},
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_invalid_email(self, client: TestClient):
        response = client.post(
            "/api/v1/auth/register",
            json={**VALID_REGISTRATION, "email": "not-an-email"},
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# =============================================================================
# Email Verification
# =============================================================================


class TestVerifyEmail:
    """Tests for GET /api/v1/auth/verify-email/{token}"""

    def test_verify_then_login(
        self, client: TestClient, db_session: Session, unverified_user: User
    ):
        response = client.get(f"/api/v1/auth/verify-email/{'a' * 64}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Email verified successfully"

        db_session.refresh(unverified_user)
        assert unverified_user.is_verified is True
        assert unverified_user.verification_token is None

        assert login(client, unverified_user.email).status_code == status.HTTP_200_OK

    def test_token_is_single_use(self, client: TestClient, unverified_user: User):
        client.get(f"/api/v1/auth/verify-email/{'a' * 64}")
        response = client.get(f"/api/v1/auth/verify-email/{'a' * 64}")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_token(self, client: TestClient):
        response = client.get("/api/v1/auth/verify-email/nope")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Invalid verification token"

    def test_already_verified(
        self, client: TestClient, db_session: Session, sample_user: User
    ):
        sample_user.verification_token = "b" * 64
        db_session.commit()

        response = client.get(f"/api/v1/auth/verify-email/{'b' * 64}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Email already verified"


# =============================================================================
# Login
# =============================================================================


class TestLogin:
    """Tests for POST /api/v1/auth/login"""

    def test_login_success(self, client: TestClient, sample_user: User):
        response = login(client, sample_user.email)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["refresh_token"]
        assert data["expires_in"] > 0
        assert ACCESS_TOKEN_COOKIE in response.cookies
        assert REFRESH_TOKEN_COOKIE in response.cookies

    def test_login_records_last_login(
        self, client: TestClient, db_session: Session, sample_user: User
    ):
        login(client, sample_user.email)

        db_session.refresh(sample_user)
        assert sample_user.last_login_at is not None

    def test_login_email_case_insensitive(self, client: TestClient, sample_user: User):
        response = login(client, "READER@example.com")
        assert response.status_code == status.HTTP_200_OK

    def test_wrong_password(self, client: TestClient, sample_user: User):
        response = login(client, sample_user.email, "WrongPass1!")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Incorrect email or password"

    def test_unknown_email(self, client: TestClient):
        response = login(client, "ghost@example.com")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Incorrect email or password"

    def test_unverified_account(self, client: TestClient, unverified_user: User):
        response = login(client, unverified_user.email)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert "verify your email" in response.json()["detail"]

    def test_inactive_account(
        self, client: TestClient, db_session: Session, sample_user: User
    ):
        sample_user.is_active = False
        db_session.commit()

        response = login(client, sample_user.email)

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Token Refresh
# =============================================================================


class TestRefresh:
    """Tests for POST /api/v1/auth/refresh"""

    def test_refresh_from_body(self, client: TestClient, sample_user: User):
        token = create_refresh_token({"sub": str(sample_user.id)})

        response = client.post("/api/v1/auth/refresh", json={"refresh_token": token})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["access_token"]

    def test_refresh_from_cookie(self, client: TestClient, sample_user: User):
        login(client, sample_user.email)

        response = client.post("/api/v1/auth/refresh")

        assert response.status_code == status.HTTP_200_OK

    def test_access_token_rejected(self, client: TestClient, sample_user: User):
        token = create_access_token({"sub": str(sample_user.id)})

        response = client.post("/api/v1/auth/refresh", json={"refresh_token": token})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_missing_token(self, client: TestClient):
        response = client.post("/api/v1/auth/refresh")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Current User / Logout
# =============================================================================


class TestCurrentUser:
    """Tests for GET /api/v1/auth/me and POST /api/v1/auth/logout"""

    def test_me_with_bearer(self, client: TestClient, sample_user: User):
        response = client.get("/api/v1/auth/me", headers=get_auth_header(sample_user))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["username"] == "reader"

    def test_me_with_cookie(self, client: TestClient, sample_user: User):
        login(client, sample_user.email)

        response = client.get("/api/v1/auth/me")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["email"] == sample_user.email

    def test_me_invalid_token(self, client: TestClient):
        response = client.get(
            "/api/v1/auth/me",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_refresh_token_cannot_authenticate(self, client: TestClient, sample_user: User):
        token = create_refresh_token({"sub": str(sample_user.id)})

        response = client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_clears_cookies(self, client: TestClient, sample_user: User):
        login(client, sample_user.email)

        response = client.post("/api/v1/auth/logout")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert client.get("/api/v1/auth/me").status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Verification Email
# =============================================================================


class TestVerificationEmail:
    def test_message_contains_link(self):
        message = build_verification_message("someone@example.com", "tok123")

        assert message["To"] == "someone@example.com"
        body = message.get_body(preferencelist=("plain",)).get_content()
        assert "/verify-email/tok123" in body

    def test_not_sent_without_smtp(self):
        with patch("mybook.services.email.smtplib.SMTP") as mock_smtp:
            assert send_verification_email("someone@example.com", "tok123") is False

        mock_smtp.assert_not_called()

    def test_sent_over_smtp(self):
        configured = get_settings().model_copy(
            update={"smtp_host": "smtp.test", "smtp_username": "mailer", "smtp_password": "pw"}
        )

        with patch("mybook.services.email.get_settings", return_value=configured), \
             patch("mybook.services.email.smtplib.SMTP") as mock_smtp:
            server = mock_smtp.return_value.__enter__.return_value
            assert send_verification_email("someone@example.com", "tok123") is True

        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "pw")
        sent = server.send_message.call_args.args[0]
        assert sent["To"] == "someone@example.com"

    def test_smtp_failure_reported(self):
        configured = get_settings().model_copy(update={"smtp_host": "smtp.test"})

        with patch("mybook.services.email.get_settings", return_value=configured), \
             patch("mybook.services.email.smtplib.SMTP") as mock_smtp:
            server = mock_smtp.return_value.__enter__.return_value
            server.send_message.side_effect = smtplib.SMTPException("mailbox full")

            assert send_verification_email("someone@example.com", "tok123") is False
