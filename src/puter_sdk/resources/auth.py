"""Sign-in, sign-out and current user."""

from __future__ import annotations

import logging
from typing import Any

from ..exceptions import (
    AuthenticationError,
    BackendError,
    TwoFactorRequiredError,
    ValidationError,
)
from ..models import LoginResult, User
from ._base import Resource

logger = logging.getLogger(__name__)


class PuterAuth(Resource):
    """Authentication against the Puter API.

    A successful :meth:`sign_in` stores the session token, after which every
    request of the owning client is sent with it.
    """

    async def sign_in(self, username: str, password: str, otp: str | None = None) -> LoginResult:
        """Authenticate with username and password.

        Args:
            username: Account username.
            password: Account password.
            otp: One-time code, required when the account has 2FA enabled.

        Returns:
            The final login response, carrying the session token.

        Raises:
            ValidationError: If username or password is missing.
            TwoFactorRequiredError: If 2FA is enabled and no OTP was given.
            AuthenticationError: If the credentials or the OTP are rejected.
        """
        if not username or not password:
            raise ValidationError("Username and password are required")

        data = await self._login("/login", {"username": username, "password": password})
        result = self._safe_validate(LoginResult, data)

        if result.next_step == "otp":
            if not otp:
                raise TwoFactorRequiredError("2FA required - OTP is needed")
            result = await self._verify_otp(result, otp)
        elif result.next_step and result.next_step != "complete":
            raise AuthenticationError(f"Unsupported authentication step: {result.next_step}")

        if not result.proceed or not result.token:
            raise self._rejected(result, "Authentication failed: Invalid credentials")

        self._transport.session.set_token(result.token)
        logger.debug(f"Signed in as {username}")
        return result

    async def _verify_otp(self, login: LoginResult, otp: str) -> LoginResult:
        data = await self._login(
            "/login/otp",
            {"token": login.otp_jwt_token, "code": otp},
        )
        result = self._safe_validate(LoginResult, data)
        if not result.proceed or not result.token:
            raise self._rejected(result, "Invalid OTP code")
        return result

    async def _login(self, endpoint: str, body: dict[str, Any]) -> Any:
        """POST a login step; a 4xx answer means the credentials were rejected."""
        try:
            return await self._transport.post(endpoint, body)
        except AuthenticationError:
            raise
        except BackendError as e:
            if e.status_code is not None and 400 <= e.status_code < 500:
                raise AuthenticationError(e.message, e.code, e.details, e.status_code) from e
            raise

    @staticmethod
    def _rejected(result: LoginResult, fallback: str) -> AuthenticationError:
        error = getattr(result, "error", None)
        if isinstance(error, dict):
            return AuthenticationError(
                error.get("message") or fallback,
                error.get("code") or "AUTHENTICATION_FAILED",
                error,
            )
        return AuthenticationError(fallback)

    async def sign_out(self) -> None:
        """Forget the session token. No request is sent."""
        self._transport.session.clear()

    def is_signed_in(self) -> bool:
        """Check whether a session token (or API key) is set."""
        return self._transport.session.is_authenticated()

    async def get_user(self) -> User:
        """Get the current user.

        Returns:
            The user the session token belongs to.
        """
        data = await self._transport.get("/whoami")
        return self._safe_validate(User, data)
