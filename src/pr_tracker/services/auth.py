"""Authentication: sign-up with email confirmation, sign-in, sessions."""

import asyncio
import hashlib
import hmac
import logging
import re
import secrets
from pathlib import Path
from typing import Awaitable, Callable
from uuid import uuid4

from ..db.repositories import UserRepository
from ..errors import AuthError, ValidationError
from ..models.user import AuthEvent, AuthSession, User

logger = logging.getLogger(__name__)

# Listener type: (event, session)
AuthListener = Callable[[AuthEvent, AuthSession], Awaitable[None]]

PBKDF2_ITERATIONS = 200_000
MIN_PASSWORD_LENGTH = 6
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def hash_password(password: str, salt: bytes) -> str:
    """PBKDF2-SHA256 digest. Blocking: call it through asyncio.to_thread."""
    return hashlib.pbkdf2_hmac("sha256", password.encode(), salt, PBKDF2_ITERATIONS).hex()


class AuthService:
    """Email/password accounts backed by the users table."""

    def __init__(self, db_path: Path | None = None, base_url: str = "http://127.0.0.1:8000"):
        self.users = UserRepository(db_path)
        self.base_url = base_url.rstrip("/")
        self._listeners: list[AuthListener] = []

    async def sign_up(self, email: str, password: str) -> tuple[User, str]:
        """Register an unconfirmed account.

        Returns:
            The new user and its email confirmation token

        Raises:
            ValidationError: Malformed email or too-short password
            AuthError: An account already exists for this email
        """
        email = self._normalize_email(email)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters."
            )

        if await self.users.get_by_email(email):
            raise AuthError("User already registered")

        salt = secrets.token_bytes(16)
        token = secrets.token_hex(24)
        user_id = str(uuid4())
        await self.users.create(
            user_id=user_id,
            email=email,
            password_hash=await asyncio.to_thread(hash_password, password, salt),
            salt=salt.hex(),
            confirmation_token=token,
        )

        # No mail transport: the log line stands in for the confirmation email
        logger.info(
            "Confirmation link for %s: %s/auth/confirm?token=%s", email, self.base_url, token
        )
        return User(id=user_id, email=email, confirmed=False), token

    async def confirm_email(self, token: str) -> User:
        user = await self.users.confirm(token)
        if user is None:
            raise AuthError("Confirmation link is invalid or has already been used")
        return user

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Check credentials and open a session."""
        email = self._normalize_email(email)
        found = await self.users.get_credentials(email)
        if found is None:
            raise AuthError("Invalid login credentials")

        user, expected, salt = found
        got = await asyncio.to_thread(hash_password, password or "", bytes.fromhex(salt))
        if not hmac.compare_digest(expected, got):
            raise AuthError("Invalid login credentials")
        if not user.confirmed:
            raise AuthError("Email not confirmed")

        token = secrets.token_urlsafe(32)
        await self.users.create_session(token, user.id)
        session = AuthSession(token=token, user=user)
        await self._notify(AuthEvent.SIGNED_IN, session)
        return session

    async def get_session(self, token: str | None) -> AuthSession | None:
        if not token:
            return None
        found = await self.users.get_session(token)
        if found is None:
            return None
        user, created_at = found
        return AuthSession(token=token, user=user, created_at=created_at)

    async def sign_out(self, token: str) -> None:
        session = await self.get_session(token)
        await self.users.delete_session(token)
        if session is not None:
            await self._notify(AuthEvent.SIGNED_OUT, session)

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        """Subscribe to sign-in/sign-out notifications.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _notify(self, event: AuthEvent, session: AuthSession) -> None:
        for listener in list(self._listeners):
            await listener(event, session)

    def _normalize_email(self, email: str) -> str:
        email = (email or "").strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Please enter a valid email address.")
        return email
