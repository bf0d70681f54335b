"""
Identity Service

Registration, login, session tokens and role gates.

The service is built from an explicit Settings object (secret, token
lifetime, cookie flags, bcrypt rounds) instead of module-level constants,
so every application instance can carry its own secret.

Usage:
    identity = IdentityService(settings)
    user, token = await identity.login(db, "sara@example.com", "s3cret!")
    identity.set_session_cookie(response, token)
"""

import logging
from typing import Optional

from fastapi import Response
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_api.core.config import Settings
from reservation_api.core.errors import (
    ConflictError,
    ForbiddenError,
    UnauthorizedError,
    ValidationError,
)
from reservation_api.core.security import PasswordHasher, SessionSigner
from reservation_api.models import User, UserRole

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
EMAIL_TAKEN = "A user with this email is already registered"


def require_role(user: User, role: UserRole) -> None:
    """Authorization gate: the user must hold exactly this role."""
    if user.role != role:
        raise ForbiddenError(f"Access denied. {role.value.capitalize()} role required.")


def require_owner_or_admin(user: User, phone: Optional[str]) -> None:
    """Customers own reservations and orders by phone number."""
    if user.role == UserRole.ADMIN:
        return
    if not user.phone or user.phone != phone:
        raise ForbiddenError("Access denied. You do not own this record.")


def _required(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


class IdentityService:
    """
    Validates credentials and issues / resolves session tokens.

    Attributes:
        settings: Application settings the service was built from
        hasher: bcrypt password hasher
        signer: itsdangerous session token signer
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
        self.signer = SessionSigner(
            secret=settings.session_secret,
            max_age=settings.session_max_age_seconds,
        )

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    async def register(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
    ) -> tuple[User, str]:
        """
        Create a user account and issue a session for it.

        Raises:
            ValidationError: a required field is missing
            ConflictError: the email is already registered
        """
        email = _required(email, "email")
        first_name = _required(first_name, "firstName")
        last_name = _required(last_name, "lastName")
        if not password or len(password) < 6:
            raise ValidationError("password must be at least 6 characters")

        existing = await db.execute(select(User.id).where(User.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(EMAIL_TAKEN)

        user = User(
            email=email,
            password_hash=self.hasher.hash(password),
            first_name=first_name,
            last_name=last_name,
            phone=phone.strip() if phone and phone.strip() else None,
            role=UserRole.USER,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(EMAIL_TAKEN)
        await db.refresh(user)

        logger.info(f"User #{user.id} registered ({user.email})")
        return user, self.issue_session(user)

    async def login(self, db: AsyncSession, email: str, password: str) -> tuple[User, str]:
        """
        Check credentials and issue a session.

        Unknown email and wrong password fail with the same message.
        """
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is None or not self.hasher.verify(password, user.password_hash):
            logger.info("Failed login attempt")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        logger.info(f"User #{user.id} logged in")
        return user, self.issue_session(user)

    async def update_profile(
        self,
        db: AsyncSession,
        user: User,
        changes: dict,
    ) -> User:
        """Let a user edit their own name and phone."""
        if "first_name" in changes:
            user.first_name = _required(changes["first_name"], "firstName")
        if "last_name" in changes:
            user.last_name = _required(changes["last_name"], "lastName")
        if "phone" in changes:
            phone = changes["phone"]
            user.phone = phone.strip() if phone and phone.strip() else None

        await db.commit()
        await db.refresh(user)
        logger.info(f"User #{user.id} updated their profile")
        return user

    # =========================================================================
    # SESSIONS
    # =========================================================================

    def issue_session(self, user: User) -> str:
        return self.signer.issue(user.id)

    async def resolve_session(self, db: AsyncSession, token: Optional[str]) -> User:
        """
        Resolve a session token to a live user.

        Raises:
            UnauthorizedError: token missing, malformed, expired, or the
                user no longer exists
        """
        if not token:
            raise UnauthorizedError("Access denied. No token provided.")

        user_id = self.signer.resolve(token)
        if user_id is None:
            raise UnauthorizedError("Invalid token.")

        user = await db.get(User, user_id)
        if user is None:
            raise UnauthorizedError("Invalid token.")
        return user

    def set_session_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=self.settings.session_cookie_name,
            value=token,
            max_age=self.settings.session_max_age_seconds,
            httponly=True,
            secure=self.settings.use_secure_cookies,
            samesite="strict",
        )

    def clear_session_cookie(self, response: Response) -> None:
        """Idempotent: clearing an absent cookie is not an error."""
        response.delete_cookie(
            key=self.settings.session_cookie_name,
            httponly=True,
            secure=self.settings.use_secure_cookies,
            samesite="strict",
        )
