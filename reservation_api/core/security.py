"""
Credential Primitives

Password hashing is delegated to bcrypt (salted hash, timing-safe compare).
Session tokens are itsdangerous URL-safe timed signatures carrying the
user id; expiry is enforced on load via max_age.
"""

import logging
from typing import Optional

import bcrypt
from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer

from reservation_api.core.errors import ValidationError

logger = logging.getLogger(__name__)

# bcrypt accepts at most 72 bytes of input
MAX_PASSWORD_BYTES = 72
PASSWORD_TOO_LONG = f"password must be at most {MAX_PASSWORD_BYTES} bytes"


def password_fits(password: str) -> bool:
    return len(password.encode("utf-8")) <= MAX_PASSWORD_BYTES


class PasswordHasher:
    """bcrypt wrapper with a configurable work factor."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """
        Hash a password with a fresh salt.

        Raises:
            ValidationError: the UTF-8 encoded password exceeds 72 bytes
        """
        if not password_fits(password):
            raise ValidationError(PASSWORD_TOO_LONG)
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Compare a candidate password against a stored hash."""
        if not password_fits(password):
            return False
        candidate = password.encode("utf-8")
        try:
            return bcrypt.checkpw(candidate, password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is malformed")
            return False


class SessionSigner:
    """
    Issues and validates signed, time-limited session tokens.

    Attributes:
        max_age: Token lifetime in seconds
    """

    SALT = "session"

    def __init__(self, secret: str, max_age: int):
        self.max_age = max_age
        self._serializer = URLSafeTimedSerializer(secret, salt=self.SALT)

    def issue(self, user_id: int) -> str:
        return self._serializer.dumps({"uid": user_id})

    def resolve(self, token: Optional[str]) -> Optional[int]:
        """
        Return the user id carried by a token.

        Returns None when the token is missing, malformed, badly signed
        or older than max_age.
        """
        if not token:
            return None
        try:
            payload = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired:
            logger.debug("Session token expired")
            return None
        except BadData:
            logger.debug("Session token rejected")
            return None

        user_id = payload.get("uid") if isinstance(payload, dict) else None
        if not isinstance(user_id, int):
            return None
        return user_id
