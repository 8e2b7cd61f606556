"""
Authentication Helpers

JWT issue/verify (HS256, shared secret from Settings) and password hashing.
Access tokens are medium lived; refresh tokens are long lived and carry
``token_type = "refresh"`` so they cannot be used as access tokens.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from phuongnam.core.config import Settings
from phuongnam.core.exceptions import AuthError

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


class TokenService:
    """Issues and verifies the API's bearer tokens."""

    def __init__(self, settings: Settings):
        self._secret = settings.jwt_secret
        self._algorithm = settings.jwt_algorithm
        self.access_ttl = timedelta(minutes=settings.access_token_expire_minutes)
        self.refresh_ttl = timedelta(days=settings.refresh_token_expire_days)

    def _encode(self, customer_id: int, email: str, token_type: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(customer_id),
            "email": email,
            "token_type": token_type,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def create_access_token(self, customer_id: int, email: str) -> str:
        return self._encode(customer_id, email, ACCESS, self.access_ttl)

    def create_refresh_token(self, customer_id: int, email: str) -> str:
        return self._encode(customer_id, email, REFRESH, self.refresh_ttl)

    def issue_pair(self, customer_id: int, email: str) -> dict[str, Any]:
        """Access + refresh token bundle returned by register and login."""
        return {
            "token": self.create_access_token(customer_id, email),
            "refreshToken": self.create_refresh_token(customer_id, email),
            "expiresIn": int(self.access_ttl.total_seconds()),
        }

    def decode(self, token: str, expected_type: str = ACCESS) -> dict[str, Any]:
        """
        Verify signature, expiry and token type.

        Raises:
            AuthError: TOKEN_EXPIRED for an expired token, TOKEN_INVALID for
                anything else that fails verification
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired", code="TOKEN_EXPIRED")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected token: {e}")
            raise AuthError("Invalid token", code="TOKEN_INVALID")

        if payload.get("token_type") != expected_type:
            raise AuthError("Invalid token type", code="TOKEN_INVALID")
        return payload
