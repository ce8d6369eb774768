"""
Security Utilities

JWT access token handling.

Tokens are issued by the authentication service and signed with the shared
SECRET_KEY. This service only validates them; ``create_access_token`` is
kept for service-to-service calls and for tests.

Token Payload:
==============
    {
        "user_id": "550e8400-e29b-41d4-a716-446655440000",
        "exp": 1710000000,
        "iat": 1709395200
    }

Usage:
======
    from src.shared.utils.security import SecurityUtils

    token = SecurityUtils.create_access_token(
        data={"user_id": str(user.id)},
        secret_key=settings.SECRET_KEY,
    )
    payload = SecurityUtils.decode_access_token(token, settings.SECRET_KEY)
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from src.config.settings import settings


class SecurityUtils:
    """JWT token creation and validation with PyJWT."""

    @staticmethod
    def create_access_token(
        data: dict,
        secret_key: str,
        expires_delta: Optional[timedelta] = None,
        algorithm: str = "HS256",
    ) -> str:
        """
        Create a signed JWT access token.

        Args:
            data: Payload claims (must include user_id)
            secret_key: Secret key for signing
            expires_delta: Token lifetime (default: ACCESS_TOKEN_EXPIRE_MINUTES)
            algorithm: JWT algorithm (default: HS256)

        Returns:
            Encoded JWT token string
        """
        issued_at = datetime.now(timezone.utc)
        claims = {
            **data,
            "iat": issued_at,
            "exp": issued_at + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)),
        }
        return jwt.encode(claims, secret_key, algorithm=algorithm)

    @staticmethod
    def decode_access_token(
        token: str,
        secret_key: str,
        algorithm: str = "HS256",
    ) -> dict:
        """
        Decode and verify a JWT token.

        Raises:
            ValueError: If the token is expired, tampered with or malformed
        """
        try:
            return jwt.decode(token, secret_key, algorithms=[algorithm])
        except jwt.ExpiredSignatureError as e:
            raise ValueError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise ValueError(f"Invalid token: {e}") from e
