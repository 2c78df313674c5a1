"""Authentication and security utilities."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Header, Request

from common.logging_config import get_logger
from upload_server.config import JWT_ALGORITHM
from upload_server.exceptions import InvalidTokenError

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Bcrypt hash of the password
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        password: Plain text password to verify
        password_hash: Bcrypt hash to verify against

    Returns:
        True if password matches hash, False otherwise
    """
    password_bytes = password.encode('utf-8')
    hash_bytes = password_hash.encode('utf-8')
    try:
        return bcrypt.checkpw(password_bytes, hash_bytes)
    except ValueError:
        logger.error("Configured password hash is not a valid bcrypt hash")
        return False


def generate_token(subject: str, secret_key: str, expires_in: int, now: Optional[datetime] = None) -> str:
    """
    Issue a signed bearer token.

    Args:
        subject: Principal name stored in the ``sub`` claim
        secret_key: HMAC signing key
        expires_in: Lifetime in seconds
        now: Issue time (defaults to current UTC time)

    Returns:
        Encoded HS256 JWT
    """
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "sub": subject,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=expires_in),
    }
    return jwt.encode(claims, secret_key, algorithm=JWT_ALGORITHM)


def decode_token(token: str, secret_key: str) -> dict:
    """
    Verify a bearer token and return its claims.

    Raises:
        InvalidTokenError: If the signature, algorithm or expiry check fails
    """
    try:
        return jwt.decode(
            token,
            secret_key,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise InvalidTokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Token rejected: {type(e).__name__}")
        raise InvalidTokenError("Invalid token")


class Authenticator:
    """
    Turns an Authorization header into an authenticated principal.
    """

    def __init__(self, secret_key: str):
        self.secret_key = secret_key

    def authenticate(self, authorization: Optional[str]) -> str:
        """
        Validate ``Authorization: Bearer <token>``.

        Returns:
            The token subject

        Raises:
            InvalidTokenError: If the header is missing or the token is invalid
        """
        if not authorization or not authorization.startswith("Bearer "):
            raise InvalidTokenError("Invalid authorization header format")

        token = authorization[len("Bearer "):].strip()
        claims = decode_token(token, self.secret_key)
        return claims["sub"]


async def get_current_user(request: Request, authorization: Optional[str] = Header(None)) -> str:
    """
    FastAPI dependency to validate the bearer token and extract the principal.

    Args:
        request: Incoming request (the authenticator lives on app.state)
        authorization: Authorization header value (format: "Bearer <token>")

    Returns:
        Name of the authenticated user

    Raises:
        InvalidTokenError: 401 if the token is invalid or missing
    """
    authenticator: Authenticator = request.app.state.authenticator
    user = authenticator.authenticate(authorization)
    request.state.user_id = user
    return user
