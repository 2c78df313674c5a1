"""Authentication service for business logic."""

from typing import Optional

from common.logging_config import get_logger
from upload_server.auth import generate_token, hash_password, verify_password
from upload_server.exceptions import InvalidCredentialsError

logger = get_logger(__name__)


class AuthService:
    def __init__(
        self,
        username: str,
        secret_key: str,
        token_expiration_seconds: int,
        password: Optional[str] = None,
        password_hash: Optional[str] = None,
    ):
        if password_hash is None:
            if password is None:
                raise ValueError("Either password or password_hash must be configured")
            password_hash = hash_password(password)

        self.username = username
        self.password_hash = password_hash
        self.secret_key = secret_key
        self.token_expiration_seconds = token_expiration_seconds

    def login_user(self, username: str, password: str) -> str:
        logger.info(f"Login attempt for user: {username}")
        if not username or not password:
            raise InvalidCredentialsError("Invalid username or password")

        if username != self.username:
            logger.warning(f"Login failed: unknown username '{username}'")
            raise InvalidCredentialsError("Invalid username or password")

        if not verify_password(password, self.password_hash):
            logger.warning(f"Login failed: invalid password for username '{username}'")
            raise InvalidCredentialsError("Invalid username or password")

        token = generate_token(username, self.secret_key, self.token_expiration_seconds)
        logger.info(f"Successfully logged in user: {username}")
        return token
