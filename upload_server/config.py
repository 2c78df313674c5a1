"""Configuration settings for the upload server."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from common.constants import DEFAULT_CHUNK_SIZE_BYTES, DEFAULT_SERVER_PORT


UPLOAD_SERVER_HOST = os.environ.get("UPLOAD_SERVER_HOST", "0.0.0.0")

UPLOAD_SERVER_PORT = int(os.environ.get("UPLOAD_SERVER_PORT", str(DEFAULT_SERVER_PORT)))

UPLOAD_DIR = os.environ.get("UPLOAD_DIR", "./uploads")

SECRET_KEY = os.environ.get("UPLOAD_SECRET_KEY", "secret-key")

TOKEN_EXPIRATION_SECONDS = int(os.environ.get("UPLOAD_TOKEN_EXPIRATION_SECONDS", str(30 * 60)))

CHUNK_SIZE_BYTES = int(os.environ.get("UPLOAD_CHUNK_SIZE_BYTES", str(DEFAULT_CHUNK_SIZE_BYTES)))

MAX_CHUNK_BYTES = int(os.environ.get("UPLOAD_MAX_CHUNK_BYTES", str(32 << 20)))

CLEANUP_INTERVAL_SECONDS = int(os.environ.get("UPLOAD_CLEANUP_INTERVAL_SECONDS", "3600"))

RETENTION_SECONDS = int(os.environ.get("UPLOAD_RETENTION_SECONDS", str(24 * 3600)))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("UPLOAD_CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

ADMIN_USERNAME = os.environ.get("UPLOAD_ADMIN_USERNAME", "admin")

ADMIN_PASSWORD = os.environ.get("UPLOAD_ADMIN_PASSWORD", "admin")

ADMIN_PASSWORD_HASH = os.environ.get("UPLOAD_ADMIN_PASSWORD_HASH")

JWT_ALGORITHM = "HS256"


@dataclass(frozen=True)
class ServerConfig:
    """
    Static configuration handed to the app factory.

    Defaults come from the environment variables above; tests build their
    own instance pointing at a temporary directory.
    """
    upload_dir: Path = field(default_factory=lambda: Path(UPLOAD_DIR))
    secret_key: str = SECRET_KEY
    token_expiration_seconds: int = TOKEN_EXPIRATION_SECONDS
    chunk_size_bytes: int = CHUNK_SIZE_BYTES
    max_chunk_bytes: int = MAX_CHUNK_BYTES
    cleanup_interval_seconds: int = CLEANUP_INTERVAL_SECONDS
    retention_seconds: int = RETENTION_SECONDS
    cors_origins: tuple[str, ...] = tuple(CORS_ORIGINS)
    admin_username: str = ADMIN_USERNAME
    admin_password: Optional[str] = ADMIN_PASSWORD
    admin_password_hash: Optional[str] = ADMIN_PASSWORD_HASH
    enable_cleanup: bool = True

    @property
    def metadata_dir(self) -> Path:
        return Path(self.upload_dir) / "meta"

    @property
    def files_dir(self) -> Path:
        return Path(self.upload_dir) / "files"
