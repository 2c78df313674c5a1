"""Pydantic schemas for API requests and responses."""

from upload_server.schemas.auth import LoginResponse
from upload_server.schemas.uploads import (
    ChunkUploadResponse,
    InitUploadResponse,
    SessionResponse,
)
from upload_server.schemas.common import ErrorResponse

__all__ = [
    "LoginResponse",
    "ChunkUploadResponse",
    "InitUploadResponse",
    "SessionResponse",
    "ErrorResponse",
]
