"""Repository layer for data access."""

from upload_server.repositories.session_repository import SessionRepository

__all__ = [
    "SessionRepository",
]
