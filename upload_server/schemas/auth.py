"""Pydantic schemas for authentication endpoints."""

from pydantic import BaseModel


class LoginResponse(BaseModel):
    """Response model for user login."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
