"""Authentication API routes."""

from fastapi import APIRouter, Depends, Form

from upload_server.dependencies import get_auth_service
from upload_server.schemas.auth import LoginResponse
from upload_server.services.auth_service import AuthService

router = APIRouter(tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
def login(
    username: str = Form(""),
    password: str = Form(""),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Exchange credentials for a bearer token.

    Parameters:
        - username: form field
        - password: form field

    Returns:
        - access_token: HS256 JWT to send as "Authorization: Bearer <token>"
        - token_type: always "bearer"
        - expires_in: token lifetime in seconds

    Raises:
        - 401: Invalid credentials
    """
    token = auth_service.login_user(username, password)

    return LoginResponse(
        access_token=token,
        expires_in=auth_service.token_expiration_seconds,
    )
