"""FastAPI dependencies resolving the per-app service instances."""

from fastapi import Request

from upload_server.services.auth_service import AuthService
from upload_server.services.download_service import DownloadService
from upload_server.services.upload_service import UploadService


def get_upload_service(request: Request) -> UploadService:
    """Get the app's upload session manager"""
    return request.app.state.upload_service


def get_download_service(request: Request) -> DownloadService:
    """Get the app's download service"""
    return request.app.state.download_service


def get_auth_service(request: Request) -> AuthService:
    """Get the app's authentication service"""
    return request.app.state.auth_service
