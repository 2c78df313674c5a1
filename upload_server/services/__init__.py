"""Service layer for business logic."""

from upload_server.services.auth_service import AuthService
from upload_server.services.download_service import DownloadPlan, DownloadService
from upload_server.services.upload_service import UploadService

__all__ = [
    "AuthService",
    "DownloadPlan",
    "DownloadService",
    "UploadService",
]
