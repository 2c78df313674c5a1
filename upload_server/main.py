"""Entry point for the upload server."""

import os
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from common.logging_config import setup_logging
from upload_server.auth import Authenticator
from upload_server.chunk_writer import ChunkWriter
from upload_server.cleanup_task import UploadJanitor
from upload_server.config import ServerConfig, UPLOAD_SERVER_HOST, UPLOAD_SERVER_PORT
from upload_server.exceptions import (
    UploadError,
    InvalidArgumentError,
    SessionNotFoundError,
    AlreadyInitializedError,
    SizeMismatchError,
    NotInitializedError,
    StorageError,
    RangeNotSatisfiableError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from upload_server.repositories.session_repository import SessionRepository
from upload_server.routes.auth_routes import router as auth_router
from upload_server.routes.upload_routes import router as upload_router
from upload_server.schemas.common import ErrorResponse
from upload_server.services.auth_service import AuthService
from upload_server.services.download_service import DownloadService
from upload_server.services.upload_service import UploadService

logger = setup_logging('upload_server')


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Prepare storage and run the janitor for the lifetime of the app.
    """
    logger.info("Upload server starting up...")

    app.state.upload_service.ensure_directories()
    logger.info(f"Upload directory ready: {app.state.config.upload_dir}")

    for route in app.routes:
        if isinstance(route, APIRoute):
            logger.info(f"Registered route: {','.join(sorted(route.methods))} {route.path}")

    janitor: Optional[UploadJanitor] = app.state.janitor
    if janitor:
        await janitor.start()
        logger.info("Background janitor task started")

    yield

    logger.info("Upload server shutting down...")
    if janitor:
        await janitor.stop()
        logger.info("Janitor task stopped")


def _error_response(
    request: Request,
    exc: Exception,
    status_code: int,
    code: str,
    headers: Optional[dict] = None,
) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    if status_code >= 500:
        logger.error(
            f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}",
            exc_info=exc,
        )
    else:
        logger.warning(
            f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}"
        )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc), code=code).model_dump(),
        headers=headers,
    )


async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_ARGUMENT")


async def session_not_found_handler(request: Request, exc: SessionNotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "NOT_FOUND")


async def already_initialized_handler(request: Request, exc: AlreadyInitializedError):
    return _error_response(request, exc, status.HTTP_409_CONFLICT, "ALREADY_INITIALIZED")


async def size_mismatch_handler(request: Request, exc: SizeMismatchError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Size mismatch: expected={exc.expected} received={exc.received} "
        f"[request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": str(exc),
            "code": "SIZE_MISMATCH",
            "expected": exc.expected,
            "received": exc.received,
        },
    )


async def not_initialized_handler(request: Request, exc: NotInitializedError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "NOT_INITIALIZED")


async def storage_error_handler(request: Request, exc: StorageError):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "STORAGE_ERROR")


async def range_not_satisfiable_handler(request: Request, exc: RangeNotSatisfiableError):
    return _error_response(
        request,
        exc,
        status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE,
        "RANGE_NOT_SATISFIABLE",
        headers={"Content-Range": f"bytes */{exc.file_size}"},
    )


async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
    return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED, "INVALID_CREDENTIALS")


async def invalid_token_handler(request: Request, exc: InvalidTokenError):
    return _error_response(
        request,
        exc,
        status.HTTP_401_UNAUTHORIZED,
        "INVALID_TOKEN",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def upload_error_handler(request: Request, exc: UploadError):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR")


EXCEPTION_HANDLERS = {
    InvalidArgumentError: invalid_argument_handler,
    SessionNotFoundError: session_not_found_handler,
    AlreadyInitializedError: already_initialized_handler,
    SizeMismatchError: size_mismatch_handler,
    NotInitializedError: not_initialized_handler,
    StorageError: storage_error_handler,
    RangeNotSatisfiableError: range_not_satisfiable_handler,
    InvalidCredentialsError: invalid_credentials_handler,
    InvalidTokenError: invalid_token_handler,
    UploadError: upload_error_handler,
}


def create_app(config: Optional[ServerConfig] = None) -> FastAPI:
    """
    Build the upload server application.

    Args:
        config: Static configuration (defaults to the environment-derived one)

    Returns:
        FastAPI app with its services attached to ``app.state``
    """
    config = config or ServerConfig()

    app = FastAPI(
        title="Resumable Upload Server",
        description="Chunked, resumable file uploads with range-aware downloads",
        version="1.0.0",
        lifespan=lifespan,
    )

    session_repo = SessionRepository(config.metadata_dir)
    chunk_writer = ChunkWriter(config.files_dir)
    upload_service = UploadService(
        session_repo=session_repo,
        chunk_writer=chunk_writer,
        max_chunk_bytes=config.max_chunk_bytes,
    )

    app.state.config = config
    app.state.upload_service = upload_service
    app.state.download_service = DownloadService(chunk_writer)
    app.state.auth_service = AuthService(
        username=config.admin_username,
        secret_key=config.secret_key,
        token_expiration_seconds=config.token_expiration_seconds,
        password=config.admin_password,
        password_hash=config.admin_password_hash,
    )
    app.state.authenticator = Authenticator(config.secret_key)
    app.state.janitor = (
        UploadJanitor(
            upload_service,
            interval_seconds=config.cleanup_interval_seconds,
            retention_seconds=config.retention_seconds,
        )
        if config.enable_cleanup
        else None
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Middleware to log all HTTP requests and responses.
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()

        logger.info(
            f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
        )

        response = await call_next(request)

        duration = time.time() - start_time

        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
        )

        response.headers["X-Request-ID"] = request_id

        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Content-Range", "Range"],
        expose_headers=["Content-Range", "Content-Length", "Accept-Ranges", "X-Request-ID"],
    )

    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)

    app.include_router(auth_router)
    app.include_router(upload_router)

    @app.get("/")
    async def root():
        """
        Root endpoint for health check.
        """
        return {
            "message": "Resumable Upload Server API",
            "status": "running",
            "chunk_size_bytes": config.chunk_size_bytes,
        }

    @app.get("/health")
    async def health_check():
        """
        Liveness probe. Returns 200 if the service is alive.
        """
        return {"status": "healthy", "service": "upload_server"}

    @app.get("/ready")
    async def ready_check():
        """
        Readiness probe. Verifies the upload directory is writable.
        """
        upload_dir = config.upload_dir
        ready = os.path.isdir(upload_dir) and os.access(upload_dir, os.W_OK)
        return JSONResponse(
            status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ready": ready, "upload_dir": str(upload_dir)},
        )

    return app


app = create_app()


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "upload_server.main:app",
        host=UPLOAD_SERVER_HOST,
        port=UPLOAD_SERVER_PORT,
    )


if __name__ == "__main__":
    main()
