"""Upload, status and download API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Header, Query, UploadFile, status
from fastapi.responses import StreamingResponse

from common.content_range import ContentRangeError, parse_content_range
from upload_server.auth import get_current_user
from upload_server.dependencies import get_download_service, get_upload_service
from upload_server.exceptions import InvalidArgumentError
from upload_server.schemas.uploads import (
    ChunkUploadResponse,
    InitUploadResponse,
    SessionResponse,
)
from upload_server.services.download_service import DownloadService
from upload_server.services.upload_service import UploadService
from upload_server.utils import parse_positive_int

router = APIRouter(tags=["Uploads"])


@router.post("/init_upload", response_model=InitUploadResponse)
def init_upload(
    file_id: Optional[str] = Query(None),
    total_size: Optional[str] = Query(None),
    current_user: str = Depends(get_current_user),
    upload_service: UploadService = Depends(get_upload_service),
):
    """
    Start a resumable upload.

    Parameters:
        - file_id: Client-chosen identifier ([A-Za-z0-9._-], up to 255 chars)
        - total_size: Final size of the file in bytes
        - Authorization header: Bearer <token> (required)

    Returns:
        - file_id and the new session metadata (status "pending")

    Raises:
        - 400: Missing or invalid parameters
        - 401: Invalid or missing token
        - 409: Upload already initialized
        - 500: Storage failure
    """
    total_bytes = parse_positive_int(total_size, "total_size")

    session = upload_service.init_upload(file_id or "", total_bytes)

    return InitUploadResponse(
        message="Upload initialized successfully",
        file_id=session.file_id,
        metadata=SessionResponse.from_session(session),
    )


@router.post("/upload_chunk", response_model=ChunkUploadResponse)
def upload_chunk(
    file_id: Optional[str] = Query(None),
    content_range: Optional[str] = Header(None, alias="Content-Range"),
    chunk: Optional[UploadFile] = File(None),
    current_user: str = Depends(get_current_user),
    upload_service: UploadService = Depends(get_upload_service),
):
    """
    Upload one byte range of a file.

    Parameters:
        - file_id: Identifier passed to /init_upload
        - Content-Range header: "bytes start-end/total" (end inclusive)
        - chunk: multipart form field with exactly end-start+1 bytes
        - Authorization header: Bearer <token> (required)

    Returns:
        - next_expected_byte, received_bytes, total_bytes, status
          (a range already below received_bytes is acknowledged unchanged)

    Raises:
        - 400: Malformed range, size mismatch or missing chunk
        - 401: Invalid or missing token
        - 404: Upload not initialized
        - 500: Storage failure
    """
    try:
        byte_range = parse_content_range(content_range)
    except ContentRangeError as e:
        raise InvalidArgumentError(str(e)) from e

    if chunk is None:
        raise InvalidArgumentError("chunk form field is required")

    max_bytes = upload_service.max_chunk_bytes
    if max_bytes is not None and byte_range.length > max_bytes:
        raise InvalidArgumentError(
            f"Chunk of {byte_range.length} bytes exceeds the limit of {max_bytes}"
        )

    # one byte past the declared range is enough to detect an oversized part
    payload = chunk.file.read(byte_range.length + 1)

    result = upload_service.upload_chunk(
        file_id=file_id or "",
        start=byte_range.start,
        end=byte_range.end,
        declared_total=byte_range.total,
        payload=payload,
    )

    return ChunkUploadResponse.from_result(result)


@router.get("/status/{file_id}", response_model=SessionResponse)
def status_check(
    file_id: str,
    upload_service: UploadService = Depends(get_upload_service),
):
    """
    Report upload progress.

    Returns:
        - Session snapshot (may lag a concurrent chunk upload)

    Raises:
        - 404: Upload not found
    """
    session = upload_service.get_status(file_id)
    return SessionResponse.from_session(session)


@router.get("/download/{file_id}")
def download_file(
    file_id: str,
    range_header: Optional[str] = Header(None, alias="Range"),
    download_service: DownloadService = Depends(get_download_service),
):
    """
    Download the bytes received so far.

    Parameters:
        - Range header (optional): "bytes=start-end", "bytes=start-" or "bytes=-suffix"

    Returns:
        - 200 with the whole byte image, or 206 with the requested range

    Raises:
        - 400: Malformed Range header
        - 404: No data for this identifier
        - 416: Range starts beyond the end of the file
    """
    plan = download_service.plan(file_id, range_header)

    headers = {
        "Content-Length": str(plan.length),
        "Accept-Ranges": "bytes",
    }

    if plan.partial:
        headers["Content-Range"] = plan.content_range
        return StreamingResponse(
            download_service.stream(plan),
            status_code=status.HTTP_206_PARTIAL_CONTENT,
            media_type="application/octet-stream",
            headers=headers,
        )

    headers["Content-Disposition"] = f'attachment; filename="{plan.file_id}"'
    return StreamingResponse(
        download_service.stream(plan),
        media_type="application/octet-stream",
        headers=headers,
    )
