"""Pydantic schemas for upload endpoints."""

from pydantic import BaseModel

from upload_server.types import ChunkResult, UploadSession


class SessionResponse(BaseModel):
    """Snapshot of an upload session."""
    file_id: str
    status: str
    received_bytes: int
    total_bytes: int
    next_expected_byte: int
    checksum: int
    last_updated: str

    @classmethod
    def from_session(cls, session: UploadSession) -> "SessionResponse":
        return cls(**session.to_dict())


class InitUploadResponse(BaseModel):
    """Response model for upload initialization."""
    message: str
    file_id: str
    metadata: SessionResponse


class ChunkUploadResponse(BaseModel):
    """Response model for a chunk upload."""
    message: str
    next_expected_byte: int
    received_bytes: int
    total_bytes: int
    status: str

    @classmethod
    def from_result(cls, result: ChunkResult) -> "ChunkUploadResponse":
        return cls(
            message="chunk already processed" if result.replayed else "chunk uploaded successfully",
            next_expected_byte=result.next_expected_byte,
            received_bytes=result.received_bytes,
            total_bytes=result.total_bytes,
            status=result.status.value,
        )
