"""Upload session manager: init, chunk placement and status."""

from datetime import datetime
from typing import Optional

from common.logging_config import get_logger
from upload_server.chunk_writer import ChunkWriter
from upload_server.exceptions import (
    InvalidArgumentError,
    NotInitializedError,
    SessionNotFoundError,
    SizeMismatchError,
    StorageError,
)
from upload_server.lock_registry import IdentifierLockRegistry
from upload_server.repositories.session_repository import SessionRepository
from upload_server.types import ChunkResult, UploadSession, UploadStatus
from upload_server.utils import utc_now, validate_file_id

logger = get_logger(__name__)


class UploadService:
    """
    Orchestrates the upload lifecycle for every identifier.

    All mutations of a session happen while holding that identifier's lock
    from the registry. Status reads do not take the lock.
    """

    def __init__(
        self,
        session_repo: SessionRepository,
        chunk_writer: ChunkWriter,
        locks: Optional[IdentifierLockRegistry] = None,
        max_chunk_bytes: Optional[int] = None,
    ):
        self.session_repo = session_repo
        self.chunk_writer = chunk_writer
        self.locks = locks if locks is not None else IdentifierLockRegistry()
        self.max_chunk_bytes = max_chunk_bytes

    def ensure_directories(self) -> None:
        try:
            self.session_repo.ensure_directory()
            self.chunk_writer.ensure_directory()
        except OSError as e:
            raise StorageError(f"Failed to create upload directories: {e}") from e

    def init_upload(self, file_id: str, total_bytes: int) -> UploadSession:
        """
        Create a pending session for file_id.

        Raises:
            InvalidArgumentError: If file_id is malformed or total_bytes <= 0
            AlreadyInitializedError: If a session already exists
            StorageError: If the record cannot be written
        """
        validate_file_id(file_id)
        if isinstance(total_bytes, bool) or not isinstance(total_bytes, int) or total_bytes <= 0:
            raise InvalidArgumentError("total_size must be a positive integer")

        self.ensure_directories()

        with self.locks.get(file_id):
            try:
                session = self.session_repo.create(file_id, total_bytes)
            except OSError as e:
                logger.error(f"Failed to write metadata for {file_id}: {e}", exc_info=True)
                raise StorageError("failed to write metadata file") from e

        logger.info(f"Upload initialized: {file_id} [total_bytes={total_bytes}]")
        return session

    def upload_chunk(
        self,
        file_id: str,
        start: int,
        end: int,
        declared_total: int,
        payload: bytes,
    ) -> ChunkResult:
        """
        Place bytes [start, end] (inclusive) of file_id and advance progress.

        A range lying entirely below the confirmed frontier is acknowledged
        without writing, so clients may redeliver chunks freely.

        Raises:
            InvalidArgumentError: Malformed identifier, range or payload length
            NotInitializedError: No session exists for file_id
            SizeMismatchError: declared_total differs from the size given at init
            StorageError: Writing the byte image or saving metadata failed
        """
        validate_file_id(file_id)
        if start < 0 or end < start:
            raise InvalidArgumentError(f"Invalid byte range {start}-{end}")
        if declared_total <= 0:
            raise InvalidArgumentError("total size must be a positive integer")

        with self.locks.get(file_id):
            session = self._load_for_update(file_id)

            if session.total_bytes != declared_total:
                logger.warning(
                    f"Total size mismatch for {file_id}: expected={session.total_bytes} received={declared_total}"
                )
                raise SizeMismatchError(
                    "total size mismatch",
                    expected=session.total_bytes,
                    received=declared_total,
                )

            if session.received_bytes >= end + 1:
                logger.info(
                    f"Chunk {start}-{end} of {file_id} already processed "
                    f"[received_bytes={session.received_bytes}]"
                )
                return self._result(session, replayed=True)

            if end >= session.total_bytes:
                raise InvalidArgumentError(
                    f"Byte range {start}-{end} exceeds total size {session.total_bytes}"
                )

            expected_length = end - start + 1
            if len(payload) != expected_length:
                raise InvalidArgumentError(
                    f"Chunk payload is {len(payload)} bytes but range {start}-{end} covers {expected_length}"
                )
            if self.max_chunk_bytes is not None and expected_length > self.max_chunk_bytes:
                raise InvalidArgumentError(
                    f"Chunk of {expected_length} bytes exceeds the limit of {self.max_chunk_bytes}"
                )

            if start > session.received_bytes:
                logger.warning(
                    f"Chunk {start}-{end} of {file_id} leaves a gap after byte {session.received_bytes}"
                )

            try:
                self.chunk_writer.write_chunk(file_id, start, payload)
            except OSError as e:
                logger.error(f"Failed to write chunk {start}-{end} of {file_id}: {e}", exc_info=True)
                raise StorageError("failed to write chunk") from e

            session.received_bytes = max(session.received_bytes, end + 1)
            session.next_expected_byte = session.received_bytes
            session.status = (
                UploadStatus.COMPLETE
                if session.received_bytes == session.total_bytes
                else UploadStatus.PARTIAL
            )
            session.last_updated = utc_now()

            try:
                self.session_repo.save(session)
            except OSError as e:
                logger.error(f"Failed to save metadata for {file_id}: {e}", exc_info=True)
                raise StorageError("failed to save metadata") from e

        logger.info(
            f"Chunk {start}-{end} of {file_id} stored "
            f"[received_bytes={session.received_bytes}/{session.total_bytes} status={session.status.value}]"
        )
        return self._result(session)

    def get_status(self, file_id: str) -> UploadSession:
        """
        Read the current session without locking.

        Raises:
            InvalidArgumentError: If file_id is malformed
            SessionNotFoundError: If no session exists
            StorageError: If the record is unreadable
        """
        validate_file_id(file_id)
        try:
            return self.session_repo.load(file_id)
        except SessionNotFoundError:
            raise
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Failed to read metadata for {file_id}: {e}", exc_info=True)
            raise StorageError("failed to read metadata") from e

    def delete_if_stale(self, file_id: str, cutoff: datetime) -> bool:
        """
        Remove a session and its byte image if it was last updated before cutoff.

        Takes the identifier lock so an in-flight chunk upload either finishes
        first (and refreshes last_updated) or starts after the deletion.

        Returns:
            True if the session was removed
        """
        with self.locks.get(file_id):
            try:
                session = self.session_repo.load(file_id)
            except SessionNotFoundError:
                return False

            if session.last_updated >= cutoff:
                return False

            self.chunk_writer.delete(file_id)
            self.session_repo.delete(file_id)

        logger.info(f"Removed stale upload {file_id} [last_updated={session.last_updated.isoformat()}]")
        return True

    def delete_orphaned_image(self, file_id: str, cutoff_timestamp: float) -> bool:
        """
        Remove a byte image that has no session record and was not modified since cutoff.
        """
        with self.locks.get(file_id):
            if self.session_repo.exists(file_id):
                return False
            mtime = self.chunk_writer.get_mtime(file_id)
            if mtime is None or mtime >= cutoff_timestamp:
                return False
            self.chunk_writer.delete(file_id)

        logger.info(f"Removed orphaned byte image {file_id}")
        return True

    def _load_for_update(self, file_id: str) -> UploadSession:
        try:
            return self.session_repo.load(file_id)
        except SessionNotFoundError:
            logger.warning(f"Chunk received for uninitialized upload {file_id}")
            raise NotInitializedError(f"Upload {file_id} not initialized, please call /init_upload first")
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Failed to read metadata for {file_id}: {e}", exc_info=True)
            raise StorageError("failed to read metadata") from e

    @staticmethod
    def _result(session: UploadSession, replayed: bool = False) -> ChunkResult:
        return ChunkResult(
            next_expected_byte=session.next_expected_byte,
            received_bytes=session.received_bytes,
            total_bytes=session.total_bytes,
            status=session.status,
            replayed=replayed,
        )
