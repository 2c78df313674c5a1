"""Upload session repository backed by one JSON record per identifier."""

import json
import os
import tempfile
from pathlib import Path
from typing import List

from common.logging_config import get_logger
from upload_server.exceptions import AlreadyInitializedError, SessionNotFoundError
from upload_server.types import UploadSession, UploadStatus
from upload_server.utils import utc_now

logger = get_logger(__name__)

RECORD_SUFFIX = ".json"


class SessionRepository:
    """
    Durable store of upload sessions.

    Records live in ``metadata_dir/<file_id>.json``. Every write goes to a
    temporary file in the same directory which is then moved into place, so
    a concurrent reader sees either the old or the new record. The
    repository does no locking; read-modify-write sequences are serialized
    by the caller.
    """

    def __init__(self, metadata_dir: Path):
        self.metadata_dir = Path(metadata_dir)

    def ensure_directory(self) -> None:
        self.metadata_dir.mkdir(parents=True, exist_ok=True)

    def record_path(self, file_id: str) -> Path:
        return self.metadata_dir / f"{file_id}{RECORD_SUFFIX}"

    def exists(self, file_id: str) -> bool:
        return self.record_path(file_id).exists()

    def create(self, file_id: str, total_bytes: int) -> UploadSession:
        """
        Create a pending session.

        Raises:
            AlreadyInitializedError: If a record for file_id exists
            OSError: If the record cannot be written
        """
        session = UploadSession(
            file_id=file_id,
            status=UploadStatus.PENDING,
            received_bytes=0,
            total_bytes=total_bytes,
            next_expected_byte=0,
            last_updated=utc_now(),
        )

        self.ensure_directory()
        tmp_path = self._write_temp(session)
        try:
            os.link(tmp_path, self.record_path(file_id))
        except FileExistsError:
            raise AlreadyInitializedError(f"Upload {file_id} is already initialized")
        finally:
            os.unlink(tmp_path)

        logger.debug(f"Created session record for {file_id} [total_bytes={total_bytes}]")
        return session

    def load(self, file_id: str) -> UploadSession:
        """
        Load a session.

        Raises:
            SessionNotFoundError: If no record exists
            OSError, ValueError: If the record cannot be read or parsed
        """
        try:
            with open(self.record_path(file_id), 'r') as f:
                data = json.load(f)
        except FileNotFoundError:
            raise SessionNotFoundError(f"Upload {file_id} not found")

        return UploadSession.from_dict(data)

    def save(self, session: UploadSession) -> None:
        """Atomically replace the record for session.file_id."""
        self.ensure_directory()
        tmp_path = self._write_temp(session)
        try:
            os.replace(tmp_path, self.record_path(session.file_id))
        except OSError:
            os.unlink(tmp_path)
            raise

    def delete(self, file_id: str) -> bool:
        """
        Delete a session record.

        Returns:
            True if a record was removed, False if none existed
        """
        try:
            self.record_path(file_id).unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Deleted session record for {file_id}")
        return True

    def list_ids(self) -> List[str]:
        """List identifiers that currently have a record."""
        if not self.metadata_dir.exists():
            return []
        return sorted(path.name[:-len(RECORD_SUFFIX)] for path in self.metadata_dir.glob(f"*{RECORD_SUFFIX}"))

    def _write_temp(self, session: UploadSession) -> str:
        fd, tmp_path = tempfile.mkstemp(
            prefix=".rec.",
            suffix=".tmp",
            dir=self.metadata_dir,
        )
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(session.to_dict(), f)
                f.flush()
                os.fsync(f.fileno())
        except BaseException:
            os.unlink(tmp_path)
            raise
        return tmp_path
