"""Range-aware download of upload byte images."""

from dataclasses import dataclass
from typing import Iterator, Optional

from common.content_range import ContentRangeError, format_content_range, parse_range_header
from common.logging_config import get_logger
from upload_server.chunk_writer import ChunkWriter
from upload_server.exceptions import (
    InvalidArgumentError,
    RangeNotSatisfiableError,
    SessionNotFoundError,
)
from upload_server.utils import validate_file_id

logger = get_logger(__name__)


@dataclass(frozen=True)
class DownloadPlan:
    """
    What to send for a download request.

    ``start`` and ``end`` are inclusive and already clamped to ``file_size``,
    which is the size observed when the request was planned.
    """
    file_id: str
    start: int
    end: int
    file_size: int
    partial: bool

    @property
    def length(self) -> int:
        return self.end - self.start + 1 if self.file_size else 0

    @property
    def content_range(self) -> str:
        return format_content_range(self.start, self.end, self.file_size)


class DownloadService:
    """
    Serves whatever bytes the byte image currently holds.

    Downloads never take the identifier lock, so a download running while
    chunks arrive is a best-effort snapshot.
    """

    def __init__(self, chunk_writer: ChunkWriter):
        self.chunk_writer = chunk_writer

    def plan(self, file_id: str, range_header: Optional[str] = None) -> DownloadPlan:
        """
        Resolve a download request against the current byte image.

        Args:
            file_id: Upload identifier
            range_header: Raw ``Range`` header value, if any

        Raises:
            InvalidArgumentError: If file_id or the range header is malformed
            SessionNotFoundError: If no byte image exists
            RangeNotSatisfiableError: If the range starts past the end of the file
        """
        validate_file_id(file_id)

        file_size = self.chunk_writer.get_size(file_id)
        if file_size is None:
            raise SessionNotFoundError(f"File {file_id} not found")

        if not range_header:
            return DownloadPlan(
                file_id=file_id,
                start=0,
                end=max(file_size - 1, 0),
                file_size=file_size,
                partial=False,
            )

        try:
            requested = parse_range_header(range_header)
        except ContentRangeError as e:
            raise InvalidArgumentError(str(e)) from e

        resolved = requested.resolve(file_size)
        if resolved is None:
            logger.warning(f"Unsatisfiable range {range_header!r} for {file_id} [file_size={file_size}]")
            raise RangeNotSatisfiableError(
                f"Requested range {range_header!r} not satisfiable for file of {file_size} bytes",
                file_size=file_size,
            )

        start, end = resolved
        return DownloadPlan(file_id=file_id, start=start, end=end, file_size=file_size, partial=True)

    def stream(self, plan: DownloadPlan) -> Iterator[bytes]:
        """Yield the planned bytes in pieces."""
        if plan.length == 0:
            return iter(())
        return self._stream(plan)

    def _stream(self, plan: DownloadPlan) -> Iterator[bytes]:
        sent = 0
        try:
            for piece in self.chunk_writer.read_range(plan.file_id, plan.start, plan.length):
                sent += len(piece)
                yield piece
        except FileNotFoundError:
            logger.warning(f"Byte image {plan.file_id} disappeared during download after {sent} bytes")
            raise

        if sent < plan.length:
            logger.warning(
                f"Short read for {plan.file_id}: sent {sent} of {plan.length} planned bytes"
            )
        else:
            logger.debug(f"Streamed {sent} bytes of {plan.file_id}")

