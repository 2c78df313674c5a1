"""Manages upload byte images on disk: offset writes and range reads."""

import os
from pathlib import Path
from typing import Iterator, List, Optional

from common.constants import STREAM_PIECE_SIZE


class ChunkWriter:
    """
    Places chunks into per-identifier byte images under ``files_dir``.

    A byte image is addressed by absolute offset. Writes never truncate and
    may land past the current end of file; the gap reads back as zeros until
    it is written.
    """

    def __init__(self, files_dir: Path):
        self.files_dir = Path(files_dir)

    def ensure_directory(self) -> None:
        """Ensure the byte image directory exists."""
        self.files_dir.mkdir(parents=True, exist_ok=True)

    def get_path(self, file_id: str) -> Path:
        """
        Get the byte image path for an upload.

        Args:
            file_id: Upload identifier

        Returns:
            Path object for the byte image
        """
        return self.files_dir / file_id

    def write_chunk(self, file_id: str, start: int, data: bytes) -> int:
        """
        Write data at absolute offset ``start`` of the byte image.

        The file is created if absent and never truncated. The handle is
        closed before returning.

        Args:
            file_id: Upload identifier
            start: Absolute byte offset
            data: Chunk payload

        Returns:
            Number of bytes written

        Raises:
            OSError: If the write fails (disk full, permissions, ...)
        """
        self.ensure_directory()
        fd = os.open(self.get_path(file_id), os.O_WRONLY | os.O_CREAT, 0o644)
        with os.fdopen(fd, 'wb') as f:
            f.seek(start)
            view = memoryview(data)
            while view:
                written = f.write(view)
                view = view[written:]
            f.flush()
            os.fsync(f.fileno())
        return len(data)

    def exists(self, file_id: str) -> bool:
        return self.get_path(file_id).is_file()

    def get_size(self, file_id: str) -> Optional[int]:
        """
        Get the current size of a byte image.

        Returns:
            Size in bytes, or None if the byte image doesn't exist
        """
        try:
            return self.get_path(file_id).stat().st_size
        except FileNotFoundError:
            return None

    def get_mtime(self, file_id: str) -> Optional[float]:
        try:
            return self.get_path(file_id).stat().st_mtime
        except FileNotFoundError:
            return None

    def read_range(
        self,
        file_id: str,
        start: int,
        length: int,
        piece_size: int = STREAM_PIECE_SIZE,
    ) -> Iterator[bytes]:
        """
        Stream ``length`` bytes starting at ``start``.

        Stops early if the byte image ends sooner; never reads past it.

        Yields:
            Data pieces of at most piece_size bytes

        Raises:
            FileNotFoundError: If the byte image does not exist
        """
        with open(self.get_path(file_id), 'rb') as f:
            f.seek(start)
            remaining = length
            while remaining > 0:
                piece = f.read(min(piece_size, remaining))
                if not piece:
                    break
                remaining -= len(piece)
                yield piece

    def delete(self, file_id: str) -> bool:
        """
        Delete a byte image.

        Returns:
            True if the file was deleted, False if it didn't exist
        """
        try:
            self.get_path(file_id).unlink()
        except FileNotFoundError:
            return False
        return True

    def list_ids(self) -> List[str]:
        """List identifiers that currently have a byte image."""
        if not self.files_dir.exists():
            return []
        return sorted(path.name for path in self.files_dir.iterdir() if path.is_file())
