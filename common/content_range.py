"""Parsing and formatting of the byte-range headers used by uploads and downloads.

Two headers are involved:

* ``Content-Range: bytes start-end/total`` sent by the client with each chunk.
* ``Range: bytes=start-end`` (also ``bytes=start-`` and ``bytes=-suffix``)
  sent by the client when downloading.

All positions are 0-indexed and ``end`` is inclusive.
"""

import re
from dataclasses import dataclass
from typing import Optional

from common.constants import BYTES_UNIT


class ContentRangeError(ValueError):
    """Raised when a range header is syntactically invalid."""
    pass


_CONTENT_RANGE_RE = re.compile(r'^\s*bytes\s+(\d+)-(\d+)/(\d+)\s*$', re.IGNORECASE)
_RANGE_RE = re.compile(r'^\s*bytes\s*=\s*(\d*)\s*-\s*(\d*)\s*$', re.IGNORECASE)


@dataclass(frozen=True)
class ContentRange:
    """A chunk's position inside the declared file."""
    start: int
    end: int
    total: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class ByteRange:
    """
    A requested download range before it is resolved against a file size.

    ``start`` is None for a suffix range (``bytes=-N``), in which case
    ``end`` holds the suffix length. ``end`` is None for an open range.
    """
    start: Optional[int]
    end: Optional[int]

    def resolve(self, file_size: int) -> Optional[tuple[int, int]]:
        """
        Clamp the range to a file of ``file_size`` bytes.

        Returns:
            (start, end) inclusive, or None if the range cannot be satisfied
        """
        if self.start is None:
            if self.end == 0 or file_size == 0:
                return None
            return max(file_size - self.end, 0), file_size - 1

        if self.start >= file_size:
            return None

        end = file_size - 1 if self.end is None else min(self.end, file_size - 1)
        return self.start, end


def parse_content_range(header: Optional[str]) -> ContentRange:
    """
    Parse a ``Content-Range: bytes start-end/total`` header.

    Args:
        header: Raw header value

    Returns:
        ContentRange with start <= end and total > 0

    Raises:
        ContentRangeError: If the header is missing or malformed
    """
    if not header:
        raise ContentRangeError("Content-Range header is required")

    match = _CONTENT_RANGE_RE.match(header)
    if not match:
        raise ContentRangeError(f"Invalid Content-Range format: {header!r}")

    start, end, total = (int(group) for group in match.groups())

    if end < start:
        raise ContentRangeError(f"Invalid Content-Range: end byte {end} precedes start byte {start}")
    if total <= 0:
        raise ContentRangeError("Invalid Content-Range: total size must be positive")

    return ContentRange(start=start, end=end, total=total)


def format_content_range(start: int, end: int, total: int) -> str:
    """Build the Content-Range value for a chunk upload or a partial response."""
    return f"{BYTES_UNIT} {start}-{end}/{total}"


def parse_range_header(header: str) -> ByteRange:
    """
    Parse a single-range ``Range`` request header.

    Raises:
        ContentRangeError: On a non-bytes unit, multiple ranges, or bad numbers
    """
    if ',' in header:
        raise ContentRangeError("Multiple ranges are not supported")

    match = _RANGE_RE.match(header)
    if not match:
        raise ContentRangeError(f"Invalid Range header: {header!r}")

    start_str, end_str = match.groups()

    if not start_str and not end_str:
        raise ContentRangeError(f"Invalid Range header: {header!r}")

    if not start_str:
        return ByteRange(start=None, end=int(end_str))

    start = int(start_str)
    end = int(end_str) if end_str else None

    if end is not None and end < start:
        raise ContentRangeError(f"Invalid Range header: end {end} precedes start {start}")

    return ByteRange(start=start, end=end)
