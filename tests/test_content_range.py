"""Tests for Content-Range and Range header handling."""

import pytest

from common.content_range import (
    ByteRange,
    ContentRangeError,
    format_content_range,
    parse_content_range,
    parse_range_header,
)


def test_parse_content_range():
    """Test a well-formed chunk header is parsed with inclusive end."""
    parsed = parse_content_range('bytes 0-4/10')

    assert parsed.start == 0
    assert parsed.end == 4
    assert parsed.total == 10
    assert parsed.length == 5


def test_parse_content_range_single_byte():
    """Test a one-byte range is accepted."""
    parsed = parse_content_range('bytes 9-9/10')
    assert parsed.length == 1


@pytest.mark.parametrize('header', [
    'bytes 5-4/10',
    'bytes 0-4/0',
    'bytes 0-4',
    'items 0-4/10',
    'bytes a-4/10',
    'bytes -1-4/10',
    'bytes 0-4/*',
])
def test_parse_content_range_rejects_malformed(header):
    """Test malformed chunk headers raise ContentRangeError."""
    with pytest.raises(ContentRangeError):
        parse_content_range(header)


def test_parse_content_range_missing():
    """Test missing header is reported explicitly."""
    with pytest.raises(ContentRangeError, match='required'):
        parse_content_range(None)


def test_format_content_range():
    """Test formatting matches the parse grammar."""
    assert format_content_range(2, 5, 10) == 'bytes 2-5/10'
    assert parse_content_range(format_content_range(2, 5, 10)).length == 4


def test_parse_range_header_forms():
    """Test closed, open and suffix ranges."""
    assert parse_range_header('bytes=2-5') == ByteRange(start=2, end=5)
    assert parse_range_header('bytes=7-') == ByteRange(start=7, end=None)
    assert parse_range_header('bytes=-3') == ByteRange(start=None, end=3)


@pytest.mark.parametrize('header', ['bytes=5-2', 'bytes=-', 'bytes=0-1,4-5', 'lines=0-1', 'bytes=x-1'])
def test_parse_range_header_rejects_malformed(header):
    """Test malformed Range headers raise ContentRangeError."""
    with pytest.raises(ContentRangeError):
        parse_range_header(header)


def test_byte_range_resolve_clamps_end():
    """Test an end past the file is clamped to the last byte."""
    assert ByteRange(start=2, end=100).resolve(10) == (2, 9)
    assert ByteRange(start=2, end=None).resolve(10) == (2, 9)


def test_byte_range_resolve_suffix():
    """Test suffix ranges select the last N bytes, capped at the file size."""
    assert ByteRange(start=None, end=3).resolve(10) == (7, 9)
    assert ByteRange(start=None, end=50).resolve(10) == (0, 9)


def test_byte_range_resolve_unsatisfiable():
    """Test ranges that start at or beyond the end cannot be satisfied."""
    assert ByteRange(start=10, end=None).resolve(10) is None
    assert ByteRange(start=None, end=0).resolve(10) is None
    assert ByteRange(start=0, end=0).resolve(0) is None
