"""Tests for byte image writes and range reads."""

import pytest

from upload_server.chunk_writer import ChunkWriter


@pytest.fixture
def writer(tmp_path):
    """Create chunk writer over a temporary directory."""
    return ChunkWriter(tmp_path / 'files')


def test_write_at_offsets(writer):
    """Test chunks land at their absolute offsets regardless of order."""
    writer.write_chunk('f', 5, b'56789')
    writer.write_chunk('f', 0, b'01234')

    assert writer.get_path('f').read_bytes() == b'0123456789'
    assert writer.get_size('f') == 10


def test_overwrite_does_not_truncate(writer):
    """Test rewriting an earlier range keeps the bytes after it."""
    writer.write_chunk('f', 0, b'0123456789')
    writer.write_chunk('f', 2, b'ab')

    assert writer.get_path('f').read_bytes() == b'01ab456789'


def test_gap_reads_as_zeros(writer):
    """Test writing past the end leaves a zero-filled gap."""
    writer.write_chunk('f', 4, b'xy')

    assert writer.get_path('f').read_bytes() == b'\x00\x00\x00\x00xy'


def test_read_range_in_pieces(writer):
    """Test range reads honour piece size and stop at the requested length."""
    writer.write_chunk('f', 0, b'0123456789')

    pieces = list(writer.read_range('f', 2, 5, piece_size=2))

    assert pieces == [b'23', b'45', b'6']


def test_read_range_stops_at_end_of_file(writer):
    """Test reads never go past the end of the byte image."""
    writer.write_chunk('f', 0, b'0123')

    assert b''.join(writer.read_range('f', 2, 10)) == b'23'


def test_missing_image(writer):
    """Test size, mtime and delete on an unknown identifier."""
    assert writer.get_size('missing') is None
    assert writer.get_mtime('missing') is None
    assert writer.exists('missing') is False
    assert writer.delete('missing') is False


def test_delete_and_list(writer):
    """Test list_ids tracks written and deleted images."""
    assert writer.list_ids() == []

    writer.write_chunk('a', 0, b'1')
    writer.write_chunk('b', 0, b'2')
    assert writer.list_ids() == ['a', 'b']

    assert writer.delete('a') is True
    assert writer.list_ids() == ['b']
