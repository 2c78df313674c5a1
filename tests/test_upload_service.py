"""Tests for the upload session manager."""

import threading

import pytest

from upload_server.exceptions import (
    AlreadyInitializedError,
    InvalidArgumentError,
    NotInitializedError,
    SessionNotFoundError,
    SizeMismatchError,
    StorageError,
)
from upload_server.types import UploadStatus


def test_init_upload(upload_service):
    """Test init creates a pending session with nothing received."""
    upload_service.init_upload('file-1', 10)

    session = upload_service.get_status('file-1')
    assert session.total_bytes == 10
    assert session.received_bytes == 0
    assert session.next_expected_byte == 0
    assert session.status == UploadStatus.PENDING


@pytest.mark.parametrize('file_id', ['', '../etc/passwd', 'a/b', '.hidden', 'abc\n', 'x' * 201])
def test_init_rejects_bad_identifier(upload_service, file_id):
    """Test identifiers that are not safe file names are rejected."""
    with pytest.raises(InvalidArgumentError):
        upload_service.init_upload(file_id, 10)


def test_longest_identifier_round_trips(upload_service):
    """Test an identifier at the length limit can be initialized, written and read."""
    file_id = 'b' * 200

    upload_service.init_upload(file_id, 4)
    result = upload_service.upload_chunk(file_id, 0, 3, 4, b'data')

    assert result.status == UploadStatus.COMPLETE
    assert upload_service.get_status(file_id).received_bytes == 4
    assert upload_service.session_repo.list_ids() == [file_id]


@pytest.mark.parametrize('total', [0, -1])
def test_init_rejects_non_positive_size(upload_service, total):
    """Test total size must be positive."""
    with pytest.raises(InvalidArgumentError):
        upload_service.init_upload('file-1', total)


def test_init_twice(upload_service):
    """Test re-initializing keeps the original session."""
    upload_service.init_upload('file-1', 10)
    upload_service.upload_chunk('file-1', 0, 4, 10, b'01234')

    with pytest.raises(AlreadyInitializedError):
        upload_service.init_upload('file-1', 10)

    assert upload_service.get_status('file-1').received_bytes == 5


def test_chunks_complete_upload(upload_service):
    """Test two chunks reach the total and mark the session complete."""
    upload_service.init_upload('file-1', 10)

    first = upload_service.upload_chunk('file-1', 0, 4, 10, b'01234')
    assert first.next_expected_byte == 5
    assert first.status == UploadStatus.PARTIAL
    assert first.replayed is False

    second = upload_service.upload_chunk('file-1', 5, 9, 10, b'56789')
    assert second.received_bytes == 10
    assert second.status == UploadStatus.COMPLETE

    assert upload_service.chunk_writer.get_path('file-1').read_bytes() == b'0123456789'


def test_replayed_chunk_is_acknowledged(upload_service):
    """Test resending a processed chunk advances nothing and writes nothing."""
    upload_service.init_upload('file-1', 10)
    upload_service.upload_chunk('file-1', 0, 4, 10, b'01234')
    before = upload_service.get_status('file-1')

    replay = upload_service.upload_chunk('file-1', 0, 4, 10, b'XXXXX')

    assert replay.replayed is True
    assert replay.next_expected_byte == 5
    after = upload_service.get_status('file-1')
    assert after.received_bytes == 5
    assert after.last_updated == before.last_updated
    assert upload_service.chunk_writer.get_path('file-1').read_bytes() == b'01234'


def test_received_bytes_never_decreases(upload_service):
    """Test an out-of-order earlier chunk does not move the frontier back."""
    upload_service.init_upload('file-1', 10)
    upload_service.upload_chunk('file-1', 5, 9, 10, b'56789')
    assert upload_service.get_status('file-1').received_bytes == 10

    result = upload_service.upload_chunk('file-1', 0, 4, 10, b'01234')

    assert result.received_bytes == 10
    assert result.replayed is True


def test_gap_is_accepted(upload_service):
    """Test a chunk past the frontier is written and the gap reads as zeros."""
    upload_service.init_upload('file-1', 8)

    result = upload_service.upload_chunk('file-1', 4, 5, 8, b'ab')

    assert result.received_bytes == 6
    assert upload_service.chunk_writer.get_path('file-1').read_bytes() == b'\x00\x00\x00\x00ab'


def test_size_mismatch_leaves_metadata_unchanged(upload_service):
    """Test a chunk declaring another total is rejected without side effects."""
    upload_service.init_upload('file-1', 10)
    before = upload_service.get_status('file-1')

    with pytest.raises(SizeMismatchError) as exc_info:
        upload_service.upload_chunk('file-1', 0, 4, 20, b'01234')

    assert exc_info.value.expected == 10
    assert exc_info.value.received == 20
    assert upload_service.get_status('file-1') == before
    assert not upload_service.chunk_writer.exists('file-1')


def test_chunk_without_init(upload_service):
    """Test a chunk for an unknown identifier raises NotInitializedError."""
    with pytest.raises(NotInitializedError):
        upload_service.upload_chunk('ghost', 0, 4, 10, b'01234')


def test_chunk_range_past_total(upload_service):
    """Test a range ending at or beyond the total size is rejected."""
    upload_service.init_upload('file-1', 10)

    with pytest.raises(InvalidArgumentError):
        upload_service.upload_chunk('file-1', 8, 10, 10, b'890')


def test_chunk_payload_length_must_match_range(upload_service):
    """Test the payload must cover exactly end-start+1 bytes."""
    upload_service.init_upload('file-1', 10)

    with pytest.raises(InvalidArgumentError):
        upload_service.upload_chunk('file-1', 0, 4, 10, b'0123')

    assert upload_service.get_status('file-1').received_bytes == 0


def test_chunk_exceeds_limit(upload_service):
    """Test chunks larger than max_chunk_bytes are rejected."""
    upload_service.init_upload('big', 4096)

    with pytest.raises(InvalidArgumentError):
        upload_service.upload_chunk('big', 0, 2047, 4096, b'x' * 2048)


def test_invalid_range_arguments(upload_service):
    """Test negative start and reversed ranges are rejected before any lookup."""
    with pytest.raises(InvalidArgumentError):
        upload_service.upload_chunk('file-1', -1, 4, 10, b'')
    with pytest.raises(InvalidArgumentError):
        upload_service.upload_chunk('file-1', 5, 4, 10, b'')


def test_status_unknown(upload_service):
    """Test status of an unknown identifier raises SessionNotFoundError."""
    with pytest.raises(SessionNotFoundError):
        upload_service.get_status('ghost')


def test_status_corrupt_record(upload_service):
    """Test an unparseable record is reported as a storage failure."""
    upload_service.init_upload('file-1', 10)
    upload_service.session_repo.record_path('file-1').write_text('{not json')

    with pytest.raises(StorageError):
        upload_service.get_status('file-1')


def test_write_failure_keeps_metadata(upload_service, monkeypatch):
    """Test a failed byte image write raises StorageError and advances nothing."""
    upload_service.init_upload('file-1', 10)

    def failing_write(file_id, start, data):
        raise OSError('disk full')

    monkeypatch.setattr(upload_service.chunk_writer, 'write_chunk', failing_write)

    with pytest.raises(StorageError):
        upload_service.upload_chunk('file-1', 0, 4, 10, b'01234')

    assert upload_service.get_status('file-1').received_bytes == 0


def test_concurrent_overlapping_chunks(upload_service):
    """Test concurrent same-identifier uploads end at the maximum end+1."""
    total = 1000
    data = bytes(i % 251 for i in range(total))
    upload_service.init_upload('shared', total)

    ranges = [(start, min(start + 199, total - 1)) for start in range(0, total, 100)]
    errors = []

    def send(start, end):
        try:
            upload_service.upload_chunk('shared', start, end, total, data[start:end + 1])
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=send, args=r) for r in ranges for _ in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    session = upload_service.get_status('shared')
    assert session.received_bytes == total
    assert session.status == UploadStatus.COMPLETE
    assert upload_service.chunk_writer.get_size('shared') == total


def test_different_identifiers_do_not_share_locks(upload_service):
    """Test holding one identifier's lock doesn't block another identifier."""
    upload_service.init_upload('a', 4)
    upload_service.init_upload('b', 4)

    with upload_service.locks.get('a'):
        result = upload_service.upload_chunk('b', 0, 3, 4, b'bbbb')

    assert result.status == UploadStatus.COMPLETE
    assert upload_service.get_status('a').received_bytes == 0


def test_lock_registry_reuses_locks(upload_service):
    """Test one lock is created per identifier and reused."""
    first = upload_service.locks.get('a')

    assert upload_service.locks.get('a') is first
    assert upload_service.locks.get('b') is not first
    assert len(upload_service.locks) == 2
