"""Tests for upload models."""
import pytest

from drivepy.core.api.retry import BackoffScheduler
from drivepy.core.upload.models import (
    UploadSession,
    UploadState,
    HttpMethod,
    ChunkRange,
    UploadProgress,
    UploadResult
)
from drivepy.core.upload.services import BytesPayload


def make_session(size=5000, **kwargs):
    payload = BytesPayload(b'x' * size, content_type='text/plain', name='notes.txt')
    return UploadSession(access_token='token', payload=payload, **kwargs)


class TestUploadSession:
    """Test suite for UploadSession."""

    def test_defaults(self):
        """Test a fresh session."""
        session = make_session()

        assert session.offset == 0
        assert session.session_uri is None
        assert session.state is UploadState.INITIATING
        assert isinstance(session.retry, BackoffScheduler)
        assert session.total_size == 5000
        assert session.content_type == 'text/plain'

    def test_default_metadata_from_payload(self):
        """Test metadata defaults to payload name and type."""
        session = make_session()

        assert session.metadata == {'name': 'notes.txt', 'mimeType': 'text/plain'}

    def test_explicit_metadata_kept(self):
        """Test explicit metadata is sent as given."""
        session = make_session(metadata={'name': 'other', 'parents': ['p1']})

        assert session.metadata == {'name': 'other', 'parents': ['p1']}

    def test_create_uses_post(self):
        """Test sessions without a target id create a file."""
        session = make_session()

        assert session.method is HttpMethod.POST
        assert session.is_replace is False

    def test_replace_uses_patch(self):
        """Test sessions with a target id replace content."""
        session = make_session(target_id='abc')

        assert session.method is HttpMethod.PATCH
        assert session.is_replace is True

    def test_token_required(self):
        """Test empty token is rejected."""
        with pytest.raises(ValueError, match="token"):
            UploadSession(access_token='', payload=BytesPayload(b'a'))

    def test_negative_chunk_size_rejected(self):
        """Test negative chunk size is rejected."""
        with pytest.raises(ValueError):
            make_session(chunk_size=-1)

    def test_token_not_in_repr(self):
        """Test the token never shows up in repr."""
        session = UploadSession(access_token='secret-token', payload=BytesPayload(b'a'))

        assert 'secret-token' not in repr(session)

    def test_session_uri_set_once(self):
        """Test the session URI cannot change once set."""
        session = make_session()
        session.set_session_uri('https://upload/1')
        session.set_session_uri('https://upload/1')

        with pytest.raises(ValueError):
            session.set_session_uri('https://upload/2')

        assert session.session_uri == 'https://upload/1'

    def test_set_offset_bounds(self):
        """Test offset stays within [0, size]."""
        session = make_session()
        session.set_offset(5000)

        assert session.offset == 5000

        with pytest.raises(ValueError):
            session.set_offset(5001)
        with pytest.raises(ValueError):
            session.set_offset(-1)

    @pytest.mark.parametrize("size,chunk", [
        (1, 1),
        (10, 3),
        (5000, 1000),
        (5001, 1000),
        (25_000_000, 20_000_000),
        (7, 100),
    ])
    def test_ranges_tile_payload(self, size, chunk):
        """Test consecutive ranges cover [0, size) exactly."""
        session = make_session(size=size, chunk_size=chunk)
        ranges = []
        while session.offset < size:
            chunk_range = session.next_range()
            ranges.append(chunk_range)
            session.set_offset(chunk_range.end)

        assert ranges[0].start == 0
        assert ranges[-1].end == size
        for previous, current in zip(ranges, ranges[1:]):
            assert previous.end == current.start
        assert all(0 < r.size <= chunk for r in ranges)

    def test_zero_chunk_size_sends_remainder(self):
        """Test chunk size 0 sends everything from the offset."""
        session = make_session(size=5000, chunk_size=0)
        session.set_offset(1000)

        chunk_range = session.next_range()

        assert (chunk_range.start, chunk_range.end) == (1000, 5000)


class TestChunkRange:
    """Test suite for ChunkRange."""

    def test_content_range(self):
        """Test Content-Range header value."""
        chunk_range = ChunkRange(0, 20_000_000, 25_000_000)

        assert chunk_range.size == 20_000_000
        assert chunk_range.content_range == 'bytes 0-19999999/25000000'

    def test_last_range(self):
        """Test the final range ends at total - 1."""
        assert ChunkRange(20_000_000, 25_000_000, 25_000_000).content_range == \
            'bytes 20000000-24999999/25000000'

    def test_empty_range(self):
        """Test an empty range uses the unknown-range form."""
        assert ChunkRange(0, 0, 0).content_range == 'bytes */0'


class TestUploadState:
    """Test suite for UploadState."""

    @pytest.mark.parametrize("state", [UploadState.COMPLETE, UploadState.FAILED, UploadState.CANCELLED])
    def test_terminal(self, state):
        """Test terminal states."""
        assert state.is_terminal

    @pytest.mark.parametrize("state", [
        UploadState.INITIATING,
        UploadState.TRANSMITTING,
        UploadState.RETRY_WAITING,
        UploadState.RESUMING
    ])
    def test_not_terminal(self, state):
        """Test non-terminal states."""
        assert not state.is_terminal


class TestUploadProgress:
    """Test suite for UploadProgress."""

    def test_percentage(self):
        """Test percentage calculation."""
        progress = UploadProgress(total_bytes=1000, uploaded_bytes=250)

        assert progress.percentage == 25.0
        assert not progress.is_complete

    def test_empty_payload_is_complete(self):
        """Test zero-byte payloads report 100%."""
        progress = UploadProgress(total_bytes=0)

        assert progress.percentage == 100.0
        assert progress.is_complete


class TestUploadResult:
    """Test suite for UploadResult."""

    def test_file_id_from_json(self):
        """Test file id read from a JSON resource."""
        result = UploadResult(resource={'id': 'abc'}, file_size=10, session_uri='u')

        assert result.file_id == 'abc'

    def test_file_id_from_text(self):
        """Test raw text resources have no id."""
        result = UploadResult(resource='ok', file_size=10, session_uri='u')

        assert result.file_id is None
