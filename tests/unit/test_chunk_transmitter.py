"""Tests for chunk transmission."""
import asyncio
import logging
import pytest
import aiohttp

from conftest import (
    FakeSession,
    FakeResponse,
    SESSION_URI,
    resume_incomplete,
    upload_done
)
from drivepy.core.api.events import EventEmitter
from drivepy.core.upload.models import (
    UploadSession,
    ResponseSnapshot,
    Complete,
    Partial,
    ClientError,
    TransientError
)
from drivepy.core.upload.services import ChunkTransmitter, BytesPayload


def make_session(data=b'0123456789' * 500, chunk_size=0, offset=0):
    session = UploadSession(
        access_token='token',
        payload=BytesPayload(data, content_type='application/pdf', name='doc.pdf'),
        chunk_size=chunk_size
    )
    session.set_session_uri(SESSION_URI)
    session.set_offset(offset)
    return session


class TestParseRange:
    """Test suite for Range header parsing."""

    @pytest.mark.parametrize("value,expected", [
        ('bytes=0-999', 1000),
        ('bytes=0-19999999', 20_000_000),
        ('0-41', 42),
        (None, None),
        ('', None),
        ('bytes=', None),
    ])
    def test_parse_range(self, value, expected):
        """Test upper bound + 1 is returned."""
        assert ChunkTransmitter.parse_range(value) == expected


class TestClassify:
    """Test suite for response classification."""

    @pytest.fixture
    def transmitter(self):
        return ChunkTransmitter(FakeSession())

    @pytest.mark.parametrize("status", [200, 201])
    def test_success_is_complete(self, transmitter, status):
        """Test 200/201 complete the upload with the parsed resource."""
        outcome = transmitter.classify(ResponseSnapshot(status, {}, '{"id": "abc"}'))

        assert isinstance(outcome, Complete)
        assert outcome.resource == {'id': 'abc'}

    def test_malformed_success_body_falls_back_to_text(self, transmitter, caplog):
        """Test a non-JSON success body is returned raw and logged."""
        caplog.set_level(logging.WARNING, logger='drivepy.upload.chunk')

        outcome = transmitter.classify(ResponseSnapshot(200, {}, 'OK, stored'))

        assert isinstance(outcome, Complete)
        assert outcome.resource == 'OK, stored'
        assert 'not JSON' in caplog.text

    def test_308_with_range(self, transmitter):
        """Test 308 continues after the acknowledged range."""
        outcome = transmitter.classify(ResponseSnapshot(308, {'Range': 'bytes=0-999'}))

        assert outcome == Partial(1000, ResponseSnapshot(308, {'Range': 'bytes=0-999'}))

    def test_308_without_range_restarts(self, transmitter):
        """Test 308 without Range restarts at 0."""
        outcome = transmitter.classify(ResponseSnapshot(308, {}))

        assert isinstance(outcome, Partial)
        assert outcome.new_offset == 0

    def test_probe_308_without_range_keeps_offset(self, transmitter):
        """Test a probe's 308 without Range leaves the offset alone."""
        outcome = transmitter.classify(ResponseSnapshot(308, {}), probing=True)

        assert isinstance(outcome, Partial)
        assert outcome.new_offset is None

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 410])
    def test_client_errors(self, transmitter, status):
        """Test other statuses below 500 are terminal."""
        outcome = transmitter.classify(ResponseSnapshot(status, {}, 'denied'))

        assert isinstance(outcome, ClientError)
        assert outcome.response.status == status

    @pytest.mark.parametrize("status", [500, 502, 503, 504])
    def test_server_errors_are_transient(self, transmitter, status):
        """Test 5xx statuses are transient."""
        outcome = transmitter.classify(ResponseSnapshot(status, {}))

        assert isinstance(outcome, TransientError)


class TestSendRange:
    """Test suite for ChunkTransmitter.send_range."""

    @pytest.mark.asyncio
    async def test_sends_whole_payload_without_chunking(self):
        """Test chunk size 0 sends the remainder in one PUT."""
        http = FakeSession([upload_done()])
        session = make_session()

        outcome = await ChunkTransmitter(http).send_range(session)

        assert isinstance(outcome, Complete)
        call = http.calls[0]
        assert call.method == 'PUT'
        assert call.url == SESSION_URI
        assert call.headers['Content-Range'] == 'bytes 0-4999/5000'
        assert call.headers['Content-Type'] == 'application/pdf'
        assert call.headers['X-Upload-Content-Type'] == 'application/pdf'
        assert call.body == session.payload._data

    @pytest.mark.asyncio
    async def test_sends_slice_at_offset(self):
        """Test the body is the slice starting at the session offset."""
        http = FakeSession([resume_incomplete(2999)])
        session = make_session(chunk_size=1000, offset=2000)

        outcome = await ChunkTransmitter(http).send_range(session)

        assert outcome.new_offset == 3000
        assert http.calls[0].headers['Content-Range'] == 'bytes 2000-2999/5000'
        assert http.calls[0].body == session.payload._data[2000:3000]

    @pytest.mark.asyncio
    async def test_transmitter_does_not_change_session(self):
        """Test outcomes are returned, not applied."""
        http = FakeSession([resume_incomplete(999)])
        session = make_session(chunk_size=1000)

        await ChunkTransmitter(http).send_range(session)

        assert session.offset == 0

    @pytest.mark.asyncio
    async def test_empty_payload(self):
        """Test a zero-byte payload is sent with an empty body."""
        http = FakeSession([upload_done()])
        session = make_session(data=b'')

        outcome = await ChunkTransmitter(http).send_range(session)

        assert isinstance(outcome, Complete)
        assert http.calls[0].body == b''
        assert http.calls[0].headers['Content-Range'] == 'bytes */0'

    @pytest.mark.asyncio
    async def test_proxy_passed_to_put(self):
        """Test chunks and probes go through the configured proxy."""
        http = FakeSession([resume_incomplete(999), resume_incomplete(999)])
        transmitter = ChunkTransmitter(http, proxy='http://proxy:3128')
        session = make_session(chunk_size=1000)

        await transmitter.send_range(session)
        await transmitter.probe(session)

        assert [c.proxy for c in http.calls] == ['http://proxy:3128'] * 2

    @pytest.mark.asyncio
    async def test_transport_failure_is_transient(self):
        """Test connection errors become TransientError."""
        error = aiohttp.ClientConnectionError("connection reset")
        http = FakeSession([error])

        outcome = await ChunkTransmitter(http).send_range(make_session())

        assert isinstance(outcome, TransientError)
        assert outcome.cause is error

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self):
        """Test timeouts become TransientError."""
        http = FakeSession([asyncio.TimeoutError()])

        outcome = await ChunkTransmitter(http).send_range(make_session())

        assert isinstance(outcome, TransientError)

    @pytest.mark.asyncio
    async def test_requires_session_uri(self):
        """Test sending before initiation is an error."""
        session = UploadSession(access_token='token', payload=BytesPayload(b'abc'))

        with pytest.raises(ValueError):
            await ChunkTransmitter(FakeSession()).send_range(session)

    @pytest.mark.asyncio
    async def test_progress_reported_while_streaming(self):
        """Test progress counts payload bytes sent so far."""
        events = EventEmitter()
        seen = []
        events.on('progress', lambda p: seen.append(p.uploaded_bytes))
        http = FakeSession([resume_incomplete(2999)])
        session = make_session(chunk_size=2000, offset=1000)

        await ChunkTransmitter(http, events, progress_step=500).send_range(session)

        assert seen == [1500, 2000, 2500, 3000]

    @pytest.mark.asyncio
    async def test_failing_observer_does_not_abort(self):
        """Test observer exceptions are swallowed."""
        events = EventEmitter()

        def broken(progress):
            raise RuntimeError("observer bug")

        events.on('progress', broken)
        http = FakeSession([upload_done()])

        outcome = await ChunkTransmitter(http, events).send_range(make_session())

        assert isinstance(outcome, Complete)
        assert len(http.calls[0].body) == 5000


class TestProbe:
    """Test suite for ChunkTransmitter.probe."""

    @pytest.mark.asyncio
    async def test_probe_request(self):
        """Test the probe is an empty PUT asking for the status."""
        http = FakeSession([resume_incomplete(1999)])
        session = make_session(chunk_size=1000)

        outcome = await ChunkTransmitter(http).probe(session)

        call = http.calls[0]
        assert call.method == 'PUT'
        assert call.headers['Content-Range'] == 'bytes */5000'
        assert call.headers['Content-Length'] == '0'
        assert call.body == b''
        assert outcome.new_offset == 2000

    @pytest.mark.asyncio
    async def test_probe_completed_upload(self):
        """Test a probe answered 200 reports completion."""
        http = FakeSession([upload_done('abc')])

        outcome = await ChunkTransmitter(http).probe(make_session())

        assert isinstance(outcome, Complete)
        assert outcome.resource['id'] == 'abc'

    @pytest.mark.asyncio
    async def test_probe_server_error(self):
        """Test a probe answered 503 is transient."""
        http = FakeSession([FakeResponse(503)])

        outcome = await ChunkTransmitter(http).probe(make_session())

        assert isinstance(outcome, TransientError)
