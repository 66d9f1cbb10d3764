"""
Chunk transmission service.

Sends byte ranges of a payload to a resumable session URI and classifies
the server's answer.
"""
import asyncio
import json
import re
from typing import AsyncIterator, Optional, Union

import aiohttp

from ...api.events import EventEmitter
from ...logging import get_logger
from ..errors import MalformedResponseError
from ..models import (
    UploadSession,
    ChunkRange,
    ResponseSnapshot,
    UploadProgress,
    Complete,
    Partial,
    ClientError,
    TransientError,
    ChunkOutcome
)


class ChunkTransmitter:
    """
    Transmits one range of an upload session per call.

    Responsibilities:
    - Slice the payload at the session offset
    - PUT the slice with its Content-Range
    - Report progress while the body streams
    - Turn the response into Complete / Partial / ClientError / TransientError

    The transmitter never changes the session; the coordinator applies
    outcomes.
    """

    DEFAULT_TIMEOUT = 120
    PROGRESS_STEP = 256 * 1024
    RESUME_INCOMPLETE = 308

    def __init__(
        self,
        http: aiohttp.ClientSession,
        events: Optional[EventEmitter] = None,
        timeout: int = DEFAULT_TIMEOUT,
        progress_step: int = PROGRESS_STEP,
        proxy: Optional[str] = None
    ):
        """
        Initialize chunk transmitter.

        Args:
            http: Shared HTTP session
            events: Emitter receiving 'progress' notifications
            timeout: Request timeout in seconds
            progress_step: Bytes streamed between two progress notifications
            proxy: Proxy URL, None connects directly
        """
        self._http = http
        self._events = events or EventEmitter('drivepy.upload.chunk')
        self._timeout = timeout
        self._progress_step = max(1, progress_step)
        self._proxy = proxy
        self._logger = get_logger('drivepy.upload.chunk')

    @staticmethod
    def parse_range(value: Optional[str]) -> Optional[int]:
        """
        Offset following a ``Range: bytes=0-N`` header.

        Returns:
            N + 1, or None when the header is missing or has no number
        """
        if not value:
            return None
        numbers = re.findall(r'\d+', value)
        if not numbers:
            return None
        return int(numbers[-1]) + 1

    @staticmethod
    def parse_resource(body: str):
        """Parsed JSON resource, or the raw text when it is not JSON."""
        if not body:
            return body
        try:
            return json.loads(body)
        except ValueError as e:
            error = MalformedResponseError(f"Upload response is not JSON: {e}", body=body)
            get_logger('drivepy.upload.chunk').warning(f"{error}; returning raw text")
            return body

    def classify(self, response: ResponseSnapshot, probing: bool = False) -> ChunkOutcome:
        """
        Interpret a chunk or probe response.

        Args:
            response: Response snapshot
            probing: True for a status probe, where a 308 without Range
                keeps the current offset instead of restarting at 0
        """
        status = response.status
        if status in (200, 201):
            return Complete(self.parse_resource(response.body), response)
        if status == self.RESUME_INCOMPLETE:
            new_offset = self.parse_range(response.headers.get('Range'))
            if new_offset is None and not probing:
                new_offset = 0
            return Partial(new_offset, response)
        if status < 500:
            return ClientError(response)
        return TransientError(response)

    def _headers(self, session: UploadSession, chunk: ChunkRange) -> dict:
        return {
            'Content-Type': session.content_type,
            'Content-Range': chunk.content_range,
            'Content-Length': str(chunk.size),
            'X-Upload-Content-Type': session.content_type,
        }

    async def _stream(self, data: bytes, chunk: ChunkRange) -> AsyncIterator[bytes]:
        """Yield data in steps, notifying progress after each one."""
        sent = 0
        while sent < len(data):
            piece = data[sent:sent + self._progress_step]
            yield piece
            sent += len(piece)
            self._events.emit(
                'progress',
                UploadProgress(total_bytes=chunk.total, uploaded_bytes=chunk.start + sent)
            )

    async def _put(self, url: str, headers: dict, body) -> Union[ResponseSnapshot, TransientError]:
        try:
            async with self._http.put(
                url,
                data=body,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                proxy=self._proxy
            ) as response:
                return ResponseSnapshot(
                    status=response.status,
                    headers=response.headers,
                    body=await response.text()
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return TransientError(e)

    async def send_range(self, session: UploadSession) -> ChunkOutcome:
        """
        Send the range starting at the session offset.

        Args:
            session: Upload session with a session URI

        Returns:
            The classified outcome
        """
        if session.session_uri is None:
            raise ValueError("Upload session has no session URI")

        chunk = session.next_range()
        data = await session.payload.read(chunk.start, chunk.end)
        body = self._stream(data, chunk) if data else b''

        self._logger.debug(
            f"Sending {chunk.content_range} ({chunk.size} bytes)"
        )
        result = await self._put(session.session_uri, self._headers(session, chunk), body)
        if isinstance(result, TransientError):
            self._logger.warning(f"Transport failure sending {chunk.content_range}: {result.cause}")
            return result

        outcome = self.classify(result)
        self._logger.debug(f"{chunk.content_range} answered HTTP {result.status}")
        return outcome

    async def probe(self, session: UploadSession) -> ChunkOutcome:
        """
        Ask the server how much of the payload it holds.

        Sends an empty PUT with ``Content-Range: bytes */{total}``.
        """
        if session.session_uri is None:
            raise ValueError("Upload session has no session URI")

        headers = {
            'Content-Range': f"bytes */{session.total_size}",
            'Content-Length': '0',
            'X-Upload-Content-Type': session.content_type,
        }
        self._logger.debug(f"Probing upload status ({session.total_size} bytes total)")
        result = await self._put(session.session_uri, headers, b'')
        if isinstance(result, TransientError):
            self._logger.warning(f"Transport failure probing upload status: {result.cause}")
            return result
        return self.classify(result, probing=True)
