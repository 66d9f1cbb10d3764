"""
Upload coordinator.

Runs the resumable upload state machine:

    INITIATING -> TRANSMITTING -> (Partial) TRANSMITTING
                               -> (Complete) COMPLETE
                               -> (ClientError) FAILED
                               -> (TransientError) RETRY_WAITING -> RESUMING -> TRANSMITTING

Each call to ``upload`` builds its own UploadSession; nothing is shared
between uploads.
"""
import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

import aiohttp

from ..api.config import UploadOptions
from ..api.events import EventEmitter
from ..api.retry import BackoffScheduler
from ..logging import get_logger
from .errors import (
    SessionInitiationError,
    ChunkUploadClientError,
    ChunkUploadTransientError
)
from .models import (
    UploadSession,
    UploadState,
    UploadResult,
    ResponseSnapshot,
    Complete,
    Partial,
    ClientError,
    TransientError,
    ChunkOutcome
)
from .protocols import PayloadProtocol, ProgressObserver
from .services import SessionInitiator, ChunkTransmitter

logger = get_logger('drivepy.upload.coordinator')


class UploadOrchestrator:
    """
    Coordinates one resumable upload per ``upload`` call.

    Uses dependency injection for the HTTP session and the sleep function,
    making it:
    - Testable (fake transport, instant backoff)
    - Reusable (one shared aiohttp session for many independent uploads)

    Example:
        >>> orchestrator = UploadOrchestrator(options=UploadOptions(chunk_size=8 * 1024 * 1024))
        >>> result = await orchestrator.upload(token, FilePayload("report.pdf"))
        >>> print(result.file_id)
    """

    def __init__(
        self,
        http: Optional[aiohttp.ClientSession] = None,
        options: Optional[UploadOptions] = None,
        progress_callback: Optional[ProgressObserver] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None
    ):
        """
        Initialize upload orchestrator.

        Args:
            http: Shared HTTP session (one is created per upload if omitted)
            options: Default upload options
            progress_callback: Observer for every upload run by this instance
            sleep: Backoff sleep coroutine (defaults to asyncio.sleep)
        """
        self._http = http
        self._options = options or UploadOptions()
        self._progress_callback = progress_callback
        self._sleep = sleep or asyncio.sleep
        # Most recent session, kept for inspection in tests only
        self._last_session: Optional[UploadSession] = None

    @property
    def options(self) -> UploadOptions:
        return self._options

    async def upload(
        self,
        access_token: str,
        payload: PayloadProtocol,
        metadata: Optional[Dict[str, Any]] = None,
        target_id: Optional[str] = None,
        chunk_size: Optional[int] = None,
        on_progress: Optional[ProgressObserver] = None,
        extra_params: Optional[Dict[str, str]] = None
    ) -> UploadResult:
        """
        Upload a payload with the resumable protocol.

        Args:
            access_token: Bearer token
            payload: Content to upload
            metadata: Resource metadata (defaults to payload name and type)
            target_id: Existing file id to replace content of
            chunk_size: Bytes per transmission (defaults to options.chunk_size)
            on_progress: Observer for this upload only
            extra_params: Query parameters added to session creation

        Returns:
            UploadResult with the final resource

        Raises:
            SessionInitiationError: Session could not be opened
            ChunkUploadClientError: A transmission was rejected
            ChunkUploadTransientError: Retry cap or deadline exhausted
            asyncio.CancelledError: The task was cancelled
        """
        session = UploadSession(
            access_token=access_token,
            payload=payload,
            metadata=metadata,
            chunk_size=self._options.chunk_size if chunk_size is None else chunk_size,
            target_id=target_id,
            retry=BackoffScheduler(sleep=self._sleep)
        )
        self._last_session = session

        events = EventEmitter('drivepy.upload.progress')
        for observer in (self._progress_callback, on_progress):
            if observer:
                events.on('progress', observer)

        params = dict(self._options.extra_params)
        params.update(extra_params or {})

        size_mb = session.total_size / (1024 * 1024)
        logger.info(
            f"Starting upload: {payload.name or 'payload'} ({size_mb:.2f} MB, "
            f"{'replace' if session.is_replace else 'create'})"
        )

        owns_http = self._http is None
        http = self._http or aiohttp.ClientSession()
        await payload.open()
        try:
            initiator = SessionInitiator(http, self._options.timeout, proxy=self._options.proxy)
            transmitter = ChunkTransmitter(
                http, events, self._options.timeout, proxy=self._options.proxy
            )
            return await self._run(session, initiator, transmitter, params)
        except asyncio.CancelledError:
            session.state = UploadState.CANCELLED
            logger.info("Upload cancelled")
            raise
        finally:
            await payload.close()
            if owns_http:
                await http.close()

    async def _run(
        self,
        session: UploadSession,
        initiator: SessionInitiator,
        transmitter: ChunkTransmitter,
        params: Dict[str, str]
    ) -> UploadResult:
        """Drive the session from INITIATING to a terminal state."""
        try:
            await initiator.initiate(session, params, self._options.base_url)
        except SessionInitiationError:
            session.state = UploadState.FAILED
            raise
        session.state = UploadState.TRANSMITTING

        transmissions = 0
        retries = 0
        # Transient failures since a transmission last moved the offset;
        # a probe answering 308 does not count as progress
        failures = 0
        last_failure: Optional[TransientError] = None

        while True:
            sent_from: Optional[int] = None
            if session.state is UploadState.TRANSMITTING:
                sent_from = session.offset
                outcome = await transmitter.send_range(session)
                transmissions += 1
            elif session.state is UploadState.RETRY_WAITING:
                self._check_retry_budget(session, failures, last_failure)
                await session.retry.wait()
                retries += 1
                session.state = UploadState.RESUMING
                continue
            else:
                outcome = await transmitter.probe(session)

            result = self._apply(session, outcome)
            if isinstance(outcome, TransientError):
                last_failure = outcome
                failures += 1
            elif sent_from is not None and session.offset > sent_from:
                failures = 0
            if result is not None:
                logger.info(
                    f"Upload complete: {session.total_size} bytes in "
                    f"{transmissions} transmissions, {retries} retries"
                )
                return UploadResult(
                    resource=result.resource,
                    file_size=session.total_size,
                    session_uri=session.session_uri,
                    transmissions=transmissions,
                    retries=retries
                )

    def _apply(self, session: UploadSession, outcome: ChunkOutcome) -> Optional[Complete]:
        """
        Apply a transmission or probe outcome to the session.

        Returns:
            The Complete outcome once the upload is done, else None
        """
        if isinstance(outcome, Complete):
            session.set_offset(session.total_size)
            session.retry.reset()
            session.state = UploadState.COMPLETE
            return outcome

        if isinstance(outcome, Partial):
            if outcome.new_offset is not None:
                session.set_offset(min(outcome.new_offset, session.total_size))
            session.retry.reset()
            logger.debug(f"Server holds {session.offset}/{session.total_size} bytes")
            session.state = UploadState.TRANSMITTING
            return None

        if isinstance(outcome, ClientError):
            session.state = UploadState.FAILED
            logger.error(f"Upload rejected with HTTP {outcome.response.status}")
            raise ChunkUploadClientError.from_response("Chunk upload rejected", outcome.response)

        logger.warning(
            f"Transient failure at offset {session.offset}, "
            f"retrying in {session.retry.interval} ms"
        )
        session.state = UploadState.RETRY_WAITING
        return None

    def _check_retry_budget(
        self,
        session: UploadSession,
        failures: int,
        failure: Optional[TransientError]
    ) -> None:
        """
        Fail the session when the configured cap or deadline is spent.

        ``failures`` counts consecutive transient failures, so the wait that
        would follow failure number max_retries + 1 is never taken.
        """
        options = self._options
        exhausted: List[str] = []
        if options.max_retries is not None and failures > options.max_retries:
            exhausted.append(f"{options.max_retries} retries")
        if (
            options.deadline is not None
            and session.elapsed + session.retry.interval / 1000 > options.deadline
        ):
            exhausted.append(f"deadline of {options.deadline}s")
        if not exhausted:
            return

        session.state = UploadState.FAILED
        message = f"Upload gave up after {' and '.join(exhausted)}"
        logger.error(message)
        cause = failure.cause if failure else None
        if isinstance(cause, ResponseSnapshot):
            raise ChunkUploadTransientError(
                message,
                status=cause.status,
                body=cause.body,
                headers=cause.headers
            )
        raise ChunkUploadTransientError(message, cause=cause) from cause
