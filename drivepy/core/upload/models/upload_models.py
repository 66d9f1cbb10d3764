"""
Data models for upload module.

Uses dataclasses for type-safe data structures. UploadSession is the only
mutable one and is owned by a single UploadOrchestrator run.
"""
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, Union, Mapping

from ...api.retry import BackoffScheduler
from ..protocols import PayloadProtocol


class UploadState(str, Enum):
    """States of the resumable upload state machine."""
    INITIATING = 'initiating'
    TRANSMITTING = 'transmitting'
    RETRY_WAITING = 'retry_waiting'
    RESUMING = 'resuming'
    COMPLETE = 'complete'
    FAILED = 'failed'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        """Returns True for states no transition leaves."""
        return self in (UploadState.COMPLETE, UploadState.FAILED, UploadState.CANCELLED)


class HttpMethod(str, Enum):
    """Session creation verb, fixed when the session is built."""
    POST = 'POST'
    PATCH = 'PATCH'


@dataclass
class UploadSession:
    """
    Unit of work for one file transfer.

    Attributes:
        access_token: Bearer credential (excluded from repr)
        payload: Byte source being uploaded
        metadata: Resource metadata sent at session creation
        chunk_size: Maximum bytes per transmission, 0 sends everything at once
        target_id: Existing file id when replacing content
        session_uri: Upload endpoint issued by the server
        offset: Next byte to send
        state: Current state machine state
        retry: Backoff state for transient failures
    """
    access_token: str = field(repr=False)
    payload: PayloadProtocol
    metadata: Optional[Dict[str, Any]] = None
    chunk_size: int = 0
    target_id: Optional[str] = None
    session_uri: Optional[str] = None
    offset: int = 0
    state: UploadState = UploadState.INITIATING
    retry: BackoffScheduler = field(default_factory=BackoffScheduler)
    started_at: float = field(default_factory=time.monotonic)
    method: HttpMethod = field(init=False)

    def __post_init__(self):
        if not self.access_token:
            raise ValueError("Access token is required")
        if self.chunk_size < 0:
            raise ValueError("Chunk size cannot be negative")
        if self.metadata is None:
            self.metadata = {
                'name': self.payload.name,
                'mimeType': self.payload.content_type,
            }
        self.method = HttpMethod.PATCH if self.target_id else HttpMethod.POST

    @property
    def is_replace(self) -> bool:
        """True when existing content is being replaced."""
        return self.method is HttpMethod.PATCH

    @property
    def total_size(self) -> int:
        """Total payload length in bytes."""
        return self.payload.size

    @property
    def content_type(self) -> str:
        """Declared content type of the whole payload."""
        return self.payload.content_type

    def set_session_uri(self, uri: str) -> None:
        """Stores the server-issued endpoint; it cannot change once set."""
        if self.session_uri is not None and self.session_uri != uri:
            raise ValueError("Session URI is already set")
        self.session_uri = uri

    def set_offset(self, offset: int) -> None:
        """Moves to a server-confirmed offset."""
        if not 0 <= offset <= self.total_size:
            raise ValueError(
                f"Offset {offset} outside payload of {self.total_size} bytes"
            )
        self.offset = offset

    def next_range(self) -> 'ChunkRange':
        """Byte range of the next transmission."""
        if self.chunk_size > 0:
            end = min(self.offset + self.chunk_size, self.total_size)
        else:
            end = self.total_size
        return ChunkRange(self.offset, end, self.total_size)

    @property
    def elapsed(self) -> float:
        """Seconds since the session was created."""
        return time.monotonic() - self.started_at


@dataclass(frozen=True)
class ChunkRange:
    """
    Half-open byte range ``[start, end)`` of one transmission.

    Attributes:
        start: First byte
        end: One past the last byte
        total: Total payload size
    """
    start: int
    end: int
    total: int

    @property
    def size(self) -> int:
        """Returns range size."""
        return self.end - self.start

    @property
    def content_range(self) -> str:
        """Value of the Content-Range header for this range."""
        if self.size == 0:
            return f"bytes */{self.total}"
        return f"bytes {self.start}-{self.end - 1}/{self.total}"


@dataclass(frozen=True)
class ResponseSnapshot:
    """Status, headers and body of an HTTP response, read eagerly."""
    status: int
    headers: Mapping[str, str]
    body: str = ''


@dataclass(frozen=True)
class Complete:
    """The server stored the whole payload."""
    resource: Union[Dict[str, Any], str]
    response: Optional[ResponseSnapshot] = None


@dataclass(frozen=True)
class Partial:
    """The server acknowledged a prefix; continue at new_offset."""
    new_offset: Optional[int]
    response: Optional[ResponseSnapshot] = None


@dataclass(frozen=True)
class ClientError:
    """Terminal rejection (4xx)."""
    response: ResponseSnapshot


@dataclass(frozen=True)
class TransientError:
    """5xx or transport failure, worth retrying."""
    cause: Union[ResponseSnapshot, BaseException]


ChunkOutcome = Union[Complete, Partial, ClientError, TransientError]


@dataclass
class UploadProgress:
    """
    Upload progress information.

    Attributes:
        total_bytes: Total payload size
        uploaded_bytes: Bytes of the payload sent so far
    """
    total_bytes: int
    uploaded_bytes: int = 0

    @property
    def percentage(self) -> float:
        """Returns upload progress as percentage."""
        if self.total_bytes == 0:
            return 100.0
        return (self.uploaded_bytes / self.total_bytes) * 100

    @property
    def is_complete(self) -> bool:
        """Returns True once every byte has been sent."""
        return self.uploaded_bytes >= self.total_bytes


@dataclass(frozen=True)
class UploadResult:
    """
    Result of a successful upload.

    Attributes:
        resource: Final resource description (parsed JSON, or raw text)
        file_size: Size of uploaded payload
        session_uri: Endpoint the content was sent to
        transmissions: Number of chunk PUTs issued
        retries: Number of backoff waits taken
    """
    resource: Union[Dict[str, Any], str]
    file_size: int
    session_uri: str
    transmissions: int = 0
    retries: int = 0

    @property
    def file_id(self) -> Optional[str]:
        """Id of the stored file, when the server returned JSON."""
        if isinstance(self.resource, dict):
            return self.resource.get('id')
        return None
