"""
Upload error taxonomy.

Terminal errors end the upload and reach the caller. Transient errors are
retried by the coordinator and only surface when a retry cap or deadline
was configured.
"""
from typing import Any, Mapping, Optional

from ..exceptions import DriveException


class UploadError(DriveException):
    """Base class for resumable upload failures."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            status: HTTP status of the failing response (None for transport errors)
            body: Raw response body
            headers: Response headers
        """
        self.body = body
        self.headers = dict(headers or {})
        super().__init__(message, status)

    @classmethod
    def from_response(cls, message: str, response) -> 'UploadError':
        """Build the error from a ResponseSnapshot."""
        return cls(
            f"{message}: HTTP {response.status}",
            status=response.status,
            body=response.body,
            headers=response.headers
        )


class SessionInitiationError(UploadError):
    """The resumable session could not be opened. Never retried."""
    pass


class ChunkUploadClientError(UploadError):
    """A chunk or status probe was rejected with a 4xx. Never retried."""
    pass


class ChunkUploadTransientError(UploadError):
    """5xx or transport failure that outlived the configured retry budget."""

    def __init__(self, message: str, *args, cause: Optional[BaseException] = None, **kwargs) -> None:
        self.cause = cause
        super().__init__(message, *args, **kwargs)


class MalformedResponseError(UploadError):
    """A success response that should have been JSON but was not."""
    pass
