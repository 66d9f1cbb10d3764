"""Drive API error codes and exceptions."""
import json
from typing import Any, Dict, Optional

from ...exceptions import DriveRequestError


class APIErrorCodes:
    """HTTP statuses returned by the Drive files API."""
    
    ERROR_CODES: Dict[int, str] = {
        400: 'badRequest (400): The request was malformed or a required parameter is missing.',
        401: 'authError (401): Invalid or expired access token.',
        403: 'forbidden (403): The user does not have sufficient permissions, or a quota was exceeded.',
        404: 'notFound (404): File not found.',
        409: 'conflict (409): The resource was modified concurrently.',
        410: 'gone (410): The upload session or resource no longer exists.',
        412: 'preconditionFailed (412): A request precondition was not satisfied.',
        416: 'requestedRangeNotSatisfiable (416): The requested range cannot be satisfied.',
        429: 'rateLimitExceeded (429): Too many requests. Please wait, then try again.',
        500: 'backendError (500): An unexpected error occurred while processing the request.',
        502: 'badGateway (502): The server received an invalid response upstream.',
        503: 'serviceUnavailable (503): The service is temporarily unavailable.',
        504: 'gatewayTimeout (504): The server did not respond in time.',
    }
    
    @classmethod
    def get_message(cls, status: int) -> str:
        """Gets error message for HTTP status."""
        return cls.ERROR_CODES.get(status, f"Unknown error: {status}")
    

class DriveAPIError(DriveRequestError):
    """Exception raised for Drive API errors."""
    
    def __init__(self, status: Optional[int], message: Optional[str] = None, body: Any = None):
        self.reason = self._extract_reason(body)
        self.message = message or (
            APIErrorCodes.get_message(status) if status is not None else "Network error"
        )
        super().__init__(self.message, status, body)
    
    @staticmethod
    def _extract_reason(body: Any) -> Optional[str]:
        """Pull the first error reason out of a Google-style error document."""
        if isinstance(body, str):
            try:
                body = json.loads(body)
            except ValueError:
                return None
        if not isinstance(body, dict):
            return None
        error = body.get('error')
        if not isinstance(error, dict):
            return None
        errors = error.get('errors') or []
        if errors and isinstance(errors[0], dict):
            return errors[0].get('reason')
        return error.get('status')


class DriveFileNotFoundError(DriveAPIError):
    """Exception raised when a file or folder is not found."""
    pass
