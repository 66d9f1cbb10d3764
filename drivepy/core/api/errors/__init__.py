"""Drive API errors and exceptions."""
from .api_errors import DriveAPIError, DriveFileNotFoundError, APIErrorCodes

__all__ = [
    'DriveAPIError',
    'DriveFileNotFoundError',
    'APIErrorCodes',
]
