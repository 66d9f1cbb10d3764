"""
Custom exceptions for Drive storage operations.

This module defines the base exception hierarchy shared by the files API
wrapper, the query builder and the upload engine.
"""
from typing import Optional, Any


class DriveException(Exception):
    """Base exception for all drivepy errors."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            status: HTTP status code (if available)
        """
        self.status = status
        super().__init__(message)


class DriveRequestError(DriveException):
    """Exception raised for API request errors."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Any = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            status: HTTP status code (if available)
            body: Raw response body (if available)
        """
        self.body = body
        super().__init__(message, status)


class QueryError(DriveException):
    """Exception raised when a query term cannot be rendered."""

    def __init__(self, message: str, term: Any = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            term: The offending query term
        """
        self.term = term
        super().__init__(message)
