"""
drivepy - Async Python client for Drive file storage.

Usage:
    >>> from drivepy import DriveClient
    >>> 
    >>> async with DriveClient(access_token) as drive:
    ...     result = await drive.upload("report.pdf")
    ...     print(result.file_id)
"""
import logging
from .client import DriveClient

# Configuration
from .core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    RetryConfig,
    UploadOptions,
    AsyncAPIClient,
    DriveAPIError,
    DriveFileNotFoundError
)

# Upload engine
from .core.upload import (
    UploadFacade,
    UploadOrchestrator,
    UploadResult,
    UploadProgress,
    UploadState,
    BytesPayload,
    FilePayload,
    UploadError,
    SessionInitiationError,
    ChunkUploadClientError,
    ChunkUploadTransientError,
    MalformedResponseError
)

# Queries
from .core.query import Operators, Conjunctions, parse_query, parse_fields
from .core.exceptions import DriveException, QueryError

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for drivepy modules.
    
    Sets the level of every drivepy logger and keeps propagation on so
    records reach the application's handlers.
    
    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'drivepy',
        'drivepy.client',
        'drivepy.api',
        'drivepy.upload',
        'drivepy.upload.coordinator',
        'drivepy.upload.session',
        'drivepy.upload.chunk',
        'drivepy.upload.retry',
        'drivepy.upload.file',
    ]
    
    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'DriveClient',
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'RetryConfig',
    'UploadOptions',
    'AsyncAPIClient',
    'UploadFacade',
    'UploadOrchestrator',
    'UploadResult',
    'UploadProgress',
    'UploadState',
    'BytesPayload',
    'FilePayload',
    'Operators',
    'Conjunctions',
    'parse_query',
    'parse_fields',
    'DriveException',
    'DriveAPIError',
    'DriveFileNotFoundError',
    'QueryError',
    'UploadError',
    'SessionInitiationError',
    'ChunkUploadClientError',
    'ChunkUploadTransientError',
    'MalformedResponseError',
    'setup_logging',
]
