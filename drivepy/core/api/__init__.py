"""Drive API module: transport, configuration, errors, events and retry."""
from .errors import DriveAPIError, DriveFileNotFoundError, APIErrorCodes
from .events import EventEmitter
from .retry import RetryStrategy, BackoffScheduler
from .config import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    RetryConfig,
    UploadOptions
)
from .async_client import AsyncAPIClient

__all__ = [
    # Async client
    'AsyncAPIClient',
    
    # Configuration
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'RetryConfig',
    'UploadOptions',
    
    # Errors
    'DriveAPIError',
    'DriveFileNotFoundError',
    'APIErrorCodes',
    
    # Events
    'EventEmitter',
    
    # Retry
    'RetryStrategy',
    'BackoffScheduler',
]
