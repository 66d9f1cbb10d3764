"""
Upload module for resumable content uploads.

Session initiation, chunk transmission and backoff are separate services
sequenced by UploadOrchestrator.
"""
from .facade import UploadFacade
from .coordinator import UploadOrchestrator
from .errors import (
    UploadError,
    SessionInitiationError,
    ChunkUploadClientError,
    ChunkUploadTransientError,
    MalformedResponseError
)
from .models import (
    UploadSession,
    UploadState,
    UploadResult,
    UploadProgress
)
from .protocols import PayloadProtocol, ProgressObserver
from .services import BytesPayload, FilePayload, SessionInitiator, ChunkTransmitter

__all__ = [
    # Main classes
    'UploadFacade',
    'UploadOrchestrator',
    'SessionInitiator',
    'ChunkTransmitter',
    
    # Payloads
    'BytesPayload',
    'FilePayload',
    
    # Models
    'UploadSession',
    'UploadState',
    'UploadResult',
    'UploadProgress',
    
    # Errors
    'UploadError',
    'SessionInitiationError',
    'ChunkUploadClientError',
    'ChunkUploadTransientError',
    'MalformedResponseError',
    
    # Protocols
    'PayloadProtocol',
    'ProgressObserver',
]
