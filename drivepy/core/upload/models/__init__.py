"""Upload models."""
from .upload_models import (
    UploadState,
    HttpMethod,
    UploadSession,
    ChunkRange,
    ResponseSnapshot,
    Complete,
    Partial,
    ClientError,
    TransientError,
    ChunkOutcome,
    UploadProgress,
    UploadResult
)

__all__ = [
    'UploadState',
    'HttpMethod',
    'UploadSession',
    'ChunkRange',
    'ResponseSnapshot',
    'Complete',
    'Partial',
    'ClientError',
    'TransientError',
    'ChunkOutcome',
    'UploadProgress',
    'UploadResult'
]
