"""Upload services module."""
from .payload_service import BytesPayload, FilePayload, DEFAULT_MIME_TYPE
from .session_service import SessionInitiator
from .chunk_service import ChunkTransmitter

__all__ = [
    'BytesPayload',
    'FilePayload',
    'DEFAULT_MIME_TYPE',
    'SessionInitiator',
    'ChunkTransmitter',
]
