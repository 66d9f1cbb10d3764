"""
Upload facade.

Provides a simplified interface for content uploads.
Follows Facade Pattern - hides payload construction and orchestration.
"""
from pathlib import Path
from typing import Optional, Union, Dict, Any, Callable
import logging

import aiohttp

from ..api.config import UploadOptions
from .coordinator import UploadOrchestrator
from .models import UploadResult, UploadProgress
from .protocols import PayloadProtocol
from .services import BytesPayload, FilePayload

Source = Union[str, Path, bytes, bytearray, PayloadProtocol]


class UploadFacade:
    """
    Simplified interface for resumable uploads.

    Accepts a path, raw bytes or any PayloadProtocol object.

    Example:
        >>> uploader = UploadFacade(access_token)
        >>> result = await uploader.upload("notes.txt")
        >>> print(result.file_id)
    """

    def __init__(
        self,
        access_token: str,
        http: Optional[aiohttp.ClientSession] = None,
        options: Optional[UploadOptions] = None,
        log_level: int = logging.INFO
    ):
        """
        Initialize upload facade.

        Args:
            access_token: Bearer token used for every upload
            http: Optional shared HTTP session
            options: Upload options
            log_level: Logging level for the upload loggers
        """
        if not access_token:
            raise ValueError("Access token is required")
        self._access_token = access_token
        self._logger = logging.getLogger('drivepy.upload')
        self._logger.setLevel(log_level)
        self._orchestrator = UploadOrchestrator(http=http, options=options)

    @staticmethod
    def to_payload(
        source: Source,
        content_type: Optional[str] = None,
        name: Optional[str] = None
    ) -> PayloadProtocol:
        """
        Wrap a source in a payload.

        Paths (str or Path) become FilePayload, bytes become BytesPayload;
        payload objects are returned unchanged.
        """
        if isinstance(source, (bytes, bytearray)):
            return BytesPayload(source, content_type=content_type, name=name)
        if isinstance(source, (str, Path)):
            return FilePayload(source, content_type=content_type, name=name)
        return source

    async def upload(
        self,
        source: Source,
        name: Optional[str] = None,
        content_type: Optional[str] = None,
        file_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        chunk_size: Optional[int] = None,
        on_progress: Optional[Callable[[UploadProgress], None]] = None
    ) -> UploadResult:
        """
        Upload content, creating a new file or replacing file_id's content.

        Args:
            source: Path, bytes or payload
            name: Remote file name
            content_type: Declared content type
            file_id: Existing file to replace
            metadata: Explicit metadata (overrides name/content_type)
            chunk_size: Bytes per transmission
            on_progress: Progress observer

        Returns:
            UploadResult with the stored resource
        """
        payload = self.to_payload(source, content_type=content_type, name=name)
        return await self._orchestrator.upload(
            self._access_token,
            payload,
            metadata=metadata,
            target_id=file_id,
            chunk_size=chunk_size,
            on_progress=on_progress
        )
