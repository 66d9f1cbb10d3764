"""
Upload session service.

Opens resumable upload sessions against the Drive upload endpoint.
"""
import asyncio
import json
from typing import Dict, Optional
from urllib.parse import urlencode

import aiohttp

from ...logging import get_logger
from ..errors import SessionInitiationError
from ..models import UploadSession, ResponseSnapshot


class SessionInitiator:
    """
    Negotiates the server-issued session URI for one upload.

    Responsibilities:
    - Build the session creation URL
    - Send metadata with the declared payload length and type
    - Return the Location header of the response
    """

    DEFAULT_BASE_URL = 'https://www.googleapis.com/upload/drive/v3/files/'
    UPLOAD_TYPE = 'resumable'

    def __init__(
        self,
        http: aiohttp.ClientSession,
        timeout: int = 120,
        proxy: Optional[str] = None
    ):
        """
        Initialize session initiator.

        Args:
            http: Shared HTTP session
            timeout: Request timeout in seconds
            proxy: Proxy URL, None connects directly
        """
        self._http = http
        self._timeout = timeout
        self._proxy = proxy
        self._logger = get_logger('drivepy.upload.session')

    @classmethod
    def build_url(
        cls,
        target_id: Optional[str] = None,
        params: Optional[Dict[str, str]] = None,
        base_url: Optional[str] = None
    ) -> str:
        """
        Build the session creation URL.

        Example:
            >>> SessionInitiator.build_url('abc', {'fields': 'id'}, 'https://x/files/')
            'https://x/files/abc?uploadType=resumable&fields=id'
        """
        url = base_url or cls.DEFAULT_BASE_URL
        if target_id:
            url += target_id
        query = {'uploadType': cls.UPLOAD_TYPE}
        for key, value in (params or {}).items():
            if key != 'uploadType':
                query[key] = value
        return f"{url}?{urlencode(query)}"

    @staticmethod
    def build_headers(session: UploadSession) -> Dict[str, str]:
        """Headers of the session creation request."""
        return {
            'Authorization': f"Bearer {session.access_token}",
            'Content-Type': 'application/json; charset=UTF-8',
            'X-Upload-Content-Length': str(session.total_size),
            'X-Upload-Content-Type': session.content_type,
        }

    async def initiate(
        self,
        session: UploadSession,
        extra_params: Optional[Dict[str, str]] = None,
        base_url: Optional[str] = None
    ) -> str:
        """
        Open a resumable session and store its URI on the upload session.

        Args:
            session: Upload session (target id selects PATCH over POST)
            extra_params: Additional query parameters
            base_url: Upload endpoint override

        Returns:
            The session URI

        Raises:
            SessionInitiationError: On any non-success or transport failure
        """
        url = self.build_url(session.target_id, extra_params, base_url)
        method = session.method.value
        body = json.dumps(session.metadata)

        self._logger.debug(f"Opening upload session: {method} {url} ({session.total_size} bytes)")

        try:
            async with self._http.request(
                method,
                url,
                data=body,
                headers=self.build_headers(session),
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                proxy=self._proxy
            ) as response:
                snapshot = ResponseSnapshot(
                    status=response.status,
                    headers=response.headers,
                    body=await response.text()
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._logger.error(f"Upload session request failed: {e}")
            raise SessionInitiationError(f"Could not open upload session: {e}") from e

        if snapshot.status >= 400:
            self._logger.error(f"Upload session rejected with HTTP {snapshot.status}")
            raise SessionInitiationError.from_response("Upload session rejected", snapshot)

        location = snapshot.headers.get('Location')
        if not location:
            raise SessionInitiationError.from_response(
                "Upload session response has no Location header", snapshot
            )

        session.set_session_uri(location)
        self._logger.info(f"Upload session opened ({method}, {session.total_size} bytes)")
        return location
