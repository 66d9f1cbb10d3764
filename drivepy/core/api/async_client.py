"""
Async Drive API client.

Fully asynchronous client for the files API with configuration support.
"""
import json
import logging
import asyncio
from typing import Dict, Optional, Any
import aiohttp

from .config import APIConfig
from .errors import DriveAPIError, DriveFileNotFoundError
from ..logging import get_logger


class AsyncAPIClient:
    """
    Asynchronous files API client.

    Wraps the JSON endpoints of the files resource plus media download.
    429/5xx answers and network errors are retried with exponential backoff
    per RetryConfig. The aiohttp session is shared with the upload engine.

    Example:
        >>> async with AsyncAPIClient(token) as client:
        ...     files = await client.list_files({'q': "'root' in parents"})
    """

    def __init__(self, access_token: str, config: Optional[APIConfig] = None):
        """
        Create a client; the HTTP session opens lazily.

        Args:
            access_token: OAuth bearer token
            config: Transport and retry settings (APIConfig.default() if omitted)
        """
        if not access_token:
            raise ValueError("Access token is required")
        self._access_token = access_token
        self._config = config or APIConfig.default()
        self._session: Optional[aiohttp.ClientSession] = None
        self._connector: Optional[aiohttp.TCPConnector] = None
        self._closed = False

        self._logger = get_logger('drivepy.api')
        # Let an application-level basicConfig() decide the level when present
        root_logger = logging.getLogger()
        if not root_logger.handlers:
            self._logger.setLevel(self._config.log_level)

    @property
    def access_token(self) -> str:
        return self._access_token

    @access_token.setter
    def access_token(self, value: str):
        """Swap in a refreshed token."""
        self._access_token = value

    @property
    def config(self) -> APIConfig:
        """Configuration this client was built with."""
        return self._config

    async def __aenter__(self) -> 'AsyncAPIClient':
        """Open the HTTP session."""
        await self.ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Close the HTTP session."""
        await self.close()

    async def ensure_session(self) -> aiohttp.ClientSession:
        """Return the open aiohttp session, creating it on first use."""
        if self._closed:
            raise DriveAPIError(None, "Client is closed")
        if self._session is None or self._session.closed:
            self._connector = aiohttp.TCPConnector(
                **self._config.get_connector_kwargs()
            )
            self._session = aiohttp.ClientSession(
                connector=self._connector,
                **self._config.get_session_kwargs()
            )
        return self._session

    async def close(self):
        """Close the session and connector; the client cannot be reused afterwards."""
        self._closed = True

        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

        if self._connector and not self._connector.closed:
            await self._connector.close()
            self._connector = None

    def _build_url(self, path: str) -> str:
        """Absolute URL of an API path."""
        return f"{self._config.api_url}{path.lstrip('/')}"

    def _headers(self, has_body: bool) -> Dict[str, str]:
        headers = {'Authorization': f"Bearer {self._access_token}"}
        if has_body:
            headers['Content-Type'] = 'application/json; charset=UTF-8'
        return headers

    @staticmethod
    def _clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, str]:
        """Drop None values and stringify the rest."""
        clean = {}
        for key, value in (params or {}).items():
            if value is None or value == '':
                continue
            if isinstance(value, bool):
                value = 'true' if value else 'false'
            clean[key] = str(value)
        return clean

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
        raw: bool = False,
        retry_count: int = 0
    ) -> Any:
        """
        Make async request to the files API.

        Args:
            method: HTTP verb
            path: Path relative to the API base URL (e.g. 'files/abc')
            params: Query string parameters (None values are dropped)
            body: JSON body
            raw: Return the response text without JSON parsing
            retry_count: Current retry attempt (internal use)

        Returns:
            Parsed JSON response, raw text when the body is not JSON,
            or None for empty responses

        Raises:
            DriveAPIError: If request fails
        """
        session = await self.ensure_session()
        url = self._build_url(path)
        data = json.dumps(body) if body is not None else None

        self._logger.debug(f"{method} {url} params={params}")
        if data:
            self._logger.debug(f"Request data: {data[:300] if len(data) > 300 else data}")

        try:
            async with session.request(
                method,
                url,
                params=self._clean_params(params),
                data=data,
                headers=self._headers(data is not None),
                proxy=self._config.proxy.to_aiohttp_proxy() if self._config.proxy else None
            ) as response:
                response_text = await response.text()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._logger.error(f"Network error: {e}")

            if retry_count < self._config.retry.max_retries:
                delay = self._config.retry.calculate_delay(retry_count)
                await asyncio.sleep(delay)
                return await self.request(method, path, params, body, raw, retry_count + 1)

            raise DriveAPIError(None, f"Network error: {e}") from e

        self._logger.debug(
            f"Response {status}: {response_text[:1000] if len(response_text) > 1000 else response_text}"
        )

        if status >= 400:
            if self._should_retry(status, retry_count):
                delay = self._config.retry.calculate_delay(retry_count)
                self._logger.warning(
                    f"Retrying after HTTP {status}, attempt {retry_count + 1}"
                )
                await asyncio.sleep(delay)
                return await self.request(method, path, params, body, raw, retry_count + 1)

            if status == 404:
                raise DriveFileNotFoundError(status, body=response_text)
            raise DriveAPIError(status, body=response_text)

        if raw:
            return response_text
        return self._parse_response(response_text)

    def _parse_response(self, response_text: str) -> Any:
        """JSON document, raw text, or None for an empty body."""
        if not response_text:
            return None
        try:
            return json.loads(response_text)
        except json.JSONDecodeError:
            return response_text

    def _should_retry(self, status: int, retry_count: int) -> bool:
        """Check if should retry for given status."""
        return (
            status in self._config.retry.retry_on_status and
            retry_count < self._config.retry.max_retries
        )

    # files resource

    async def create_file(
        self,
        metadata: Dict[str, Any],
        fields: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create a file resource (metadata only).

        Args:
            metadata: File resource body (name, mimeType, parents, ...)
            fields: Partial response selector

        Returns:
            Created file resource
        """
        return await self.request('POST', 'files', params={'fields': fields}, body=metadata)

    async def get_file(self, file_id: str, fields: Optional[str] = None) -> Dict[str, Any]:
        """Get a file resource."""
        return await self.request('GET', f"files/{file_id}", params={'fields': fields})

    async def download(self, file_id: str) -> Any:
        """
        Download file content.

        Returns:
            Raw content as text
        """
        return await self.request('GET', f"files/{file_id}", params={'alt': 'media'}, raw=True)

    async def update_file(
        self,
        file_id: str,
        metadata: Dict[str, Any],
        params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Patch a file resource."""
        return await self.request('PATCH', f"files/{file_id}", params=params, body=metadata)

    async def delete_file(self, file_id: str) -> None:
        """Permanently delete a file."""
        await self.request('DELETE', f"files/{file_id}")

    async def list_files(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """List or search files."""
        return await self.request('GET', 'files', params=params)
