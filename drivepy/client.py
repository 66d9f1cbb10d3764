"""
DriveClient - High-level async client for Drive files.

Example:
    >>> async with DriveClient(access_token) as drive:
    ...     created = await drive.create(name="notes.json", mime_type=DriveClient.JSON_MIME_TYPE,
    ...                                  content={"todo": []})
    ...     listing = await drive.list()
"""
import json
from pathlib import Path
from typing import Optional, List, Dict, Any, Union, Callable

from .core.api import AsyncAPIClient, APIConfig, UploadOptions
from .core.query import Operators, Conjunctions, parse_query, parse_fields
from .core.query.builder import Query
from .core.upload import (
    UploadFacade,
    UploadOrchestrator,
    UploadResult,
    UploadProgress,
    BytesPayload,
    PayloadProtocol
)
from .core.logging import get_logger

logger = get_logger('drivepy.client')


class DriveClient:
    """
    Create, read, update, delete, list and search files.

    Content of created and updated files is sent with the resumable upload
    engine. The access token is supplied by the caller.
    """

    DEFAULT_PAGE_SIZE = 100
    FOLDER_MIME_TYPE = 'application/vnd.google-apps.folder'
    DEFAULT_MIME_TYPE = 'application/octet-stream'
    JSON_MIME_TYPE = 'application/json'
    ROOT_FOLDER = 'root'
    APPLICATION_DATA_FOLDER = 'appDataFolder'
    FILE_FIELDS = 'id, name, mimeType, properties, description, parents'

    DEFAULT_LIST_ORDER = ['folder', 'name_natural']
    DEFAULT_LIST_FIELDS = {
        'nextPageToken': True,
        'files': {
            'id': True,
            'name': True,
            'parents': True,
            'mimeType': True,
            'thumbnailLink': True,
            'webViewLink': True
        }
    }

    def __init__(
        self,
        access_token: str,
        config: Optional[APIConfig] = None,
        api: Optional[AsyncAPIClient] = None,
        uploader: Optional[UploadOrchestrator] = None
    ):
        """
        Initialize client.

        Args:
            access_token: OAuth bearer token
            config: API configuration
            api: Preconfigured files API client
            uploader: Preconfigured upload orchestrator
        """
        self._config = config or APIConfig.default()
        self._api = api or AsyncAPIClient(access_token, self._config)
        self._uploader = uploader

    @property
    def api(self) -> AsyncAPIClient:
        return self._api

    @property
    def upload_chunk_size(self) -> int:
        return self._config.chunk_size

    async def __aenter__(self) -> 'DriveClient':
        await self._api.ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the underlying HTTP session."""
        await self._api.close()

    async def _get_uploader(self) -> UploadOrchestrator:
        """Upload orchestrator sharing the API client's HTTP session."""
        if self._uploader is None:
            http = await self._api.ensure_session()
            self._uploader = UploadOrchestrator(
                http=http,
                options=self._config.upload_options()
            )
        return self._uploader

    @classmethod
    def get_clean_content(cls, content: Any, mime_type: str = DEFAULT_MIME_TYPE) -> bytes:
        """
        Serialize content for upload.

        JSON documents are pretty-printed, text is UTF-8 encoded and bytes
        are sent unchanged. Empty content yields an empty body.
        """
        if content is None or content == '' or content == b'':
            return b''
        if mime_type == cls.JSON_MIME_TYPE:
            return json.dumps(content, indent=2).encode('utf-8')
        if isinstance(content, (bytes, bytearray)):
            return bytes(content)
        return f"{content}".encode('utf-8')

    async def _upload_content(
        self,
        file_id: str,
        name: str,
        mime_type: str,
        content: Any
    ) -> UploadResult:
        payload = BytesPayload(
            self.get_clean_content(content, mime_type),
            content_type=mime_type,
            name=name
        )
        uploader = await self._get_uploader()
        return await uploader.upload(
            self._api.access_token,
            payload,
            target_id=file_id,
            chunk_size=self.upload_chunk_size
        )

    async def create(
        self,
        name: str = '',
        mime_type: str = DEFAULT_MIME_TYPE,
        properties: Optional[Dict[str, Any]] = None,
        content: Any = None,
        folder: Optional[str] = ROOT_FOLDER
    ) -> Dict[str, Any]:
        """
        Create a new file.

        Args:
            name: File name
            mime_type: MIME type of the file
            properties: Custom key/value properties
            content: Initial content (None creates an empty, metadata-only file)
            folder: Parent folder id ('' or None for no explicit parent)

        Returns:
            Dict with id, name, mimeType, properties and content
        """
        metadata: Dict[str, Any] = {'name': name, 'mimeType': mime_type}
        if properties is not None:
            metadata['properties'] = properties
        if isinstance(folder, str) and folder != '':
            metadata['parents'] = [folder]

        new_file = await self._api.create_file(metadata)
        file_id = new_file['id']
        logger.info(f"Created file {file_id} ({mime_type})")

        if content is not None:
            await self._upload_content(file_id, name, mime_type, content)

        return {
            'id': file_id,
            'name': name,
            'mimeType': mime_type,
            'properties': properties,
            'content': content
        }

    async def read(self, file_id: str = '', info_only: bool = False) -> Dict[str, Any]:
        """
        Read a detailed file.

        Args:
            file_id: File id
            info_only: Skip downloading content

        Returns:
            File metadata plus 'content' (None for folders or info_only)
        """
        file = await self._api.get_file(file_id, fields=self.FILE_FIELDS)
        mime_type = file.get('mimeType')
        is_folder = mime_type == self.FOLDER_MIME_TYPE

        content = None
        if not info_only and not is_folder:
            raw_content = await self._api.download(file_id)
            if mime_type == self.JSON_MIME_TYPE and isinstance(raw_content, str) and raw_content:
                content = json.loads(raw_content)
            else:
                content = raw_content

        return {**file, 'content': content}

    async def update(
        self,
        file_id: str = '',
        name: str = '',
        mime_type: str = DEFAULT_MIME_TYPE,
        content: Any = None
    ) -> Dict[str, Any]:
        """
        Update a file's name, type and optionally its content.

        Returns:
            Dict with id, name, mimeType and content
        """
        await self._api.update_file(file_id, {'name': name, 'mimeType': mime_type})
        logger.info(f"Updated file {file_id}")

        if content is not None:
            await self._upload_content(file_id, name, mime_type, content)

        return {
            'id': file_id,
            'name': name,
            'mimeType': mime_type,
            'content': content
        }

    async def delete(self, file_id: str = '') -> bool:
        """Delete a file permanently."""
        await self._api.delete_file(file_id)
        logger.info(f"Deleted file {file_id}")
        return True

    async def add_to_folder(
        self,
        file_id: str = '',
        folder: str = '',
        move_from_folder: Optional[str] = None,
        remove_from_all_other_folders: bool = False
    ) -> bool:
        """
        Add a file to a folder, optionally removing it from another or all other folders.

        Args:
            file_id: File id
            folder: Folder to add the file to
            move_from_folder: Folder to take the file out of
            remove_from_all_other_folders: Leave folder as the only parent
        """
        remove: List[str] = []
        if remove_from_all_other_folders:
            parents = (await self.read(file_id, info_only=True)).get('parents') or []
            remove = [p for p in parents if p != folder]
        elif isinstance(move_from_folder, str) and move_from_folder != '':
            remove = [move_from_folder]

        await self._api.update_file(
            file_id,
            {},
            params={
                'addParents': folder,
                'removeParents': ','.join(remove) or None
            }
        )
        return True

    async def list(
        self,
        folder: str = ROOT_FOLDER,
        mime_type: Optional[str] = None,
        file_extension: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: Optional[str] = None,
        order_by: Optional[List[str]] = None,
        fields: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        List files in a folder.

        Folders are always included; mime_type (wildcards stripped) or
        file_extension narrow down the other files.
        """
        in_folder = {'key': 'parents', 'operator': Operators.IN, 'value': folder}
        is_folder = {'key': 'mimeType', 'operator': Operators.EQUALS, 'value': self.FOLDER_MIME_TYPE}

        if mime_type:
            clean_mime_type = mime_type.replace('*', '')
            query: Query = [
                in_folder,
                Conjunctions.AND,
                [
                    is_folder,
                    Conjunctions.OR,
                    {'key': 'mimeType', 'operator': Operators.CONTAINS, 'value': clean_mime_type}
                ]
            ]
        elif file_extension:
            query = [
                in_folder,
                Conjunctions.AND,
                [
                    is_folder,
                    Conjunctions.OR,
                    {'key': 'fileExtension', 'operator': Operators.EQUALS, 'value': file_extension}
                ]
            ]
        else:
            query = [in_folder]

        return await self.search(
            query=query,
            fields=fields or self.DEFAULT_LIST_FIELDS,
            page_token=page_token,
            page_size=page_size,
            order_by=order_by or self.DEFAULT_LIST_ORDER
        )

    async def search(
        self,
        query: Query = None,
        fields: Optional[Dict[str, Any]] = None,
        page_token: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        order_by: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        """
        Search for files.

        Args:
            query: Query structure (see drivepy.core.query)
            fields: Nested field mask
            page_token: Token of the page to fetch
            page_size: Maximum results per page
            order_by: Sort keys
        """
        return await self._api.list_files({
            'pageToken': page_token,
            'q': parse_query(query or []),
            'fields': parse_fields(fields),
            'orderBy': ','.join(order_by or []),
            'pageSize': page_size
        })

    async def upload(
        self,
        source: Union[str, Path, bytes, PayloadProtocol],
        file_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        content_type: Optional[str] = None,
        chunk_size: Optional[int] = None,
        options: Optional[UploadOptions] = None,
        on_progress: Optional[Callable[[UploadProgress], None]] = None
    ) -> UploadResult:
        """
        Upload content directly with the resumable engine.

        Args:
            source: Path, bytes or payload
            file_id: Existing file whose content is replaced
            metadata: Metadata for a new file
            content_type: Declared type for path/bytes sources
            chunk_size: Bytes per transmission
            options: Upload options overriding the client configuration
            on_progress: Progress observer

        Returns:
            UploadResult with the stored resource
        """
        payload = UploadFacade.to_payload(source, content_type=content_type)

        if options is not None:
            uploader = UploadOrchestrator(
                http=await self._api.ensure_session(),
                options=self._config.upload_options(options)
            )
        else:
            uploader = await self._get_uploader()

        return await uploader.upload(
            self._api.access_token,
            payload,
            metadata=metadata,
            target_id=file_id,
            chunk_size=chunk_size,
            on_progress=on_progress
        )
