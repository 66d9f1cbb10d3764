"""
Payload sources for uploads.

Single Responsibility: each class exposes one kind of byte source through
PayloadProtocol.
"""
import mimetypes
from pathlib import Path
from typing import Optional, Union
import logging
import aiofiles


DEFAULT_MIME_TYPE = 'application/octet-stream'


class BytesPayload:
    """
    In-memory payload.

    Example:
        >>> payload = BytesPayload(b'{"a": 1}', content_type='application/json')
    """

    def __init__(
        self,
        data: Union[bytes, bytearray, memoryview, str],
        content_type: Optional[str] = None,
        name: Optional[str] = None
    ):
        if isinstance(data, str):
            data = data.encode('utf-8')
        self._data = bytes(data)
        self.content_type = content_type or DEFAULT_MIME_TYPE
        self.name = name

    @property
    def size(self) -> int:
        return len(self._data)

    async def open(self) -> None:
        pass

    async def read(self, start: int, end: int) -> bytes:
        return self._data[start:end]

    async def close(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"BytesPayload(name={self.name!r}, size={self.size}, content_type={self.content_type!r})"


class FilePayload:
    """
    Payload backed by a file on disk.

    Uses aiofiles for non-blocking I/O. The handle is kept open between
    open() and close() so each chunk does not reopen the file.
    """

    def __init__(
        self,
        file_path: Union[str, Path],
        content_type: Optional[str] = None,
        name: Optional[str] = None
    ):
        """
        Initialize file payload.

        Args:
            file_path: Path to the file
            content_type: Declared type (guessed from the extension if omitted)
            name: Remote name (defaults to the file name)

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a regular file
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        if not path.is_file():
            raise ValueError(f"Path is not a file: {path}")

        self.path = path
        self.name = name or path.name
        self.content_type = (
            content_type
            or mimetypes.guess_type(path.name)[0]
            or DEFAULT_MIME_TYPE
        )
        # Size is fixed at construction; the session relies on it not changing
        self._size = path.stat().st_size
        self._file_handle = None
        self._logger = logging.getLogger('drivepy.upload.file')

    @property
    def size(self) -> int:
        return self._size

    @property
    def is_open(self) -> bool:
        return self._file_handle is not None

    async def open(self) -> None:
        """Open file for reading. Call this before reading chunks."""
        if self._file_handle is None:
            self._file_handle = await aiofiles.open(self.path, 'rb')

    async def close(self) -> None:
        """Close the currently open file."""
        if self._file_handle is not None:
            await self._file_handle.close()
            self._file_handle = None

    async def read(self, start: int, end: int) -> bytes:
        """
        Read a chunk from the file.

        Reuses the open handle when there is one, otherwise opens and
        closes the file around the read.

        Raises:
            IOError: If fewer bytes than requested could be read
        """
        chunk_size = end - start
        if chunk_size <= 0:
            return b''

        if self._file_handle is not None:
            await self._file_handle.seek(start)
            data = await self._file_handle.read(chunk_size)
        else:
            async with aiofiles.open(self.path, 'rb') as f:
                await f.seek(start)
                data = await f.read(chunk_size)

        if len(data) != chunk_size:
            raise IOError(
                f"Short read from {self.path}: wanted {chunk_size} bytes at {start}, got {len(data)}"
            )
        self._logger.debug(f"Read chunk: {start}-{end} ({len(data)} bytes)")
        return data

    def __repr__(self) -> str:
        return f"FilePayload(path={str(self.path)!r}, size={self.size}, content_type={self.content_type!r})"
