"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection.
"""
from typing import Protocol, Optional, Any, runtime_checkable


@runtime_checkable
class PayloadProtocol(Protocol):
    """
    Ordered byte source with a known length and content type.

    The upload engine opens the payload before the first transmission and
    closes it once the upload reaches a terminal state. Content must not
    change in between.
    """

    name: Optional[str]
    content_type: str

    @property
    def size(self) -> int:
        """Total length in bytes."""
        ...

    async def open(self) -> None:
        """Acquire any underlying resource (file handle)."""
        ...

    async def read(self, start: int, end: int) -> bytes:
        """
        Read the half-open range ``[start, end)``.

        Args:
            start: Start position in bytes
            end: End position in bytes

        Returns:
            Exactly ``end - start`` bytes
        """
        ...

    async def close(self) -> None:
        """Release the underlying resource."""
        ...


class ProgressObserver(Protocol):
    """Callable receiving advisory progress notifications."""

    def __call__(self, progress: Any) -> None: ...

