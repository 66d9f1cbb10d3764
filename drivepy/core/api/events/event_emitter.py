"""Observer-style event emitter for progress notifications."""
from typing import Callable, Dict, List, Optional

from ...logging import get_logger


class EventEmitter:
    """
    Named events with any number of handlers.

    Handlers are advisory: one that raises is logged and skipped, the
    remaining handlers still run and the emitting code never sees the error.

    Example:
        >>> events = EventEmitter().on('progress', lambda p: print(p.percentage))
        >>> events.emit('progress', UploadProgress(total_bytes=10, uploaded_bytes=5))
    """

    def __init__(self, logger_name: str = 'drivepy.events'):
        self._handlers: Dict[str, List[Callable]] = {}
        self._logger = get_logger(logger_name)

    def on(self, event: str, callback: Callable) -> 'EventEmitter':
        """Subscribe callback to event; returns self for chaining."""
        self._handlers.setdefault(event, []).append(callback)
        return self

    def off(self, event: str, callback: Optional[Callable] = None) -> 'EventEmitter':
        """Unsubscribe callback, or every handler of event when callback is None."""
        handlers = self._handlers.get(event)
        if handlers is not None:
            if callback is None:
                self._handlers.pop(event)
            else:
                self._handlers[event] = [h for h in handlers if h != callback]
        return self

    def emit(self, event: str, *args, **kwargs) -> None:
        # Copy so handlers may unsubscribe while being called
        for callback in list(self._handlers.get(event, ())):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                self._logger.warning(f"Handler for '{event}' failed: {e}")

    def has_listeners(self, event: str) -> bool:
        return bool(self._handlers.get(event))
