"""Retry strategies using Strategy Pattern."""
import asyncio
import random
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ...logging import get_logger

T = TypeVar('T')


class RetryStrategy(ABC):
    """Abstract retry strategy."""
    
    @abstractmethod
    async def schedule(self, action: Callable[[], Awaitable[T]]) -> T:
        """Waits the current delay, then runs action."""
        pass
    
    @abstractmethod
    def reset(self) -> None:
        """Returns to the initial delay."""
        pass


class BackoffScheduler(RetryStrategy):
    """
    Exponential backoff with jitter.
    
    Intervals are integer milliseconds. Every scheduled wait doubles the
    interval and adds a random jitter in [0, 999], capped at MAX_INTERVAL.
    The wait is an ``asyncio.sleep`` so no thread is held while waiting.
    
    One scheduler belongs to exactly one upload session.
    
    Example:
        >>> scheduler = BackoffScheduler()
        >>> await scheduler.schedule(transmitter.probe_session)
    """
    
    BASE_INTERVAL = 1000
    MAX_INTERVAL = 60 * 1000
    MAX_JITTER = 999
    
    def __init__(
        self,
        base_interval: int = BASE_INTERVAL,
        max_interval: int = MAX_INTERVAL,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize scheduler.
        
        Args:
            base_interval: Starting (and reset) interval in milliseconds
            max_interval: Ceiling for the interval in milliseconds
            sleep: Coroutine function taking seconds (defaults to asyncio.sleep)
            rng: Random source for jitter
        """
        self.base_interval = base_interval
        self.max_interval = max_interval
        self.interval = base_interval
        self.attempts = 0
        self._sleep = sleep or asyncio.sleep
        self._rng = rng or random.Random()
        self._logger = get_logger('drivepy.upload.retry')
    
    def next_interval(self) -> int:
        """Computes the interval that follows the current one."""
        jitter = self._rng.randint(0, self.MAX_JITTER)
        return min(self.interval * 2 + jitter, self.max_interval)
    
    async def wait(self) -> int:
        """
        Sleeps for the current interval, then grows it.
        
        Returns:
            The interval that was waited, in milliseconds
        """
        waited = self.interval
        self.attempts += 1
        self._logger.debug(f"Backing off {waited} ms (attempt {self.attempts})")
        await self._sleep(waited / 1000)
        self.interval = self.next_interval()
        return waited
    
    async def schedule(self, action: Callable[[], Awaitable[T]]) -> T:
        """Waits the current interval, grows it, then awaits action."""
        await self.wait()
        return await action()
    
    def reset(self) -> None:
        """Back to the base interval after a successful transmission."""
        self.interval = self.base_interval
        self.attempts = 0
