"""Retry strategies using Strategy Pattern."""
from .retry_strategy import RetryStrategy, BackoffScheduler

__all__ = [
    'RetryStrategy',
    'BackoffScheduler',
]
