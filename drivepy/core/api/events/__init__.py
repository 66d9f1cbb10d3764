"""Event emitter for progress and lifecycle notifications."""
from .event_emitter import EventEmitter

__all__ = ['EventEmitter']
