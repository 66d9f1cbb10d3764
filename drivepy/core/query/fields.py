"""Partial response field selectors."""
from typing import Any, Dict, Optional


def parse_fields(fields: Optional[Dict[str, Any]] = None) -> str:
    """
    Render a nested field mask.

    Example:
        >>> parse_fields({'nextPageToken': True, 'files': {'id': True, 'name': True}})
        'nextPageToken, files(id, name)'
    """
    parts = []
    for key, value in (fields or {}).items():
        if isinstance(value, dict):
            parts.append(f"{key}({parse_fields(value)})")
        else:
            parts.append(key)
    return ', '.join(parts)
