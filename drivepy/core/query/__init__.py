"""Query language builder for file searches."""
from .builder import (
    Operators,
    Conjunctions,
    OPERATOR_NEGATOR,
    parse_query,
    parse_value
)
from .fields import parse_fields

__all__ = [
    'Operators',
    'Conjunctions',
    'OPERATOR_NEGATOR',
    'parse_query',
    'parse_value',
    'parse_fields',
]
