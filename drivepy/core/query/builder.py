"""
Query builder.

Renders nested query structures into the files API query language:

- a ``str`` is used verbatim (conjunctions, hand-written clauses)
- a ``dict`` is a term: ``{'key', 'operator' (default '='), 'value', 'negated'}``
- a ``list`` is a sequence joined by spaces; nested lists become ``( ... )`` groups

Example:
    >>> parse_query([
    ...     {'key': 'name', 'operator': Operators.CONTAINS, 'value': 'Project'},
    ...     Conjunctions.AND,
    ...     {'key': 'trashed', 'value': False},
    ... ])
    "name contains 'Project' and trashed = false"
"""
from datetime import date, datetime
from typing import Any, Dict, List, Union

from ..exceptions import QueryError


class Operators:
    """Comparison operators understood by the query language."""
    CONTAINS = 'contains'
    EQUALS = '='
    DOES_NOT_EQUAL = '!='
    LESS_THAN = '<'
    LESS_THAN_OR_EQUAL_TO = '<='
    GREATER_THAN = '>'
    GREATER_THAN_OR_EQUAL_TO = '>='
    IN = 'in'
    HAS = 'has'

    ALL = (
        CONTAINS, EQUALS, DOES_NOT_EQUAL, LESS_THAN, LESS_THAN_OR_EQUAL_TO,
        GREATER_THAN, GREATER_THAN_OR_EQUAL_TO, IN, HAS
    )


class Conjunctions:
    """Clause joiners."""
    AND = 'and'
    OR = 'or'


OPERATOR_NEGATOR = 'not'

Query = Union[str, Dict[str, Any], List[Any]]


def _negation(negated: Any) -> str:
    return f"{OPERATOR_NEGATOR} " if negated else ''


def _operator(term: Dict[str, Any]) -> str:
    operator = term.get('operator') or Operators.EQUALS
    if operator not in Operators.ALL:
        raise QueryError(f"Unknown operator '{operator}' for key '{term.get('key')}'", term)
    return operator


def parse_value_string(value: str = '', omit_quotes: bool = False) -> str:
    """Quote and escape a string value (bare when omit_quotes)."""
    if omit_quotes:
        return f"{value}"
    clean = f"{value}".replace('\\', '\\\\').replace("'", "\\'")
    return f"'{clean}'"


def parse_value_number(value: Union[int, float] = 0) -> str:
    return f"{value}"


def parse_value_boolean(value: bool = False) -> str:
    return 'true' if value else 'false'


def parse_value_date(value: Any) -> str:
    """Dates render as quoted RFC 3339 timestamps."""
    if isinstance(value, (datetime, date)):
        return f"'{value.isoformat()}'"
    return f"'{value}'"


def parse_value_object(term: Dict[str, Any]) -> str:
    """A key/value pair inside a ``has`` list (``properties has { ... }``)."""
    key = term.get('key')
    operator = _operator(term)
    return (
        f"key{Operators.EQUALS}{parse_value_string(key)} and "
        f"{_negation(term.get('negated'))}value{operator}{parse_value(term.get('value'))}"
    )


def parse_value_array(values: List[Any]) -> str:
    parsed = ' '.join(parse_value(v, quote_string=False) for v in values)
    return f"{{ {parsed} }}"


def parse_value(value: Any = '', quote_string: bool = True) -> str:
    """
    Render a term value according to its type.

    Args:
        value: The value
        quote_string: False renders strings bare (conjunctions inside lists)
    """
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return parse_value_boolean(value)
    if isinstance(value, (int, float)):
        return parse_value_number(value)
    if isinstance(value, str):
        return parse_value_string(value, omit_quotes=not quote_string)
    if isinstance(value, dict):
        return parse_value_object(value)
    if isinstance(value, (list, tuple)):
        return parse_value_array(list(value))
    return parse_value_date(value)


def parse_query_string(query: Any = '') -> str:
    return f"{query}"


def parse_query_object(term: Dict[str, Any]) -> str:
    """
    Render one term.

    Raises:
        QueryError: For ``has`` without a list value or an unknown operator
    """
    key = term.get('key')
    operator = _operator(term)
    value = term.get('value')

    if operator == Operators.HAS and not isinstance(value, (list, tuple)):
        raise QueryError(f"Invalid value for key '{key}' with '{Operators.HAS}' operator.", term)

    negation = _negation(term.get('negated'))
    if operator == Operators.IN:
        return f"{negation}{parse_value(value)} {operator} {key}"
    return f"{negation}{key} {operator} {parse_value(value)}"


def parse_query_array(query: List[Any], group: bool = False) -> str:
    parsed = ' '.join(parse_query(q, top=False) for q in query)
    return f"( {parsed} )" if group else parsed


def parse_query(query: Query = None, top: bool = True) -> str:
    """
    Render a query structure.

    Args:
        query: String, term dict or list of them
        top: False when called for a nested element (lists become groups)

    Returns:
        Query language string
    """
    if query is None:
        return ''
    if isinstance(query, (list, tuple)):
        return parse_query_array(list(query), group=not top)
    if isinstance(query, dict):
        return parse_query_object(query)
    return parse_query_string(query)
