"""Record filters used by `Table.delete` and `VectorSearch.where`.

A filter is either `Equals(field, value)` or `All()`. The two string forms the
store has always accepted (``id = "x"`` and ``id IS NOT NULL``) are parsed into
those variants; anything else is rejected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Union

from localrag.errors import FilterError


@dataclass(frozen=True, slots=True)
class Equals:
    """Match records whose `field` equals `value`. Dotted fields reach into nested mappings."""

    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class All:
    """Match every record."""


Filter = Union[Equals, All]

_EQUALS_RE = re.compile(r'^\s*([A-Za-z_][\w.]*)\s*=\s*"([^"]*)"\s*$')
_NOT_NULL_RE = re.compile(r"^\s*id\s+IS\s+NOT\s+NULL\s*$", re.IGNORECASE)

_MISSING = object()


def parse_filter(expression: Filter | str) -> Filter:
    """Turn a filter expression into a `Filter` value."""
    if isinstance(expression, (Equals, All)):
        return expression
    if not isinstance(expression, str):
        raise FilterError(f"Unsupported filter type: {type(expression).__name__}")

    match = _EQUALS_RE.match(expression)
    if match:
        return Equals(field=match.group(1), value=match.group(2))
    if _NOT_NULL_RE.match(expression):
        return All()
    raise FilterError(f"Unsupported filter expression: {expression!r}")


def _lookup(record: Mapping[str, Any], field: str) -> Any:
    current: Any = record
    for part in field.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def matches(record: Mapping[str, Any], flt: Filter) -> bool:
    if isinstance(flt, All):
        return True
    return _lookup(record, flt.field) == flt.value
