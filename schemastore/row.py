"""Rows as kept in a DynamoDB table, and their attribute-value encoding.

Attribute values use the DynamoDB wire form: a mapping with a single type
tag such as ``{"S": "text"}`` or ``{"SS": ["a", "b"]}``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

AttributeValue = dict[str, Any]

_STRING_FIELDS = ("type", "id", "label", "parent_id")
_COLUMNS_FIELD = "columns"


class AttributeDecodeError(ValueError):
    """Raised when an item cannot be decoded into a row."""


@dataclass
class StoredRow:
    """A row of the table: its key, label, optional parent and columns."""

    type: str
    id: str
    label: str = ""
    parent_id: str = ""
    columns: dict[str, Any] = field(default_factory=dict)


def _number(text: Any) -> int | float:
    text = str(text)
    try:
        return int(text)
    except ValueError:
        try:
            return float(text)
        except ValueError:
            raise AttributeDecodeError(f"invalid number attribute: {text!r}") from None


def _string(payload: Any) -> str:
    if not isinstance(payload, str):
        raise AttributeDecodeError(f"string attribute holds {payload!r}")
    return payload


_DECODERS: dict[str, Callable[[Any], Any]] = {
    "S": _string,
    "N": _number,
    "B": bytes,
    "SS": lambda payload: [_string(item) for item in payload],
    "NS": lambda payload: [_number(item) for item in payload],
    "BS": lambda payload: [bytes(item) for item in payload],
    "BOOL": bool,
    "NULL": lambda payload: None,
    "L": lambda payload: [_decode(item) for item in payload],
    "M": lambda payload: {key: _decode(item) for key, item in payload.items()},
}


def _split(value: Any) -> tuple[str, Any]:
    if not isinstance(value, Mapping) or len(value) != 1:
        raise AttributeDecodeError(f"malformed attribute value: {value!r}")
    ((tag, payload),) = value.items()
    if tag not in _DECODERS:
        raise AttributeDecodeError(f"unknown attribute type {tag!r}")
    return tag, payload


def _decode(value: Any) -> Any:
    tag, payload = _split(value)
    return _DECODERS[tag](payload)


def _decode_string_field(name: str, value: Any) -> str:
    tag, payload = _split(value)
    if tag == "NULL":
        return ""
    if tag != "S":
        raise AttributeDecodeError(f"cannot decode {tag} attribute into field {name!r}")
    return _string(payload)


def item_to_row(item: Mapping[str, Any]) -> StoredRow:
    """Decode a table item into a :class:`StoredRow`.

    Missing fields take empty values and unknown attributes are ignored.
    """
    fields = {
        name: _decode_string_field(name, item[name])
        for name in _STRING_FIELDS
        if name in item
    }
    columns: dict[str, Any] = {}
    if _COLUMNS_FIELD in item:
        decoded = _decode(item[_COLUMNS_FIELD])
        if isinstance(decoded, dict):
            columns = decoded
        elif decoded is not None:
            raise AttributeDecodeError("columns attribute must be a map")
    return StoredRow(
        type=fields.get("type", ""),
        id=fields.get("id", ""),
        label=fields.get("label", ""),
        parent_id=fields.get("parent_id", ""),
        columns=columns,
    )


def value_to_attribute(value: Any) -> AttributeValue | None:
    """Encode a column value: strings and lists of strings; anything else gives None."""
    if isinstance(value, str):
        return {"S": value}
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return {"SS": list(value)}
    return None


def columns_to_map(columns: Mapping[str, Any] | None) -> dict[str, AttributeValue | None]:
    """Encode every column value with :func:`value_to_attribute`."""
    return {key: value_to_attribute(value) for key, value in (columns or {}).items()}