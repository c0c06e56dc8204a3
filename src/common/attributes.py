# src/common/attributes.py

"""
Structured attributes and the payload encoder.

An attribute value is one of three explicit variants:

    Scalar      strings, numbers, booleans, None, and JSON-friendly lists
    ErrorValue  an exception, rendered as its message text
    Group       an ordered run of child attributes, encoded as a nested object

The encoder is pure. It never deduplicates keys: an inherited attribute and a
record attribute with the same key are both written, in encounter order.
"""

import json
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence, Tuple, Union

from src.common.exceptions import EncodingError

if TYPE_CHECKING:
    from src.common.records import LogRecord

TIME_KEY = "time"
LEVEL_KEY = "level"
MESSAGE_KEY = "message"
GROUPS_KEY = "groups"


@dataclass(frozen=True)
class Scalar:
    value: Any


@dataclass(frozen=True)
class ErrorValue:
    error: BaseException


@dataclass(frozen=True)
class Group:
    attributes: Tuple["Attribute", ...] = ()


AttributeValue = Union[Scalar, ErrorValue, Group]


@dataclass(frozen=True)
class Attribute:
    """
    A key/value pair attached to a record or inherited from a handler.

    Plain Python values are classified on construction, so
    `Attribute("disk", "/dev/sda1")` and `Attribute("disk", Scalar("/dev/sda1"))`
    are equal. Dicts become Groups (children keep the dict's order) and
    exceptions become ErrorValues.
    """

    key: str
    value: AttributeValue

    def __post_init__(self):
        object.__setattr__(self, "value", to_attribute_value(self.value))

    @classmethod
    def of(cls, key: str, value: Any) -> "Attribute":
        """Builds an attribute from any Python value, classifying it explicitly."""
        return cls(key, to_attribute_value(value))

    @classmethod
    def group(cls, key: str, *attributes: "Attribute") -> "Attribute":
        """Builds a nested group attribute from already-built children."""
        return cls(key, Group(tuple(attributes)))


def to_attribute_value(value: Any) -> AttributeValue:
    if isinstance(value, (Scalar, ErrorValue, Group)):
        return value
    if isinstance(value, BaseException):
        return ErrorValue(value)
    if isinstance(value, dict):
        return Group(tuple(Attribute(str(k), v) for k, v in value.items()))
    return Scalar(value)


def attributes_from_pairs(pairs: Iterable[dict]) -> List[Attribute]:
    """
    Converts request-style `[{"key": ..., "value": ...}]` entries to Attributes.

    A missing "value" is treated as None, which the encoder drops.
    """
    return [Attribute.of(pair["key"], pair.get("value")) for pair in pairs]


# ==============================================================================
# Payload
# ==============================================================================


@dataclass(frozen=True)
class Payload:
    """
    Ordered key/value tree ready to be rendered as one JSON object.

    Stored as pairs rather than a dict so duplicate keys survive. Nested
    groups are nested Payloads.
    """

    fields: Tuple[Tuple[str, Any], ...] = ()

    def keys(self) -> List[str]:
        return [key for key, _ in self.fields]

    def get(self, key: str, default: Any = None) -> Any:
        """Returns the last value written under `key`, like a JSON reader would."""
        found = default
        for field_key, value in self.fields:
            if field_key == key:
                found = value
        return found

    def as_dict(self) -> dict:
        """
        Last-wins dict view, recursing into nested groups.

        For tests and debugging only; the wire format is `to_json()`.
        """
        return {
            key: value.as_dict() if isinstance(value, Payload) else value
            for key, value in self.fields
        }

    def to_json(self) -> str:
        """
        Renders the tree as a JSON object, keeping every key in order.

        Raises:
            EncodingError: If a scalar value cannot be represented in JSON.
        """
        parts = []
        for key, value in self.fields:
            if isinstance(value, Payload):
                rendered = value.to_json()
            else:
                rendered = _dump_value(key, value)
            parts.append(f"{json.dumps(key, ensure_ascii=False)}:{rendered}")
        return "{" + ",".join(parts) + "}"


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _dump_value(key: str, value: Any) -> str:
    try:
        return json.dumps(
            value, ensure_ascii=False, allow_nan=False, default=_json_default
        )
    except (TypeError, ValueError) as e:
        raise EncodingError(f"cannot encode attribute '{key}': {e}") from e


# ==============================================================================
# Encoder
# ==============================================================================


def format_time(moment: datetime) -> str:
    """RFC 3339 at second precision, keeping the record's UTC offset. UTC is written as `Z`."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    rendered = moment.isoformat(timespec="seconds")
    if rendered.endswith("+00:00"):
        rendered = rendered[:-6] + "Z"
    return rendered


def encode_attribute(attribute: Attribute) -> Optional[Tuple[str, Any]]:
    """
    Encodes one attribute to a (key, value) pair, or None if it has no value.

    A Scalar holding None has no value. A Group has no value when none of its
    children do.
    """
    value = attribute.value
    if isinstance(value, Group):
        children = [encode_attribute(child) for child in value.attributes]
        kept = tuple(child for child in children if child is not None)
        if not kept:
            return None
        return attribute.key, Payload(kept)
    if isinstance(value, ErrorValue):
        return attribute.key, str(value.error)
    if value.value is None:
        return None
    return attribute.key, value.value


def encode_payload(
    record: "LogRecord",
    inherited: Sequence[Attribute] = (),
    groups: Sequence[str] = (),
) -> Payload:
    """
    Builds the payload for one record.

    Purpose:
        Produces the structured body of a CloudWatch event: `time`, `level`
        and `message` first, then `groups` when the handler was derived with
        group names, then the handler's inherited attributes followed by the
        record's own attributes.

    Args:
        record (LogRecord): The record being logged.
        inherited (Sequence[Attribute]): Attributes accumulated on the handler.
        groups (Sequence[str]): Group names accumulated on the handler.

    Returns:
        Payload: The ordered tree. Identical inputs give equal payloads.
    """
    fields: List[Tuple[str, Any]] = [
        (TIME_KEY, format_time(record.time)),
        (LEVEL_KEY, record.level.name),
        (MESSAGE_KEY, record.message),
    ]
    if groups:
        fields.append((GROUPS_KEY, tuple(groups)))

    for attribute in (*inherited, *record.attributes):
        encoded = encode_attribute(attribute)
        if encoded is not None:
            fields.append(encoded)

    return Payload(tuple(fields))
