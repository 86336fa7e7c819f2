"""Generic encode: Message tree -> bytes.

The tree is checked against the description, copied into the protobuf
class registered for its type, and serialized by the runtime. Named fields
come out in field-number order, then the unrecognized fields in the order
they were read. Repeated numeric fields are written packed.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from google.protobuf.message import DecodeError, EncodeError
from google.protobuf.message import Message as ProtobufMessage

from propresenter_edit.codec.message import Message
from propresenter_edit.codec.schema import FieldSpec, MessageType, resolve_message_type
from propresenter_edit.errors import InvalidTree

log = logging.getLogger("propresenter_edit")

# kind -> (min, max)
_INT_RANGES: dict[str, tuple[int, int]] = {
    "int32": (-(1 << 31), (1 << 31) - 1),
    "sint32": (-(1 << 31), (1 << 31) - 1),
    "sfixed32": (-(1 << 31), (1 << 31) - 1),
    "enum": (-(1 << 31), (1 << 31) - 1),
    "uint32": (0, (1 << 32) - 1),
    "fixed32": (0, (1 << 32) - 1),
    "int64": (-(1 << 63), (1 << 63) - 1),
    "sint64": (-(1 << 63), (1 << 63) - 1),
    "sfixed64": (-(1 << 63), (1 << 63) - 1),
    "uint64": (0, (1 << 64) - 1),
    "fixed64": (0, (1 << 64) - 1),
}

_FLOAT32_MAX = 3.4028234663852886e38


# region encode
def encode(message_type: MessageType | str, message: Message) -> bytes:
    """
    Encode a message tree.

    Args:
        message_type: The type `message` must be, or its full name
        message: Root of the tree

    Raises:
        InvalidTree: If any value violates the schema; the exception's `path`
            names the field, e.g. "rv.data.Presentation.cues[0].name".
        SchemaUnavailable: If the schema cannot be loaded.
    """
    resolved = resolve_message_type(message_type)
    path = resolved.full_name
    if not isinstance(message, Message):
        raise InvalidTree(path, f"expected a Message, got {type(message).__name__}")
    if message.type_name != resolved.full_name:
        raise InvalidTree(path, f"expected {resolved.full_name}, got {message.type_name}")

    pb = resolved.pb_class()
    _fill(pb, message, path)
    try:
        data = pb.SerializeToString()
    except (EncodeError, ValueError) as e:
        raise InvalidTree(path, f"could not serialize: {e}") from e

    log.debug(f"Encoded {resolved.full_name} to {len(data)} bytes")
    return data


# endregion


# region _fill
def _fill(pb: ProtobufMessage, message: Message, path: str) -> None:
    """Copy `message` into the protobuf message `pb`, checking every value."""
    for spec in message.message_type.fields:
        if spec.required and spec.name not in message:
            raise InvalidTree(f"{path}.{spec.name}", "required field is missing")

    for spec, value in message.present_fields():
        field_path = f"{path}.{spec.name}"

        if not spec.repeated:
            if spec.is_message:
                _check_message(spec, value, field_path)
                target = getattr(pb, spec.name)
                target.SetInParent()
                _fill(target, value, field_path)
            else:
                _store(field_path, setattr, pb, spec.name, _check_scalar(spec, value, field_path))
            continue

        if not isinstance(value, list):
            raise InvalidTree(field_path, f"repeated field needs a list, got {type(value).__name__}")

        container = getattr(pb, spec.name)
        for i, item in enumerate(value):
            item_path = f"{field_path}[{i}]"
            if spec.is_message:
                _check_message(spec, item, item_path)
                _fill(container.add(), item, item_path)
            else:
                _store(item_path, container.append, _check_scalar(spec, item, item_path))

    if message.unknown_fields:
        try:
            pb.MergeFromString(b"".join(unknown.data for unknown in message.unknown_fields))
        except DecodeError as e:
            raise InvalidTree(path, f"unknown fields are not valid protobuf data: {e}") from e


def _store(path: str, setter: Any, *args: Any) -> None:
    try:
        setter(*args)
    except (TypeError, ValueError) as e:
        raise InvalidTree(path, str(e)) from e


# endregion


# region value checks
def _check_message(spec: FieldSpec, value: Any, path: str) -> None:
    if not isinstance(value, Message):
        raise InvalidTree(path, f"expected {spec.message_type}, got {type(value).__name__}")
    if value.type_name != spec.message_type:
        raise InvalidTree(path, f"expected {spec.message_type}, got {value.type_name}")


def _check_scalar(spec: FieldSpec, value: Any, path: str) -> Any:
    """Return `value` in the form the protobuf setter takes, or raise InvalidTree."""
    kind = spec.kind

    if kind == "string":
        if not isinstance(value, str):
            raise InvalidTree(path, f"expected str, got {type(value).__name__}")
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidTree(path, f"string is not encodable as UTF-8: {e}") from e
        return value

    if kind == "bytes":
        if not isinstance(value, (bytes, bytearray)):
            raise InvalidTree(path, f"expected bytes, got {type(value).__name__}")
        return bytes(value)

    if kind == "bool":
        if not isinstance(value, bool):
            raise InvalidTree(path, f"expected bool, got {type(value).__name__}")
        return value

    if kind in ("float", "double"):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidTree(path, f"expected a number, got {type(value).__name__}")
        if kind == "float" and math.isfinite(value) and abs(value) > _FLOAT32_MAX:
            raise InvalidTree(path, f"{value} is out of range for float")
        return float(value)

    # Integer kinds
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidTree(path, f"expected int, got {type(value).__name__}")
    low, high = _INT_RANGES[kind]
    if not low <= value <= high:
        raise InvalidTree(path, f"{value} is out of range for {kind}")
    return value


# endregion
