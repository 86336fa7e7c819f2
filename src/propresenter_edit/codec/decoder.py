"""Generic decode: bytes + message type -> Message tree.

The protobuf runtime parses the bytes into the class registered for the
type; the result is then copied into a Message tree. A singular message
field that occurs more than once is merged, a repeated scalar may arrive
packed or unpacked, and fields the description does not know (or that
arrive with a different wire type) stay in `unknown_fields` byte for byte.
"""

from __future__ import annotations

import logging

from google.protobuf.message import DecodeError
from google.protobuf.message import Message as ProtobufMessage
from google.protobuf.unknown_fields import UnknownFieldSet

from propresenter_edit.codec.message import Message, UnknownField
from propresenter_edit.codec.schema import MessageType, resolve_message_type
from propresenter_edit.errors import MalformedMessage

log = logging.getLogger("propresenter_edit")

WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LENGTH_DELIMITED = 2
WIRE_START_GROUP = 3
WIRE_FIXED32 = 5


# region decode
def decode(message_type: MessageType | str, data: bytes) -> Message:
    """
    Decode `data` as a message of `message_type`.

    Args:
        message_type: A MessageType, or a full name such as "rv.data.Presentation"
        data: The complete encoded message

    Raises:
        MalformedMessage: If the bytes are not a well-formed message.
        SchemaUnavailable: If the schema cannot be loaded.
    """
    resolved = resolve_message_type(message_type)
    path = resolved.full_name

    pb = resolved.pb_class()
    try:
        pb.ParseFromString(bytes(data))
    except (DecodeError, UnicodeDecodeError) as e:
        raise MalformedMessage(f"not a valid protobuf message ({e})", path=path) from e

    message = _from_pb(resolved, pb, path)
    log.debug(f"Decoded {len(data)} bytes as {path}")
    return message


# endregion


# region _from_pb
def _from_pb(message_type: MessageType, pb: ProtobufMessage, path: str) -> Message:
    message = Message(message_type)

    for spec in message_type.fields:
        field_path = f"{path}.{spec.name}"
        try:
            if spec.repeated:
                values = getattr(pb, spec.name)
                if not values:
                    continue
                if spec.is_message:
                    nested = message_type.nested_type(spec)
                    message[spec.name].extend(
                        _from_pb(nested, item, f"{field_path}[{i}]")
                        for i, item in enumerate(values)
                    )
                else:
                    message[spec.name].extend(values)
            elif pb.HasField(spec.name):
                value = getattr(pb, spec.name)
                if spec.is_message:
                    value = _from_pb(message_type.nested_type(spec), value, field_path)
                message[spec.name] = value
        except UnicodeDecodeError as e:
            raise MalformedMessage(f"invalid UTF-8 in string field: {e}", path=field_path) from e

    message.unknown_fields.extend(_unknown_fields(pb, path))
    return message


# endregion


# region unknown fields
def _unknown_fields(pb: ProtobufMessage, path: str) -> list[UnknownField]:
    """
    Split the unrecognized bytes of `pb` into one UnknownField per entry.

    Clears the known fields of `pb`; call it after they have been copied.
    """
    entries = list(UnknownFieldSet(pb))
    if not entries:
        return []

    for descriptor, _ in pb.ListFields():
        pb.ClearField(descriptor.name)
    raw = pb.SerializeToString()

    sizes = [_entry_size(entry) for entry in entries]
    if sum(sizes) != len(raw):
        # Non-minimal encodings: keep the run whole rather than split it wrongly
        log.debug(f"{path}: keeping {len(entries)} unknown fields as one {len(raw)}-byte run")
        first = entries[0]
        return [UnknownField(first.field_number, first.wire_type, raw)]

    fields: list[UnknownField] = []
    offset = 0
    for entry, size in zip(entries, sizes):
        fields.append(UnknownField(entry.field_number, entry.wire_type, raw[offset : offset + size]))
        offset += size
    return fields


def _varint_size(value: int) -> int:
    return max(1, (value.bit_length() + 6) // 7)


def _entry_size(entry) -> int:
    key = _varint_size(entry.field_number << 3)
    wire_type = entry.wire_type
    if wire_type == WIRE_VARINT:
        return key + _varint_size(entry.data)
    if wire_type == WIRE_FIXED64:
        return key + 8
    if wire_type == WIRE_FIXED32:
        return key + 4
    if wire_type == WIRE_LENGTH_DELIMITED:
        return key + _varint_size(len(entry.data)) + len(entry.data)
    if wire_type == WIRE_START_GROUP:
        return 2 * key + sum(_entry_size(inner) for inner in entry.data)
    raise MalformedMessage(f"unexpected wire type {wire_type} for field {entry.field_number}")


# endregion
