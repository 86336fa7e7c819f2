"""Protobuf runtime classes built from the TOML schema description.

Each MessageType becomes a descriptor in a private DescriptorPool, and the
protobuf runtime generates its class. Parsing and serializing go through
those classes, so the wire format handling is the library's.

Message names are flattened ("rv.data.Presentation.CCLI" becomes
"rv_data_Presentation_CCLI") because the description does not separate
packages from nesting. Every singular scalar is a proto3 optional field, so
a value set to its default still counts as present. Enums are declared as
int32 so values the description does not list are read as plain numbers.
"""

# region imports
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

from propresenter_edit.errors import SchemaUnavailable

if TYPE_CHECKING:
    from google.protobuf.message import Message as ProtobufMessage

    from propresenter_edit.codec.schema import FieldSpec, MessageType

log = logging.getLogger("propresenter_edit")
# endregion

PACKAGE = "propresenter_edit.schema"

_FDP = descriptor_pb2.FieldDescriptorProto

# kind -> descriptor field type
_FIELD_TYPES: dict[str, int] = {
    "double": _FDP.TYPE_DOUBLE,
    "float": _FDP.TYPE_FLOAT,
    "int32": _FDP.TYPE_INT32,
    "int64": _FDP.TYPE_INT64,
    "uint32": _FDP.TYPE_UINT32,
    "uint64": _FDP.TYPE_UINT64,
    "sint32": _FDP.TYPE_SINT32,
    "sint64": _FDP.TYPE_SINT64,
    "fixed32": _FDP.TYPE_FIXED32,
    "fixed64": _FDP.TYPE_FIXED64,
    "sfixed32": _FDP.TYPE_SFIXED32,
    "sfixed64": _FDP.TYPE_SFIXED64,
    "bool": _FDP.TYPE_BOOL,
    "enum": _FDP.TYPE_INT32,
    "string": _FDP.TYPE_STRING,
    "bytes": _FDP.TYPE_BYTES,
    "message": _FDP.TYPE_MESSAGE,
}


def flat_name(full_name: str) -> str:
    return full_name.replace(".", "_")


# region build_message_classes
def build_message_classes(
    messages: dict[str, MessageType], source: str, file_name: str = "propresenter_schema.proto"
) -> dict[str, type[ProtobufMessage]]:
    """
    Register every message type in a fresh pool and return its generated class.

    Raises:
        SchemaUnavailable: If the protobuf runtime rejects the definitions.
    """
    file_proto = descriptor_pb2.FileDescriptorProto(
        name=file_name, package=PACKAGE, syntax="proto3"
    )

    seen: dict[str, str] = {}
    for full_name, message_type in messages.items():
        flat = flat_name(full_name)
        if flat in seen:
            raise SchemaUnavailable(
                f"{source}: message types '{seen[flat]}' and '{full_name}' "
                f"cannot both be registered as '{flat}'"
            )
        seen[flat] = full_name
        _add_message(file_proto.message_type.add(), flat, message_type)

    pool = descriptor_pool.DescriptorPool()
    try:
        pool.AddSerializedFile(file_proto.SerializeToString())
        classes = {
            full_name: message_factory.GetMessageClass(
                pool.FindMessageTypeByName(f"{PACKAGE}.{flat_name(full_name)}")
            )
            for full_name in messages
        }
    except (TypeError, ValueError, KeyError) as e:
        error_msg = f"Protobuf runtime rejected schema {source}: {e}"
        log.error(error_msg)
        raise SchemaUnavailable(error_msg) from e

    log.debug(f"Registered {len(classes)} message classes from {source}")
    return classes


def _add_message(
    proto: descriptor_pb2.DescriptorProto, flat: str, message_type: MessageType
) -> None:
    proto.name = flat

    # Real oneofs come first; the runtime requires synthetic ones after them.
    oneof_index: dict[str, int] = {}
    for oneof_name in message_type.oneofs:
        oneof_index[oneof_name] = len(proto.oneof_decl)
        proto.oneof_decl.add(name=oneof_name)

    for spec in message_type.fields:
        field_proto = proto.field.add(
            name=spec.name,
            number=spec.number,
            type=_FIELD_TYPES[spec.kind],
            json_name=spec.name,
            label=_FDP.LABEL_REPEATED if spec.repeated else _FDP.LABEL_OPTIONAL,
        )
        if spec.is_message:
            field_proto.type_name = f".{PACKAGE}.{flat_name(spec.message_type or '')}"
        if spec.oneof:
            field_proto.oneof_index = oneof_index[spec.oneof]
        elif _needs_presence(spec):
            field_proto.proto3_optional = True
            field_proto.oneof_index = len(proto.oneof_decl)
            proto.oneof_decl.add(name=f"_{spec.name}")


def _needs_presence(spec: FieldSpec) -> bool:
    return not spec.repeated and not spec.is_message


# endregion
