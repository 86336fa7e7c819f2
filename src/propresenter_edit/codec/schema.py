"""Schema description: which field numbers exist on which message type.

The description is a TOML definition set (see resources/propresenter_schema.toml)
rather than .proto source. It is parsed once per process and shared read-only
by every decode and encode call.

Format:

    [messages."rv.data.Color"]
    fields = [
        { name = "red", number = 1, kind = "float" },
        ...
    ]

Field keys: name, number, kind, type (for kind = "message"), repeated,
oneof, required.
"""

# region imports
from __future__ import annotations

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # Python 3.10

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from google.protobuf.message import Message as ProtobufMessage

from propresenter_edit.codec.descriptors import build_message_classes
from propresenter_edit.errors import SchemaUnavailable
from propresenter_edit.internals.constants import (
    DEFAULT_SCHEMA_FILENAME,
    RESOURCES_DIR,
)

log = logging.getLogger("propresenter_edit")
# endregion


# region field kinds
SCALAR_KINDS = frozenset(
    {
        "double",
        "float",
        "int32",
        "int64",
        "uint32",
        "uint64",
        "sint32",
        "sint64",
        "fixed32",
        "fixed64",
        "sfixed32",
        "sfixed64",
        "bool",
        "enum",
        "string",
        "bytes",
    }
)

MESSAGE_KIND = "message"

FIELD_KINDS = SCALAR_KINDS | {MESSAGE_KIND}

MAX_FIELD_NUMBER = (1 << 29) - 1
# Reserved for the protobuf implementation
RESERVED_FIELD_NUMBERS = range(19000, 20000)
# endregion


# region FieldSpec
@dataclass(frozen=True)
class FieldSpec:
    """One field of a message type."""

    name: str
    number: int
    kind: str
    message_type: Optional[str] = None
    repeated: bool = False
    oneof: Optional[str] = None
    required: bool = False

    @property
    def is_message(self) -> bool:
        return self.kind == MESSAGE_KIND

    @property
    def packable(self) -> bool:
        """Repeated numeric fields may arrive packed in one length-delimited value."""
        return self.repeated and self.kind not in ("string", "bytes", MESSAGE_KIND)

    def default(self) -> Any:
        """proto3 default for a scalar; None for a message."""
        if self.is_message:
            return None
        if self.kind == "string":
            return ""
        if self.kind == "bytes":
            return b""
        if self.kind == "bool":
            return False
        if self.kind in ("float", "double"):
            return 0.0
        return 0


# endregion


# region MessageType
@dataclass(eq=False)
class MessageType:
    """A message type: its fields, indexed by number and by name.

    `schema` is set by the owning Schema so nested field types resolve
    against the same definition set.
    """

    full_name: str
    fields: tuple[FieldSpec, ...]
    by_number: dict[int, FieldSpec] = field(default_factory=dict, repr=False)
    by_name: dict[str, FieldSpec] = field(default_factory=dict, repr=False)
    oneofs: dict[str, tuple[str, ...]] = field(default_factory=dict, repr=False)
    schema: Optional[Schema] = field(default=None, repr=False)

    @classmethod
    def build(cls, full_name: str, fields: list[FieldSpec]) -> MessageType:
        """Create a MessageType, checking numbers and names are unique."""
        by_number: dict[int, FieldSpec] = {}
        by_name: dict[str, FieldSpec] = {}
        oneofs: dict[str, list[str]] = {}
        for spec in fields:
            if spec.number in by_number:
                raise SchemaUnavailable(
                    f"{full_name}: field number {spec.number} used by both "
                    f"'{by_number[spec.number].name}' and '{spec.name}'"
                )
            if spec.name in by_name:
                raise SchemaUnavailable(f"{full_name}: duplicate field name '{spec.name}'")
            by_number[spec.number] = spec
            by_name[spec.name] = spec
            if spec.oneof:
                oneofs.setdefault(spec.oneof, []).append(spec.name)

        for oneof_name in oneofs:
            if oneof_name in by_name:
                raise SchemaUnavailable(
                    f"{full_name}: oneof '{oneof_name}' has the same name as a field"
                )

        ordered = tuple(sorted(fields, key=lambda f: f.number))
        return cls(
            full_name=full_name,
            fields=ordered,
            by_number=by_number,
            by_name=by_name,
            oneofs={k: tuple(v) for k, v in oneofs.items()},
        )

    def field_named(self, name: str) -> FieldSpec:
        try:
            return self.by_name[name]
        except KeyError:
            raise KeyError(f"{self.full_name} has no field '{name}'") from None

    def nested_type(self, spec: FieldSpec) -> MessageType:
        """The MessageType of a message-kind field."""
        if self.schema is None or spec.message_type is None:
            raise SchemaUnavailable(
                f"{self.full_name}.{spec.name}: no schema to resolve its message type"
            )
        return self.schema.message_type(spec.message_type)

    @property
    def pb_class(self) -> type[ProtobufMessage]:
        """The protobuf runtime class registered for this type."""
        if self.schema is None:
            raise SchemaUnavailable(f"{self.full_name} does not belong to a loaded schema")
        return self.schema.message_class(self.full_name)


# endregion


# region Schema
class Schema:
    """A loaded, validated set of message types."""

    def __init__(self, messages: dict[str, MessageType], source: str = "<memory>") -> None:
        self.messages = messages
        self.source = source
        self._validate_references()
        for message in messages.values():
            message.schema = self
        self._classes = build_message_classes(messages, source)

    def __contains__(self, name: str) -> bool:
        return name in self.messages

    def __len__(self) -> int:
        return len(self.messages)

    def message_type(self, name: str) -> MessageType:
        try:
            return self.messages[name]
        except KeyError:
            raise SchemaUnavailable(
                f"Message type '{name}' is not described by schema {self.source}"
            ) from None

    def message_class(self, name: str) -> type[ProtobufMessage]:
        """The generated protobuf class for a described message type."""
        self.message_type(name)
        return self._classes[name]

    def _validate_references(self) -> None:
        for message in self.messages.values():
            for spec in message.fields:
                if spec.is_message and spec.message_type not in self.messages:
                    raise SchemaUnavailable(
                        f"{message.full_name}.{spec.name} refers to undeclared "
                        f"message type '{spec.message_type}'"
                    )

    # region parsing
    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str = "<memory>") -> Schema:
        """Build a Schema from the parsed TOML structure."""
        raw_messages = data.get("messages")
        if not isinstance(raw_messages, dict) or not raw_messages:
            raise SchemaUnavailable(f"Schema {source} declares no [messages] tables")

        messages: dict[str, MessageType] = {}
        for full_name, body in raw_messages.items():
            raw_fields = body.get("fields", []) if isinstance(body, dict) else None
            if not isinstance(raw_fields, list):
                raise SchemaUnavailable(f"{source}: {full_name}.fields must be a list")
            specs = [_parse_field(full_name, raw, source) for raw in raw_fields]
            messages[full_name] = MessageType.build(full_name, specs)

        return cls(messages, source=source)

    @classmethod
    def from_toml(cls, path: Path) -> Schema:
        """Load a schema definition file; any failure raises SchemaUnavailable."""
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError as e:
            error_msg = f"Schema file not found: {path}"
            log.error(error_msg)
            raise SchemaUnavailable(error_msg) from e
        except OSError as e:
            error_msg = f"Could not read schema file {path}: {e}"
            log.error(error_msg)
            raise SchemaUnavailable(error_msg) from e
        except tomllib.TOMLDecodeError as e:
            error_msg = f"Invalid TOML syntax in schema file {path}"
            log.error(error_msg)
            raise SchemaUnavailable(error_msg) from e

        return cls.from_dict(data, source=str(path))

    # endregion


def _parse_field(message_name: str, raw: Any, source: str) -> FieldSpec:
    """Turn one inline table from the TOML file into a FieldSpec."""
    if not isinstance(raw, dict):
        raise SchemaUnavailable(f"{source}: {message_name} has a field that is not a table")

    name = raw.get("name")
    number = raw.get("number")
    kind = raw.get("kind")
    where = f"{source}: {message_name}.{name}"

    if not isinstance(name, str) or not name:
        raise SchemaUnavailable(f"{source}: {message_name} has a field without a name")
    if not isinstance(number, int) or isinstance(number, bool) or not (
        1 <= number <= MAX_FIELD_NUMBER
    ):
        raise SchemaUnavailable(f"{where}: invalid field number {number!r}")
    if number in RESERVED_FIELD_NUMBERS:
        raise SchemaUnavailable(f"{where}: field number {number} is reserved by protobuf")
    if kind not in FIELD_KINDS:
        raise SchemaUnavailable(
            f"{where}: unknown kind {kind!r}. Valid kinds: {sorted(FIELD_KINDS)}"
        )

    message_type = raw.get("type")
    if kind == MESSAGE_KIND and not isinstance(message_type, str):
        raise SchemaUnavailable(f"{where}: message fields need a 'type'")

    repeated = bool(raw.get("repeated", False))
    oneof = raw.get("oneof")
    if oneof is not None and repeated:
        raise SchemaUnavailable(f"{where}: a oneof member cannot be repeated")

    return FieldSpec(
        name=name,
        number=number,
        kind=kind,
        message_type=message_type if kind == MESSAGE_KIND else None,
        repeated=repeated,
        oneof=oneof,
        required=bool(raw.get("required", False)),
    )


# endregion


# region process-wide cache
# Loaded lazily by get_schema(); never mutated afterwards.
_schema: Schema | None = None
_schema_path: Path | None = None
_schema_lock = threading.Lock()


def default_schema_path() -> Path:
    return RESOURCES_DIR / DEFAULT_SCHEMA_FILENAME


def configure_schema_path(path: Path | str | None) -> None:
    """
    Choose which schema file the next get_schema() call loads.

    Must be called before the first decode or encode; a schema that is already
    loaded is kept until reset_schema_cache().
    """
    global _schema_path
    with _schema_lock:
        _schema_path = Path(path) if path is not None else None
        if _schema is not None:
            log.debug(
                f"Schema already loaded from {_schema.source}; new path {path} applies after reset."
            )


def get_schema() -> Schema:
    """
    Return the process-wide schema, loading it on first use.

    Raises:
        SchemaUnavailable: If the definition set cannot be read or is invalid.
    """
    global _schema

    if _schema is None:
        with _schema_lock:
            if _schema is None:
                path = _schema_path or default_schema_path()
                log.debug(f"Loading schema description from {path}")
                loaded = Schema.from_toml(path)
                log.debug(f"Schema loaded: {len(loaded)} message types from {path}")
                _schema = loaded
    return _schema


def reset_schema_cache() -> None:
    """Drop the cached schema (tests, or switching definition files)."""
    global _schema
    with _schema_lock:
        _schema = None


def resolve_message_type(message_type: MessageType | str) -> MessageType:
    """Accept a MessageType or a full type name looked up in the cached schema."""
    if isinstance(message_type, MessageType):
        return message_type
    return get_schema().message_type(message_type)


# endregion
