"""In-memory message tree produced by decode() and consumed by encode()."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from propresenter_edit.codec.schema import FieldSpec, MessageType


# region UnknownField
@dataclass(frozen=True)
class UnknownField:
    """A field the schema does not describe, kept exactly as it was read.

    `data` is the complete encoded field, key included, so encode() can write
    it back byte-for-byte.
    """

    number: int
    wire_type: int
    data: bytes


# endregion


# region Message
class Message:
    """
    One decoded message: named field values plus the unrecognized-fields bucket.

    Field access goes through the schema, so a misspelled field name raises
    KeyError instead of silently creating a new attribute.

    Example:
        >>> cue = Message(schema.message_type("rv.data.Cue"), {"name": "Verse 1"})
        >>> cue["name"]
        'Verse 1'
        >>> cue.ensure("uuid")["string"] = generate_uuid()
    """

    __slots__ = ("_type", "_values", "unknown_fields")

    def __init__(
        self,
        message_type: MessageType,
        values: Mapping[str, Any] | None = None,
        unknown_fields: list[UnknownField] | None = None,
    ) -> None:
        self._type = message_type
        self._values: dict[str, Any] = {}
        self.unknown_fields: list[UnknownField] = list(unknown_fields or [])
        if values:
            self.set_fields(values)

    # region type info
    @property
    def message_type(self) -> MessageType:
        return self._type

    @property
    def type_name(self) -> str:
        return self._type.full_name

    # endregion

    # region field access
    def __getitem__(self, name: str) -> Any:
        """Stored value, or the field default. Reading a repeated field returns the live list."""
        spec = self._type.field_named(name)
        if name in self._values:
            return self._values[name]
        if spec.repeated:
            values: list[Any] = []
            self._values[name] = values
            return values
        return spec.default()

    def __setitem__(self, name: str, value: Any) -> None:
        spec = self._type.field_named(name)
        if value is None:
            self._values.pop(name, None)
            return

        value = self._coerce(spec, value)

        # Only one member of a oneof can be active
        if spec.oneof:
            for sibling in self._type.oneofs[spec.oneof]:
                if sibling != name:
                    self._values.pop(sibling, None)

        self._values[name] = value

    def __delitem__(self, name: str) -> None:
        self._type.field_named(name)
        self._values.pop(name, None)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str) or name not in self._values:
            return False
        value = self._values[name]
        if isinstance(value, list):
            return len(value) > 0
        return True

    def get(self, name: str, default: Any = None) -> Any:
        """Stored value if the field is present, otherwise `default`."""
        self._type.field_named(name)
        if name in self:
            return self._values[name]
        return default

    def set_fields(self, values: Mapping[str, Any]) -> None:
        for name, value in values.items():
            self[name] = value

    def ensure(self, name: str) -> Message:
        """Return the nested message in `name`, creating an empty one if it is unset."""
        spec = self._type.field_named(name)
        if not spec.is_message or spec.repeated:
            raise TypeError(f"{self.type_name}.{name} is not a singular message field")
        existing = self._values.get(name)
        if isinstance(existing, Message):
            return existing
        child = Message(self._type.nested_type(spec))
        self[name] = child
        return child

    def add(self, name: str, values: Mapping[str, Any] | None = None) -> Message:
        """Append a new nested message to the repeated field `name` and return it."""
        spec = self._type.field_named(name)
        if not spec.is_message or not spec.repeated:
            raise TypeError(f"{self.type_name}.{name} is not a repeated message field")
        child = Message(self._type.nested_type(spec), values)
        self[name].append(child)
        return child

    def which_oneof(self, group: str) -> str | None:
        """Name of the active member of a oneof group, or None."""
        try:
            members = self._type.oneofs[group]
        except KeyError:
            raise KeyError(f"{self.type_name} has no oneof '{group}'") from None
        for member in members:
            if member in self:
                return member
        return None

    def present_fields(self) -> Iterator[tuple[FieldSpec, Any]]:
        """Set fields in field-number order."""
        for spec in self._type.fields:
            if spec.name in self:
                yield spec, self._values[spec.name]

    # endregion

    # region coercion
    def _coerce(self, spec: FieldSpec, value: Any) -> Any:
        """Turn plain dicts into Messages so trees can be written as literals."""
        if spec.repeated:
            if not isinstance(value, (list, tuple)):
                return value  # encode() reports the bad type with its path
            return [self._coerce_single(spec, item) for item in value]
        return self._coerce_single(spec, value)

    def _coerce_single(self, spec: FieldSpec, value: Any) -> Any:
        if spec.is_message and isinstance(value, Mapping):
            return Message(self._type.nested_type(spec), value)
        if isinstance(value, bytearray):
            return bytes(value)
        return value

    # endregion

    # region copy / compare / render
    def copy(self) -> Message:
        """Deep copy of the tree below this node (the schema is shared, not copied)."""
        clone = Message(self._type, unknown_fields=list(self.unknown_fields))
        for name, value in self._values.items():
            if isinstance(value, Message):
                clone._values[name] = value.copy()
            elif isinstance(value, list):
                clone._values[name] = [
                    item.copy() if isinstance(item, Message) else item for item in value
                ]
            else:
                clone._values[name] = value
        return clone

    def __deepcopy__(self, memo: dict[int, Any]) -> Message:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Message):
            return NotImplemented
        return (
            self.type_name == other.type_name
            and self._comparable_values() == other._comparable_values()
            and self.unknown_fields == other.unknown_fields
        )

    __hash__ = None  # type: ignore[assignment]

    def _comparable_values(self) -> dict[str, Any]:
        return {name: value for name, value in self._values.items() if name in self}

    def __repr__(self) -> str:
        shown = ", ".join(f"{spec.name}={value!r}" for spec, value in self.present_fields())
        unknown = f", unknown_fields={len(self.unknown_fields)}" if self.unknown_fields else ""
        return f"Message({self.type_name}: {shown}{unknown})"

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view: bytes become base64 strings, unknown fields go under '_unknown'."""
        result: dict[str, Any] = {}
        for spec, value in self.present_fields():
            if isinstance(value, list):
                result[spec.name] = [_plain(item) for item in value]
            else:
                result[spec.name] = _plain(value)
        if self.unknown_fields:
            result["_unknown"] = [
                {
                    "number": unknown.number,
                    "wire_type": unknown.wire_type,
                    "data": base64.b64encode(unknown.data).decode("ascii"),
                }
                for unknown in self.unknown_fields
            ]
        return result

    # endregion


def _plain(value: Any) -> Any:
    if isinstance(value, Message):
        return value.to_dict()
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    return value


# endregion
