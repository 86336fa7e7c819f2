"""Identifiers for newly authored cues, groups, elements and arrangements.

ProPresenter stores identifiers as upper-case version-4 UUID strings wrapped
in an `rv.data.UUID` message. There is no registry; a collision between
random UUIDs is treated as impossible in practice.
"""

from __future__ import annotations

import uuid

from propresenter_edit.codec.message import Message
from propresenter_edit.codec.schema import resolve_message_type

UUID_TYPE = "rv.data.UUID"


def generate_uuid() -> str:
    """New identifier, e.g. '3F2504E0-4F89-41D3-9A0C-0305E82C3301'."""
    return str(uuid.uuid4()).upper()


def uuid_message(value: str | None = None) -> Message:
    """An `rv.data.UUID` message holding `value`, or a fresh identifier."""
    return Message(
        resolve_message_type(UUID_TYPE),
        {"string": value if value is not None else generate_uuid()},
    )
