"""Tests for the in-memory Message tree."""

import pytest

from propresenter_edit.codec.message import Message, UnknownField
from propresenter_edit.codec.schema import resolve_message_type


@pytest.fixture
def cue() -> Message:
    return Message(resolve_message_type("rv.data.Cue"))


def test_unset_scalar_reads_default(cue: Message) -> None:
    assert cue["name"] == ""
    assert cue["is_enabled"] is False
    assert "name" not in cue


def test_unset_message_reads_none(cue: Message) -> None:
    assert cue["uuid"] is None
    assert cue.get("uuid", "fallback") == "fallback"


def test_repeated_field_returns_live_list(cue: Message) -> None:
    cue["actions"].append(Message(resolve_message_type("rv.data.Action")))
    assert len(cue["actions"]) == 1
    assert "actions" in cue


def test_empty_repeated_field_is_not_present(cue: Message) -> None:
    cue["actions"]
    assert "actions" not in cue
    assert list(cue.present_fields()) == []


def test_unknown_field_name_raises(cue: Message) -> None:
    with pytest.raises(KeyError, match="has no field 'lyrics'"):
        cue["lyrics"]
    with pytest.raises(KeyError):
        cue["lyrics"] = "x"


def test_setting_none_clears_field(cue: Message) -> None:
    cue["name"] = "Verse"
    cue["name"] = None
    assert "name" not in cue


def test_dicts_become_messages(cue: Message) -> None:
    cue["uuid"] = {"string": "ABC"}
    assert isinstance(cue["uuid"], Message)
    assert cue["uuid"].type_name == "rv.data.UUID"


def test_setting_oneof_member_clears_siblings() -> None:
    action = Message(resolve_message_type("rv.data.Action"))
    action["media"] = {}
    assert action.which_oneof("action_type_data") == "media"

    action["slide"] = {}
    assert action.which_oneof("action_type_data") == "slide"
    assert "media" not in action


def test_which_oneof_unknown_group_raises() -> None:
    action = Message(resolve_message_type("rv.data.Action"))
    with pytest.raises(KeyError, match="no oneof"):
        action.which_oneof("payload")


def test_ensure_creates_once(cue: Message) -> None:
    first = cue.ensure("hot_key")
    assert cue.ensure("hot_key") is first


def test_ensure_rejects_non_message_fields(cue: Message) -> None:
    with pytest.raises(TypeError):
        cue.ensure("name")
    with pytest.raises(TypeError):
        cue.ensure("actions")


def test_add_appends_to_repeated_message_field(cue: Message) -> None:
    action = cue.add("actions", {"name": "Slide"})
    assert cue["actions"] == [action]
    with pytest.raises(TypeError):
        cue.add("uuid")


def test_copy_is_deep(cue: Message) -> None:
    cue["uuid"] = {"string": "ABC"}
    cue.unknown_fields.append(UnknownField(99, 0, b"\x98\x06\x01"))
    clone = cue.copy()

    clone["uuid"]["string"] = "XYZ"

    assert cue["uuid"]["string"] == "ABC"
    assert clone.unknown_fields == cue.unknown_fields
    assert clone != cue


def test_equality_ignores_empty_lists(cue: Message) -> None:
    other = Message(resolve_message_type("rv.data.Cue"))
    cue["actions"]
    assert cue == other


def test_to_dict_encodes_bytes_and_unknown_fields() -> None:
    text = Message(resolve_message_type("rv.data.Graphics.Text"), {"rtf_data": b"{\\rtf1}"})
    text.unknown_fields.append(UnknownField(1, 0, b"\x08\x01"))

    result = text.to_dict()

    assert result["rtf_data"] == "e1xydGYxfQ=="
    assert result["_unknown"] == [{"number": 1, "wire_type": 0, "data": "CAE="}]
