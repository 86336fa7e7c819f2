# models.py
"""Typed views over decoded presentation messages.

Each class wraps one `Message` node and reads or writes straight through to
it, so every change made through a view lands in the tree that gets
re-encoded. Views hold no state of their own and can be created as often as
needed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional

from propresenter_edit.codec.message import Message, UnknownField
from propresenter_edit.codec.schema import resolve_message_type
from propresenter_edit.internals.constants import PRESENTATION_TYPE
from propresenter_edit.internals.identifiers import uuid_message


# region helpers
def _uuid_of(message: Message, field_name: str = "uuid") -> str:
    """The identifier string in a UUID-typed field, or '' when unset."""
    wrapped = message.get(field_name)
    if wrapped is None:
        return ""
    return wrapped["string"]


# endregion


# region _MessageView
@dataclass
class _MessageView:
    """Base for all views: holds the wrapped message and checks its type."""

    TYPE_NAME: ClassVar[str] = ""

    message: Message

    def __post_init__(self) -> None:
        if self.message.type_name != self.TYPE_NAME:
            raise TypeError(
                f"{type(self).__name__} wraps {self.TYPE_NAME}, got {self.message.type_name}"
            )

    @property
    def unknown_fields(self) -> list[UnknownField]:
        return self.message.unknown_fields


# endregion


# region ActionKind
class ActionKind(Enum):
    """Which payload an action carries (the active member of its ActionTypeData oneof)."""

    SLIDE = "slide"
    MEDIA = "media"
    TIMER = "timer"
    CLEAR = "clear"
    CLEAR_GROUP = "clear_group"
    PROP = "prop"
    MESSAGE = "message"
    STAGE = "stage"
    MACRO = "macro"
    OTHER = "other"  # A member this enum does not list
    NONE = "none"  # No payload at all

    @classmethod
    def from_member(cls, member: Optional[str]) -> ActionKind:
        if member is None:
            return cls.NONE
        try:
            return cls(member)
        except ValueError:
            return cls.OTHER


# endregion


# region text and elements
@dataclass
class TextPayload(_MessageView):
    """`rv.data.Graphics.Text`: RTF content plus opaque formatting."""

    TYPE_NAME: ClassVar[str] = "rv.data.Graphics.Text"

    @property
    def rtf_data(self) -> bytes:
        return self.message["rtf_data"]

    @rtf_data.setter
    def rtf_data(self, value: bytes) -> None:
        self.message["rtf_data"] = value

    @property
    def has_text(self) -> bool:
        return len(self.rtf_data) > 0

    @property
    def attributes(self) -> Optional[Message]:
        return self.message.get("attributes")

    @property
    def custom_attributes(self) -> list[Message]:
        attributes = self.attributes
        if attributes is None:
            return []
        return list(attributes["custom_attributes"])


@dataclass
class Element(_MessageView):
    """`rv.data.Slide.Element`: one graphic on a slide."""

    TYPE_NAME: ClassVar[str] = "rv.data.Slide.Element"

    @property
    def graphics(self) -> Optional[Message]:
        return self.message.get("element")

    @property
    def uuid(self) -> str:
        graphics = self.graphics
        return _uuid_of(graphics) if graphics is not None else ""

    @property
    def name(self) -> str:
        graphics = self.graphics
        return graphics["name"] if graphics is not None else ""

    @property
    def text(self) -> Optional[TextPayload]:
        """The text payload, or None for images, shapes and other non-text elements."""
        graphics = self.graphics
        if graphics is None or "text" not in graphics:
            return None
        return TextPayload(graphics["text"])


# endregion


# region slides
@dataclass
class Slide(_MessageView):
    """`rv.data.Slide`: a canvas holding elements."""

    TYPE_NAME: ClassVar[str] = "rv.data.Slide"

    @property
    def uuid(self) -> str:
        return _uuid_of(self.message)

    @property
    def size(self) -> Optional[tuple[float, float]]:
        size = self.message.get("size")
        if size is None:
            return None
        return size["width"], size["height"]

    @property
    def background_color(self) -> Optional[Message]:
        return self.message.get("background_color")

    @property
    def draws_background_color(self) -> bool:
        return self.message["draws_background_color"]

    @property
    def elements(self) -> list[Element]:
        return [Element(element) for element in self.message["elements"]]


@dataclass
class PresentationSlide(_MessageView):
    """`rv.data.PresentationSlide`: the slide payload of a slide action."""

    TYPE_NAME: ClassVar[str] = "rv.data.PresentationSlide"

    @property
    def base_slide(self) -> Optional[Slide]:
        base = self.message.get("base_slide")
        return Slide(base) if base is not None else None

    @property
    def notes_rtf(self) -> bytes:
        notes = self.message.get("notes")
        if notes is None:
            return b""
        return notes["rtf_data"]


# endregion


# region cues
@dataclass
class Action(_MessageView):
    """`rv.data.Action`. Only slide actions are interpreted; other kinds pass through."""

    TYPE_NAME: ClassVar[str] = "rv.data.Action"

    @property
    def uuid(self) -> str:
        return _uuid_of(self.message)

    @property
    def name(self) -> str:
        return self.message["name"]

    @property
    def is_enabled(self) -> bool:
        return self.message["is_enabled"]

    @property
    def kind(self) -> ActionKind:
        return ActionKind.from_member(self.message.which_oneof("action_type_data"))

    @property
    def presentation_slide(self) -> Optional[PresentationSlide]:
        """The presentation slide of a slide action; None for every other kind."""
        if self.kind is not ActionKind.SLIDE:
            return None
        slide_type = self.message["slide"]
        if slide_type.which_oneof("slide") != "presentation":
            return None
        return PresentationSlide(slide_type["presentation"])


@dataclass
class Cue(_MessageView):
    """`rv.data.Cue`: one addressable slide."""

    TYPE_NAME: ClassVar[str] = "rv.data.Cue"

    @property
    def uuid(self) -> str:
        return _uuid_of(self.message)

    @property
    def name(self) -> str:
        return self.message["name"]

    @name.setter
    def name(self, value: str) -> None:
        self.message["name"] = value

    @property
    def is_enabled(self) -> bool:
        return self.message["is_enabled"]

    @property
    def actions(self) -> list[Action]:
        return [Action(action) for action in self.message["actions"]]


@dataclass
class CueGroup(_MessageView):
    """`rv.data.Presentation.CueGroup`: a named group referencing cues by identifier."""

    TYPE_NAME: ClassVar[str] = "rv.data.Presentation.CueGroup"

    @property
    def group(self) -> Optional[Message]:
        return self.message.get("group")

    @property
    def uuid(self) -> str:
        group = self.group
        return _uuid_of(group) if group is not None else ""

    @property
    def name(self) -> str:
        group = self.group
        return group["name"] if group is not None else ""

    @property
    def color(self) -> Optional[Message]:
        group = self.group
        return group.get("color") if group is not None else None

    @property
    def cue_identifiers(self) -> list[str]:
        return [identifier["string"] for identifier in self.message["cue_identifiers"]]


@dataclass
class Arrangement(_MessageView):
    """`rv.data.Presentation.Arrangement`: an ordering of groups."""

    TYPE_NAME: ClassVar[str] = "rv.data.Presentation.Arrangement"

    @property
    def uuid(self) -> str:
        return _uuid_of(self.message)

    @property
    def name(self) -> str:
        return self.message["name"]

    @property
    def group_identifiers(self) -> list[str]:
        return [identifier["string"] for identifier in self.message["group_identifiers"]]


# endregion


# region metadata blocks
@dataclass
class CCLI(_MessageView):
    """`rv.data.Presentation.CCLI`: copyright and licensing fields."""

    TYPE_NAME: ClassVar[str] = "rv.data.Presentation.CCLI"

    @property
    def author(self) -> str:
        return self.message["author"]

    @property
    def artist_credits(self) -> str:
        return self.message["artist_credits"]

    @property
    def song_title(self) -> str:
        return self.message["song_title"]

    @property
    def publisher(self) -> str:
        return self.message["publisher"]

    @property
    def copyright_year(self) -> int:
        return self.message["copyright_year"]

    @property
    def song_number(self) -> int:
        return self.message["song_number"]

    @property
    def display(self) -> bool:
        return self.message["display"]

    @property
    def album(self) -> str:
        return self.message["album"]


@dataclass
class MusicKeyBlock(_MessageView):
    """`rv.data.Presentation.Music`: original and user (transposed) key."""

    TYPE_NAME: ClassVar[str] = "rv.data.Presentation.Music"

    @property
    def original_music_key(self) -> str:
        return self.message["original_music_key"]

    @property
    def user_music_key(self) -> str:
        return self.message["user_music_key"]

    @property
    def original(self) -> Optional[tuple[int, int]]:
        """(key index, scale) of the original key, if recorded."""
        return _key_scale(self.message.get("original"))

    @property
    def user(self) -> Optional[tuple[int, int]]:
        return _key_scale(self.message.get("user"))


def _key_scale(message: Optional[Message]) -> Optional[tuple[int, int]]:
    if message is None:
        return None
    return message["music_key"], message["music_scale"]


# endregion


# region Presentation
@dataclass
class Presentation(_MessageView):
    """`rv.data.Presentation`: the root of a .pro file."""

    TYPE_NAME: ClassVar[str] = PRESENTATION_TYPE

    @classmethod
    def new(cls, name: str = "") -> Presentation:
        """An empty presentation with a fresh identifier."""
        message = Message(resolve_message_type(PRESENTATION_TYPE))
        message["uuid"] = uuid_message()
        message["name"] = name
        return cls(message)

    @property
    def uuid(self) -> str:
        return _uuid_of(self.message)

    @property
    def name(self) -> str:
        return self.message["name"]

    @name.setter
    def name(self, value: str) -> None:
        self.message["name"] = value

    @property
    def category(self) -> str:
        return self.message["category"]

    @property
    def notes(self) -> str:
        return self.message["notes"]

    @property
    def music_key(self) -> str:
        return self.message["music_key"]

    @property
    def ccli(self) -> Optional[CCLI]:
        block = self.message.get("ccli")
        return CCLI(block) if block is not None else None

    @property
    def music(self) -> Optional[MusicKeyBlock]:
        block = self.message.get("music")
        return MusicKeyBlock(block) if block is not None else None

    @property
    def cue_groups(self) -> list[CueGroup]:
        return [CueGroup(group) for group in self.message["cue_groups"]]

    @property
    def cues(self) -> list[Cue]:
        return [Cue(cue) for cue in self.message["cues"]]

    @property
    def arrangements(self) -> list[Arrangement]:
        return [Arrangement(arrangement) for arrangement in self.message["arrangements"]]

    @property
    def selected_arrangement(self) -> str:
        return _uuid_of(self.message, "selected_arrangement")


# endregion
