"""Shared test helper functions."""

from typing import Optional

from propresenter_edit.codec.message import Message
from propresenter_edit.codec.schema import resolve_message_type
from propresenter_edit.internals import constants
from propresenter_edit.internals.identifiers import uuid_message
from propresenter_edit.models import Presentation
from propresenter_edit.processing.rtf import text_to_rtf


def make_cue(
    text: Optional[str],
    name: str = "",
    uuid: Optional[str] = None,
    notes: Optional[str] = None,
) -> Message:
    """
    A cue with one slide action whose slide has one element.

    text=None gives an element without a text payload (like an image).
    """
    cue = Message(resolve_message_type("rv.data.Cue"))
    cue["uuid"] = uuid_message(uuid)
    cue["name"] = name
    cue["is_enabled"] = True

    action = cue.add("actions")
    action["uuid"] = uuid_message()
    action["type"] = constants.ACTION_TYPE_PRESENTATION_SLIDE
    presentation_slide = action.ensure("slide").ensure("presentation")
    slide = presentation_slide.ensure("base_slide")
    slide["uuid"] = uuid_message()

    graphics = slide.add("elements").ensure("element")
    graphics["uuid"] = uuid_message()
    graphics["name"] = "Lyrics"
    graphics["bounds"] = {
        "origin": {"x": 0.0, "y": 100.0},
        "size": {"width": 1920.0, "height": 880.0},
    }
    if text is not None:
        text_payload = graphics.ensure("text")
        text_payload["attributes"] = {"font": {"name": "Arial", "size": 72.0}}
        text_payload["rtf_data"] = text_to_rtf(text)

    if notes is not None:
        presentation_slide["notes"] = {"rtf_data": text_to_rtf(notes)}

    return cue


def make_presentation(
    groups: list[tuple[str, list[Message]]], name: str = "Test Song"
) -> Presentation:
    """A presentation whose cue list is every group's cues, in group order."""
    presentation = Presentation.new(name)
    root = presentation.message
    for group_name, cues in groups:
        cue_group = root.add("cue_groups")
        group = cue_group.ensure("group")
        group["uuid"] = uuid_message()
        group["name"] = group_name
        for cue in cues:
            root["cues"].append(cue)
            cue_group["cue_identifiers"].append(uuid_message(cue["uuid"]["string"]))
    return presentation


def add_element(cue: Message, text: Optional[str]) -> Message:
    """Append another element to the cue's first slide; returns its Graphics.Element."""
    slide = cue["actions"][0]["slide"]["presentation"]["base_slide"]
    graphics = slide.add("elements").ensure("element")
    graphics["uuid"] = uuid_message()
    if text is not None:
        graphics.ensure("text")["rtf_data"] = text_to_rtf(text)
    return graphics
