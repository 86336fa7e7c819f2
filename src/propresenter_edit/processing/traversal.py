"""Locate, read and replace slide text in a decoded presentation.

The path to a cue's text is:

    Cue.actions[] -> Action (slide kind) -> SlideType.presentation
        -> PresentationSlide.base_slide -> Slide.elements[]
        -> Slide.Element.element -> Graphics.Element.text -> rtf_data

Nothing here raises when text is missing: an absent element comes back as
None, an empty string, or False.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from propresenter_edit.internals.constants import (
    DEFAULT_FONT_NAME,
    DEFAULT_FONT_SIZE,
    UNNAMED_GROUP,
)
from propresenter_edit.models import Cue, Presentation, PresentationSlide, Slide, TextPayload
from propresenter_edit.processing.rtf import rtf_to_text, text_to_rtf

log = logging.getLogger("propresenter_edit")


# region result types
@dataclass
class CueGroupEntry:
    """One cue group, resolved: its display name and the cues it references, in order."""

    name: str
    cues: list[Cue] = field(default_factory=list)


@dataclass(frozen=True)
class Chord:
    """A chord name tagged to a character range of a text element."""

    start: int
    end: int
    chord: str


# endregion


# region cues and groups
def cues_of(presentation: Presentation) -> list[Cue]:
    """The presentation's own cue list, in file order, unfiltered."""
    return presentation.cues


def grouped_cues(presentation: Presentation) -> list[CueGroupEntry]:
    """
    Resolve every cue group's identifiers against the presentation's cue list.

    Entries follow group order and are positional: two groups with the same
    name give two entries. Identifiers with no matching cue are skipped.

    Example:
        >>> [(entry.name, [text_of(c) for c in entry.cues]) for entry in grouped_cues(prs)]
        [('Verse 1', ['Line one', 'Line two'])]
    """
    by_uuid: dict[str, Cue] = {}
    for cue in presentation.cues:
        if not cue.uuid:
            continue
        if cue.uuid in by_uuid:
            log.debug(f"Duplicate cue identifier {cue.uuid}; keeping the first cue with it")
            continue
        by_uuid[cue.uuid] = cue

    entries: list[CueGroupEntry] = []
    for group in presentation.cue_groups:
        entry = CueGroupEntry(name=group.name or UNNAMED_GROUP)
        for identifier in group.cue_identifiers:
            cue = by_uuid.get(identifier)
            if cue is None:
                log.debug(f"Group '{entry.name}' references missing cue {identifier}; skipping")
                continue
            entry.cues.append(cue)
        entries.append(entry)

    return entries


def find_cue(presentation: Presentation, index: int) -> Cue:
    """
    Cue at a 0-based position in the cue list.

    Raises:
        IndexError: If there is no cue at `index` (negative indexes included).
    """
    cues = presentation.cues
    if not 0 <= index < len(cues):
        if cues:
            raise IndexError(f"Cue index {index} out of range (0-{len(cues) - 1})")
        raise IndexError(f"Cue index {index} out of range (presentation has no cues)")
    return cues[index]


# endregion


# region slides
def presentation_slides(cue: Cue) -> list[PresentationSlide]:
    """Presentation slides of the cue's slide actions, in action order."""
    slides = []
    for action in cue.actions:
        presentation_slide = action.presentation_slide
        if presentation_slide is not None:
            slides.append(presentation_slide)
    return slides


def cue_slide(cue: Cue) -> Optional[Slide]:
    """Base slide of the first slide action that has one."""
    for presentation_slide in presentation_slides(cue):
        base = presentation_slide.base_slide
        if base is not None:
            return base
    return None


def slide_text_elements(slide: Slide) -> list[TextPayload]:
    """Text payloads with non-empty RTF, in element order."""
    payloads = []
    for element in slide.elements:
        text = element.text
        if text is not None and text.has_text:
            payloads.append(text)
    return payloads


def slide_text(slide: Slide) -> str:
    """Text of every text element on the slide, joined by newlines."""
    texts = [rtf_to_text(payload.rtf_data) for payload in slide_text_elements(slide)]
    return "\n".join(text for text in texts if text)


# endregion


# region text
def first_text_element(cue: Cue) -> Optional[TextPayload]:
    """
    First element with non-empty RTF, searching slide actions and then elements in order.

    Returns None when the cue has no such element.
    """
    for presentation_slide in presentation_slides(cue):
        base = presentation_slide.base_slide
        if base is None:
            continue
        payloads = slide_text_elements(base)
        if payloads:
            return payloads[0]
    return None


def text_of(cue: Cue) -> str:
    """Plain text of the cue's first text element; '' if it has none."""
    payload = first_text_element(cue)
    if payload is None:
        return ""
    return rtf_to_text(payload.rtf_data)


def set_text(
    cue: Cue,
    new_text: str,
    font_name: str = DEFAULT_FONT_NAME,
    font_size: float = DEFAULT_FONT_SIZE,
) -> bool:
    """
    Replace the RTF of the cue's first text element.

    Only `rtf_data` changes; attributes, bounds and every other element stay
    as they were.

    Returns:
        True if a text element was found and replaced, False otherwise (the
        cue is left untouched).
    """
    payload = first_text_element(cue)
    if payload is None:
        log.debug(f"Cue '{cue.name}' has no text element to replace")
        return False

    payload.rtf_data = text_to_rtf(new_text, font_name, font_size)
    log.debug(f"Replaced text of cue '{cue.name}'")
    return True


# endregion


# region chords and notes
def chords_of(cue: Cue) -> list[Chord]:
    """Chords attached to ranges of the cue's first text element, in attribute order."""
    payload = first_text_element(cue)
    if payload is None:
        return []

    chords = []
    for attribute in payload.custom_attributes:
        if attribute.which_oneof("attribute") != "chord" or not attribute["chord"]:
            continue
        text_range = attribute.get("range")
        start = text_range["start"] if text_range is not None else 0
        end = text_range["end"] if text_range is not None else 0
        chords.append(Chord(start=start, end=end, chord=attribute["chord"]))
    return chords


def notes_of(cue: Cue) -> str:
    """Plain text of the first slide notes found on the cue; '' if none."""
    for presentation_slide in presentation_slides(cue):
        notes = presentation_slide.notes_rtf
        if notes:
            return rtf_to_text(notes)
    return ""


# endregion
