"""Build a complete presentation from song sections.

One cue per slide, one cue group per section, a single centered text element
per slide, and optional CCLI, music key and arrangement blocks.

Song files for the CLI `create` command are TOML:

    title = "Amazing Grace"
    artist = "John Newton"
    ccli_number = 22025
    key = "G"

    [[sections]]
    name = "Verse 1"
    slides = [
        "Amazing grace how sweet the sound\\nThat saved a wretch like me",
        { text = "I once was lost", chords = [{ position = 0, chord = "G" }] },
    ]
"""

# region imports
from __future__ import annotations

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # Python 3.10

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from propresenter_edit.codec.message import Message
from propresenter_edit.codec.schema import resolve_message_type
from propresenter_edit.internals.config.define_config import UserConfig
from propresenter_edit.internals.constants import (
    ACTION_TYPE_PRESENTATION_SLIDE,
    DEFAULT_CREATE_FONT_SIZE,
    DEFAULT_FONT_NAME,
    DEFAULT_SLIDE_HEIGHT,
    DEFAULT_SLIDE_WIDTH,
)
from propresenter_edit.internals.identifiers import uuid_message
from propresenter_edit.models import Presentation
from propresenter_edit.processing.metadata import (
    MusicKey,
    MusicScale,
    parse_key,
    parse_scale,
    set_music_key,
)
from propresenter_edit.processing.rtf import text_to_rtf

log = logging.getLogger("propresenter_edit")
# endregion


# region constants
Color = tuple[float, float, float, float]

# Cycled through when a section has no color of its own
DEFAULT_GROUP_COLORS: tuple[Color, ...] = (
    (0.0, 0.0, 0.998, 1.0),  # Blue
    (0.135, 1.0, 0.025, 1.0),  # Green
    (0.989, 0.415, 0.032, 1.0),  # Orange
    (1.0, 0.999, 0.041, 1.0),  # Yellow
    (0.986, 0.007, 0.027, 1.0),  # Red
    (0.580, 0.404, 0.741, 1.0),  # Purple
)

WHITE: Color = (1.0, 1.0, 1.0, 1.0)
BLACK: Color = (0.0, 0.0, 0.0, 1.0)

# Text box leaves a 100px margin at the top of the slide
TEXT_TOP_MARGIN = 100

ALIGNMENT_CENTER = 2
VERTICAL_ALIGNMENT_MIDDLE = 1
STROKE_WIDTH_OUTSIDE = -6.0
DEFAULT_TAB_INTERVAL = 84.0
DEFAULT_KERNING = 2.0

DEFAULT_ARRANGEMENT_NAME = "Default"
# endregion


# region input types
@dataclass
class ChordPosition:
    """A chord starting at a character position of the slide text."""

    position: int
    chord: str


@dataclass
class SlideInput:
    text: str
    chords: list[ChordPosition] = field(default_factory=list)


@dataclass
class SectionInput:
    """A song section ("Verse 1", "Chorus") and its slides."""

    name: str
    slides: list[Union[SlideInput, str]] = field(default_factory=list)
    color: Optional[Color] = None


@dataclass
class MusicKeyConfig:
    key: MusicKey
    scale: MusicScale = MusicScale.MAJOR


@dataclass
class TextBounds:
    x: float
    y: float
    width: float
    height: float


@dataclass
class CreatePresentationOptions:
    """Everything needed to author a presentation. Only `title` and `sections` are required."""

    title: str
    sections: list[SectionInput] = field(default_factory=list)
    artist: str = ""
    ccli_number: int = 0
    ccli_author: str = ""
    copyright_year: int = 0
    publisher: str = ""
    category: str = ""
    notes: str = ""
    music_key: Optional[MusicKeyConfig] = None
    font_name: str = DEFAULT_FONT_NAME
    font_size: float = DEFAULT_CREATE_FONT_SIZE
    slide_width: int = DEFAULT_SLIDE_WIDTH
    slide_height: int = DEFAULT_SLIDE_HEIGHT
    text_bounds: Optional[TextBounds] = None
    create_arrangement: bool = True

    def get_text_bounds(self) -> TextBounds:
        """Explicit bounds, or the full slide width below the top margin."""
        if self.text_bounds is not None:
            return self.text_bounds
        return TextBounds(
            x=0,
            y=TEXT_TOP_MARGIN,
            width=self.slide_width,
            height=self.slide_height - 2 * TEXT_TOP_MARGIN,
        )


# endregion


# region create_presentation
def create_presentation(options: CreatePresentationOptions) -> Presentation:
    """
    Author a presentation from scratch.

    Cue names are "<section> - Slide <n>". Group colors cycle through
    DEFAULT_GROUP_COLORS unless the section sets its own. A CCLI block is added
    when a song number, author or artist is given; a "Default" arrangement
    listing every group is added unless `create_arrangement` is False.

    Example:
        >>> prs = create_presentation(CreatePresentationOptions(
        ...     title="Amazing Grace",
        ...     sections=[SectionInput("Verse 1", ["Amazing grace how sweet the sound"])],
        ... ))
        >>> [c.name for c in prs.cues]
        ['Verse 1 - Slide 1']
    """
    presentation = Presentation.new(options.title)
    root = presentation.message
    root["category"] = options.category
    root["notes"] = options.notes

    group_uuids: list[str] = []
    for section_index, section in enumerate(options.sections):
        color = section.color or DEFAULT_GROUP_COLORS[section_index % len(DEFAULT_GROUP_COLORS)]
        cue_group = root.add("cue_groups")
        group = cue_group.ensure("group")
        group["uuid"] = uuid_message()
        group["name"] = section.name
        group["color"] = _color(color)
        group["hot_key"] = {"code": 0, "control_identifier": ""}
        group["application_group_name"] = ""

        for slide_index, slide_input in enumerate(section.slides):
            if isinstance(slide_input, str):
                slide_input = SlideInput(text=slide_input)
            cue = _build_cue(f"{section.name} - Slide {slide_index + 1}", slide_input, options)
            root["cues"].append(cue)
            cue_group["cue_identifiers"].append(uuid_message(cue["uuid"]["string"]))

        group_uuids.append(group["uuid"]["string"])

    if options.ccli_number or options.ccli_author or options.artist:
        root["ccli"] = {
            "song_title": options.title,
            "author": options.ccli_author or options.artist,
            "artist_credits": options.artist,
            "publisher": options.publisher,
            "copyright_year": options.copyright_year,
            "song_number": options.ccli_number,
            "display": True,
            "album": "",
        }

    if options.music_key is not None:
        set_music_key(presentation, options.music_key.key, options.music_key.scale)

    if options.create_arrangement:
        arrangement = root.add("arrangements", {"name": DEFAULT_ARRANGEMENT_NAME})
        arrangement["uuid"] = uuid_message()
        for group_uuid in group_uuids:
            arrangement["group_identifiers"].append(uuid_message(group_uuid))
        root["selected_arrangement"] = uuid_message(arrangement["uuid"]["string"])

    log.info(
        f"Created presentation '{options.title}': {len(options.sections)} sections, "
        f"{len(root['cues'])} slides"
    )
    return presentation


# endregion


# region builders
def _build_cue(name: str, slide_input: SlideInput, options: CreatePresentationOptions) -> Message:
    cue = Message(resolve_message_type("rv.data.Cue"))
    cue["uuid"] = uuid_message()
    cue["name"] = name
    cue["hot_key"] = {"code": 0, "control_identifier": ""}
    cue["is_enabled"] = True

    action = cue.add("actions")
    action["uuid"] = uuid_message()
    action["name"] = ""
    action["delay_time"] = 0.0
    action["is_enabled"] = True
    action["duration"] = 0.0
    action["type"] = ACTION_TYPE_PRESENTATION_SLIDE
    presentation_slide = action.ensure("slide").ensure("presentation")
    presentation_slide["base_slide"] = _build_slide(slide_input, options)

    return cue


def _build_slide(slide_input: SlideInput, options: CreatePresentationOptions) -> Message:
    slide = Message(resolve_message_type("rv.data.Slide"))
    slide.add("elements", {"element": _build_text_element(slide_input, options)})
    slide["size"] = {"width": float(options.slide_width), "height": float(options.slide_height)}
    slide["uuid"] = uuid_message()
    slide["background_color"] = _color(BLACK)
    slide["draws_background_color"] = True
    return slide


def _build_text_element(slide_input: SlideInput, options: CreatePresentationOptions) -> Message:
    bounds = options.get_text_bounds()
    element = Message(resolve_message_type("rv.data.Graphics.Element"))
    element["uuid"] = uuid_message()
    element["name"] = slide_input.text
    element["bounds"] = {
        "origin": {"x": float(bounds.x), "y": float(bounds.y)},
        "size": {"width": float(bounds.width), "height": float(bounds.height)},
    }
    element["rotation"] = 0.0
    element["opacity"] = 1.0
    element["locked"] = False
    element["aspect_ratio_locked"] = False

    text = element.ensure("text")
    text["attributes"] = {
        "font": {
            "name": options.font_name,
            "size": float(options.font_size),
            "italic": False,
            "bold": False,
            "family": options.font_name,
            "face": "",
        },
        "capitalization": 0,
        "paragraph_style": {
            "alignment": ALIGNMENT_CENTER,
            "line_height_multiple": 1.0,
            "default_tab_interval": DEFAULT_TAB_INTERVAL,
        },
        "kerning": DEFAULT_KERNING,
        "stroke_width": STROKE_WIDTH_OUTSIDE,
        "stroke_color": _color(BLACK),
        "custom_attributes": _chord_attributes(slide_input),
        "text_solid_fill": _color(WHITE),
    }
    text["rtf_data"] = text_to_rtf(slide_input.text, options.font_name, options.font_size)
    text["vertical_alignment"] = VERTICAL_ALIGNMENT_MIDDLE
    text["scale_behavior"] = 0
    text["margins"] = {"left": 0.0, "right": 0.0, "top": 0.0, "bottom": 0.0}
    return element


def _chord_attributes(slide_input: SlideInput) -> list[dict[str, Any]]:
    """
    One custom attribute per chord, each running to the next chord's position
    (the last one to the end of the text). Without chords, a single attribute
    covers the whole text.
    """
    text_length = len(slide_input.text)
    if not slide_input.chords:
        return [{"range": {"start": 0, "end": text_length}}]

    ordered = sorted(slide_input.chords, key=lambda c: c.position)
    attributes = []
    for index, chord in enumerate(ordered):
        end = ordered[index + 1].position if index + 1 < len(ordered) else text_length
        attributes.append({"range": {"start": chord.position, "end": end}, "chord": chord.chord})
    return attributes


def _color(rgba: Color) -> dict[str, float]:
    red, green, blue, alpha = rgba
    return {"red": red, "green": green, "blue": blue, "alpha": alpha}


# endregion


# region options_from_toml
def options_from_toml(path: Path, cfg: Optional[UserConfig] = None) -> CreatePresentationOptions:
    """
    Read a song file (see module docstring) into CreatePresentationOptions.

    Font, slide size and arrangement settings come from `cfg` unless the song
    file sets them.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the TOML is invalid or the song is missing a title or sections
    """
    path = Path(path)
    cfg = cfg or UserConfig()

    if not path.exists():
        log.error(f"Song file not found: {path}")
        raise FileNotFoundError(f"Song file not found: {path}")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        error_msg = f"Invalid TOML syntax in {path}"
        log.error(error_msg)
        raise ValueError(error_msg) from e

    title = data.get("title")
    if not isinstance(title, str) or not title:
        error_msg = f"Song file {path} needs a 'title'"
        log.error(error_msg)
        raise ValueError(error_msg)

    raw_sections = data.get("sections")
    if not isinstance(raw_sections, list) or not raw_sections:
        error_msg = f"Song file {path} needs at least one [[sections]] table"
        log.error(error_msg)
        raise ValueError(error_msg)

    music_key = None
    if "key" in data:
        music_key = MusicKeyConfig(
            key=parse_key(str(data["key"])),
            scale=parse_scale(str(data.get("scale", "major"))),
        )

    return CreatePresentationOptions(
        title=title,
        sections=[_parse_section(raw, path) for raw in raw_sections],
        artist=data.get("artist", ""),
        ccli_number=data.get("ccli_number", 0),
        ccli_author=data.get("ccli_author", ""),
        copyright_year=data.get("copyright_year", 0),
        publisher=data.get("publisher", ""),
        category=data.get("category", ""),
        notes=data.get("notes", ""),
        music_key=music_key,
        font_name=data.get("font_name", cfg.font_name),
        font_size=data.get("font_size", cfg.create_font_size),
        slide_width=data.get("slide_width", cfg.slide_width),
        slide_height=data.get("slide_height", cfg.slide_height),
        create_arrangement=data.get("create_arrangement", cfg.create_arrangement),
    )


def _parse_section(raw: Any, path: Path) -> SectionInput:
    if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
        error_msg = f"Every section in {path} needs a 'name'"
        log.error(error_msg)
        raise ValueError(error_msg)

    slides: list[Union[SlideInput, str]] = []
    for raw_slide in raw.get("slides", []):
        if isinstance(raw_slide, str):
            slides.append(raw_slide)
        elif isinstance(raw_slide, dict) and isinstance(raw_slide.get("text"), str):
            chords = [_parse_chord(c, raw["name"], path) for c in raw_slide.get("chords", [])]
            slides.append(SlideInput(text=raw_slide["text"], chords=chords))
        else:
            error_msg = f"Section '{raw['name']}' in {path} has a slide that is neither text nor a table with 'text'"
            log.error(error_msg)
            raise ValueError(error_msg)

    color = raw.get("color")
    if color is not None:
        if not isinstance(color, list) or len(color) != 4:
            error_msg = f"Section '{raw['name']}' color must be [red, green, blue, alpha]"
            log.error(error_msg)
            raise ValueError(error_msg)
        color = tuple(float(component) for component in color)

    return SectionInput(name=raw["name"], slides=slides, color=color)


def _parse_chord(raw: Any, section: str, path: Path) -> ChordPosition:
    position = raw.get("position") if isinstance(raw, dict) else None
    chord = raw.get("chord") if isinstance(raw, dict) else None
    if (
        not isinstance(position, int)
        or isinstance(position, bool)
        or position < 0
        or not isinstance(chord, str)
        or not chord
    ):
        error_msg = (
            f"Section '{section}' in {path} has a chord without a whole-number "
            f"'position' and a 'chord' name: {raw!r}"
        )
        log.error(error_msg)
        raise ValueError(error_msg)
    return ChordPosition(position=position, chord=chord)


# endregion
