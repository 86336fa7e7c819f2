"""Console summaries and plain-text, markdown and TSV exports of a presentation."""

from __future__ import annotations

import logging
from typing import Optional

from propresenter_edit.models import Presentation
from propresenter_edit.processing.metadata import (
    format_copyright,
    format_license,
    license_info,
    music_key,
)
from propresenter_edit.processing.traversal import chords_of, grouped_cues, text_of
from propresenter_edit.utils import preview

log = logging.getLogger("propresenter_edit")

SUMMARY_PREVIEW_LENGTH = 50
LISTING_PREVIEW_LENGTH = 100

TSV_COLUMNS = ("group", "slide", "cue_name", "text", "chords")


# region presentation_summary
def presentation_summary(presentation: Presentation) -> str:
    """Multi-line overview: metadata, counts, then a preview of every grouped slide."""
    lines = [
        f"Name: {presentation.name or 'Untitled'}",
        f"Category: {presentation.category or 'None'}",
    ]

    ccli = presentation.ccli
    if ccli is not None:
        lines.append(f"CCLI: {ccli.song_title} by {ccli.author or 'Unknown'}")
        license_line = format_license(license_info(presentation))
        if license_line:
            lines.append(license_line)
        copyright_line = format_copyright(presentation)
        if copyright_line:
            lines.append(copyright_line)

    key = music_key(presentation)
    if key is not None:
        lines.append(f"Key: {key.describe()}")

    lines.append("")
    lines.append(f"Cue Groups: {len(presentation.cue_groups)}")
    lines.append(f"Total Cues: {len(presentation.cues)}")
    lines.append("")
    lines.append("Slides:")

    for entry in grouped_cues(presentation):
        lines.append("")
        lines.append(f"[{entry.name}]")
        for number, cue in enumerate(entry.cues, start=1):
            lines.append(f"  {number}. {preview(text_of(cue), SUMMARY_PREVIEW_LENGTH)}")

    return "\n".join(lines)


# endregion


# region cue_listing
def cue_listing(
    presentation: Presentation,
    group: Optional[str] = None,
    full: bool = False,
) -> str:
    """
    Slides grouped under "=== name ===" headings.

    Args:
        group: Only list groups with this name (case-insensitive)
        full: Show complete text instead of a one-line preview
    """
    lines: list[str] = []
    for entry in grouped_cues(presentation):
        if group is not None and entry.name.lower() != group.lower():
            continue
        lines.append(f"=== {entry.name} ===")
        for index, cue in enumerate(entry.cues):
            text = text_of(cue)
            shown = text if full else preview(text, LISTING_PREVIEW_LENGTH, " | ")
            lines.append(f"[{index}] {shown}")
        lines.append("")

    if group is not None and not lines:
        log.warning(f"No group named '{group}' in '{presentation.name}'")

    return "\n".join(lines).rstrip("\n")


# endregion


# region exports
def export_text(presentation: Presentation) -> str:
    """Every group as "[name]" followed by its slide texts, one blank line between slides."""
    lines: list[str] = []
    for entry in grouped_cues(presentation):
        lines.append(f"[{entry.name}]")
        for cue in entry.cues:
            text = text_of(cue)
            if text:
                lines.append(text)
                lines.append("")
    return "\n".join(lines)


def export_markdown(presentation: Presentation) -> str:
    """Lyric sheet in markdown: title, credits, then one section per group."""
    lines = [f"# {presentation.name or 'Untitled'}", ""]

    credits = []
    ccli = presentation.ccli
    if ccli is not None and (ccli.author or ccli.artist_credits):
        credits.append(f"*{ccli.author or ccli.artist_credits}*")
    key = music_key(presentation)
    if key is not None:
        credits.append(f"Key: {key.describe()}")
    if credits:
        lines.extend(credits)
        lines.append("")

    for entry in grouped_cues(presentation):
        lines.append(f"## {entry.name}")
        lines.append("")
        for cue in entry.cues:
            text = text_of(cue)
            if text:
                # Trailing double space keeps the line break in rendered markdown
                lines.append("  \n".join(text.split("\n")))
                lines.append("")

    footer = [
        line
        for line in (format_copyright(presentation), format_license(license_info(presentation)))
        if line
    ]
    if footer:
        lines.append("---")
        lines.append("")
        lines.append("  \n".join(footer))
        lines.append("")

    return "\n".join(lines)


def export_tsv(presentation: Presentation) -> str:
    """One row per grouped slide; newlines in text become " / " and tabs become spaces."""
    rows = ["\t".join(TSV_COLUMNS)]
    for entry in grouped_cues(presentation):
        for number, cue in enumerate(entry.cues, start=1):
            chords = " ".join(chord.chord for chord in chords_of(cue))
            cells = (entry.name, str(number), cue.name, text_of(cue), chords)
            rows.append("\t".join(_tsv_cell(cell) for cell in cells))
    return "\n".join(rows) + "\n"


def _tsv_cell(value: str) -> str:
    return value.replace("\t", " ").replace("\r", "").replace("\n", " / ")


# endregion
