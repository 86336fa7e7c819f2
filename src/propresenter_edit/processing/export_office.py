# export_office.py
"""Export a presentation's lyrics to Word (python-docx) or PowerPoint (python-pptx)."""
# mypy: disable-error-code="import-untyped"

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import docx
import pptx
from docx import document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt as DocxPt
from pptx import presentation as pptx_presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import PP_ALIGN
from pptx.util import Inches, Pt

from propresenter_edit.models import Presentation
from propresenter_edit.processing.metadata import (
    format_copyright,
    format_license,
    license_info,
    music_key,
)
from propresenter_edit.processing.traversal import grouped_cues, notes_of, text_of

log = logging.getLogger("propresenter_edit")

# 16:9, matching ProPresenter's 1920x1080 default
PPTX_SLIDE_WIDTH = Inches(13.333)
PPTX_SLIDE_HEIGHT = Inches(7.5)
PPTX_MARGIN = Inches(0.5)
PPTX_FONT_SIZE = Pt(40)

# Layout indexes in python-pptx's default template
TITLE_LAYOUT = 0
BLANK_LAYOUT = 6

SAVE_TYPE = Union[document.Document, pptx_presentation.Presentation]


# region helpers
def _credit_lines(presentation: Presentation) -> list[str]:
    lines = []
    ccli = presentation.ccli
    if ccli is not None and (ccli.author or ccli.artist_credits):
        lines.append(ccli.author or ccli.artist_credits)
    key = music_key(presentation)
    if key is not None:
        lines.append(f"Key: {key.describe()}")
    return lines


def _footer_lines(presentation: Presentation) -> list[str]:
    candidates = (format_copyright(presentation), format_license(license_info(presentation)))
    return [line for line in candidates if line]


def _save(save_object: SAVE_TYPE, path: Path) -> Path:
    """Save a python-docx or python-pptx object, creating the folder if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        save_object.save(str(path))
    except PermissionError as e:
        log.error(f"Save failed due to permission error: {e}")
        raise PermissionError("Save failed: File may be open in another program") from e
    except OSError as e:
        log.error(f"Save failed: {e}")
        raise OSError(f"Save failed (disk space or IO issue): {e}") from e
    log.info(f"Successfully saved to {path}.")
    return path


# endregion


# region export_docx
def export_docx(presentation: Presentation, path: Path | str) -> Path:
    """
    Write a Word lyric sheet: title, credits, one heading per group, one
    paragraph per slide (line breaks kept), slide notes in italics, and
    copyright lines at the end.
    """
    doc = docx.Document()
    doc.add_heading(presentation.name or "Untitled", level=0)

    for line in _credit_lines(presentation):
        credit = doc.add_paragraph()
        credit.add_run(line).italic = True

    for entry in grouped_cues(presentation):
        doc.add_heading(entry.name, level=2)
        for cue in entry.cues:
            text = text_of(cue)
            if not text:
                continue
            paragraph = doc.add_paragraph()
            lines = text.split("\n")
            for index, line in enumerate(lines):
                run = paragraph.add_run(line)
                if index < len(lines) - 1:
                    run.add_break()

            notes = notes_of(cue)
            if notes:
                note_paragraph = doc.add_paragraph()
                note_run = note_paragraph.add_run(notes)
                note_run.italic = True
                note_run.font.size = DocxPt(9)

    for line in _footer_lines(presentation):
        footer = doc.add_paragraph()
        footer.alignment = WD_ALIGN_PARAGRAPH.CENTER
        footer.add_run(line).font.size = DocxPt(8)

    return _save(doc, Path(path))


# endregion


# region export_pptx
def export_pptx(presentation: Presentation, path: Path | str) -> Path:
    """
    Write a PowerPoint deck: a title slide, then one black slide with
    centered white text per grouped cue. The group name and any slide notes
    go in the speaker notes.
    """
    prs = pptx.Presentation()
    prs.slide_width = PPTX_SLIDE_WIDTH
    prs.slide_height = PPTX_SLIDE_HEIGHT

    title_slide = prs.slides.add_slide(prs.slide_layouts[TITLE_LAYOUT])
    title_slide.shapes.title.text = presentation.name or "Untitled"
    subtitle_lines = _credit_lines(presentation) + _footer_lines(presentation)
    if len(title_slide.placeholders) > 1:
        title_slide.placeholders[1].text = "\n".join(subtitle_lines)

    blank_layout = prs.slide_layouts[BLANK_LAYOUT]
    slide_count = 0
    for entry in grouped_cues(presentation):
        for cue in entry.cues:
            slide = prs.slides.add_slide(blank_layout)
            fill = slide.background.fill
            fill.solid()
            fill.fore_color.rgb = RGBColor(0, 0, 0)

            box = slide.shapes.add_textbox(
                PPTX_MARGIN,
                PPTX_MARGIN,
                prs.slide_width - 2 * PPTX_MARGIN,
                prs.slide_height - 2 * PPTX_MARGIN,
            )
            text_frame = box.text_frame
            text_frame.word_wrap = True

            for index, line in enumerate(text_of(cue).split("\n")):
                # A new text frame already holds one empty paragraph
                paragraph = text_frame.paragraphs[0] if index == 0 else text_frame.add_paragraph()
                paragraph.alignment = PP_ALIGN.CENTER
                run = paragraph.add_run()
                run.text = line
                run.font.size = PPTX_FONT_SIZE
                run.font.color.rgb = RGBColor(0xFF, 0xFF, 0xFF)

            notes = notes_of(cue)
            slide.notes_slide.notes_text_frame.text = (
                f"{entry.name}\n{notes}" if notes else entry.name
            )
            slide_count += 1

    log.debug(f"Built {slide_count} lyric slides for '{presentation.name}'")
    return _save(prs, Path(path))


# endregion
