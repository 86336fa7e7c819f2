"""Copyright, licensing and music key metadata of a presentation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from propresenter_edit.models import Presentation

log = logging.getLogger("propresenter_edit")


# region keys
class MusicKey(IntEnum):
    """Key index as stored in `rv.data.MusicKeyScale.music_key`."""

    A_FLAT = 0
    A = 1
    A_SHARP = 2
    B_FLAT = 3
    B = 4
    B_SHARP = 5
    C_FLAT = 6
    C = 7
    C_SHARP = 8
    D_FLAT = 9
    D = 10
    D_SHARP = 11
    E_FLAT = 12
    E = 13
    E_SHARP = 14
    F_FLAT = 15
    F = 16
    F_SHARP = 17
    G_FLAT = 18
    G = 19
    G_SHARP = 20


class MusicScale(IntEnum):
    MAJOR = 0
    MINOR = 1


# Display names, indexed by MusicKey
KEY_NAMES: tuple[str, ...] = (
    "Ab", "A", "A#",
    "Bb", "B", "B#",
    "Cb", "C", "C#",
    "Db", "D", "D#",
    "Eb", "E", "E#",
    "Fb", "F", "F#",
    "Gb", "G", "G#",
)  # fmt: skip


def key_name(key: int) -> str:
    """Display name of a key index; '' outside the table."""
    if 0 <= key < len(KEY_NAMES):
        return KEY_NAMES[key]
    return ""


def parse_key(name: str) -> MusicKey:
    """
    MusicKey for a display name such as "F#" or "Bb" (case-insensitive first letter).

    Raises:
        ValueError: If the name is not in the key table.
    """
    cleaned = name.strip()
    if cleaned:
        cleaned = cleaned[0].upper() + cleaned[1:]
    try:
        return MusicKey(KEY_NAMES.index(cleaned))
    except ValueError:
        error_msg = f"Unknown key '{name}'. Valid keys: {', '.join(KEY_NAMES)}"
        log.error(error_msg)
        raise ValueError(error_msg) from None


def parse_scale(name: str) -> MusicScale:
    """MusicScale for "major" / "minor"."""
    try:
        return MusicScale[name.strip().upper()]
    except KeyError:
        error_msg = f"Unknown scale '{name}'. Valid scales: major, minor"
        log.error(error_msg)
        raise ValueError(error_msg) from None


@dataclass(frozen=True)
class MusicKeyInfo:
    """Original and current key of a song; `current` differs when it was transposed."""

    original: str
    current: str
    scale: MusicScale = MusicScale.MAJOR

    @property
    def is_transposed(self) -> bool:
        return self.original != self.current

    def describe(self) -> str:
        scale = self.scale.name.lower()
        if self.is_transposed:
            return f"{self.current} {scale} (transposed from {self.original})"
        return f"{self.original} {scale}"


def music_key(presentation: Presentation) -> Optional[MusicKeyInfo]:
    """
    Key of the song, from the music block or, failing that, the flat music_key string.

    Returns None when neither is set.
    """
    block = presentation.music
    if block is not None:
        original = block.original_music_key
        scale = MusicScale.MAJOR
        if block.original is not None:
            original = original or key_name(block.original[0])
            scale = _scale_or_major(block.original[1])

        current = block.user_music_key
        if not current and block.user is not None:
            current = key_name(block.user[0])

        if original or current:
            return MusicKeyInfo(original=original or current, current=current or original, scale=scale)

    if presentation.music_key:
        return MusicKeyInfo(original=presentation.music_key, current=presentation.music_key)

    return None


def _scale_or_major(value: int) -> MusicScale:
    try:
        return MusicScale(value)
    except ValueError:
        log.debug(f"Unknown music scale value {value}; treating it as major")
        return MusicScale.MAJOR


def set_music_key(
    presentation: Presentation,
    key: MusicKey | int,
    scale: MusicScale | int = MusicScale.MAJOR,
    user_key: Optional[MusicKey | int] = None,
) -> None:
    """
    Record the song's key.

    Writes the music block (original and user key, names and indexes) and the
    flat `music_key` string. `user_key` defaults to `key`, i.e. not transposed.
    """
    original = MusicKey(key)
    user = MusicKey(user_key) if user_key is not None else original
    scale = MusicScale(scale)

    music = presentation.message.ensure("music")
    music["original_music_key"] = key_name(original)
    music["user_music_key"] = key_name(user)
    music["original"] = {"music_key": int(original), "music_scale": int(scale)}
    music["user"] = {"music_key": int(user), "music_scale": int(scale)}
    presentation.message["music_key"] = key_name(original)

    log.debug(f"Set music key of '{presentation.name}' to {key_name(original)} ({scale.name.lower()})")


# endregion


# region copyright and licensing
@dataclass(frozen=True)
class LicenseInfo:
    """Licensing fields of the CCLI block."""

    song_number: int
    song_title: str
    author: str
    publisher: str
    copyright_year: int
    display: bool


def license_info(presentation: Presentation) -> Optional[LicenseInfo]:
    """Licensing fields, or None when the presentation has no CCLI block."""
    ccli = presentation.ccli
    if ccli is None:
        return None
    return LicenseInfo(
        song_number=ccli.song_number,
        song_title=ccli.song_title,
        author=ccli.author or ccli.artist_credits,
        publisher=ccli.publisher,
        copyright_year=ccli.copyright_year,
        display=ccli.display,
    )


def format_license(info: Optional[LicenseInfo]) -> str:
    """'CCLI Song #4365774', or '' without a song number."""
    if info is None or not info.song_number:
        return ""
    return f"CCLI Song #{info.song_number}"


def format_copyright(presentation: Presentation) -> str:
    """'© 2004 Van Ness Press, Inc.'; the year or publisher is left out when unset."""
    ccli = presentation.ccli
    if ccli is None:
        return ""
    parts = [str(ccli.copyright_year)] if ccli.copyright_year else []
    if ccli.publisher:
        parts.append(ccli.publisher)
    if not parts:
        return ""
    return "© " + " ".join(parts)


# endregion
