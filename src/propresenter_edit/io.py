# io.py
"""File I/O for .pro presentations and .proplaylist playlists."""

import logging
import os
import tempfile
from pathlib import Path

from propresenter_edit.codec.decoder import decode
from propresenter_edit.codec.encoder import encode
from propresenter_edit.codec.message import Message
from propresenter_edit.internals import constants
from propresenter_edit.models import Presentation

log = logging.getLogger("propresenter_edit")


# region Path Helpers
def validate_path(user_path: str | Path) -> Path:
    """Ensure filepath exists and is a file."""
    path = Path(user_path)
    if not path.exists():
        log.error(f"File not found: {user_path}")
        raise FileNotFoundError(f"File not found: {user_path}")
    if not path.is_file():
        log.error(f"Path is not a file (might be a directory): {user_path}")
        raise ValueError(f"Path is not a file: {user_path}")
    return path


def validate_pro_path(user_path: str | Path) -> Path:
    """Validates the filepath exists and is actually a .pro presentation."""
    path = validate_path(user_path)

    if path.suffix.lower() == constants.PLAYLIST_EXTENSION:
        log.error(f"Playlist passed where a presentation was expected: {path}")
        raise ValueError(
            f"{path.name} is a playlist. This command needs a presentation ({constants.PRESENTATION_EXTENSION}) file."
        )
    if path.suffix.lower() != constants.PRESENTATION_EXTENSION:
        log.error(
            f"Wrong file extension: expected {constants.PRESENTATION_EXTENSION}, got {path.suffix}"
        )
        raise ValueError(
            f"Expected a {constants.PRESENTATION_EXTENSION} file, but got: {path.suffix or '(no extension)'}"
        )
    return path


# endregion


# region Disk I/O - Read
def read_bytes(user_path: str | Path) -> bytes:
    """Whole-file read of an existing file."""
    path = validate_path(user_path)
    data = path.read_bytes()
    log.debug(f"Read {len(data)} bytes from {path}")
    return data


def load_presentation(user_path: str | Path) -> Presentation:
    """
    Read and decode a .pro file.

    Raises:
        FileNotFoundError, ValueError: Bad path or extension
        MalformedMessage: The file is not a readable presentation
    """
    path = validate_pro_path(user_path)
    message = decode(constants.PRESENTATION_TYPE, read_bytes(path))
    presentation = Presentation(message)
    log.info(
        f"Loaded '{presentation.name or path.stem}' from {path.name}: "
        f"{len(presentation.cues)} cues in {len(presentation.cue_groups)} groups"
    )
    return presentation


def load_playlist(user_path: str | Path) -> Message:
    """Read and decode a .proplaylist file (`rv.data.PlaylistDocument`)."""
    path = validate_path(user_path)
    if path.suffix.lower() != constants.PLAYLIST_EXTENSION:
        log.warning(f"{path.name} does not have a {constants.PLAYLIST_EXTENSION} extension; decoding anyway")
    message = decode(constants.PLAYLIST_TYPE, read_bytes(path))
    log.info(f"Loaded playlist {path.name}")
    return message


# endregion


# region Disk I/O - Write
def write_bytes(user_path: str | Path, data: bytes) -> Path:
    """
    Write `data` atomically: a temp file in the same folder, then a rename.

    On any failure the temp file is removed and an existing file at the
    destination is left as it was.
    """
    path = Path(user_path)
    if path.exists() and path.is_dir():
        log.error(f"Cannot write: path is a directory: {path}")
        raise ValueError(f"Cannot write: path is a directory: {path}")

    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(temp_name, path)
    except PermissionError as e:
        _remove_quietly(temp_name)
        log.error(f"Save failed due to permission error: {e}")
        raise PermissionError(f"Save failed: {path} may be open in another program") from e
    except OSError as e:
        _remove_quietly(temp_name)
        log.error(f"Save failed: {e}")
        raise OSError(f"Save failed (disk space or IO issue): {e}") from e

    log.debug(f"Wrote {len(data)} bytes to {path}")
    return path


def _remove_quietly(temp_name: str) -> None:
    try:
        os.remove(temp_name)
    except FileNotFoundError:
        pass


def save_presentation(presentation: Presentation, user_path: str | Path) -> Path:
    """
    Encode and write a presentation.

    Encoding happens before the file is touched, so an InvalidTree error
    leaves the destination unchanged.
    """
    data = encode(constants.PRESENTATION_TYPE, presentation.message)
    path = write_bytes(user_path, data)
    log.info(f"Successfully saved to {path}.")
    return path


# endregion
