"""Utilities for use across the entire program."""

import io
import logging
import os
import platform
import sys

from propresenter_edit.internals import constants

log = logging.getLogger("propresenter_edit")


# region setup_console_encoding
def setup_console_encoding() -> None:
    """Configure UTF-8 encoding for Windows console to prevent UnicodeEncodeError when printing non-ASCII characters (like the copyright sign)."""
    if platform.system() == "Windows":
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8")


# endregion


# region get_debug_mode
def get_debug_mode() -> bool:
    """Determine debug mode by checking whether there's an env variable set; otherwise fallback to bool constant."""

    env_debug_str = os.environ.get("PROPRESENTER_EDIT_DEBUG")
    if env_debug_str is not None:
        try:
            return str_to_bool(env_debug_str)
        except ValueError:
            log.warning(
                f"Warning: Invalid value for PROPRESENTER_EDIT_DEBUG env var: '{env_debug_str}'. Using default."
            )

    return constants.DEBUG_MODE_DEFAULT


# endregion


# region str_to_bool
def str_to_bool(value: str) -> bool:
    """Convert strings "True"/"False" to booleans"""
    if value.lower().strip() in {"false", "f", "0", "no", "n"}:
        return False
    elif value.lower().strip() in {"true", "t", "1", "yes", "y"}:
        return True
    else:
        log.warning(f"{value} is not a valid boolean value.")
        raise ValueError(f"{value} is not a valid boolean value.")


# endregion


# region preview
def preview(text: str, limit: int = 50, line_separator: str = " ") -> str:
    """Shorten text for one-line display, marking truncation with '...'."""
    shown = text[:limit].replace("\n", line_separator)
    return shown + ("..." if len(text) > limit else "")


# endregion
