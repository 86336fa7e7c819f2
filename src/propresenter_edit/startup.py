"""Startup logic that runs before any command.

Handles common setup tasks:
- Console encoding (so lyrics with non-ASCII characters print on Windows)
- Logging configuration
"""

import logging
import sys

from propresenter_edit.internals.logger import setup_logger
from propresenter_edit.utils import get_debug_mode, setup_console_encoding


# region initialize_application
def initialize_application() -> logging.Logger:
    """Common startup tasks for every entry point."""

    # Windows console encoding must be set before any console output,
    # so this runs prior to setting up the logger.
    setup_console_encoding()

    # Start up logging.
    try:
        log = setup_logger(enable_trace=_should_enable_trace_on_startup())
    except PermissionError as e:
        print(f"Error: Cannot create log files ({e}). Check permissions on the user data folder.", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: Cannot create log files: disk full or I/O error ({e}).", file=sys.stderr)
        sys.exit(1)

    log.info("Starting propresenter_edit Log.")

    return log


# endregion


# region _should_enable_trace_on_startup
def _should_enable_trace_on_startup() -> bool:
    """
    Determine if trace logging should start immediately based on Debug Mode switch.

    Checks:
    - Environment variable (PROPRESENTER_EDIT_DEBUG)
    - System default (DEBUG_MODE_DEFAULT in constants.py)
    """
    return get_debug_mode()


# endregion
