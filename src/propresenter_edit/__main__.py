"""Entry point for the propresenter-edit command."""

from __future__ import annotations
import sys
from propresenter_edit import startup
from propresenter_edit.cli import run as run_cli
import logging


def main() -> None:
    """Application entry point - handles initialization, then runs the CLI.

    Call like:
    ```
    python -m propresenter_edit info "Amazing Grace.pro"
    propresenter-edit edit "Amazing Grace.pro" --cue 0 --text "Amazing grace"
    ```

    """

    # Set up logging.
    log: logging.Logger = startup.initialize_application()

    try:
        exit_code = run_cli()
    except Exception:
        log.exception("Unhandled exception - program crashed.")  # Logs full traceback
        raise  # Still crash, but now it's logged

    sys.exit(exit_code)


if __name__ == "__main__":

    main()
