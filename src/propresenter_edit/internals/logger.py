"""
Basic logging setup; creates console and file handlers with session_id in every log line.
"""

import logging

from propresenter_edit.internals.paths import user_log_dir_path
from propresenter_edit.internals.run_context import get_session_id


def setup_logger(
    name: str = "propresenter_edit",
    level: int = logging.DEBUG,
    enable_trace: bool = False,
    console_level: int = logging.INFO,
) -> logging.Logger:
    """
    Setup logging with console and file output.

    The session_id is included in every log line for traceability.
    Safe to call multiple times (won't create duplicate handlers).

    Args:
        name: Logger name (default: "propresenter_edit")
        level: Minimum log level (default: DEBUG)
        enable_trace: Add a second file handler with file/function/line detail
        console_level: Level for the console handler (default: INFO)

    Returns:
        Configured logger instance

    Example:
        >>> log = setup_logger()
        >>> log.info("Reading Amazing Grace.pro")
        2025-01-09 14:23:45 [INFO] Reading Amazing Grace.pro [session:a1b2c3d4]
    """

    logger = logging.getLogger(name)

    # If it's already configured, return the existing logger
    if logger.handlers:
        return logger

    logger.setLevel(level)

    # Keep our lines out of the root logger
    logger.propagate = False

    session_id = get_session_id()

    log_format = f"%(asctime)s [%(levelname)s] %(message)s [session:{session_id}]"
    formatter = logging.Formatter(log_format, datefmt="%Y-%m-%d %H:%M:%S")

    # Console handler goes to stderr so command output on stdout stays clean
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(console_level)
    logger.addHandler(console_handler)

    # File handler (everything goes to file)
    log_file = user_log_dir_path() / "propresenter_edit.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)
    logger.addHandler(file_handler)

    if enable_trace:
        trace_log_format = f"%(filename)s: %(funcName)s(), Line: %(lineno)d: - [%(levelname)s] %(asctime)s - %(message)s -- [session_id={session_id}]"
        trace_log_formatter = logging.Formatter(
            trace_log_format, datefmt="%Y-%m-%d %H:%M:%S"
        )
        trace_log_file = user_log_dir_path() / "trace_propresenter_edit.log"
        trace_file_handler = logging.FileHandler(trace_log_file, encoding="utf-8")
        trace_file_handler.setFormatter(trace_log_formatter)
        trace_file_handler.setLevel(logging.DEBUG)
        logger.addHandler(trace_file_handler)

    logger.debug(f"Logger initialized. Writing to {log_file}")

    return logger
