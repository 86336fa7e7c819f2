"""Cross-platform path resolution for user directories.

Uses platformdirs to find OS-appropriate locations for:
- Logs (where propresenter_edit.log lives)
- Output (default save location for exports)
- Configs (saved TOML settings)
"""

import os
from pathlib import Path

from platformdirs import user_data_dir  # Gives us the "right" place for files on each OS

from propresenter_edit.internals.constants import PACKAGE_NAME


# region user_base_dir
def user_base_dir() -> Path:
    """
    Base directory for all propresenter_edit user files.

    Returns:
        Path to the OS user-data folder for this package

    Examples:
        Windows: C:/Users/YourName/AppData/Local/propresenter_edit/
        macOS: /Users/YourName/Library/Application Support/propresenter_edit/
        Linux: /home/yourname/.local/share/propresenter_edit/
    """
    base = Path(user_data_dir(PACKAGE_NAME, appauthor=False))
    base.mkdir(parents=True, exist_ok=True)
    return base


# endregion


# region user_log_dir_path
def user_log_dir_path() -> Path:
    """
    Directory for log files.

    Returns:
        Path to <user_base_dir>/logs/
    """
    log_dir = user_base_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


# endregion


# region user_output_dir
def user_output_dir() -> Path:
    """Default output directory for exported files."""
    output_dir = user_base_dir() / "output"
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


# endregion


# region user_configs_dir
def user_configs_dir() -> Path:
    """Directory for saved configuration files."""
    configs_dir = user_base_dir() / "configs"
    configs_dir.mkdir(parents=True, exist_ok=True)
    return configs_dir


# endregion


# region resolve_path
def resolve_path(raw: str) -> Path:
    """
    Expand ~ and ${VARS}; resolve to absolute path.

    Relative paths resolve relative to current working directory.
    """
    expanded = os.path.expandvars(raw)
    return Path(expanded).expanduser().resolve()


# endregion


# region normalize_path
def normalize_path(path_str: str | None) -> str | None:
    """
    Normalize path separators to forward slashes for cross-platform compatibility.

    Forward slashes work on all platforms and avoid TOML escape sequence issues
    with backslashes.
    """
    return path_str.replace("\\", "/") if path_str else None


# endregion
