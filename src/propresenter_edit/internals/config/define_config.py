# internals/config/define_config.py
"""User configuration dataclass and validation."""

# region imports
from __future__ import annotations

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # Python 3.10

import tomli_w  # For writing (no stdlib equivalent yet)

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from propresenter_edit.internals.constants import (
    DEFAULT_CREATE_FONT_SIZE,
    DEFAULT_FONT_NAME,
    DEFAULT_FONT_SIZE,
    DEFAULT_SLIDE_HEIGHT,
    DEFAULT_SLIDE_WIDTH,
)
from propresenter_edit.internals.paths import normalize_path, user_base_dir, user_output_dir

log = logging.getLogger("propresenter_edit")
# endregion


# region class UserConfig
@dataclass
class UserConfig:
    """All user-configurable settings for propresenter_edit."""

    # region define fields
    # Schema description file; None means the packaged propresenter_schema.toml
    schema_path: Optional[str] = None

    # Font written by `edit` when it replaces slide text
    font_name: str = DEFAULT_FONT_NAME
    font_size: float = DEFAULT_FONT_SIZE

    # Presentation authoring (`create`)
    create_font_size: float = DEFAULT_CREATE_FONT_SIZE
    slide_width: int = DEFAULT_SLIDE_WIDTH
    slide_height: int = DEFAULT_SLIDE_HEIGHT
    create_arrangement: bool = True

    # Where exports go when no explicit output file is given
    output_folder: Optional[str] = None

    # endregion

    # region path helpers
    def _resolve_path(self, raw: str) -> Path:
        """Expand ~ and ${VARS}; resolve relative to user_base_dir if not absolute."""
        expanded = os.path.expandvars(raw)
        p = Path(expanded).expanduser()

        if p.is_absolute():
            return p.resolve()

        return (user_base_dir() / p).resolve()

    def get_schema_path(self) -> Path | None:
        """Configured schema file, or None to use the packaged one."""
        if self.schema_path:
            return self._resolve_path(self.schema_path)
        return None

    def get_output_folder(self) -> Path:
        """Export folder, with fallback to the platformdirs default."""
        if self.output_folder:
            return self._resolve_path(self.output_folder)
        return user_output_dir()

    # endregion

    # region from_toml
    @classmethod
    def from_toml(cls, path: Path) -> UserConfig:
        """
        Load configuration from a TOML file.

        The TOML file has flat key-value pairs matching the UserConfig field names.

        Example TOML:
            font_name = "Helvetica"
            font_size = 60
            output_folder = "~/Documents/lyrics"

        Args:
            path: Path to the .toml config file

        Returns:
            UserConfig: Populated configuration object

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If TOML is invalid or names fields UserConfig doesn't have
        """
        path = Path(path)
        if not path.exists():
            log.error(f"Config file not found: {path}")
            raise FileNotFoundError(f"Config file not found: {path}")

        # Read in the TOML file; raise if there are syntax errors.
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            error_msg = f"Invalid TOML syntax in {path}"
            log.error(error_msg)
            raise ValueError(error_msg) from e

        # Warn the user if the data was read-in as empty, but only warn-- keep going.
        if not data:
            log.warning(f"Config toml file is empty: {path}. Using all defaults.")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            error_msg = f"Unknown config keys in {path}: {unknown}. Valid keys: {sorted(known)}"
            log.error(error_msg)
            raise ValueError(error_msg)

        cfg = cls(**data)
        cfg.validate()
        return cfg

    # endregion

    # region save_toml
    def save_toml(self, path: Path) -> None:
        """
        Save configuration to a TOML file.

        Args:
            path: Where to save the .toml file
        """
        path = Path(path)

        # Check if path is a directory
        if path.exists() and path.is_dir():
            error_msg = f"Cannot save config: path is a directory, not a file: {path}."
            log.error(error_msg)
            raise ValueError(error_msg)

        # Auto-create parent directories if they don't exist
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "schema_path": normalize_path(self.schema_path),
            "font_name": self.font_name,
            "font_size": self.font_size,
            "create_font_size": self.create_font_size,
            "slide_width": self.slide_width,
            "slide_height": self.slide_height,
            "create_arrangement": self.create_arrangement,
            "output_folder": normalize_path(self.output_folder),
        }

        # Filter out None values (TOML can't serialize None)
        data = {k: v for k, v in data.items() if v is not None}

        try:
            with open(path, "wb") as f:
                tomli_w.dump(data, f)
        except PermissionError as e:
            error_msg = f"Permission denied writing to: {path}"
            log.error(error_msg)
            raise PermissionError(error_msg) from e
        except OSError as e:
            error_msg = f"Failed to write config file to {path}"
            log.error(error_msg)
            raise OSError(error_msg) from e

    # endregion

    # region validate
    def validate(self) -> None:
        """
        Validate intrinsic config values (no filesystem access).

        Catches wrong types from hand-edited TOML, empty strings where None
        is expected, and sizes that can't be drawn.
        """
        for field_name in ("schema_path", "output_folder"):
            val = getattr(self, field_name)
            if val is not None and not isinstance(val, str):
                raise ValueError(f"{field_name} must be a string, got {type(val).__name__}")
            if val == "":
                raise ValueError(f"{field_name} cannot be empty string; use None for default")

        if not isinstance(self.font_name, str) or not self.font_name.strip():
            raise ValueError("font_name must be a non-empty string")

        for field_name in ("font_size", "create_font_size"):
            val = getattr(self, field_name)
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise ValueError(f"{field_name} must be a number, got {type(val).__name__}")
            if val <= 0:
                raise ValueError(f"{field_name} must be positive, got {val}")

        for field_name in ("slide_width", "slide_height"):
            val = getattr(self, field_name)
            if isinstance(val, bool) or not isinstance(val, int):
                raise ValueError(f"{field_name} must be an integer, got {type(val).__name__}")
            if val <= 0:
                raise ValueError(f"{field_name} must be positive, got {val}")

        if not isinstance(self.create_arrangement, bool):
            raise ValueError(
                f"create_arrangement must be a boolean, got {type(self.create_arrangement).__name__}"
            )

    # endregion


# endregion
