"""Application-wide constants and configuration values."""

from pathlib import Path

PACKAGE_NAME = "propresenter_edit"

# Packaged data files (schema description)
RESOURCES_DIR = Path(__file__).resolve().parent.parent / "resources"
DEFAULT_SCHEMA_FILENAME = "propresenter_schema.toml"

# Root message types for the two file kinds we read
PRESENTATION_TYPE = "rv.data.Presentation"
PLAYLIST_TYPE = "rv.data.PlaylistDocument"

PRESENTATION_EXTENSION = ".pro"
PLAYLIST_EXTENSION = ".proplaylist"

# Text defaults. The RTF size unit is half-points, so 48 becomes \fs96.
DEFAULT_FONT_NAME = "Arial"
DEFAULT_FONT_SIZE = 48

# Used when authoring a presentation from scratch
DEFAULT_CREATE_FONT_SIZE = 72
DEFAULT_SLIDE_WIDTH = 1920
DEFAULT_SLIDE_HEIGHT = 1080

# Action.type value for a presentation slide action
ACTION_TYPE_PRESENTATION_SLIDE = 11

UNNAMED_GROUP = "Unnamed"

# Fallback for get_debug_mode() in utils
DEBUG_MODE_DEFAULT = False  # Hard-coded default

# Loaded from user_configs_dir() when no --config is given
DEFAULT_CONFIG_FILENAME = "config.toml"
