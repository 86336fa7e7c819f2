"""Tests for UserConfig class definition file and related items"""

import logging
from pathlib import Path

import pytest

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

from propresenter_edit.internals import constants
from propresenter_edit.internals.config.define_config import UserConfig


# region defaults
def test_defaults_match_constants() -> None:
    cfg = UserConfig()
    assert cfg.font_name == constants.DEFAULT_FONT_NAME
    assert cfg.font_size == constants.DEFAULT_FONT_SIZE
    assert cfg.create_font_size == constants.DEFAULT_CREATE_FONT_SIZE
    assert (cfg.slide_width, cfg.slide_height) == (
        constants.DEFAULT_SLIDE_WIDTH,
        constants.DEFAULT_SLIDE_HEIGHT,
    )
    assert cfg.create_arrangement is True
    assert cfg.schema_path is None


def test_default_config_validates() -> None:
    UserConfig().validate()


# endregion


# region from_toml tests
@pytest.mark.parametrize(
    argnames="mock_toml",
    argvalues=[
        # edit settings
        """
font_name = "Helvetica"
font_size = 60.5
""",
        # authoring settings
        """
create_font_size = 80
slide_width = 1280
slide_height = 720
create_arrangement = false
output_folder = "~/lyrics"
""",
    ],
)
def test_from_toml_happy_paths(tmp_path: Path, mock_toml: str) -> None:
    """Test that known-good toml config files do not raise when parsed with from_toml."""
    toml_file = tmp_path / "config.toml"
    toml_file.write_text(mock_toml, encoding="utf-8")

    UserConfig.from_toml(toml_file)


def test_from_toml_real_path(sample_config_toml: Path) -> None:
    cfg = UserConfig.from_toml(sample_config_toml)
    assert cfg.font_name == "Helvetica"
    assert cfg.font_size == 60
    assert cfg.slide_width == constants.DEFAULT_SLIDE_WIDTH


def test_from_toml_raises_on_syntax_error(tmp_path: Path) -> None:
    toml_file = tmp_path / "config.toml"
    toml_file.write_text('font_name = "Helvetica\n', encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid TOML syntax"):
        UserConfig.from_toml(toml_file)


def test_from_toml_rejects_unknown_keys(tmp_path: Path) -> None:
    toml_file = tmp_path / "config.toml"
    toml_file.write_text('line_spacing = 1.5\n', encoding="utf-8")

    with pytest.raises(ValueError, match="Unknown config keys.*line_spacing"):
        UserConfig.from_toml(toml_file)


def test_from_toml_validates_values(tmp_path: Path) -> None:
    toml_file = tmp_path / "config.toml"
    toml_file.write_text('slide_width = "wide"\n', encoding="utf-8")

    with pytest.raises(ValueError, match="slide_width must be an integer"):
        UserConfig.from_toml(toml_file)


def test_from_toml_warns_if_empty(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Ensure we log a warning if ingested toml file is loaded as empty."""
    toml_file = tmp_path / "config.toml"
    toml_file.write_text("", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="propresenter_edit"):
        cfg = UserConfig.from_toml(toml_file)

    assert "Config toml file is empty" in caplog.text
    assert cfg == UserConfig()


def test_from_toml_raises_helpfully_if_path_not_exist(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        UserConfig.from_toml(tmp_path / "fake.toml")


# endregion


# region save_toml tests
def test_save_toml_round_trip(tmp_path: Path) -> None:
    cfg = UserConfig(font_name="Gill Sans", slide_width=1280, create_arrangement=False)
    path = tmp_path / "nested" / "saved.toml"

    cfg.save_toml(path)

    assert UserConfig.from_toml(path) == cfg


def test_save_toml_omits_none_and_normalizes_paths(tmp_path: Path) -> None:
    cfg = UserConfig(output_folder="C:\\Users\\me\\lyrics")
    path = tmp_path / "saved.toml"

    cfg.save_toml(path)

    with open(path, "rb") as f:
        data = tomllib.load(f)
    assert "schema_path" not in data
    assert data["output_folder"] == "C:/Users/me/lyrics"


def test_save_toml_raises_for_directory(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="path is a directory"):
        UserConfig().save_toml(tmp_path)


# endregion


# region validate tests
@pytest.mark.parametrize(
    argnames="overrides,message",
    argvalues=[
        ({"schema_path": ""}, "schema_path cannot be empty"),
        ({"output_folder": 3}, "output_folder must be a string"),
        ({"font_name": "  "}, "font_name must be a non-empty string"),
        ({"font_size": 0}, "font_size must be positive"),
        ({"create_font_size": "big"}, "create_font_size must be a number"),
        ({"font_size": True}, "font_size must be a number"),
        ({"slide_height": 720.5}, "slide_height must be an integer"),
        ({"slide_width": -1}, "slide_width must be positive"),
        ({"create_arrangement": "yes"}, "create_arrangement must be a boolean"),
    ],
)
def test_validate_rejects_bad_values(overrides: dict, message: str) -> None:
    cfg = UserConfig(**overrides)
    with pytest.raises(ValueError, match=message):
        cfg.validate()


# endregion


# region path helpers
def test_output_folder_defaults_to_user_output_dir(isolated_user_dirs: Path) -> None:
    assert UserConfig().get_output_folder() == isolated_user_dirs / "output"


def test_relative_paths_resolve_against_user_base_dir(isolated_user_dirs: Path) -> None:
    cfg = UserConfig(output_folder="exports", schema_path="schemas/pp.toml")
    assert cfg.get_output_folder() == (isolated_user_dirs / "exports").resolve()
    assert cfg.get_schema_path() == (isolated_user_dirs / "schemas" / "pp.toml").resolve()


def test_absolute_paths_are_kept(tmp_path: Path) -> None:
    assert UserConfig(output_folder=str(tmp_path)).get_output_folder() == tmp_path.resolve()


def test_schema_path_none_by_default() -> None:
    assert UserConfig().get_schema_path() is None


# endregion
