"""Shared fixtures"""

# tests/conftest.py
import pytest
from pathlib import Path
from typing import Iterator

from propresenter_edit.codec.encoder import encode
from propresenter_edit.codec.schema import configure_schema_path, reset_schema_cache
from propresenter_edit.internals import constants
from propresenter_edit.internals.config.define_config import UserConfig
from propresenter_edit.models import Presentation
from tests.helpers import make_cue, make_presentation


@pytest.fixture(autouse=True)
def packaged_schema() -> Iterator[None]:
    """Every test starts and ends with the packaged schema loaded lazily."""
    configure_schema_path(None)
    reset_schema_cache()
    yield
    configure_schema_path(None)
    reset_schema_cache()


@pytest.fixture(autouse=True)
def isolated_user_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep platformdirs folders (logs, output, configs) inside tmp_path."""
    base = tmp_path / "user_data"
    monkeypatch.setattr(
        "propresenter_edit.internals.paths.user_data_dir",
        lambda *args, **kwargs: str(base),
    )
    return base


@pytest.fixture
def temp_output_dir(tmp_path: Path) -> Path:
    """Temporary directory for test output files"""
    output = tmp_path / "output"
    output.mkdir()
    return output


@pytest.fixture
def clean_debug_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Ensure debug env var is not set before test."""
    # Pytest will temporarily remove it from THIS test/caller's view of the environment
    monkeypatch.delenv("PROPRESENTER_EDIT_DEBUG", raising=False)
    return monkeypatch


@pytest.fixture
def verse_presentation() -> Presentation:
    """One group "Verse 1" holding two cues: "Line one" and "Line two"."""
    return make_presentation(
        [("Verse 1", [make_cue("Line one", name="V1a"), make_cue("Line two", name="V1b")])]
    )


@pytest.fixture
def song_presentation() -> Presentation:
    """A small song with credits, a key and two groups."""
    presentation = make_presentation(
        [
            (
                "Verse 1",
                [
                    make_cue("Amazing grace how sweet the sound\nThat saved a wretch like me"),
                    make_cue("I once was lost but now am found\nWas blind but now I see"),
                ],
            ),
            ("Chorus", [make_cue("My chains are gone", notes="Build here")]),
        ],
        name="Amazing Grace",
    )
    presentation.message["category"] = "Song"
    presentation.message["ccli"] = {
        "author": "John Newton",
        "song_title": "Amazing Grace",
        "publisher": "Public Domain",
        "copyright_year": 1779,
        "song_number": 22025,
        "display": True,
    }
    presentation.message["music_key"] = "G"
    return presentation


@pytest.fixture
def pro_file(tmp_path: Path, song_presentation: Presentation) -> Path:
    """The song presentation written to disk as a .pro file."""
    path = tmp_path / "Amazing Grace.pro"
    path.write_bytes(encode(constants.PRESENTATION_TYPE, song_presentation.message))
    return path


@pytest.fixture
def sample_config_toml(tmp_path: Path) -> Path:
    """A config toml that sets a couple of fields."""
    path = tmp_path / "test_config.toml"
    path.write_text('font_name = "Helvetica"\nfont_size = 60\n', encoding="utf-8")
    return path


@pytest.fixture
def default_cfg(temp_output_dir: Path) -> UserConfig:
    return UserConfig(output_folder=str(temp_output_dir))
