"""Tests for CLI argument parsing, config building and the subcommands."""

import json
import logging
import sys
from pathlib import Path

import pytest

from propresenter_edit.cli import (
    _validate_args_match_config,
    build_config_from_args,
    build_parser,
    parse_args,
    run,
)
from propresenter_edit.codec.schema import get_schema
from propresenter_edit.internals.config.define_config import UserConfig
from propresenter_edit.io import load_presentation, save_presentation
from propresenter_edit.processing.metadata import music_key
from propresenter_edit.processing.traversal import grouped_cues, text_of
from tests.helpers import add_element, make_cue, make_presentation


# region TestParseArgs
class TestParseArgs:
    """Test that parse_args stores the values we expect."""

    @pytest.mark.parametrize(
        argnames="arg_dest_name,cli_flag,expected",
        argvalues=[
            ("create_arrangement", "--arrangement", True),
            ("create_arrangement", "--no-arrangement", False),
        ],
    )
    def test_cli_boolean_flags_set_correctly_when_provided(
        self, arg_dest_name: str, cli_flag: str, expected: bool
    ) -> None:
        """Test that boolean flags set correct True/False values when they are provided explicitly."""
        args = parse_args([cli_flag, "info", "song.pro"])
        assert getattr(args, arg_dest_name) == expected

    @pytest.mark.parametrize(
        argnames="arg_dest_name",
        argvalues=[
            "schema_path",
            "font_name",
            "font_size",
            "create_font_size",
            "slide_width",
            "slide_height",
            "create_arrangement",
            "output_folder",
        ],
    )
    def test_global_options_default_to_none_when_not_provided(self, arg_dest_name: str) -> None:
        """Unset global options stay None so config file values aren't overwritten."""
        args = parse_args(["info", "song.pro"])
        assert getattr(args, arg_dest_name) is None

    def test_parse_args_reads_sys_argv(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "argv", ["propresenter-edit", "list", "song.pro", "-g", "Chorus"])
        args = parse_args()
        assert (args.command, args.file, args.group, args.full) == ("list", "song.pro", "Chorus", False)

    def test_edit_requires_cue_and_text(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["edit", "song.pro", "--cue", "1"])

    def test_command_is_required(self) -> None:
        with pytest.raises(SystemExit):
            parse_args([])

    def test_export_format_is_checked(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["export", "song.pro", "--format", "pdf"])


# endregion


# region build_config_from_args
class TestBuildConfig:
    def test_defaults_without_config(self) -> None:
        cfg = build_config_from_args(parse_args(["info", "song.pro"]))
        assert cfg == UserConfig()

    def test_config_file_values_are_loaded(self, sample_config_toml: Path) -> None:
        cfg = build_config_from_args(parse_args(["--config", str(sample_config_toml), "info", "x.pro"]))
        assert cfg.font_name == "Helvetica"
        assert cfg.font_size == 60

    def test_cli_overrides_config_file(self, sample_config_toml: Path) -> None:
        args = parse_args(["--config", str(sample_config_toml), "--font-size", "36", "info", "x.pro"])
        cfg = build_config_from_args(args)
        assert cfg.font_name == "Helvetica"
        assert cfg.font_size == 36

    def test_user_config_folder_is_used_when_no_config_given(self, isolated_user_dirs: Path) -> None:
        config = isolated_user_dirs / "configs" / "config.toml"
        config.parent.mkdir(parents=True)
        config.write_text("slide_width = 1280\n", encoding="utf-8")

        cfg = build_config_from_args(parse_args(["info", "x.pro"]))

        assert cfg.slide_width == 1280

    def test_invalid_override_raises(self) -> None:
        with pytest.raises(ValueError, match="font_size must be positive"):
            build_config_from_args(parse_args(["--font-size", "-3", "info", "x.pro"]))

    def test_every_config_field_has_a_cli_option(self) -> None:
        _validate_args_match_config(build_parser())

    def test_extra_global_option_is_detected(self) -> None:
        parser = build_parser()
        parser.add_argument("--surprise")
        with pytest.raises(RuntimeError, match="don't match"):
            _validate_args_match_config(parser)


# endregion


# region read-only commands
def test_info_prints_summary(pro_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["info", str(pro_file)]) == 0
    out = capsys.readouterr().out
    assert "Name: Amazing Grace" in out
    assert "Total Cues: 3" in out


def test_list_prints_groups(pro_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["list", str(pro_file), "--group", "Chorus"]) == 0
    assert capsys.readouterr().out.strip() == "=== Chorus ===\n[0] My chains are gone"


def test_text_writes_to_file(pro_file: Path, tmp_path: Path) -> None:
    out = tmp_path / "lyrics.txt"
    assert run(["text", str(pro_file), "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8").startswith("[Verse 1]\nAmazing grace")


def test_dump_outputs_json(pro_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["dump", str(pro_file), "--compact"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["name"] == "Amazing Grace"
    assert len(data["cues"]) == 3


def test_decode_rtf_shows_raw_and_text(pro_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["decode-rtf", str(pro_file), "--cue", "2"]) == 0
    out = capsys.readouterr().out
    assert "=== Cue 2 ===" in out
    assert "\\rtf1" in out
    assert "--- Extracted Text ---\nMy chains are gone" in out


def test_decode_rtf_on_empty_presentation_says_so(
    tmp_path: Path, caplog: pytest.LogCaptureFixture, capsys: pytest.CaptureFixture[str]
) -> None:
    path = save_presentation(make_presentation([]), tmp_path / "empty.pro")

    with caplog.at_level(logging.WARNING, logger="propresenter_edit"):
        assert run(["decode-rtf", str(path), "--cue", "0"]) == 0

    assert "Cue index 0 out of range (presentation has no cues)" in caplog.text
    assert "0--1" not in caplog.text
    assert "=== Cue" not in capsys.readouterr().out


def test_decode_rtf_joins_every_text_element(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cue = make_cue("Amazing grace")
    add_element(cue, "How sweet the sound")
    path = save_presentation(make_presentation([("Verse", [cue])]), tmp_path / "two.pro")

    assert run(["decode-rtf", str(path)]) == 0

    out = capsys.readouterr().out
    assert "Text element 2 of 2" in out
    assert "--- Slide Text ---\nAmazing grace\nHow sweet the sound" in out


def test_validate_reports_lossless_round_trip(pro_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["validate", str(pro_file)]) == 0
    assert "File is valid" in capsys.readouterr().out


# endregion


# region mutating commands
def test_edit_rewrites_file(pro_file: Path) -> None:
    assert run(["edit", str(pro_file), "--cue", "0", "--text", "Changed"]) == 0

    presentation = load_presentation(pro_file)
    assert text_of(grouped_cues(presentation)[0].cues[0]) == "Changed"


def test_edit_dry_run_leaves_file(pro_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    before = pro_file.read_bytes()
    assert run(["edit", str(pro_file), "-c", "0", "-t", "Changed", "--dry-run"]) == 0
    assert pro_file.read_bytes() == before
    assert "dry run" in capsys.readouterr().out


def test_edit_to_other_output(pro_file: Path, tmp_path: Path) -> None:
    out = tmp_path / "edited.pro"
    before = pro_file.read_bytes()

    assert run(["edit", str(pro_file), "-c", "2", "-t", "New chorus", "-o", str(out)]) == 0

    assert pro_file.read_bytes() == before
    assert text_of(load_presentation(out).cues[2]) == "New chorus"


def test_edit_bad_index_fails(pro_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["edit", str(pro_file), "-c", "9", "-t", "x"]) == 1
    assert "Error: Cue index 9 out of range (0-2)" in capsys.readouterr().err


def test_edit_cue_without_text_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = save_presentation(make_presentation([("Verse", [make_cue(None)])]), tmp_path / "image.pro")

    assert run(["edit", str(path), "-c", "0", "-t", "x"]) == 1
    assert "Could not find text element" in capsys.readouterr().err


def test_missing_file_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["info", str(tmp_path / "missing.pro")]) == 1
    assert capsys.readouterr().err.startswith("Error: File not found")


def test_malformed_file_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "broken.pro"
    path.write_bytes(b"\x0f")
    assert run(["info", str(path)]) == 1
    assert "Error:" in capsys.readouterr().err


def test_set_key(pro_file: Path) -> None:
    assert run(["set-key", str(pro_file), "F", "--scale", "minor", "--user-key", "G"]) == 0
    assert music_key(load_presentation(pro_file)).describe() == "G minor (transposed from F)"


def test_set_key_rejects_unknown_key(pro_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["set-key", str(pro_file), "H"]) == 1
    assert "Unknown key 'H'" in capsys.readouterr().err


def test_create_builds_presentation(tmp_path: Path) -> None:
    song = tmp_path / "song.toml"
    song.write_text(
        'title = "New Song"\n[[sections]]\nname = "Verse 1"\nslides = ["one", "two"]\n',
        encoding="utf-8",
    )
    out = tmp_path / "New Song.pro"

    assert run(["--slide-width", "1280", "create", str(song), "-o", str(out)]) == 0

    presentation = load_presentation(out)
    assert [text_of(cue) for cue in presentation.cues] == ["one", "two"]
    assert presentation.cues[0].actions[0].presentation_slide.base_slide.size == (1280.0, 1080.0)


def test_create_reports_chord_without_position(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    song = tmp_path / "song.toml"
    song.write_text(
        'title = "x"\n[[sections]]\nname = "V"\nslides = [{ text = "a", chords = [{ chord = "G" }] }]\n',
        encoding="utf-8",
    )
    out = tmp_path / "x.pro"

    assert run(["create", str(song), "-o", str(out)]) == 1
    assert "chord without" in capsys.readouterr().err
    assert not out.exists()


def test_create_defaults_to_output_folder(tmp_path: Path, temp_output_dir: Path) -> None:
    song = tmp_path / "song.toml"
    song.write_text('title = "A/B"\n[[sections]]\nname = "V"\nslides = ["x"]\n', encoding="utf-8")

    assert run(["--output-folder", str(temp_output_dir), "create", str(song)]) == 0
    assert (temp_output_dir / "AB.pro").exists()


@pytest.mark.parametrize("fmt,ext", [("text", ".txt"), ("markdown", ".md"), ("tsv", ".tsv"), ("docx", ".docx"), ("pptx", ".pptx")])
def test_export_formats(pro_file: Path, temp_output_dir: Path, fmt: str, ext: str) -> None:
    assert run(["--output-folder", str(temp_output_dir), "export", str(pro_file), "--format", fmt]) == 0
    assert (temp_output_dir / f"Amazing Grace{ext}").exists()


def test_schema_option_switches_schema(pro_file: Path, tmp_path: Path) -> None:
    """A schema file without the presentation type makes every command fail cleanly."""
    schema = tmp_path / "schema.toml"
    schema.write_text('[messages."x.Y"]\nfields = []\n', encoding="utf-8")

    assert run(["--schema", str(schema), "info", str(pro_file)]) == 1
    assert "x.Y" in get_schema()


# endregion
