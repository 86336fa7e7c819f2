"""CLI Interface Logic (argparse etc)"""

import argparse
import json
import logging
import sys
from dataclasses import fields
from pathlib import Path
from typing import Callable, Optional

from propresenter_edit import io
from propresenter_edit.codec.decoder import decode
from propresenter_edit.codec.encoder import encode
from propresenter_edit.codec.schema import configure_schema_path, reset_schema_cache
from propresenter_edit.errors import ProPresenterError
from propresenter_edit.internals import constants
from propresenter_edit.internals.config.define_config import UserConfig
from propresenter_edit.internals.paths import resolve_path, user_configs_dir
from propresenter_edit.models import Presentation
from propresenter_edit.processing import report
from propresenter_edit.processing.create import create_presentation, options_from_toml
from propresenter_edit.processing.export_office import export_docx, export_pptx
from propresenter_edit.processing.metadata import parse_key, parse_scale, set_music_key
from propresenter_edit.processing.rtf import rtf_to_text
from propresenter_edit.processing.traversal import (
    cue_slide,
    find_cue,
    set_text,
    slide_text,
    slide_text_elements,
    text_of,
)
from propresenter_edit.utils import preview

log = logging.getLogger("propresenter_edit")

RAW_RTF_PREVIEW_LENGTH = 500

EXPORT_EXTENSIONS = {
    "text": ".txt",
    "markdown": ".md",
    "tsv": ".tsv",
    "docx": ".docx",
    "pptx": ".pptx",
}

Handler = Callable[[argparse.Namespace, UserConfig], int]


# region run
def run(argv: Optional[list[str]] = None) -> int:
    """
    Run CLI interface. Assumes startup.initialize_application() was already called.

    Returns the process exit code: 0 on success, 1 on any handled failure.
    """
    args = parse_args(argv)

    try:
        cfg = build_config_from_args(args)
        schema_path = cfg.get_schema_path()
        if schema_path is not None:
            configure_schema_path(schema_path)
            reset_schema_cache()
        handler: Handler = args.handler
        return handler(args, cfg)
    except (ProPresenterError, OSError, ValueError, IndexError) as e:
        log.debug(f"Command '{args.command}' failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


# endregion


# region parse_args
def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Global options mirror the UserConfig fields; each subcommand adds its own.
    """
    parser = build_parser()
    _validate_args_match_config(parser)
    return parser.parse_args(argv)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="propresenter-edit",
        description="Read, edit and write ProPresenter 7 presentation (.pro) files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show a summary of a song
  propresenter-edit info "Amazing Grace.pro"

  # Replace the text of the third slide, writing a copy
  propresenter-edit edit "Amazing Grace.pro" --cue 2 --text "New words" -o edited.pro

  # Build a presentation from a TOML song file
  propresenter-edit create song.toml -o "Amazing Grace.pro"

  # Export lyrics to Word
  propresenter-edit export "Amazing Grace.pro" --format docx
        """,
    )

    # Config file (special - loads other values)
    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="Path to TOML configuration file. CLI options override its values.",
    )
    parser.add_argument(
        "--schema",
        type=str,
        dest="schema_path",
        metavar="PATH",
        help="Schema description TOML to use instead of the packaged one",
    )
    parser.add_argument(
        "--font-name",
        type=str,
        dest="font_name",
        help=f"Font for replaced slide text (default: {constants.DEFAULT_FONT_NAME})",
    )
    parser.add_argument(
        "--font-size",
        type=float,
        dest="font_size",
        metavar="POINTS",
        help=f"Font size for replaced slide text (default: {constants.DEFAULT_FONT_SIZE})",
    )
    parser.add_argument(
        "--create-font-size",
        type=float,
        dest="create_font_size",
        metavar="POINTS",
        help=f"Font size for authored slides (default: {constants.DEFAULT_CREATE_FONT_SIZE})",
    )
    parser.add_argument(
        "--slide-width",
        type=int,
        dest="slide_width",
        metavar="PX",
        help=f"Width of authored slides (default: {constants.DEFAULT_SLIDE_WIDTH})",
    )
    parser.add_argument(
        "--slide-height",
        type=int,
        dest="slide_height",
        metavar="PX",
        help=f"Height of authored slides (default: {constants.DEFAULT_SLIDE_HEIGHT})",
    )
    arrangement_group = parser.add_mutually_exclusive_group()
    arrangement_group.add_argument(
        "--arrangement",
        action="store_true",
        dest="create_arrangement",
        default=None,
        help="Add a Default arrangement to authored presentations (default: enabled)",
    )
    arrangement_group.add_argument(
        "--no-arrangement",
        action="store_false",
        dest="create_arrangement",
        default=None,
        help="Do not add an arrangement to authored presentations",
    )
    parser.add_argument(
        "--output-folder",
        type=str,
        dest="output_folder",
        metavar="PATH",
        help="Folder for exports and created files when no output path is given",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    dump = subparsers.add_parser("dump", help="Dump a .pro or .proplaylist file as JSON")
    dump.add_argument("file", help="ProPresenter file (.pro or .proplaylist)")
    dump.add_argument("-o", "--output", metavar="FILE", help="Output file (default: stdout)")
    dump.add_argument("--compact", action="store_true", help="No indentation")
    dump.set_defaults(handler=cmd_dump)

    info = subparsers.add_parser("info", help="Show presentation summary")
    info.add_argument("file", help="ProPresenter presentation file (.pro)")
    info.set_defaults(handler=cmd_info)

    list_cmd = subparsers.add_parser("list", help="List all slides with their text content")
    list_cmd.add_argument("file", help="ProPresenter presentation file (.pro)")
    list_cmd.add_argument("-g", "--group", metavar="NAME", help="Only this group")
    list_cmd.add_argument("-f", "--full", action="store_true", help="Show full text (not truncated)")
    list_cmd.set_defaults(handler=cmd_list)

    text = subparsers.add_parser("text", help="Extract all text from a presentation")
    text.add_argument("file", help="ProPresenter presentation file (.pro)")
    text.add_argument("-o", "--output", metavar="FILE", help="Output file (default: stdout)")
    text.set_defaults(handler=cmd_text)

    edit = subparsers.add_parser("edit", help="Edit slide text in a presentation")
    edit.add_argument("file", help="ProPresenter presentation file (.pro)")
    edit.add_argument("-c", "--cue", type=int, required=True, metavar="INDEX", help="Cue index to edit (0-based)")
    edit.add_argument("-t", "--text", required=True, help="New text for the slide")
    edit.add_argument("-o", "--output", metavar="FILE", help="Output file (default: overwrite input)")
    edit.add_argument("--dry-run", action="store_true", help="Show what would change without writing")
    edit.set_defaults(handler=cmd_edit)

    decode_rtf = subparsers.add_parser(
        "decode-rtf", help="Show raw RTF and extracted text for each text element"
    )
    decode_rtf.add_argument("file", help="ProPresenter presentation file (.pro)")
    decode_rtf.add_argument("-c", "--cue", type=int, metavar="INDEX", help="Specific cue index (default: all)")
    decode_rtf.set_defaults(handler=cmd_decode_rtf)

    validate = subparsers.add_parser(
        "validate", help="Check that a file can be read and re-encoded without loss"
    )
    validate.add_argument("file", help="ProPresenter presentation file (.pro)")
    validate.set_defaults(handler=cmd_validate)

    create = subparsers.add_parser("create", help="Build a presentation from a TOML song file")
    create.add_argument("song", help="Song description (.toml)")
    create.add_argument("-o", "--output", metavar="FILE", help="Output .pro file (default: <output folder>/<title>.pro)")
    create.set_defaults(handler=cmd_create)

    set_key = subparsers.add_parser("set-key", help="Set the music key of a presentation")
    set_key.add_argument("file", help="ProPresenter presentation file (.pro)")
    set_key.add_argument("key", help="Key name, e.g. F, Bb, C#")
    set_key.add_argument("--scale", default="major", choices=["major", "minor"])
    set_key.add_argument("--user-key", metavar="KEY", help="Transposed key (default: same as key)")
    set_key.add_argument("-o", "--output", metavar="FILE", help="Output file (default: overwrite input)")
    set_key.set_defaults(handler=cmd_set_key)

    export = subparsers.add_parser("export", help="Export lyrics to text, markdown, TSV, Word or PowerPoint")
    export.add_argument("file", help="ProPresenter presentation file (.pro)")
    export.add_argument("--format", required=True, choices=sorted(EXPORT_EXTENSIONS), dest="export_format")
    export.add_argument("-o", "--output", metavar="FILE", help="Output file (default: <output folder>/<name>.<ext>)")
    export.set_defaults(handler=cmd_export)

    return parser


# endregion


# region build_config_from_args
def build_config_from_args(args: argparse.Namespace) -> UserConfig:
    """
    Build UserConfig from parsed arguments with proper priority.

    Priority order (highest to lowest):
    1. CLI arguments (if explicitly provided)
    2. Config file values (--config, else config.toml in the user configs folder)
    3. UserConfig defaults
    """
    default_config = user_configs_dir() / constants.DEFAULT_CONFIG_FILENAME
    if args.config:
        config_path = resolve_path(args.config)
        log.info(f"Loading config from {config_path}")
        cfg = UserConfig.from_toml(config_path)
    elif default_config.exists():
        log.info(f"Loading user config from {default_config}")
        cfg = UserConfig.from_toml(default_config)
    else:
        cfg = UserConfig()

    # argparse leaves these as None unless they were given
    for field_name in (
        "schema_path",
        "font_name",
        "font_size",
        "create_font_size",
        "slide_width",
        "slide_height",
        "create_arrangement",
        "output_folder",
    ):
        value = getattr(args, field_name)
        if value is not None:
            setattr(cfg, field_name, value)

    cfg.validate()
    return cfg


def _validate_args_match_config(parser: argparse.ArgumentParser) -> None:
    """
    Ensure all UserConfig fields have corresponding global CLI options.

    Raises:
        RuntimeError: If there's a mismatch between config fields and CLI args
    """
    config_fields = {f.name for f in fields(UserConfig)}

    excluded_args = {"help", "config", "command"}
    arg_names = {action.dest for action in parser._actions if action.dest not in excluded_args}

    missing_in_args = config_fields - arg_names
    extra_in_args = arg_names - config_fields

    if missing_in_args:
        log.error("UserConfig fields must have a corresponding option in cli.build_parser().")
        raise RuntimeError(f"CLI arguments missing for UserConfig fields: {missing_in_args}")

    if extra_in_args:
        log.error(
            "Global CLI options must map to a UserConfig field, or be added to excluded_args "
            "in _validate_args_match_config()."
        )
        raise RuntimeError(f"CLI arguments don't match UserConfig fields: {extra_in_args}")


# endregion


# region output helpers
def _emit(output: str, destination: Optional[str]) -> None:
    """Print to stdout, or write to `destination` and say where it went."""
    if destination:
        path = io.write_bytes(destination, output.encode("utf-8"))
        print(f"Written to {path}")
    else:
        print(output)


def _default_output(cfg: UserConfig, stem: str, extension: str) -> Path:
    safe_stem = "".join(c for c in stem if c not in '<>:"/\\|?*').strip() or "Untitled"
    return cfg.get_output_folder() / f"{safe_stem}{extension}"


# endregion


# region commands
def cmd_dump(args: argparse.Namespace, cfg: UserConfig) -> int:
    """Dump a presentation or playlist tree as JSON."""
    if Path(args.file).suffix.lower() == constants.PLAYLIST_EXTENSION:
        message = io.load_playlist(args.file)
    else:
        message = decode(constants.PRESENTATION_TYPE, io.read_bytes(args.file))

    output = json.dumps(
        message.to_dict(),
        indent=None if args.compact else 2,
        ensure_ascii=False,
    )
    _emit(output, args.output)
    return 0


def cmd_info(args: argparse.Namespace, cfg: UserConfig) -> int:
    presentation = io.load_presentation(args.file)
    print(report.presentation_summary(presentation))
    return 0


def cmd_list(args: argparse.Namespace, cfg: UserConfig) -> int:
    presentation = io.load_presentation(args.file)
    print(report.cue_listing(presentation, group=args.group, full=args.full))
    return 0


def cmd_text(args: argparse.Namespace, cfg: UserConfig) -> int:
    presentation = io.load_presentation(args.file)
    _emit(report.export_text(presentation), args.output)
    return 0


def cmd_edit(args: argparse.Namespace, cfg: UserConfig) -> int:
    """Replace one cue's text and write the file back."""
    presentation = io.load_presentation(args.file)
    cue = find_cue(presentation, args.cue)
    old_text = text_of(cue)

    print(f"Cue {args.cue}:")
    print(f"  Old text: {preview(old_text)}")
    print(f"  New text: {preview(args.text)}")

    if args.dry_run:
        print("\n(dry run - no changes written)")
        return 0

    if not set_text(cue, args.text, cfg.font_name, cfg.font_size):
        print("Error: Could not find text element in cue", file=sys.stderr)
        return 1

    output_path = io.save_presentation(presentation, args.output or args.file)
    print(f"\nWritten to {output_path}")
    return 0


def cmd_decode_rtf(args: argparse.Namespace, cfg: UserConfig) -> int:
    """Print raw RTF next to the extracted text, for one cue or all of them."""
    presentation = io.load_presentation(args.file)
    cues = presentation.cues
    indices = [args.cue] if args.cue is not None else list(range(len(cues)))

    for index in indices:
        if not cues:
            log.warning(f"Cue index {index} out of range (presentation has no cues); skipping")
            continue
        if not 0 <= index < len(cues):
            log.warning(f"Cue index {index} out of range (0-{len(cues) - 1}); skipping")
            continue

        print(f"\n=== Cue {index} ===")
        slide = cue_slide(cues[index])
        if slide is None:
            continue
        payloads = slide_text_elements(slide)
        for number, payload in enumerate(payloads, start=1):
            raw = payload.rtf_data.decode("utf-8", errors="replace")
            print(f"\nText element {number} of {len(payloads)}")
            print("--- Raw RTF ---")
            print(raw[:RAW_RTF_PREVIEW_LENGTH])
            if len(raw) > RAW_RTF_PREVIEW_LENGTH:
                print("...(truncated)")
            print("\n--- Extracted Text ---")
            print(rtf_to_text(payload.rtf_data))
        if len(payloads) > 1:
            print("\n--- Slide Text ---")
            print(slide_text(slide))

    return 0


def cmd_validate(args: argparse.Namespace, cfg: UserConfig) -> int:
    """Decode, re-encode and decode again; the two trees must be equal."""
    print(f"Reading {args.file}...")
    presentation = io.load_presentation(args.file)
    print("✓ Read successfully")
    print(f"  Name: {presentation.name}")
    print(f"  Cues: {len(presentation.cues)}")
    print(f"  Groups: {len(presentation.cue_groups)}")

    unknown = len(presentation.unknown_fields)
    if unknown:
        print(f"  Unrecognized top-level fields kept: {unknown}")

    encoded = encode(constants.PRESENTATION_TYPE, presentation.message)
    reread = Presentation(decode(constants.PRESENTATION_TYPE, encoded))
    if reread.message != presentation.message:
        print("✗ Re-encoded file does not decode to the same tree", file=sys.stderr)
        return 1

    print("✓ Round-trip preserves every field")
    print("\n✓ File is valid")
    return 0


def cmd_create(args: argparse.Namespace, cfg: UserConfig) -> int:
    options = options_from_toml(Path(args.song), cfg)
    presentation = create_presentation(options)
    output = (
        Path(args.output)
        if args.output
        else _default_output(cfg, options.title, constants.PRESENTATION_EXTENSION)
    )
    path = io.save_presentation(presentation, output)
    print(f"Created '{options.title}' with {len(presentation.cues)} slides: {path}")
    return 0


def cmd_set_key(args: argparse.Namespace, cfg: UserConfig) -> int:
    presentation = io.load_presentation(args.file)
    key = parse_key(args.key)
    user_key = parse_key(args.user_key) if args.user_key else None
    set_music_key(presentation, key, parse_scale(args.scale), user_key)
    path = io.save_presentation(presentation, args.output or args.file)
    print(f"Set key of '{presentation.name}' to {args.key} {args.scale}: {path}")
    return 0


def cmd_export(args: argparse.Namespace, cfg: UserConfig) -> int:
    presentation = io.load_presentation(args.file)
    fmt = args.export_format
    output = (
        Path(args.output)
        if args.output
        else _default_output(cfg, presentation.name or Path(args.file).stem, EXPORT_EXTENSIONS[fmt])
    )

    if fmt == "docx":
        path = export_docx(presentation, output)
    elif fmt == "pptx":
        path = export_pptx(presentation, output)
    else:
        exporters = {
            "text": report.export_text,
            "markdown": report.export_markdown,
            "tsv": report.export_tsv,
        }
        path = io.write_bytes(output, exporters[fmt](presentation).encode("utf-8"))

    print(f"Exported {fmt} to {path}")
    return 0


# endregion


def main() -> None:
    """Development entry point - run CLI directly with `python -m propresenter_edit.cli`"""
    from propresenter_edit import startup

    log = startup.initialize_application()
    try:
        sys.exit(run())
    except Exception:
        log.exception("Fatal error in CLI")
        raise


if __name__ == "__main__":
    main()
