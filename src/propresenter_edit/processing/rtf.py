"""Conversion between the RTF bytes stored in text elements and plain text.

The reader is a lenient stripper, not an RTF interpreter: it knows the handful
of control words and header groups ProPresenter writes, and anything it does
not recognize degrades to best-effort text instead of raising. The writer
produces the smallest document ProPresenter accepts: one font, one size.
"""

import logging
import re

from propresenter_edit.internals.constants import DEFAULT_FONT_NAME, DEFAULT_FONT_SIZE

log = logging.getLogger("propresenter_edit")

# Private-use stand-ins for escaped characters while control words are stripped
_BACKSLASH = "\ue000"
_OPEN_BRACE = "\ue001"
_CLOSE_BRACE = "\ue002"

_PREAMBLE = re.compile(r"^\s*\{\\rtf1(?:\\[a-z]+-?\d* ?)*")
_ESCAPED_NEWLINE = re.compile(r"\\\r?\n")
_LINE_BREAK = re.compile(r"\\(?:par|line)\b ?")
_CONTROL_WORD = re.compile(r"\\[a-z]+-?\d* ?")
_HORIZONTAL_SPACE = re.compile(r"[ \t\f\v]+")
_SPACE_AROUND_NEWLINE = re.compile(r" *\n *")
_HEX_RUN = re.compile(r"(?:\\'[0-9a-fA-F]{2})+")

# Header groups whose content is never text
_IGNORED_GROUPS = (
    "{\\fonttbl",
    "{\\colortbl",
    "{\\stylesheet",
    "{\\info",
    "{\\*",
)


# region rtf_to_text
def rtf_to_text(data: bytes | bytearray | str) -> str:
    """
    Extract plain text from RTF.

    `\\par` and `\\line` become newlines; every other control word, the header
    groups and the braces are dropped. Never raises.

    Example:
        >>> rtf_to_text(rb"{\\rtf1\\ansi\\deff0{\\fonttbl{\\f0 Arial;}}\\f0\\fs48 Hi\\par there}")
        'Hi\\nthere'
    """
    text = _as_str(data)

    text = (
        text.replace("\\\\", _BACKSLASH)
        .replace("\\{", _OPEN_BRACE)
        .replace("\\}", _CLOSE_BRACE)
    )

    # A backslash before a raw line end is a paragraph break; other raw line ends are formatting only
    text = _ESCAPED_NEWLINE.sub(r"\\par ", text)
    text = text.replace("\r", "").replace("\n", "")

    text = _PREAMBLE.sub("", text, count=1)
    text = _LINE_BREAK.sub("\n", text)
    for marker in _IGNORED_GROUPS:
        text = _remove_groups(text, marker)
    text = _CONTROL_WORD.sub("", text)
    text = text.replace("{", "").replace("}", "")

    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE.sub("\n", text)
    text = text.strip()

    text = _HEX_RUN.sub(_decode_hex_run, text)

    return (
        text.replace(_BACKSLASH, "\\")
        .replace(_OPEN_BRACE, "{")
        .replace(_CLOSE_BRACE, "}")
    )


def _as_str(data: bytes | bytearray | str) -> str:
    if isinstance(data, str):
        return data
    raw = bytes(data)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        log.debug("RTF data is not valid UTF-8; reading it as latin-1")
        return raw.decode("latin-1")


def _remove_groups(text: str, marker: str) -> str:
    """Drop every balanced group that starts with `marker`. An unclosed group is left alone."""
    start = text.find(marker)
    while start != -1:
        depth = 0
        end = -1
        for index in range(start, len(text)):
            char = text[index]
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    end = index
                    break
        if end == -1:
            log.debug(f"Unbalanced RTF group {marker!r}; leaving it in place")
            return text
        text = text[:start] + text[end + 1 :]
        start = text.find(marker, start)
    return text


def _decode_hex_run(match: re.Match[str]) -> str:
    """`\\'e9\\'e8` -> bytes -> text. cp1252 first, latin-1 for bytes cp1252 leaves undefined."""
    # ProPresenter writes \ansicpg1252, so \'92 is a right quote (U+2019).
    # Taking the byte value as the code point would give the C1 control U+0092.
    raw = bytes(int(pair, 16) for pair in match.group(0).split("\\'")[1:])
    try:
        return raw.decode("cp1252")
    except UnicodeDecodeError:
        return "".join(_decode_hex_byte(byte) for byte in raw)


def _decode_hex_byte(byte: int) -> str:
    try:
        return bytes([byte]).decode("cp1252")
    except UnicodeDecodeError:
        return bytes([byte]).decode("latin-1")


# endregion


# region text_to_rtf
def text_to_rtf(
    text: str,
    font_name: str = DEFAULT_FONT_NAME,
    font_size: float = DEFAULT_FONT_SIZE,
) -> bytes:
    """
    Wrap plain text in a minimal RTF document.

    Backslashes and braces are escaped and newlines become `\\par`. The size
    is given in points and written in half-points (`\\fs`). Characters other
    than newline are passed through as they are.
    """
    half_points = int(round(font_size * 2))
    body = _escape(text).replace("\n", "\\par ")
    rtf = (
        "{\\rtf1\\ansi\\deff0"
        f"{{\\fonttbl{{\\f0 {_escape(font_name)};}}}}"
        f"\\f0\\fs{half_points} {body}}}"
    )
    return rtf.encode("utf-8")


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("{", "\\{").replace("}", "\\}")


# endregion
