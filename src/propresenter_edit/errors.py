"""Exception types raised by the codec and document layers.

A missing text element or a dangling cue reference is not an error; those
come back as ordinary values (False, None, or a skipped entry).
"""


class ProPresenterError(Exception):
    """Base class for every error raised by propresenter_edit."""


class SchemaUnavailable(ProPresenterError):
    """The schema description could not be loaded, so nothing can be decoded or encoded."""


class MalformedMessage(ProPresenterError):
    """The bytes do not parse as a well-formed protobuf message.

    `path` names the type being decoded, or the dotted path of a string
    field whose bytes are not valid UTF-8.
    """

    def __init__(self, reason: str, path: str | None = None) -> None:
        self.reason = reason
        self.path = path
        super().__init__(f"{path}: {reason}" if path else reason)


class InvalidTree(ProPresenterError):
    """A value in the tree violates the schema; `path` names the offending field."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
