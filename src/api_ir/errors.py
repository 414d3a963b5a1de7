"""Error taxonomy for loading and recognizing API documents."""

from enum import Enum


class ErrorKind(Enum):
    FORMAT_UNRECOGNIZED = "format-unrecognized"  # no normalizer claims the input
    SOURCE_UNREADABLE = "source-unreadable"  # missing file or undecodable content
    INVALID_DOCUMENT = "invalid-document"  # recognized format, rejected by its parser


class ParseError(Exception):
    """Terminal failure of a parse call. Callers branch on ``kind``."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"ParseError({self.kind.name}, {self.message!r})"
