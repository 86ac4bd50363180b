"""Exceptions raised while reading and processing token streams."""

from __future__ import annotations

from .kinds import Kind


class SBError(Exception):
    """Base class of all errors raised by this package.

    ``offset`` is the byte position in the input where the problem was
    found, when that is known.
    """

    default_message = "stream error"

    def __init__(self, message: str = "", *, offset: int | None = None) -> None:
        self.message = message or self.default_message
        self.offset = offset
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.offset is None:
            return self.message
        return f"{self.message}: offset: {self.offset}"


class DecodeError(SBError):
    """Encoded input could not be decoded."""

    default_message = "decode error"


class BadTokenKind(DecodeError):
    """The input holds a byte that is not a known token kind."""

    default_message = "bad token kind"

    def __init__(self, kind: int, *, offset: int | None = None) -> None:
        self.kind = kind
        try:
            label = str(Kind(kind))
        except ValueError:
            label = str(kind)
        super().__init__(f"{self.default_message}: kind: {label}", offset=offset)


class StringTooLong(DecodeError):
    """A string length prefix is larger than allowed."""

    default_message = "string too long"


class BytesTooLong(DecodeError):
    """A bytes length prefix is larger than allowed."""

    default_message = "bytes too long"


class BadStringLength(DecodeError):
    """A string length prefix is malformed."""

    default_message = "bad string length"


class UnexpectedEOF(DecodeError, EOFError):
    """The input ended before a token or value was complete."""

    default_message = "unexpected EOF"