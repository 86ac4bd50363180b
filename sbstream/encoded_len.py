"""Size of the binary encoding of a token stream, without encoding it."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, Optional

from .encode import LENGTH_PREFIXED_KINDS, TEXT_ENCODING, TEXT_ERRORS, VALUE_FORMATS
from .kinds import Kind
from .streams import Sink, Stream, Token, copy


def _prefix_len(length: int) -> int:
    if length < 128:
        return 1
    return 1 + (length.bit_length() + 6) // 7


def _payload_len(kind: Kind, value: Any) -> int:
    if kind == Kind.BOOL:
        return 1
    fmt = VALUE_FORMATS.get(kind)
    if fmt is not None:
        return struct.calcsize(fmt)
    if kind in LENGTH_PREFIXED_KINDS:
        if isinstance(value, str):
            size = len(value.encode(TEXT_ENCODING, TEXT_ERRORS))
        elif isinstance(value, (bytes, bytearray, memoryview)):
            size = len(bytes(value))
        else:
            raise TypeError(f"bad value {value!r} for {kind}")
        return _prefix_len(size) + size
    raise TypeError(f"{kind} carries no value, got {value!r}")


@dataclass
class EncodedLen:
    """A sink adding up the encoded size of the tokens it receives.

    At the end of the stream it hands over to ``cont``.
    """

    total: int = 0
    cont: Optional[Sink] = None

    def __call__(self, token: Token) -> Optional[Sink]:
        if token.invalid():
            return self.cont
        self.total += 1
        if token.value is not None:
            self.total += _payload_len(Kind(token.kind), token.value)
        return self


def encoded_len(stream: Stream) -> int:
    """Return the number of bytes ``stream`` takes when encoded."""
    counter = EncodedLen()
    copy(stream, counter)
    return counter.total