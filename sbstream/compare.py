"""Ordering of token streams and of encoded token sequences."""

from __future__ import annotations

import struct
from typing import Any, Iterator

from .encode import TEXT_ENCODING, TEXT_ERRORS
from .errors import BadStringLength, BadTokenKind, StringTooLong, UnexpectedEOF
from .kinds import Kind
from .streams import Stream, Token

# Encoded numbers are compared as the raw little-endian unsigned value of
# their bytes, floats as floats.
_NUMBER_FORMATS = {
    Kind.INT: "<Q",
    Kind.INT64: "<Q",
    Kind.UINT: "<Q",
    Kind.UINT64: "<Q",
    Kind.POINTER: "<Q",
    Kind.INT8: "<B",
    Kind.UINT8: "<B",
    Kind.INT16: "<H",
    Kind.UINT16: "<H",
    Kind.INT32: "<I",
    Kind.UINT32: "<I",
    Kind.FLOAT32: "<f",
    Kind.FLOAT64: "<d",
}

_LENGTH_PREFIXED = frozenset({Kind.STRING, Kind.BYTES, Kind.TYPE_NAME, Kind.LITERAL})

_VALUELESS = frozenset(
    {
        Kind.MIN,
        Kind.ARRAY_END,
        Kind.OBJECT_END,
        Kind.MAP_END,
        Kind.TUPLE_END,
        Kind.NIL,
        Kind.NAN,
        Kind.ARRAY,
        Kind.OBJECT,
        Kind.MAP,
        Kind.TUPLE,
        Kind.MAX,
    }
)


def _tokens(stream: Stream) -> Iterator[Token]:
    return (token for token in stream if token.valid())


def _value_key(value: Any) -> Any:
    if isinstance(value, str):
        return value.encode(TEXT_ENCODING, TEXT_ERRORS)
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    return value


def _order(a: Any, b: Any) -> int:
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def compare(stream1: Stream, stream2: Stream) -> int:
    """Return -1, 0 or 1 as ``stream1`` sorts before, equal to or after ``stream2``.

    Tokens are compared pairwise, first by kind, then by value. A stream
    that ends first sorts first.
    """
    first, second = _tokens(stream1), _tokens(stream2)
    while True:
        t1 = next(first, None)
        t2 = next(second, None)
        if t1 is None and t2 is None:
            return 0
        if t1 is None:
            return -1
        if t2 is None:
            return 1
        if t1.kind != t2.kind:
            return -1 if t1.kind < t2.kind else 1
        v1, v2 = _value_key(t1.value), _value_key(t2.value)
        if isinstance(v1, bytes) != isinstance(v2, bytes):
            raise TypeError(f"cannot compare {t1.value!r} with {t2.value!r}")
        if v1 != v2:
            return -1 if v1 < v2 else 1


class _Cursor:
    """Reads from an encoded byte string, tracking the offset."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self.offset = 0

    @property
    def exhausted(self) -> bool:
        return self.offset >= len(self._data)

    def read(self, n: int) -> bytes:
        if len(self._data) - self.offset < n:
            raise UnexpectedEOF(offset=self.offset)
        chunk = self._data[self.offset : self.offset + n]
        self.offset += n
        return chunk

    def read_number(self, fmt: str) -> Any:
        (value,) = struct.unpack(fmt, self.read(struct.calcsize(fmt)))
        return value

    def read_sized(self) -> bytes:
        first = self.read(1)[0]
        if first < 128:
            return self.read(first)
        size = 0xFF ^ first
        if size > 8:
            raise StringTooLong(offset=self.offset)
        length = _parse_uvarint(self.read(size))
        if length == 0:
            raise BadStringLength(offset=self.offset)
        return self.read(length)


def _parse_uvarint(data: bytes) -> int:
    value = 0
    shift = 0
    for byte in data:
        value |= (byte & 0x7F) << shift
        if byte < 0x80:
            return value
        shift += 7
    return 0


def compare_bytes(a: bytes, b: bytes) -> int:
    """Compare two encoded token sequences without building tokens.

    Returns -1, 0 or 1. Raises a :class:`~sbstream.errors.DecodeError`
    subclass when either input is malformed.
    """
    left, right = _Cursor(a), _Cursor(b)
    while True:
        if left.exhausted and right.exhausted:
            return 0
        if left.exhausted:
            return -1
        if right.exhausted:
            return 1

        kind_a = left.read(1)[0]
        kind_b = right.read(1)[0]
        if kind_a != kind_b:
            return -1 if kind_a < kind_b else 1

        if kind_a == Kind.BOOL:
            result = _order(left.read(1)[0] > 0, right.read(1)[0] > 0)
        elif kind_a in _NUMBER_FORMATS:
            fmt = _NUMBER_FORMATS[Kind(kind_a)]
            result = _order(left.read_number(fmt), right.read_number(fmt))
        elif kind_a in _LENGTH_PREFIXED:
            value_a = left.read_sized()
            value_b = right.read_sized()
            result = _order(value_a, value_b)
        elif kind_a in _VALUELESS:
            result = 0
        else:
            raise BadTokenKind(kind_a, offset=left.offset)

        if result:
            return result