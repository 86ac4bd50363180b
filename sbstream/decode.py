"""Decoding of the binary token format and of JSON text into tokens."""

from __future__ import annotations

import io
import json
import re
import struct
from typing import Any, BinaryIO, Iterator, Optional, Union

from .encode import LENGTH_PREFIXED_KINDS, TEXT_ENCODING, TEXT_ERRORS, VALUE_FORMATS
from .errors import (
    BadTokenKind,
    BytesTooLong,
    DecodeError,
    StringTooLong,
    UnexpectedEOF,
)
from .kinds import Kind
from .streams import Token

#: Longest string or bytes value accepted by the decoder.
MAX_DECODE_STRING_LENGTH = 4 * 1024 * 1024 * 1024

#: Size of the first segment produced by :func:`decode_for_compare`.
INIT_DECODE_STEP = 8

_TEXT_KINDS = frozenset({Kind.STRING, Kind.TYPE_NAME, Kind.LITERAL})

_VALUELESS_KINDS = frozenset(
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

Source = Union[BinaryIO, bytes, bytearray, memoryview]


class _Input:
    """A reader that counts the bytes taken from it."""

    def __init__(self, source: Source) -> None:
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self._reader = source
        self.offset = 0

    def _read_some(self, n: int) -> bytes:
        try:
            return self._reader.read(n)
        except (OSError, ValueError) as exc:
            raise DecodeError(str(exc), offset=self.offset) from exc

    def read(self, n: int) -> bytes:
        chunks = []
        remaining = n
        while remaining > 0:
            chunk = self._read_some(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        data = b"".join(chunks)
        if len(data) < n:
            raise UnexpectedEOF(offset=self.offset)
        self.offset += n
        return data

    def read_kind(self) -> Optional[int]:
        """The next kind byte, or ``None`` at a clean end of input."""
        chunk = self._read_some(1)
        if not chunk:
            return None
        self.offset += 1
        return chunk[0]

    def read_length(self, too_long: type) -> int:
        first = self.read(1)[0]
        if first < 128:
            length = first
        else:
            size = 0xFF ^ first
            if size > 8:
                raise too_long(offset=self.offset)
            length = self._parse_uvarint(self.read(size))
        if length > MAX_DECODE_STRING_LENGTH:
            raise too_long(offset=self.offset)
        return length

    def _parse_uvarint(self, data: bytes) -> int:
        value = 0
        shift = 0
        for byte in data:
            value |= (byte & 0x7F) << shift
            if byte < 0x80:
                return value
            shift += 7
        raise UnexpectedEOF("truncated length varint", offset=self.offset)


def _text(data: bytes) -> str:
    return data.decode(TEXT_ENCODING, TEXT_ERRORS)


def _segments(
    source: _Input, kind: Kind, length: int, step: int
) -> Iterator[Token]:
    text = kind in _TEXT_KINDS
    yield Token(Kind.STRING_BEGIN if text else Kind.BYTES_BEGIN)
    while length > 0:
        size = min(step, length)
        step *= 2
        length -= size
        data = source.read(size)
        yield Token(kind, _text(data) if text else data)
    yield Token(Kind.STRING_END if text else Kind.BYTES_END)


def _decode(source: Source, step: Optional[int]) -> Iterator[Token]:
    data = _Input(source)
    while True:
        raw_kind = data.read_kind()
        if raw_kind is None:
            return
        try:
            kind = Kind(raw_kind)
        except ValueError:
            raise BadTokenKind(raw_kind, offset=data.offset) from None

        if kind == Kind.BOOL:
            yield Token(kind, data.read(1)[0] > 0)
        elif kind in VALUE_FORMATS:
            fmt = VALUE_FORMATS[kind]
            (value,) = struct.unpack(fmt, data.read(struct.calcsize(fmt)))
            yield Token(kind, value)
        elif kind in LENGTH_PREFIXED_KINDS:
            text = kind in _TEXT_KINDS
            length = data.read_length(StringTooLong if text else BytesTooLong)
            if step is not None:
                yield from _segments(data, kind, length, step)
            else:
                payload = data.read(length)
                yield Token(kind, _text(payload) if text else payload)
        elif kind in _VALUELESS_KINDS:
            yield Token(kind)
        else:
            raise BadTokenKind(raw_kind, offset=data.offset)


def decode(reader: Source) -> Iterator[Token]:
    """Yield the tokens encoded in ``reader`` (a binary file or bytes)."""
    return _decode(reader, None)


def decode_for_compare(reader: Source, step: int = INIT_DECODE_STEP) -> Iterator[Token]:
    """Like :func:`decode`, but split strings and bytes into segments.

    Each string or bytes value becomes a begin token, segments of
    ``step``, ``2 * step``, ``4 * step``... bytes, and an end token, so
    that long values can be compared without reading them whole.
    """
    if step < 1:
        raise ValueError("step must be positive")
    return _decode(reader, step)


class _Number(str):
    """A JSON number kept as its literal text."""


class _Object(list):
    """A JSON object as an ordered list of key, value pairs."""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


_JSON_DECODER = json.JSONDecoder(
    parse_float=_Number,
    parse_int=_Number,
    parse_constant=_reject_constant,
    object_pairs_hook=_Object,
)

_WHITESPACE = re.compile(r"[ \t\n\r]*")


def _json_tokens(value: Any) -> Iterator[Token]:
    if isinstance(value, _Object):
        yield Token(Kind.OBJECT)
        for key, item in value:
            yield Token(Kind.STRING, key)
            yield from _json_tokens(item)
        yield Token(Kind.OBJECT_END)
    elif isinstance(value, list):
        yield Token(Kind.ARRAY)
        for item in value:
            yield from _json_tokens(item)
        yield Token(Kind.ARRAY_END)
    elif isinstance(value, bool):
        yield Token(Kind.BOOL, value)
    elif value is None:
        yield Token(Kind.NIL)
    elif isinstance(value, _Number):
        yield Token(Kind.LITERAL, str(value))
    elif isinstance(value, str):
        yield Token(Kind.STRING, value)
    else:
        raise DecodeError(f"bad JSON value: {value!r}")


def decode_json(reader: Union[str, bytes, Any]) -> Iterator[Token]:
    """Yield tokens for the JSON values in ``reader`` (text, bytes or a file).

    Numbers become literal tokens holding their text. Several top-level
    values separated by whitespace are decoded one after another.
    """
    text = reader if isinstance(reader, (str, bytes, bytearray)) else reader.read()
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8")
    pos = 0
    while True:
        pos = _WHITESPACE.match(text, pos).end()
        if pos == len(text):
            return
        try:
            value, pos = _JSON_DECODER.raw_decode(text, pos)
        except ValueError as exc:
            offset = getattr(exc, "pos", pos)
            message = getattr(exc, "msg", str(exc))
            raise DecodeError(message, offset=offset) from exc
        yield from _json_tokens(value)