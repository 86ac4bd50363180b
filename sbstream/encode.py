"""Binary encoding of tokens.

Each token is written as its kind byte followed by its value, if any.
Numbers are little-endian with a width fixed by the kind. Strings and
bytes carry a length prefix: one byte for lengths below 128, otherwise
the bitwise complement of the size of an unsigned varint, then that
varint.
"""

from __future__ import annotations

import struct
from typing import BinaryIO, Optional

from .kinds import Kind
from .streams import Sink, Token

#: struct formats of the fixed-width kinds.
VALUE_FORMATS = {
    Kind.INT: "<q",
    Kind.INT8: "<b",
    Kind.INT16: "<h",
    Kind.INT32: "<i",
    Kind.INT64: "<q",
    Kind.UINT: "<Q",
    Kind.UINT8: "<B",
    Kind.UINT16: "<H",
    Kind.UINT32: "<I",
    Kind.UINT64: "<Q",
    Kind.POINTER: "<Q",
    Kind.FLOAT32: "<f",
    Kind.FLOAT64: "<d",
}

#: Kinds whose value is a length-prefixed run of bytes.
LENGTH_PREFIXED_KINDS = frozenset(
    {Kind.STRING, Kind.TYPE_NAME, Kind.LITERAL, Kind.BYTES, Kind.REF}
)

#: Encoding used for string values; lone surrogates stand for raw bytes.
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"


def _uvarint(value: int) -> bytes:
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def _length_prefix(length: int) -> bytes:
    if length < 128:
        return bytes([length])
    varint = _uvarint(length)
    return bytes([0xFF ^ len(varint)]) + varint


def _payload(kind: Kind, value: object) -> bytes:
    if kind == Kind.BOOL:
        return b"\x01" if value else b"\x00"
    fmt = VALUE_FORMATS.get(kind)
    if fmt is not None:
        try:
            return struct.pack(fmt, value)
        except (struct.error, OverflowError) as exc:
            raise ValueError(f"value {value!r} does not fit {kind}") from exc
    if kind in LENGTH_PREFIXED_KINDS:
        if isinstance(value, str):
            data = value.encode(TEXT_ENCODING, TEXT_ERRORS)
        elif isinstance(value, (bytes, bytearray, memoryview)):
            data = bytes(value)
        else:
            raise TypeError(f"bad value {value!r} for {kind}")
        return _length_prefix(len(data)) + data
    raise TypeError(f"{kind} carries no value, got {value!r}")


def encode_token(token: Token) -> bytes:
    """Return the encoded form of one valid token."""
    if token.invalid():
        raise ValueError("cannot encode an invalid token")
    head = bytes([int(token.kind)])
    if token.value is None:
        return head
    return head + _payload(Kind(token.kind), token.value)


def encode(writer: BinaryIO, cont: Optional[Sink] = None) -> Sink:
    """A sink writing each token to ``writer``; at the end it hands over to ``cont``."""

    def sink(token: Token) -> Optional[Sink]:
        if token.invalid():
            return cont
        writer.write(encode_token(token))
        return sink

    return sink