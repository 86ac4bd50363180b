"""Content hashes of token streams.

Every value gets a digest. A scalar is hashed as its kind byte followed
by its raw value. A compound value is hashed as its kind byte followed by
the digests of its elements, including the closing token. A type name is
hashed as its kind byte, the name, and the digest of the value it names.
A reference token stands for its referenced value: its bytes are taken as
the digest directly.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .encode import TEXT_ENCODING, TEXT_ERRORS, VALUE_FORMATS
from .errors import UnexpectedEOF
from .kinds import Kind
from .streams import Sink, Stream, Token, copy

#: A callable returning a fresh hash object with ``update`` and ``digest``.
NewState = Callable[[], Any]
#: Called with ``b""`` when a value starts and with its digest when it ends.
HashCallback = Callable[[bytes, Token], None]

_VALUELESS = frozenset(
    {
        Kind.MIN,
        Kind.NIL,
        Kind.NAN,
        Kind.MAX,
        Kind.ARRAY_END,
        Kind.OBJECT_END,
        Kind.MAP_END,
        Kind.TUPLE_END,
    }
)

_END_KINDS = frozenset({Kind.ARRAY_END, Kind.OBJECT_END, Kind.MAP_END, Kind.TUPLE_END})

_COMPOUND = frozenset({Kind.ARRAY, Kind.OBJECT, Kind.MAP, Kind.TUPLE})

_SCALAR = frozenset({Kind.BOOL, Kind.STRING, Kind.LITERAL, Kind.BYTES}) | frozenset(
    VALUE_FORMATS
)


@dataclass
class _Digest:
    """Where a finished value's digest is stored."""

    value: bytes = b""


def _text(value: str) -> bytes:
    return value.encode(TEXT_ENCODING, TEXT_ERRORS)


def _scalar_bytes(kind: Kind, value: Any) -> bytes:
    if kind == Kind.BOOL:
        return b"\x01" if value else b"\x00"
    if kind in (Kind.STRING, Kind.LITERAL):
        return _text(value)
    if kind == Kind.BYTES:
        return bytes(value)
    return struct.pack(VALUE_FORMATS[kind], value)


def _hash_value(
    new_state: NewState,
    fn: Optional[HashCallback],
    result: Optional[_Digest],
    cont: Optional[Sink],
) -> Sink:
    def finish(state: Any, token: Token) -> None:
        total = state.digest()
        if result is not None:
            result.value = total
        if fn is not None:
            fn(total, token)

    def sink(token: Token) -> Optional[Sink]:
        if token.invalid():
            raise UnexpectedEOF("token stream ended inside a value")
        kind = token.kind

        if kind == Kind.REF:
            total = bytes(token.value)
            if fn is not None:
                fn(total, token)
            if result is not None:
                result.value = total
            return cont

        state = new_state()
        state.update(bytes([int(kind)]))
        if fn is not None:
            fn(b"", token)

        if kind in _VALUELESS:
            finish(state, token)
            return cont

        if kind in _SCALAR:
            state.update(_scalar_bytes(Kind(kind), token.value))
            finish(state, token)
            return cont

        if kind in _COMPOUND:

            def close_compound(next_token: Token) -> Optional[Sink]:
                finish(state, token)
                return cont(next_token) if cont is not None else None

            return hash_compound(new_state, state, fn, close_compound)

        if kind == Kind.TYPE_NAME:
            state.update(_text(token.value))
            inner = _Digest()

            def close_named(next_token: Token) -> Optional[Sink]:
                state.update(inner.value)
                finish(state, token)
                return cont(next_token) if cont is not None else None

            return _hash_value(new_state, fn, inner, close_named)

        raise ValueError(f"unexpected token: {token!r}")

    return sink


def hash_sink(
    new_state: NewState,
    fn: Optional[HashCallback] = None,
    cont: Optional[Sink] = None,
) -> Sink:
    """A sink hashing one value, then handing the following token to ``cont``.

    ``fn`` is told about every value and sub-value: once with ``b""`` when
    it starts, once with its digest when it is complete.
    """
    return _hash_value(new_state, fn, None, cont)


def hash_compound(
    new_state: NewState,
    state: Any,
    fn: Optional[HashCallback],
    cont: Optional[Sink],
) -> Sink:
    """A sink hashing the elements of a compound value into ``state``.

    Each element's digest is added to ``state``. After the closing token,
    the token that follows it is handed to ``cont``.
    """

    def sink(token: Token) -> Optional[Sink]:
        if token.invalid():
            raise UnexpectedEOF("token stream ended inside a compound value")
        follow = cont if token.kind in _END_KINDS else sink
        element = _Digest()

        def after(next_token: Token) -> Optional[Sink]:
            state.update(element.value)
            if follow is None:
                return None
            return follow(next_token)

        return _hash_value(new_state, fn, element, after)(token)

    return sink


def digest(stream: Stream, new_state: NewState) -> bytes:
    """Return the digest of the first value in ``stream``."""
    result = _Digest()
    copy(stream, _hash_value(new_state, None, result, None))
    return result.value