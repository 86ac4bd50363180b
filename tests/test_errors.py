import pytest

from sbstream.errors import (
    BadStringLength,
    BadTokenKind,
    BytesTooLong,
    DecodeError,
    SBError,
    StringTooLong,
    UnexpectedEOF,
)
from sbstream.kinds import Kind


def test_offset_in_message():
    err = DecodeError(offset=7)
    assert err.offset == 7
    assert str(err).endswith("offset: 7")


def test_message_without_offset():
    err = DecodeError("broken input")
    assert err.offset is None
    assert str(err) == "broken input"


def test_bad_token_kind_carries_kind():
    err = BadTokenKind(Kind.INT, offset=1)
    assert err.kind == Kind.INT
    assert "kind: KindInt" in str(err)
    assert err.offset == 1


def test_bad_token_kind_unknown_value():
    err = BadTokenKind(3)
    assert err.kind == 3
    assert "kind: 3" in str(err)


@pytest.mark.parametrize(
    "cls", [BadTokenKind, StringTooLong, BytesTooLong, BadStringLength, UnexpectedEOF]
)
def test_hierarchy(cls):
    err = cls(Kind.MAX, offset=3) if cls is BadTokenKind else cls(offset=3)
    assert isinstance(err, DecodeError)
    assert isinstance(err, SBError)
    assert err.offset == 3
    assert "offset: 3" in str(err)


def test_unexpected_eof_is_eof_error():
    err = UnexpectedEOF(offset=1)
    assert isinstance(err, EOFError)
    assert err.offset == 1
    assert "offset: 1" in str(err)


def test_default_messages_differ():
    messages = {str(StringTooLong()), str(BytesTooLong()), str(BadStringLength())}
    assert len(messages) == 3