import hashlib

import pytest

from sbstream.decode import decode
from sbstream.encode import encode_token
from sbstream.errors import UnexpectedEOF
from sbstream.hashing import digest, hash_compound, hash_sink
from sbstream.kinds import Kind
from sbstream.streams import Token, copy


class Fnv128:
    """FNV-1 with a 128-bit state, as a hashlib-like object."""

    OFFSET = 0x6C62272E07BB014262B821756295C58D
    PRIME = 0x0000000001000000000000000000013B
    MASK = (1 << 128) - 1

    def __init__(self):
        self.value = self.OFFSET

    def update(self, data):
        for byte in data:
            self.value = (self.value * self.PRIME) & self.MASK
            self.value ^= byte

    def digest(self):
        return self.value.to_bytes(16, "big")


class Foo(Exception):
    pass


def int_array(*values):
    return (
        [Token(Kind.ARRAY)]
        + [Token(Kind.INT, v) for v in values]
        + [Token(Kind.ARRAY_END)]
    )


CASES = [
    (
        [Token(Kind.INT, 42)],
        "0fcc339bcc03b2d67d97d0e2fa60bd41",
        ["", "0fcc339bcc03b2d67d97d0e2fa60bd41"],
        [Kind.INT, Kind.INT],
    ),
    (
        int_array(1, 2, 3),
        "1686c4524aa5e66d9cf9b98296ea178c",
        [
            "",
            "",
            "62aabcb77703b2d6d746d674187a9a50",
            "",
            "255cd04db403b2d6e416b2ad65ec0309",
            "",
            "8f217470f503b2d6dfd16944f6c63576",
            "",
            "d228cb69101a8caf78912b704e4a1475",
            "1686c4524aa5e66d9cf9b98296ea178c",
        ],
        [
            Kind.ARRAY,
            Kind.INT,
            Kind.INT,
            Kind.INT,
            Kind.INT,
            Kind.INT,
            Kind.INT,
            Kind.ARRAY_END,
            Kind.ARRAY_END,
            Kind.ARRAY,
        ],
    ),
]


@pytest.mark.parametrize("tokens, expected, sums, kinds", CASES)
def test_sink_hash(tokens, expected, sums, kinds):
    assert digest(tokens, Fnv128).hex() == expected

    seen_sums = []
    seen_kinds = []

    def fn(total, token):
        seen_sums.append(total.hex())
        seen_kinds.append(token.kind)

    copy(tokens, hash_sink(Fnv128, fn))
    assert seen_sums == sums
    assert seen_kinds == kinds


def test_hash_of_decoded_stream_matches():
    for tokens in ([Token(Kind.INT, 42)], int_array(42)):
        data = b"".join(encode_token(t) for t in tokens)
        assert digest(decode(data), Fnv128) == digest(tokens, Fnv128)


def test_empty_stream_raises():
    with pytest.raises(UnexpectedEOF):
        copy([], hash_sink(Fnv128))


def test_unfinished_compound_raises():
    with pytest.raises(UnexpectedEOF):
        copy([Token(Kind.OBJECT)], hash_sink(Fnv128))


def test_callback_error_on_start():
    def fn(total, token):
        raise Foo()

    with pytest.raises(Foo):
        copy([Token(Kind.INT, 42)], hash_sink(Fnv128, fn))


def test_callback_error_on_sum():
    def fn(total, token):
        if total:
            raise Foo()

    with pytest.raises(Foo):
        copy([Token(Kind.INT, 42)], hash_sink(Fnv128, fn))


@pytest.mark.parametrize(
    "with_sum, kind",
    [(True, Kind.ARRAY_END), (False, Kind.ARRAY_END), (True, Kind.ARRAY)],
)
def test_callback_error_in_compound(with_sum, kind):
    def fn(total, token):
        if bool(total) == with_sum and token.kind == kind:
            raise Foo()

    with pytest.raises(Foo):
        copy(int_array(1, 2, 3), hash_sink(Fnv128, fn))


def test_ref_hash():
    inner = digest([Token(Kind.INT, 2)], hashlib.sha256)
    plain = int_array(1, 2, 3)
    with_ref = [
        Token(Kind.ARRAY),
        Token(Kind.INT, 1),
        Token(Kind.REF, inner),
        Token(Kind.INT, 3),
        Token(Kind.ARRAY_END),
    ]
    assert digest(plain, hashlib.sha256) == digest(with_ref, hashlib.sha256)


def test_ref_at_top_level_is_its_own_digest():
    assert digest([Token(Kind.REF, b"abc")], Fnv128) == b"abc"


def test_type_name_hash():
    named = [Token(Kind.TYPE_NAME, "pkg.T"), Token(Kind.INT, 1)]
    other = [Token(Kind.TYPE_NAME, "pkg.U"), Token(Kind.INT, 1)]
    plain = [Token(Kind.INT, 1)]
    assert digest(named, Fnv128) != digest(plain, Fnv128)
    assert digest(named, Fnv128) != digest(other, Fnv128)

    kinds = []
    copy(named, hash_sink(Fnv128, lambda total, token: kinds.append((bool(total), token.kind))))
    assert kinds == [
        (False, Kind.TYPE_NAME),
        (False, Kind.INT),
        (True, Kind.INT),
        (True, Kind.TYPE_NAME),
    ]


def test_nested_compound_digest_depends_on_structure():
    nested = [
        Token(Kind.ARRAY),
        *int_array(1),
        Token(Kind.ARRAY_END),
    ]
    assert digest(nested, Fnv128) != digest(int_array(1), Fnv128)
    assert digest(nested, Fnv128) == digest(list(nested), Fnv128)


def test_hash_sink_hands_over_to_cont():
    received = []

    def collect(token):
        if token.invalid():
            return None
        received.append(token)
        return collect

    copy(
        [Token(Kind.INT, 1), Token(Kind.INT, 2), Token(Kind.INT, 3)],
        hash_sink(Fnv128, None, collect),
    )
    assert received == [Token(Kind.INT, 2), Token(Kind.INT, 3)]


def test_hash_compound_feeds_state():
    state = Fnv128()
    state.update(bytes([int(Kind.ARRAY)]))
    closed = []

    def close(token):
        closed.append(token)
        return None

    sink = hash_compound(Fnv128, state, None, close)
    for token in int_array(1, 2, 3)[1:] + [Token()]:
        assert sink is not None
        sink = sink(token)
    assert sink is None
    assert state.digest().hex() == "1686c4524aa5e66d9cf9b98296ea178c"
    assert closed == [Token()]


def test_unexpected_kind_raises():
    with pytest.raises(ValueError):
        copy([Token(Kind.STRING_BEGIN)], hash_sink(Fnv128))


def test_digest_of_first_value_only():
    assert digest([Token(Kind.INT, 42), Token(Kind.INT, 1)], Fnv128).hex() == (
        "0fcc339bcc03b2d67d97d0e2fa60bd41"
    )