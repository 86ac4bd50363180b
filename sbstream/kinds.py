"""Token kinds and their wire values."""

from __future__ import annotations

from enum import IntEnum


class Kind(IntEnum):
    """The kind of a token; the numeric value is the byte written on the wire.

    Kinds are ordered, and that order is the order used when comparing
    token streams.
    """

    INVALID = 0
    MIN = 1

    ARRAY_END = 10
    OBJECT_END = 20
    MAP_END = 25
    TUPLE_END = 27

    NIL = 30
    BOOL = 40
    STRING_END = 49
    STRING = 50
    STRING_BEGIN = 51
    BYTES_END = 54
    BYTES = 55
    BYTES_BEGIN = 56

    INT = 60
    INT8 = 70
    INT16 = 80
    INT32 = 90
    INT64 = 100

    UINT = 110
    UINT8 = 120
    UINT16 = 130
    UINT32 = 140
    UINT64 = 150

    FLOAT32 = 160
    FLOAT64 = 170
    NAN = 175

    ARRAY = 180
    OBJECT = 190
    MAP = 200
    TUPLE = 210

    TYPE_NAME = 230
    LITERAL = 240
    POINTER = 245

    REF = 251

    MAX = 0xFF

    def is_end(self) -> bool:
        """Whether this kind closes an array, object, map or tuple."""
        return self in _END_KINDS

    def is_begin(self) -> bool:
        """Whether this kind opens an array, object, map or tuple."""
        return self in _BEGIN_KINDS

    def __str__(self) -> str:
        special = _SPECIAL_LABELS.get(self.name)
        if special is not None:
            return special
        return "Kind" + "".join(part.capitalize() for part in self.name.split("_"))

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


_SPECIAL_LABELS = {"NAN": "KindNaN"}

_END_KINDS = frozenset(
    {Kind.ARRAY_END, Kind.OBJECT_END, Kind.MAP_END, Kind.TUPLE_END}
)

_BEGIN_KINDS = frozenset({Kind.ARRAY, Kind.OBJECT, Kind.MAP, Kind.TUPLE})