"""Typed token streams: binary encoding, JSON decoding, ordering and structural hashing."""

__version__ = "0.1.0"

__all__ = ["kinds", "errors", "streams", "encode", "decode", "compare", "hashing", "encoded_len"]