# sbstream

`sbstream` works with streams of typed tokens. A value is written as a flat
sequence of tokens: an array is an array token, then its elements, then an
array-end token. Token sequences can be written to a compact binary form,
read back, put in a stable total order, and hashed structurally.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Concepts

- `sbstream.kinds.Kind` is an `IntEnum` of token kinds. Its number is the
  byte written on the wire, and the order of kinds is the order used when
  comparing streams. `Kind.is_begin()` and `Kind.is_end()` tell whether a
  kind opens or closes an array, object, map or tuple.
- `sbstream.streams.Token` is a dataclass with a `kind` and an optional
  `value`. `Token()` is invalid and marks the end of a stream for a sink.
  `reset()`, `valid()` and `invalid()` work on that state.
- A *stream* is any iterable of tokens.
- A *sink* is a callable that takes one token and returns the sink for the
  next token, or `None` when it needs no more.

## Example

```python
import hashlib
import io

from sbstream.compare import compare
from sbstream.decode import decode
from sbstream.encode import encode
from sbstream.hashing import digest
from sbstream.kinds import Kind
from sbstream.streams import Token, copy

tokens = [
    Token(Kind.ARRAY),
    Token(Kind.INT, 1),
    Token(Kind.STRING, "two"),
    Token(Kind.ARRAY_END),
]

buf = io.BytesIO()
copy(tokens, encode(buf))

decoded = list(decode(buf.getvalue()))
assert compare(decoded, tokens) == 0

print(digest(tokens, hashlib.sha256).hex())
```

## Stream building blocks

In `sbstream.streams`:

- `copy(stream, *sinks)` feeds a stream to every sink. Tokens are pulled
  lazily and nothing more is read once every sink has finished. Sinks that
  are still running when the stream ends receive end tokens.
- `discard` is a sink that ignores tokens until the stream ends.
- `feed(sink, tokens)` pushes tokens into a sink without an end token and
  returns the sink that comes next.
- `concat_streams(*streams)` yields the tokens of each stream in turn.
  `concat_sinks(*sinks)` hands tokens to each sink in turn, moving on to the
  next one as each finishes.
- `alt_sink(*sinks)` runs several sinks side by side. A sink that raises is
  dropped. The combination finishes as soon as any sink finishes. If every
  sink fails, the last error is raised.
- `filter_stream(stream, predicate)` and `filter_sink(sink, predicate)` let
  through only the tokens that match. `filter_sink` always passes on the end
  token.
- `deref(stream, get_stream)` replaces each `Kind.REF` token with the stream
  that `get_stream` returns for its bytes. If `get_stream` returns `None`,
  the reference token is passed through unchanged.

## Binary form

Each token is written as its kind byte followed by its value, if it has one:

- Booleans take one byte.
- Numbers are little-endian, with a width fixed by the kind.
- Strings, type names, literals, bytes and references have a length prefix.
  Lengths below 128 use a single byte. Longer lengths use the bitwise
  complement of the varint size, followed by an unsigned varint.
- Strings are UTF-8, with `surrogateescape` for raw bytes.

Modules:

- `sbstream.encode.encode(writer, cont=None)` is a sink that writes tokens to
  a binary file-like object. At the end of the stream it hands over to
  `cont`. `encode_token(token)` returns the bytes of one token. A value that
  does not fit its kind raises `ValueError` or `TypeError`.
- `sbstream.decode.decode(reader)` yields tokens from a binary file-like
  object or from a bytes object.
- `decode_for_compare(reader, step=8)` does the same, but splits each string
  or bytes value into a begin token, then segments of `step`, `2 * step`,
  `4 * step`, … bytes, then an end token.
- `decode_json(reader)` yields tokens for JSON given as text, bytes or a file.
  Numbers become `Kind.LITERAL` tokens that hold their text. Objects become
  object tokens with string keys. Several top-level values separated by
  whitespace are decoded one after another.
- `sbstream.encoded_len.encoded_len(stream)` returns the encoded size of a
  stream without encoding it. `EncodedLen` is the sink form: it adds up into
  `total`, and at the end of the stream it hands over to `cont`.

## Ordering and hashing

- `sbstream.compare.compare(stream1, stream2)` returns -1, 0 or 1. Tokens are
  compared pair by pair, first by kind and then by value. A stream that ends
  first sorts first.
- `compare_bytes(a, b)` compares two encoded buffers directly, without
  building tokens. Numbers are compared by the raw little-endian unsigned
  value of their bytes, and floats as floats.
- `sbstream.hashing.digest(stream, new_state)` returns the digest of the first
  value in the stream. `new_state` can be any constructor for an object that
  has `update` and `digest` methods, such as `hashlib.sha256`. How values are
  hashed:
  - A scalar is hashed as its kind byte followed by its raw value.
  - A compound value is hashed as its kind byte followed by the digests of its
    elements and of its closing token.
  - A reference token stands for the digest it carries, so a value hashes the
    same whether or not its parts have been replaced by references.
- `hash_sink(new_state, fn=None, cont=None)` and
  `hash_compound(new_state, state, fn, cont)` are the sink forms. The optional
  callback `fn(digest, token)` is called with `b""` when a value or sub-value
  starts, and again with its digest when it is complete. A stream that ends
  inside a value raises `UnexpectedEOF`.

## Errors

All errors defined in `sbstream.errors` derive from `SBError`, which records
the byte `offset` of the failure when it is known.

`DecodeError` covers malformed input. Read errors from the underlying file
are also wrapped in it. Its subclasses are:

- `BadTokenKind`
- `StringTooLong`
- `BytesTooLong`
- `BadStringLength`
- `UnexpectedEOF`, which is also an `EOFError`

## What this package does not do

The package does not turn Python objects into tokens or build them back from
tokens. You build streams from `Token` values yourself, or obtain them with
`decode` or `decode_json`. It also has no tree structure for streams, no
search by hash, and no command-line tool.