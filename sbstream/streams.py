"""Tokens, streams of tokens and sinks that consume them.

A stream is any iterable of valid tokens. A sink is a callable that takes
one token and returns the sink that handles the next token, or ``None``
when it needs no more. The end of a stream is signalled to a sink by an
invalid token (``Token()``).
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Optional

from .kinds import Kind


@dataclass
class Token:
    """One element of a token stream."""

    kind: Kind = Kind.INVALID
    value: Any = None

    def reset(self) -> None:
        """Make the token invalid again."""
        self.kind = Kind.INVALID
        self.value = None

    def valid(self) -> bool:
        return self.kind != Kind.INVALID

    def invalid(self) -> bool:
        return self.kind == Kind.INVALID


Sink = Callable[[Token], Any]
Stream = Iterable[Token]


def _valid_tokens(stream: Stream) -> Iterator[Token]:
    return (token for token in stream if token.valid())


def copy(stream: Optional[Stream], *sinks: Optional[Sink]) -> None:
    """Feed the tokens of ``stream`` to every sink until all sinks are done.

    Tokens are pulled lazily: nothing more is read once no sink is left.
    After the stream is exhausted, sinks still running receive end tokens.
    """
    active = [sink for sink in sinks if sink is not None]
    tokens = _valid_tokens(stream) if stream is not None else None
    while active:
        token = None
        if tokens is not None:
            token = next(tokens, None)
            if token is None:
                tokens = None
        if token is None:
            token = Token()
        following = (sink(token) for sink in active)
        active = [sink for sink in following if sink is not None]


def discard(token: Token) -> Optional[Sink]:
    """A sink that ignores every token until the stream ends."""
    if token.invalid():
        return None
    return discard


def feed(sink: Optional[Sink], tokens: Stream) -> Optional[Sink]:
    """Push ``tokens`` into ``sink`` without an end token; return the next sink."""
    for token in _valid_tokens(tokens):
        if sink is None:
            return None
        sink = sink(token)
    return sink


def concat_streams(*streams: Optional[Stream]) -> Iterator[Token]:
    """Yield the tokens of each stream in turn."""
    return itertools.chain.from_iterable(
        _valid_tokens(stream) for stream in streams if stream is not None
    )


def concat_sinks(*sinks: Optional[Sink]) -> Optional[Sink]:
    """A sink that hands tokens to each sink in turn, moving on as each finishes."""
    pending = [sink for sink in sinks if sink is not None]
    if not pending:
        return None

    def sink(token: Token) -> Optional[Sink]:
        nonlocal pending
        following = pending[0](token)
        pending = ([following] if following is not None else []) + pending[1:]
        return sink if pending else None

    return sink


def alt_sink(*sinks: Sink) -> Optional[Sink]:
    """A sink that tries several sinks side by side.

    A sink that raises is dropped. As soon as one sink finishes, the
    combination finishes. When every sink has failed, the last error is
    raised.
    """
    alive = list(sinks)

    def sink(token: Token) -> Optional[Sink]:
        nonlocal alive
        survivors = []
        error: Optional[BaseException] = None
        for current in alive:
            try:
                following = current(token)
            except Exception as exc:
                error = exc
                continue
            if following is None:
                return None
            survivors.append(following)
        alive = survivors
        if not alive:
            if error is not None:
                raise error
            return None
        if len(alive) == 1:
            return alive[0]
        return sink

    return sink


def filter_stream(stream: Stream, predicate: Callable[[Token], bool]) -> Iterator[Token]:
    """Yield only the tokens for which ``predicate`` is true."""
    return (token for token in _valid_tokens(stream) if predicate(token))


def filter_sink(sink: Optional[Sink], predicate: Callable[[Token], bool]) -> Sink:
    """A sink that passes on the end token and tokens matching ``predicate``."""
    target = sink

    def filtered(token: Token) -> Optional[Sink]:
        nonlocal target
        if token.invalid() or predicate(token):
            if target is None:
                return None
            target = target(token)
        if target is None:
            return None
        return filtered

    return filtered


def deref(
    stream: Stream, get_stream: Callable[[bytes], Optional[Stream]]
) -> Iterator[Token]:
    """Replace each reference token with the stream ``get_stream`` returns for it.

    A reference for which ``get_stream`` returns ``None`` is passed through
    unchanged. Tokens of a substituted stream are not dereferenced again.
    """
    for token in _valid_tokens(stream):
        if token.kind != Kind.REF:
            yield token
            continue
        sub_stream = get_stream(token.value)
        if sub_stream is None:
            yield token
        else:
            yield from _valid_tokens(sub_stream)