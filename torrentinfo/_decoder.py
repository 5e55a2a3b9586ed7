"""Bencode decoder: tokens in, span-annotated value tree out.

The tree has four node types, one per bencode production:

    BInteger   signed 64-bit integer
    BBytes     raw byte string (never decoded as text here)
    BList      ordered tuple of nodes
    BDict      text key -> node

Every node carries the half-open byte range ``[start, end)`` it was read
from, framing included ('i'/'e', the length prefix, 'l'/'d' and the
closing 'e').  The decoder checks structure only; it has no idea what a
torrent looks like.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ._constants import MAX_DEPTH
from ._errors import (
    ERR_LIMIT_DEPTH,
    ERR_UNEXPECTED,
    ERR_UNTERMINATED,
    ERR_UTF8,
    TorrentError,
)
from ._tokenizer import BYTES, CLOSE, DICT, INTEGER, LIST, Token, Tokenizer


@dataclass(frozen=True)
class Span:
    start: int
    end: int

    def contains(self, other: "Span") -> bool:
        return self.start <= other.start and other.end <= self.end


@dataclass(frozen=True)
class BInteger:
    value: int
    span: Span
    kind = "integer"

    def to_python(self) -> int:
        return self.value


@dataclass(frozen=True)
class BBytes:
    value: bytes
    span: Span
    kind = "bytes"

    def to_python(self) -> bytes:
        return self.value


@dataclass(frozen=True)
class BList:
    value: Tuple["BValue", ...]
    span: Span
    kind = "list"

    def __len__(self) -> int:
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def to_python(self) -> list:
        return [item.to_python() for item in self.value]


@dataclass(frozen=True)
class BDict:
    value: Mapping[str, "BValue"]
    span: Span
    kind = "dict"

    def __hash__(self) -> int:
        return hash((frozenset(self.value.items()), self.span))

    def get(self, key: str) -> Optional["BValue"]:
        return self.value.get(key)

    def to_python(self) -> dict:
        return {k: v.to_python() for k, v in self.value.items()}


BValue = Union[BInteger, BBytes, BList, BDict]


class Decoder:
    """Recursive-descent decoder over a single buffer.

    One Decoder owns one Tokenizer (and therefore one cursor).  Nothing
    is shared between instances, so separate decodes never interfere.
    """

    def __init__(self, data: bytes, max_depth: int = MAX_DEPTH) -> None:
        self.tokens = Tokenizer(data)
        # Each nesting level costs two frames; a third of the recursion
        # limit leaves room for the caller's own stack.
        self.max_depth = min(max_depth, sys.getrecursionlimit() // 3)

    @property
    def pos(self) -> int:
        return self.tokens.pos

    def decode(self) -> BValue:
        """Decode one value starting at the cursor; leave cursor after it."""
        return self._value(self.tokens.next(), 0)

    def _value(self, tok: Token, depth: int) -> BValue:
        if tok.kind == INTEGER:
            return BInteger(tok.value, Span(tok.start, tok.end))
        if tok.kind == BYTES:
            return BBytes(tok.value, Span(tok.start, tok.end))
        if tok.kind == LIST:
            return self._list(tok, depth + 1)
        if tok.kind == DICT:
            return self._dict(tok, depth + 1)
        # A stray 'e' where a value belongs.
        raise TorrentError(ERR_UNEXPECTED, "unexpected end marker", tok.start)

    def _expect_more(self, opener: Token, what: str) -> None:
        """Fail if input ends while ``opener`` is still open.

        Running out of input exactly at a token boundary means the
        container was never closed; running out inside a token is the
        tokenizer's ERR_EOF and passes through untouched.
        """
        if self.tokens.at_end():
            raise TorrentError(
                ERR_UNTERMINATED,
                "{} opened here is never terminated".format(what),
                opener.start)

    def _check_depth(self, opener: Token, depth: int) -> None:
        if depth > self.max_depth:
            raise TorrentError(
                ERR_LIMIT_DEPTH,
                "nesting exceeds {} levels".format(self.max_depth),
                opener.start)

    def _list(self, opener: Token, depth: int) -> BList:
        self._check_depth(opener, depth)
        items = []
        while True:
            self._expect_more(opener, "list")
            try:
                tok = self.tokens.next()
                if tok.kind == CLOSE:
                    return BList(tuple(items), Span(opener.start, tok.end))
                items.append(self._value(tok, depth))
            except TorrentError as e:
                raise e.within(len(items))

    def _dict(self, opener: Token, depth: int) -> BDict:
        self._check_depth(opener, depth)
        entries: Dict[str, BValue] = {}
        while True:
            self._expect_more(opener, "dictionary")
            tok = self.tokens.next()
            if tok.kind == CLOSE:
                return BDict(MappingProxyType(entries),
                             Span(opener.start, tok.end))
            if tok.kind != BYTES:
                raise TorrentError(
                    ERR_UNEXPECTED,
                    "dictionary keys must be byte strings, got {}".format(tok.kind),
                    tok.start)
            try:
                key = tok.value.decode("utf-8")
            except UnicodeDecodeError:
                raise TorrentError(
                    ERR_UTF8, "dictionary key is not valid UTF-8", tok.start)
            self._expect_more(opener, "dictionary")
            try:
                # Last occurrence of a repeated key wins.
                entries[key] = self._value(self.tokens.next(), depth)
            except TorrentError as e:
                raise e.within(key)


def decode(data: bytes, max_depth: int = MAX_DEPTH) -> BValue:
    """Decode a complete buffer holding exactly one bencoded value."""
    dec = Decoder(data, max_depth)
    val = dec.decode()
    if dec.pos != len(dec.tokens.data):
        raise TorrentError(
            ERR_UNEXPECTED, "trailing bytes after root value", dec.pos)
    return val


def to_python(data: bytes) -> Any:
    """Decode and strip spans: int / bytes / list / dict."""
    return decode(data).to_python()
