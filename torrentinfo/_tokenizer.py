"""Bencode tokenizer.

Grammar (byte-oriented, not Unicode-aware):

    Integer   := "i" ["-"] Digits "e"     no leading zero unless "0", no "-0"
    ByteStr   := Digits ":" <Digits raw bytes>
    ListStart := "l"
    DictStart := "d"
    End       := "e"

The tokenizer knows nothing about nesting.  It owns a single cursor that
only moves forward, by exactly the bytes of the token just returned, and
it never reads past the end of the buffer: every bounds violation turns
into ERR_EOF instead of a short slice.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from ._constants import (
    COLON,
    DICT_START,
    END,
    INT64_MAX,
    INT64_MIN,
    INT_START,
    LIST_START,
    MINUS,
    NINE,
    ZERO,
)
from ._errors import ERR_EOF, ERR_TOKEN, TorrentError

# int64 needs at most 19 digits; anything longer is out of range.
MAX_DIGITS: int = 20

# Token kinds.
INTEGER: str = "integer"
BYTES: str = "bytes"
LIST: str = "list"
DICT: str = "dict"
CLOSE: str = "end"

_MARKERS = {
    LIST_START: LIST,
    DICT_START: DICT,
    END: CLOSE,
}


@dataclass(frozen=True)
class Token:
    """One scanned token and the half-open byte range it came from."""

    kind: str
    start: int
    end: int
    value: Union[int, bytes, None] = None


def _is_digit(b: int) -> bool:
    return ZERO <= b <= NINE


class Tokenizer:
    """Yield bencode tokens from an in-memory buffer."""

    def __init__(self, data: bytes, pos: int = 0) -> None:
        self.data = bytes(data)
        self.pos = pos

    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def next(self) -> Token:
        """Consume and return the token at the cursor."""
        if self.at_end():
            raise TorrentError(ERR_EOF, "no more input", self.pos)
        b = self.data[self.pos]
        if b == INT_START:
            return self._next_int()
        if _is_digit(b):
            return self._next_bytes()
        kind = _MARKERS.get(b)
        if kind is None:
            raise TorrentError(
                ERR_TOKEN, "invalid token 0x{:02x}".format(b), self.pos)
        start = self.pos
        self.pos += 1
        return Token(kind, start, self.pos)

    # ── Productions ───────────────────────────────────────────

    def _scan_digits(self, off: int) -> Tuple[int, int]:
        """Scan a run of ASCII digits starting at ``off``.

        Returns (value, offset just past the run).  Rejects an empty run
        and a leading zero on anything but the single digit "0".  Runs
        longer than MAX_DIGITS are returned as -1 so callers can report
        overflow without handing int() an unbounded string.
        """
        buf = self.data
        i = off
        while i < len(buf) and _is_digit(buf[i]):
            i += 1
        if i == off:
            if i >= len(buf):
                raise TorrentError(ERR_EOF, "input ends inside a number", i)
            raise TorrentError(
                ERR_TOKEN, "expected digit, got 0x{:02x}".format(buf[i]), i)
        if buf[off] == ZERO and i - off > 1:
            raise TorrentError(ERR_TOKEN, "leading zero in number", off)
        if i - off > MAX_DIGITS:
            return -1, i
        return int(buf[off:i]), i

    def _next_int(self) -> Token:
        buf = self.data
        start = self.pos
        off = start + 1  # skip 'i'
        negative = False
        if off < len(buf) and buf[off] == MINUS:
            negative = True
            off += 1
        magnitude, off = self._scan_digits(off)
        if magnitude < 0:
            raise TorrentError(ERR_TOKEN, "integer outside int64 range", start)
        if off >= len(buf):
            raise TorrentError(ERR_EOF, "unterminated integer", start)
        if buf[off] != END:
            raise TorrentError(
                ERR_TOKEN,
                "non-digit 0x{:02x} in integer".format(buf[off]), off)
        if negative and magnitude == 0:
            raise TorrentError(ERR_TOKEN, "negative zero", start)
        value = -magnitude if negative else magnitude
        if value < INT64_MIN or value > INT64_MAX:
            raise TorrentError(ERR_TOKEN, "integer outside int64 range", start)
        self.pos = off + 1
        return Token(INTEGER, start, self.pos, value)

    def _next_bytes(self) -> Token:
        buf = self.data
        start = self.pos
        length, off = self._scan_digits(start)
        if length < 0:
            raise TorrentError(ERR_EOF, "string length exceeds input", start)
        if off >= len(buf):
            raise TorrentError(ERR_EOF, "input ends inside string length", off)
        if buf[off] != COLON:
            raise TorrentError(
                ERR_TOKEN,
                "expected ':' after string length, got 0x{:02x}".format(buf[off]),
                off)
        off += 1
        if off + length > len(buf):
            raise TorrentError(
                ERR_EOF,
                "string declares {} bytes, only {} remain".format(
                    length, len(buf) - off),
                start)
        self.pos = off + length
        return Token(BYTES, start, self.pos, buf[off:self.pos])


def tokenize(data: bytes) -> Tuple[Token, ...]:
    """Scan the whole buffer into a flat token tuple (no nesting checks)."""
    tok = Tokenizer(data)
    out = []
    while not tok.at_end():
        out.append(tok.next())
    return tuple(out)

