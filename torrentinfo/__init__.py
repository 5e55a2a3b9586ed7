"""torrentinfo: bencode decoding and torrent metainfo extraction.

Decode a bencoded buffer into a span-annotated value tree, then validate
it into a typed TorrentFile record.

Quick start:
    >>> from torrentinfo import decode
    >>> decode(b"d3:cow3:moo4:spam4:eggse").to_python()
    {'cow': b'moo', 'spam': b'eggs'}
    >>> decode(b"l4:spam4:eggse").value[1].span
    Span(start=7, end=13)

Every failure raises TorrentError with a stable ``.code``:
    >>> try:
    ...     decode(b"i03e")
    ... except TorrentError as e:
    ...     print(e.code)
    ERR_TOKEN
"""

from __future__ import annotations

from ._constants import DIGEST_SIZE, INT64_MAX, INT64_MIN, MAX_DEPTH
from ._decoder import (
    BBytes,
    BDict,
    BInteger,
    BList,
    BValue,
    Decoder,
    Span,
    decode,
    to_python,
)
from ._errors import (
    ERR_EOF,
    ERR_FIELD_TYPE,
    ERR_FIELD_VALUE,
    ERR_LIMIT_DEPTH,
    ERR_MISSING,
    ERR_PIECES,
    ERR_TOKEN,
    ERR_UNEXPECTED,
    ERR_UNTERMINATED,
    ERR_UTF8,
    TorrentError,
)
from ._metainfo import (
    FileEntry,
    Info,
    PieceTable,
    TorrentFile,
    info_from_value,
    parse_torrent,
    torrent_from_value,
)
from ._tokenizer import Token, Tokenizer, tokenize

__version__ = "0.1.0"

__all__ = [
    # Decoding
    "decode",
    "to_python",
    "tokenize",
    "Decoder",
    "Tokenizer",
    "Token",
    "Span",
    "BValue",
    "BInteger",
    "BBytes",
    "BList",
    "BDict",
    # Metainfo
    "parse_torrent",
    "torrent_from_value",
    "info_from_value",
    "TorrentFile",
    "Info",
    "FileEntry",
    "PieceTable",
    # Limits
    "DIGEST_SIZE",
    "INT64_MAX",
    "INT64_MIN",
    "MAX_DEPTH",
    # Exception
    "TorrentError",
    # Error codes
    "ERR_EOF",
    "ERR_TOKEN",
    "ERR_UNTERMINATED",
    "ERR_UNEXPECTED",
    "ERR_LIMIT_DEPTH",
    "ERR_MISSING",
    "ERR_FIELD_TYPE",
    "ERR_FIELD_VALUE",
    "ERR_UTF8",
    "ERR_PIECES",
]
