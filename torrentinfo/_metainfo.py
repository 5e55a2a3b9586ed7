"""Torrent metainfo extraction: decoded tree -> typed descriptor.

Layout of a metainfo dictionary:

    announce        text, required
    created by      text, optional
    creation date   integer, optional (stored verbatim)
    info            dictionary, required
        name          text, required
        piece length  integer > 0, required
        pieces        bytes, len % 20 == 0, required
        length        integer, optional (single-file torrents)
        files         non-empty list, optional (multi-file torrents)
            length      integer, required
            path        non-empty list of text, required

Every field is checked on its own.  Whether ``length`` and ``files``
are mutually exclusive is only enforced with ``strict=True``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from ._constants import DIGEST_SIZE, MAX_DEPTH
from ._decoder import BBytes, BDict, BInteger, BList, BValue, decode
from ._errors import (
    ERR_FIELD_TYPE,
    ERR_FIELD_VALUE,
    ERR_MISSING,
    ERR_PIECES,
    ERR_UNEXPECTED,
    ERR_UTF8,
    TorrentError,
)


@dataclass(frozen=True)
class PieceTable:
    """The "pieces" string cut into opaque 20-byte digests."""

    digests: Tuple[bytes, ...]

    @classmethod
    def from_bytes(cls, raw: bytes) -> "PieceTable":
        if len(raw) % DIGEST_SIZE:
            raise TorrentError(
                ERR_PIECES,
                "pieces length {} is not a multiple of {}".format(
                    len(raw), DIGEST_SIZE))
        return cls(tuple(raw[i:i + DIGEST_SIZE]
                         for i in range(0, len(raw), DIGEST_SIZE)))

    def __len__(self) -> int:
        return len(self.digests)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.digests)

    def __getitem__(self, idx: int) -> bytes:
        return self.digests[idx]

    def hex(self) -> List[str]:
        return [d.hex().upper() for d in self.digests]


@dataclass(frozen=True)
class FileEntry:
    length: int
    path: Tuple[str, ...]


@dataclass(frozen=True)
class Info:
    name: str
    piece_length: int
    pieces: PieceTable
    length: Optional[int] = None
    files: Optional[Tuple[FileEntry, ...]] = None

    @property
    def is_multi_file(self) -> bool:
        return self.files is not None

    @property
    def total_length(self) -> Optional[int]:
        if self.files is not None:
            return sum(f.length for f in self.files)
        return self.length


@dataclass(frozen=True)
class TorrentFile:
    announce: str
    info: Info
    created_by: Optional[str] = None
    creation_date: Optional[int] = None


# ── Field helpers ─────────────────────────────────────────────
# Each helper raises with the key already recorded in the error path,
# so callers never have to wrap them.

def _lookup(d: BDict, key: str, required: bool) -> Optional[BValue]:
    val = d.get(key)
    if val is None and required:
        raise TorrentError(ERR_MISSING, "missing required key '{}'".format(key))
    return val


def _wrong_type(key: str, want: str, got: BValue) -> TorrentError:
    return TorrentError(
        ERR_FIELD_TYPE,
        "expected {}, got {}".format(want, got.kind),
        got.span.start).within(key)


def _as_text(val: BValue, key: str) -> str:
    if not isinstance(val, BBytes):
        raise _wrong_type(key, "string", val)
    try:
        return val.value.decode("utf-8")
    except UnicodeDecodeError:
        raise TorrentError(
            ERR_UTF8, "not valid UTF-8", val.span.start).within(key)


def _text(d: BDict, key: str) -> str:
    return _as_text(_lookup(d, key, True), key)


def _optional_text(d: BDict, key: str) -> Optional[str]:
    val = _lookup(d, key, False)
    return None if val is None else _as_text(val, key)


def _integer(d: BDict, key: str) -> int:
    val = _lookup(d, key, True)
    if not isinstance(val, BInteger):
        raise _wrong_type(key, "integer", val)
    return val.value


def _optional_integer(d: BDict, key: str) -> Optional[int]:
    val = _lookup(d, key, False)
    if val is None:
        return None
    if not isinstance(val, BInteger):
        raise _wrong_type(key, "integer", val)
    return val.value


def _dict(d: BDict, key: str) -> BDict:
    val = _lookup(d, key, True)
    if not isinstance(val, BDict):
        raise _wrong_type(key, "dictionary", val)
    return val


def _nonempty_list(d: BDict, key: str, required: bool) -> Optional[BList]:
    val = _lookup(d, key, required)
    if val is None:
        return None
    if not isinstance(val, BList):
        raise _wrong_type(key, "list", val)
    if not len(val):
        raise TorrentError(
            ERR_FIELD_VALUE, "must not be empty", val.span.start).within(key)
    return val


# ── Records ───────────────────────────────────────────────────

def file_entry_from_value(val: BValue) -> FileEntry:
    if not isinstance(val, BDict):
        raise TorrentError(
            ERR_FIELD_TYPE,
            "expected dictionary for file, got {}".format(val.kind),
            val.span.start)
    length = _integer(val, "length")
    segments = _nonempty_list(val, "path", True)
    path = []
    for idx, seg in enumerate(segments):
        try:
            path.append(_as_text(seg, "path"))
        except TorrentError as e:
            # _as_text recorded "path"; slot the index in after it.
            e.path.insert(1, idx)
            raise
    return FileEntry(length=length, path=tuple(path))


def info_from_value(val: BValue, strict: bool = False) -> Info:
    if not isinstance(val, BDict):
        raise TorrentError(
            ERR_FIELD_TYPE,
            "expected dictionary for info, got {}".format(val.kind),
            val.span.start)

    name = _text(val, "name")

    piece_length = _integer(val, "piece length")
    if piece_length <= 0:
        raise TorrentError(
            ERR_FIELD_VALUE,
            "must be positive, got {}".format(piece_length),
            val.get("piece length").span.start).within("piece length")

    raw_pieces = _lookup(val, "pieces", True)
    if not isinstance(raw_pieces, BBytes):
        raise _wrong_type("pieces", "string", raw_pieces)
    try:
        pieces = PieceTable.from_bytes(raw_pieces.value)
    except TorrentError as e:
        e.offset = raw_pieces.span.start
        raise e.within("pieces")

    length = _optional_integer(val, "length")

    files = None
    entries = _nonempty_list(val, "files", False)
    if entries is not None:
        out = []
        for idx, item in enumerate(entries):
            try:
                out.append(file_entry_from_value(item))
            except TorrentError as e:
                raise e.within(idx).within("files")
        files = tuple(out)

    if strict and (files is None) == (length is None):
        raise TorrentError(
            ERR_FIELD_VALUE,
            "exactly one of 'length' and 'files' must be present",
            val.span.start)

    return Info(name=name, piece_length=piece_length, pieces=pieces,
                length=length, files=files)


def torrent_from_value(val: BValue, strict: bool = False) -> TorrentFile:
    """Validate a decoded tree and build the TorrentFile it describes."""
    if not isinstance(val, BDict):
        raise TorrentError(
            ERR_UNEXPECTED,
            "expected dictionary at top level, got {}".format(val.kind),
            val.span.start)

    announce = _text(val, "announce")
    created_by = _optional_text(val, "created by")
    creation_date = _optional_integer(val, "creation date")
    info_val = _dict(val, "info")
    try:
        info = info_from_value(info_val, strict)
    except TorrentError as e:
        raise e.within("info")

    return TorrentFile(announce=announce, info=info, created_by=created_by,
                       creation_date=creation_date)


def parse_torrent(data: bytes, strict: bool = False,
                  max_depth: int = MAX_DEPTH) -> TorrentFile:
    """Decode ``data`` and extract its TorrentFile in one pass."""
    return torrent_from_value(decode(data, max_depth), strict)
