"""Error codes and the exception raised by every torrentinfo entry point.

Decoding and extraction stop at the first violation.  Enclosing frames
never catch-and-replace an error; they only prepend the dictionary key or
list index they were processing, so ``.code`` always names the original
failure and ``.path`` says where in the tree it happened.
"""

from __future__ import annotations

from typing import List, Optional, Union

# ── Error codes ──────────────────────────────────────────────
# Decoder-level failures.
ERR_EOF: str = "ERR_EOF"                    # input exhausted mid-token / mid-value
ERR_TOKEN: str = "ERR_TOKEN"                # malformed integer, length prefix, marker
ERR_UNTERMINATED: str = "ERR_UNTERMINATED"  # list/dict never reached its 'e'
ERR_UNEXPECTED: str = "ERR_UNEXPECTED"      # wrong value kind for the position
ERR_LIMIT_DEPTH: str = "ERR_LIMIT_DEPTH"    # nesting exceeds MAX_DEPTH

# Extractor-level failures.
ERR_MISSING: str = "ERR_MISSING"            # required key absent
ERR_FIELD_TYPE: str = "ERR_FIELD_TYPE"      # key present with the wrong kind
ERR_FIELD_VALUE: str = "ERR_FIELD_VALUE"    # right kind, unusable value
ERR_UTF8: str = "ERR_UTF8"                  # text field is not valid UTF-8
ERR_PIECES: str = "ERR_PIECES"              # pieces length not a multiple of 20

ALL_CODES: List[str] = [
    ERR_EOF,
    ERR_TOKEN,
    ERR_UNTERMINATED,
    ERR_UNEXPECTED,
    ERR_LIMIT_DEPTH,
    ERR_MISSING,
    ERR_FIELD_TYPE,
    ERR_FIELD_VALUE,
    ERR_UTF8,
    ERR_PIECES,
]

PathItem = Union[str, int]


class TorrentError(Exception):
    """Raised for any decode or validation failure.

    ``.code`` is one of the ERR_* strings above, ``.offset`` is the byte
    offset of the violation when the decoder knows it, and ``.path`` lists
    the dictionary keys (str) and list indexes (int) leading from the root
    value to the failing one.
    """

    def __init__(self, code: str, msg: str = "",
                 offset: Optional[int] = None) -> None:
        super().__init__(msg or code)
        self.code = code
        self.msg = msg or code
        self.offset = offset
        self.path: List[PathItem] = []

    def within(self, item: PathItem) -> "TorrentError":
        """Record that the error happened under ``item`` and return self."""
        self.path.insert(0, item)
        return self

    @property
    def location(self) -> str:
        """Dotted rendering of ``.path``, e.g. ``info.files[2].path``."""
        out = ""
        for item in self.path:
            if isinstance(item, int):
                out += "[{}]".format(item)
            elif out:
                out += "." + item
            else:
                out = item
        return out

    def __str__(self) -> str:
        text = self.msg
        if self.path:
            text = "{}: {}".format(self.location, text)
        if self.offset is not None:
            text += " (at byte {})".format(self.offset)
        return text
