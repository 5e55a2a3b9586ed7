"""Bencode grammar markers, integer bounds, and decoder limits."""

from __future__ import annotations

# ── Single-byte markers ──────────────────────────────────────
# Compared against ints because indexing a bytes object yields ints.
INT_START: int = ord("i")
LIST_START: int = ord("l")
DICT_START: int = ord("d")
END: int = ord("e")
COLON: int = ord(":")
MINUS: int = ord("-")
ZERO: int = ord("0")
NINE: int = ord("9")

# ── Signed 64-bit integer range ──────────────────────────────
# Python ints are arbitrary-precision, so the tokenizer range-checks.
INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1

# ── Limits ───────────────────────────────────────────────────
# Every container level costs a few Python frames; 256 stays far below
# the default recursion limit.
MAX_DEPTH: int = 256

# Each entry of the "pieces" table is one SHA-1 digest.
DIGEST_SIZE: int = 20

# How many digests the CLI prints before eliding the rest.
PIECES_PREVIEW: int = 10
