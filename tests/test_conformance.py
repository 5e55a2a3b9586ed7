"""Decode conformance suite.

Runs every vector in conformance/decode_vectors.json through decode() and
compares the root value and span, or the error code.  Point
TORRENTINFO_VECTORS at another file to run a different vector set.
"""

from __future__ import annotations

import base64
import json
import os
import sys
import unittest
from typing import Any, Dict, List

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from torrentinfo import TorrentError, decode  # noqa: E402
from torrentinfo._errors import ALL_CODES  # noqa: E402

VECTORS_FILE = os.environ.get("TORRENTINFO_VECTORS") or os.path.join(
    os.path.dirname(__file__), "..", "conformance", "decode_vectors.json")


def _load_vectors() -> List[dict]:
    with open(VECTORS_FILE, "r", encoding="utf-8") as f:
        return json.load(f)["vectors"]


def _jsonable(val: Any) -> Any:
    """Map decoded Python values onto the vector file's JSON shapes."""
    if isinstance(val, bytes):
        return val.decode("latin-1")
    if isinstance(val, list):
        return [_jsonable(v) for v in val]
    if isinstance(val, dict):
        return {k: _jsonable(v) for k, v in val.items()}
    return val


def _run_vector(vec: dict) -> Dict[str, Any]:
    raw = base64.b64decode(vec["input_b64"])
    try:
        root = decode(raw)
    except TorrentError as e:
        return {"err": e.code}
    return {"value": _jsonable(root.to_python()),
            "span": [root.span.start, root.span.end]}


class ConformanceTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.vectors = _load_vectors()

    def test_vector_file_present(self):
        self.assertTrue(self.vectors)

    def test_test_ids_unique(self):
        ids = [vec["test_id"] for vec in self.vectors]
        self.assertEqual(len(ids), len(set(ids)))

    def test_expected_codes_are_known(self):
        for vec in self.vectors:
            err = vec["expect"].get("err")
            if err is not None:
                self.assertIn(err, ALL_CODES, vec["test_id"])

    def test_vectors(self):
        for vec in self.vectors:
            with self.subTest(test_id=vec["test_id"]):
                self.assertEqual(_run_vector(vec), vec["expect"])


if __name__ == "__main__":
    unittest.main()
