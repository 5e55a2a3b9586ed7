#!/usr/bin/env python3
# tools/fuzz_runner.py
#
# Mutation fuzzing for the bencode decoder and metainfo extractor.
#
# Each round builds a random bencode tree, encodes it, and then:
#   A) decodes the pristine bytes and checks value, root span and child spans,
#      and cross-checks the value against bencodepy.decode
#   B) decodes a mutated copy (bit flip, truncation, splice, byte insert)
#      and checks that the only exception ever raised is TorrentError
#   C) runs parse_torrent on mutated metainfo and applies the same check
#
# Any other outcome prints a minimal repro payload and exits non-zero.

import os, sys, base64, random
from typing import Any, Callable, List

import bencodepy

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from torrentinfo import BDict, BList, TorrentError, decode, parse_torrent

SEED = int(os.environ.get("TORRENTINFO_SEED", "4242"))
ROUNDS = int(os.environ.get("TORRENTINFO_FUZZ_ROUNDS", "5000"))

random.seed(SEED)

def b64(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def fail(label: str, raw: bytes, detail: str) -> None:
    print("FAILURE:", label)
    print("DETAIL:", detail)
    print("INPUT_B64:", b64(raw)[:4000])
    raise SystemExit(1)

# bencodepy decodes dictionary keys to bytes; ours are text.
def with_byte_keys(val: Any) -> Any:
    if isinstance(val, dict):
        return {k.encode("utf-8"): with_byte_keys(v) for k, v in val.items()}
    if isinstance(val, list):
        return [with_byte_keys(v) for v in val]
    return val

# --- generators ---

def rand_key() -> str:
    n = random.randint(0, 8)
    return "".join(chr(random.randint(0x20, 0x7E)) for _ in range(n))

def rand_tree(depth: int = 0) -> Any:
    r = random.random()
    if depth > 5 or r < 0.35:
        if random.random() < 0.5:
            return random.randint(-(2**63), 2**63 - 1)
        return bytes(random.getrandbits(8) for _ in range(random.randint(0, 24)))
    if r < 0.65:
        return {rand_key(): rand_tree(depth + 1) for _ in range(random.randint(0, 5))}
    return [rand_tree(depth + 1) for _ in range(random.randint(0, 5))]

def rand_metainfo() -> Any:
    info = {
        "name": b"fuzz",
        "piece length": random.choice([16384, 262144, 0, -1]),
        "pieces": bytes(random.getrandbits(8) for _ in range(20 * random.randint(0, 4))),
    }
    if random.random() < 0.5:
        info["length"] = random.randint(0, 10**9)
    else:
        info["files"] = [{"length": random.randint(0, 999),
                          "path": [b"d", b"f%d" % i]} for i in range(random.randint(1, 3))]
    return {"announce": b"http://t.example/announce", "info": info}

# --- mutators ---

def flip(raw: bytes) -> bytes:
    if not raw:
        return raw
    i = random.randrange(len(raw))
    return raw[:i] + bytes([raw[i] ^ (1 << random.randrange(8))]) + raw[i + 1:]

def truncate(raw: bytes) -> bytes:
    return raw[:random.randrange(len(raw) + 1)]

def insert(raw: bytes) -> bytes:
    i = random.randrange(len(raw) + 1)
    return raw[:i] + bytes([random.choice(b"ilde:-0123456789x")]) + raw[i:]

def splice(raw: bytes) -> bytes:
    if len(raw) < 2:
        return raw
    i, j = sorted(random.sample(range(len(raw)), 2))
    return raw[:i] + raw[j:]

MUTATORS: List[Callable[[bytes], bytes]] = [flip, truncate, insert, splice]

# --- checks ---

def check_spans(node: Any, raw: bytes) -> None:
    children = []
    if isinstance(node, BList):
        children = list(node.value)
    elif isinstance(node, BDict):
        children = sorted(node.value.values(), key=lambda v: v.span.start)
    prev = node.span.start
    for child in children:
        if not node.span.contains(child.span) or child.span.start < prev:
            fail("A spans", raw, "child {} inside {}".format(child.span, node.span))
        prev = child.span.end
        check_spans(child, raw)

def survives(label: str, fn: Callable[[bytes], Any], raw: bytes) -> None:
    try:
        fn(raw)
    except TorrentError:
        pass
    except Exception as e:  # anything else is a decoder bug
        fail(label, raw, "{}: {}".format(type(e).__name__, e))

def main() -> int:
    for _ in range(ROUNDS):
        r = random.random()

        # A) pristine encodings decode exactly
        if r < 0.30:
            tree = rand_tree()
            raw = bencodepy.encode(tree)
            root = decode(raw)
            if (root.span.start, root.span.end) != (0, len(raw)):
                fail("A root span", raw, str(root.span))
            if root.to_python() != tree:
                fail("A value", raw, "decoded tree differs from source")
            if with_byte_keys(root.to_python()) != bencodepy.decode(raw):
                fail("A bencodepy", raw, "decoded tree differs from bencodepy.decode")
            check_spans(root, raw)
            continue

        # B) mutated encodings never escape TorrentError
        if r < 0.75:
            raw = random.choice(MUTATORS)(bencodepy.encode(rand_tree()))
            survives("B decode", decode, raw)
            continue

        # C) mutated metainfo through the extractor
        raw = bencodepy.encode(rand_metainfo())
        if random.random() < 0.8:
            raw = random.choice(MUTATORS)(raw)
        survives("C parse_torrent", parse_torrent, raw)

    print(f"OK: fuzz rounds={ROUNDS} seed={SEED} (no failures)")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
