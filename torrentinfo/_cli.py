"""torrentinfo command-line interface.

Usage:
    python3 -m torrentinfo._cli info --file example.torrent
    python3 -m torrentinfo._cli -dd info -f example.torrent
    cat example.torrent | torrentinfo info
    torrentinfo version
"""

from __future__ import annotations

import argparse
import datetime
import logging
import sys
from typing import List, Optional, TextIO

from . import TorrentError, TorrentFile, __version__, parse_torrent
from ._constants import PIECES_PREVIEW

log = logging.getLogger("torrentinfo")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="torrentinfo",
        description="Decode a .torrent file and print its metainfo",
    )
    parser.add_argument("-d", "--debug", action="count", default=0,
                        help="Turn debugging information on (repeat for more)")
    sub = parser.add_subparsers(dest="command")

    # ── info ──
    info_p = sub.add_parser("info", help="Print information parsed from the torrent file")
    info_p.add_argument("--file", "-f", metavar="FILE",
                        help="The torrent file to parse (default: stdin)")
    info_p.add_argument("--strict", action="store_true",
                        help="Require exactly one of 'length' and 'files'")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _configure_logging(level: int) -> None:
    levels = [logging.WARNING, logging.INFO, logging.DEBUG]
    logging.basicConfig(
        level=levels[min(level, len(levels) - 1)],
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def _read_input(filepath: Optional[str]) -> bytes:
    """Read torrent bytes from a file or stdin."""
    if filepath:
        log.info("Parsing file: %s", filepath)
        with open(filepath, "rb") as f:
            return f.read()
    if sys.stdin.isatty():
        print("torrentinfo: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.buffer.read()


def render(torrent: TorrentFile, out: TextIO) -> None:
    """Write the human-readable summary printed by ``info``."""
    info = torrent.info
    print('announce: "{}"'.format(torrent.announce), file=out)
    if torrent.created_by is not None:
        print('created by: "{}"'.format(torrent.created_by), file=out)
    if torrent.creation_date is not None:
        try:
            when = datetime.datetime.fromtimestamp(
                torrent.creation_date, tz=datetime.timezone.utc).isoformat()
        except (OverflowError, OSError, ValueError):
            when = "out of range"
        print("creation date: {} ({})".format(torrent.creation_date, when), file=out)
    print("info:", file=out)
    print('   name: "{}"'.format(info.name), file=out)
    if info.length is not None:
        print("   length: {}".format(info.length), file=out)
    print("   piece_length: {}".format(info.piece_length), file=out)
    if info.files is not None:
        print("   files:", file=out)
        for entry in info.files:
            print("      - {} [{}]".format("/".join(entry.path), entry.length), file=out)
    print("   pieces:", file=out)
    digests = info.pieces.hex()
    for digest in digests[:PIECES_PREVIEW]:
        print("       - {}".format(digest), file=out)
    if len(digests) > PIECES_PREVIEW:
        print("       - ...more...", file=out)


def _cmd_info(args: argparse.Namespace) -> None:
    raw = _read_input(args.file)
    log.debug("read %d bytes", len(raw))
    torrent = parse_torrent(raw, strict=args.strict)
    log.debug("decoded %d pieces", len(torrent.info.pieces))
    render(torrent, sys.stdout)


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.debug)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"torrentinfo {__version__}")
        return

    try:
        if args.command == "info":
            _cmd_info(args)
    except TorrentError as e:
        print(f"torrentinfo: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except OSError as e:
        print(f"torrentinfo: cannot read input: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
