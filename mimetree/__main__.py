"""Entry point for inspecting messages from the command line.

Usage::

    python -m mimetree tree FILE        # part tree, one line per part
    python -m mimetree headers FILE     # header block in order
    python -m mimetree addresses FILE   # parsed address headers
"""

from __future__ import annotations

import sys
from pathlib import Path

import structlog

from .config import MimeConfig
from .errors import MimeError
from .logging import setup_logging
from .message import Message
from .normalize import AddressHeader

COMMANDS = ("tree", "headers", "addresses")

logger = structlog.get_logger()


def _print_tree(msg: Message) -> None:
    for part in msg.root.iter_parts():
        flags = []
        if part.is_attachment():
            flags.append(f"attachment={part.filename() or '-'}")
        if part.is_text():
            flags.append(f"chars={len(part.text or '')}")
        print(part.content_type, *flags)


def _print_headers(msg: Message) -> None:
    for key, value in msg.headers.items():
        print(f"{key}: {value}")


def _print_addresses(msg: Message) -> None:
    for member in AddressHeader:
        for address in msg.addresses(member.value):
            print(f"{member.value}: {address}")


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 2 or args[0] not in COMMANDS:
        print("Usage: python -m mimetree <tree|headers|addresses> FILE", file=sys.stderr)
        return 1

    config = MimeConfig()
    setup_logging(config)
    command, path = args

    try:
        with Message.parse(Path(path).read_bytes(), config) as msg:
            if command == "tree":
                _print_tree(msg)
            elif command == "headers":
                _print_headers(msg)
            else:
                _print_addresses(msg)
    except (OSError, MimeError) as exc:
        logger.error("inspect_failed", path=path, error=str(exc))
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
