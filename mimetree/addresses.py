"""Tolerant RFC 5322 address-list grammar and its serializer.

Parsing never fails on partially malformed input: every candidate
address is judged on its own and malformed ones are dropped, so
``"a <a@a.com> b b@b.com"`` yields only ``a <a@a.com>``.

Separators are commas, semicolons (group terminators) and whitespace
between two complete addresses.  A display phrase followed by a bare
address without angle brackets is one malformed unit and is dropped
whole.  Unquoted phrase words may not contain ``[`` or ``]``; quoted
phrases may.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from email.charset import Charset
from email.utils import quote

import structlog

from .headers import decode_header_text, restore_utf8

logger = structlog.get_logger()


@dataclass(frozen=True)
class Address:
    """A mailbox: addr-spec plus optional display name."""

    email: str
    name: str | None = None

    def __str__(self) -> str:
        return format_address(self)


# ----------------------------------------------------------------------
# Tokenizer
# ----------------------------------------------------------------------

WORD = "word"
QUOTED = "quoted"
ANGLE = "angle"
COMMENT = "comment"
COMMA = ","
COLON = ":"
SEMICOLON = ";"

_WORD_STOP = frozenset(' \t\r\n"<(,;:')


@dataclass
class _Token:
    kind: str
    text: str
    start: int
    end: int


def _read_delimited(text: str, i: int, close: str) -> tuple[str, int]:
    """Read from just after an opening quote up to *close*, honouring escapes."""
    out = []
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\" and i + 1 < n:
            out.append(text[i + 1])
            i += 2
            continue
        if ch == close:
            return "".join(out), i + 1
        out.append(ch)
        i += 1
    return "".join(out), n


def _read_comment(text: str, i: int) -> tuple[str, int]:
    depth = 1
    out = []
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\" and i + 1 < n:
            out.append(text[i + 1])
            i += 2
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return "".join(out), i + 1
        out.append(ch)
        i += 1
    return "".join(out), n


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        start = i
        if ch.isspace():
            i += 1
            continue
        if ch == '"':
            value, i = _read_delimited(text, i + 1, '"')
            tokens.append(_Token(QUOTED, value, start, i))
        elif ch == "<":
            end = text.find(">", i + 1)
            end = n if end < 0 else end
            tokens.append(_Token(ANGLE, text[i + 1:end].strip(), start, min(end + 1, n)))
            i = end + 1
        elif ch == "(":
            value, i = _read_comment(text, i + 1)
            tokens.append(_Token(COMMENT, value.strip(), start, i))
        elif ch in (COMMA, COLON, SEMICOLON):
            tokens.append(_Token(ch, ch, start, i + 1))
            i += 1
        else:
            while i < n and text[i] not in _WORD_STOP:
                i += 1
            word = text[start:i]
            prev = tokens[-1] if tokens else None
            # "quoted local"@domain arrives as QUOTED immediately followed by "@..."
            if word.startswith("@") and prev is not None and prev.kind == QUOTED and prev.end == start:
                tokens[-1] = _Token(WORD, text[prev.start:i], prev.start, i)
            else:
                tokens.append(_Token(WORD, word, start, i))
    return tokens


# ----------------------------------------------------------------------
# Grammar
# ----------------------------------------------------------------------

_ATOM = r"[^\s@<>(),;:\\\"\[\]]+"
_LOCAL = rf'(?:{_ATOM}|"(?:[^"\\]|\\.)*")'
_DOMAIN = rf"(?:{_ATOM}|\[[^\[\]\s\\]*\])"
_ADDR_SPEC_RE = re.compile(rf"^{_LOCAL}@{_DOMAIN}$")


def is_valid_email(value: str) -> bool:
    """True if *value* is a usable ``local@domain`` token."""
    if not _ADDR_SPEC_RE.match(value):
        return False
    domain = value.rsplit("@", 1)[1]
    if domain.startswith("["):
        return True
    return not (domain.startswith(".") or domain.endswith(".") or ".." in domain)


def _strip_route(angle: str) -> str:
    # obsolete source route: <@relay1,@relay2:user@example.com>
    if angle.startswith("@") and ":" in angle:
        return angle.rsplit(":", 1)[1].strip()
    return angle


class _Unit:
    """The candidate address currently being assembled."""

    def __init__(self) -> None:
        self.phrase: list[_Token] = []
        self.bad = False

    def start(self, default: int) -> int:
        return self.phrase[0].start if self.phrase else default

    def display_name(self) -> str | None:
        if not self.phrase:
            return None
        name = " ".join(tok.text for tok in self.phrase)
        if "=?" in name:
            name = decode_header_text(name)
        return name or None


def parse_address_list(text: str) -> list[Address]:
    """Parse a header value into addresses, dropping malformed entries."""
    if not isinstance(text, str):
        raise TypeError(f"address list must be str, not {type(text).__name__}")
    text = restore_utf8(text)

    addresses: list[Address] = []
    unit = _Unit()
    # index of a bare address that a trailing (comment) may name
    nameable: int | None = None

    def drop(end: int, reason: str) -> None:
        logger.debug("address_dropped", unit=text[unit.start(end):end].strip(), reason=reason)

    for tok in _tokenize(text):
        if tok.kind == COMMENT:
            if nameable is not None and tok.text:
                addresses[nameable] = Address(addresses[nameable].email, decode_header_text(tok.text))
            nameable = None
            continue
        nameable = None

        if tok.kind in (COMMA, SEMICOLON):
            if unit.phrase:
                drop(tok.start, "no address")
            unit = _Unit()
        elif tok.kind == COLON:
            # group syntax "name: a@a.com, b@b.com;" keeps only the members
            if not unit.phrase:
                unit.bad = True
            else:
                unit = _Unit()
        elif tok.kind == ANGLE:
            email = _strip_route(tok.text)
            if unit.bad:
                drop(tok.end, "malformed display name")
            elif not is_valid_email(email):
                drop(tok.end, "invalid address")
            else:
                addresses.append(Address(email, unit.display_name()))
            unit = _Unit()
        elif tok.kind == WORD and "@" in tok.text:
            if unit.phrase:
                drop(tok.end, "display name without angle brackets")
            elif unit.bad or not is_valid_email(tok.text):
                drop(tok.end, "invalid address")
            else:
                addresses.append(Address(tok.text))
                nameable = len(addresses) - 1
            unit = _Unit()
        else:
            if tok.kind == WORD and ("[" in tok.text or "]" in tok.text):
                unit.bad = True
            unit.phrase.append(tok)

    if unit.phrase:
        drop(len(text), "no address")
    return addresses


# ----------------------------------------------------------------------
# Serializer
# ----------------------------------------------------------------------

_SPECIALS_RE = re.compile(r'[][\\()<>@,:;".]')
_UTF8 = Charset("utf-8")


def format_address(address: Address) -> str:
    """Render ``Name <email>``, or the bare email when there is no name."""
    if not address.name:
        return address.email
    name = address.name
    if not name.isascii():
        name = _UTF8.header_encode(name)
    elif _SPECIALS_RE.search(name):
        name = f'"{quote(name)}"'
    return f"{name} <{address.email}>"


def format_address_list(addresses: list[Address]) -> str:
    return ", ".join(format_address(address) for address in addresses)
