"""Normalization rules shared by the header store and the part tree.

Everything here is a pure function or an immutable table.
"""

from __future__ import annotations

from enum import Enum


class AddressHeader(str, Enum):
    """The closed set of headers whose value is an address list."""

    FROM = "From"
    SENDER = "Sender"
    REPLY_TO = "Reply-To"
    TO = "To"
    CC = "Cc"
    BCC = "Bcc"

    @classmethod
    def lookup(cls, name: str) -> AddressHeader | None:
        """Return the member for *name* (any casing), or None."""
        return _ADDRESS_HEADERS.get(header_key(name))


_ADDRESS_HEADERS: dict[str, AddressHeader] = {
    member.value.lower(): member for member in AddressHeader
}


def header_key(key: str) -> str:
    """Comparison form of a header name."""
    return key.strip().lower()


def keys_match(a: str, b: str) -> bool:
    return header_key(a) == header_key(b)


def is_address_header(key: str) -> bool:
    return header_key(key) in _ADDRESS_HEADERS


def is_content_header(key: str) -> bool:
    """True for the ``Content-*`` headers that describe a MIME part."""
    return header_key(key).startswith("content-")


def normalize_content_type(value: str | None, default: str = "text/plain") -> str:
    """Lowercase ``type/subtype``; anything without a slash becomes *default*."""
    if not value:
        return default
    ctype = value.split(";", 1)[0].strip().lower()
    maintype, sep, subtype = ctype.partition("/")
    if not sep or not maintype or not subtype:
        return default
    return f"{maintype}/{subtype}"


def maintype(content_type: str) -> str:
    return content_type.partition("/")[0]


def normalize_transfer_encoding(value: str | None) -> str:
    if not value:
        return "7bit"
    return value.strip().lower()


def normalize_charset(value: str | None) -> str | None:
    """Lowercase charset name; placeholder charsets collapse to None."""
    if not value:
        return None
    charset = value.strip().strip('"').lower()
    if charset in ("", "unknown-8bit", "x-unknown", "unknown", "default"):
        return None
    return charset
