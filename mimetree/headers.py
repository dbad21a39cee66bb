"""Ordered header store with duplicate-key and case-insensitive-key semantics."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from email.header import decode_header

from .errors import AddressHeaderWriteRejected, HeaderNotFound
from .normalize import header_key, is_address_header


@dataclass
class HeaderEntry:
    """A single ``key: value`` header line. *key* keeps its original casing."""

    key: str
    value: str

    def matches(self, key: str) -> bool:
        return header_key(self.key) == header_key(key)


class HeaderStore:
    """Ordered sequence of header entries.

    Lookups match keys case-insensitively and return the first entry by
    position.  Mutating an entry never reorders the others.
    """

    def __init__(self, entries: Iterable[tuple[str, str]] = ()) -> None:
        self._entries: list[HeaderEntry] = [HeaderEntry(k, v) for k, v in entries]

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, key: str, default: str | None = None) -> str | None:
        for entry in self._entries:
            if entry.matches(key):
                return entry.value
        return default

    def get_all(self, key: str) -> list[str]:
        return [entry.value for entry in self._entries if entry.matches(key)]

    def items(self) -> list[tuple[str, str]]:
        return [(entry.key, entry.value) for entry in self._entries]

    def keys(self) -> list[str]:
        return [entry.key for entry in self._entries]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and any(e.matches(key) for e in self._entries)

    def __iter__(self) -> Iterator[HeaderEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"HeaderStore({self.items()!r})"

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def set(self, key: str, value: str) -> None:
        """Replace the first *key* entry in place, or append one.

        Address headers may only be written this way while absent; an
        existing address list must be changed through the address API so
        the value stays a valid list.
        """
        if is_address_header(key) and key in self:
            raise AddressHeaderWriteRejected(key)
        self.put(key, value)

    def put(self, key: str, value: str) -> None:
        """``set`` without the address-header guard."""
        for entry in self._entries:
            if entry.matches(key):
                entry.value = value
                return
        self._entries.append(HeaderEntry(key, value))

    def collapse(self, key: str, value: str) -> None:
        """Leave exactly one *key* entry, holding *value*, at the first entry's position."""
        self.put(key, value)
        first = True
        kept = []
        for entry in self._entries:
            if entry.matches(key):
                if not first:
                    continue
                first = False
            kept.append(entry)
        self._entries = kept

    def add(self, key: str, value: str) -> None:
        self._entries.append(HeaderEntry(key, value))

    def remove_first(self, key: str) -> bool:
        for i, entry in enumerate(self._entries):
            if entry.matches(key):
                del self._entries[i]
                return True
        return False

    def remove_all(self, key: str) -> bool:
        kept = [entry for entry in self._entries if not entry.matches(key)]
        removed = len(kept) != len(self._entries)
        self._entries = kept
        return removed

    def replace(self, key: str, old_value: str, new_value: str) -> None:
        """Swap the value of the entry matching both *key* and *old_value*."""
        for entry in self._entries:
            if entry.matches(key) and entry.value == old_value:
                entry.value = new_value
                return
        raise HeaderNotFound(key, old_value)

    def extract(self, predicate: Callable[[str], bool]) -> list[tuple[str, str]]:
        """Remove and return, in order, every entry whose key satisfies *predicate*."""
        taken = [(e.key, e.value) for e in self._entries if predicate(e.key)]
        self._entries = [e for e in self._entries if not predicate(e.key)]
        return taken


_FOLD_RE = re.compile(r"\r?\n(?=[ \t])")


def unfold(value: str) -> str:
    """Join folded continuation lines of a raw header value."""
    return _FOLD_RE.sub("", value).strip()


def restore_utf8(value: str) -> str:
    """Turn surrogate-escaped raw header bytes back into text.

    Raw 8-bit header values (RFC 6532) arrive from the parser as surrogate
    escapes; they are read as UTF-8 and anything else becomes U+FFFD.
    """
    if not any("\udc80" <= ch <= "\udcff" for ch in value):
        return value
    return value.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def decode_header_text(header_text: str | None) -> str:
    """Decode RFC 2047 encoded-words in a header value."""
    if not header_text:
        return ""

    result_parts = []
    for part, charset in decode_header(restore_utf8(header_text)):
        if isinstance(part, bytes):
            if charset is None:
                # unencoded run between encoded-words
                result_parts.append(part.decode("raw-unicode-escape"))
                continue
            try:
                result_parts.append(part.decode(charset, errors="replace"))
            except LookupError:
                result_parts.append(part.decode("utf-8", errors="replace"))
        else:
            result_parts.append(part)
    return "".join(result_parts)
