"""Message: the root object: header block plus MIME part tree.

Parse raw bytes, edit headers, addresses and bodies in place, and
export the result::

    with Message.parse(raw) as msg:
        msg.subject = "Re: " + msg.subject
        msg.add_address("cc", "Audit", "audit@example.com")
        out = msg.export()
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import structlog

from .addresses import Address, format_address_list, is_valid_email, parse_address_list
from .config import MimeConfig
from .errors import MessageClosed, UnknownAddressHeader
from .framer import detect_linesep, frame
from .headers import HeaderStore, decode_header_text
from .normalize import AddressHeader, is_content_header
from .part import Part, Visitor

logger = structlog.get_logger()


class Message:
    """A parsed, mutable email message.

    The message header block is the root part's header store, so
    top-level ``Content-*`` headers always describe the current root.
    """

    def __init__(
        self,
        root: Part,
        *,
        config: MimeConfig | None = None,
        linesep: str = "\n",
    ) -> None:
        self._root: Part | None = root
        self.config = config or MimeConfig()
        self._linesep = linesep

    @classmethod
    def parse(cls, raw: bytes | str, config: MimeConfig | None = None) -> Message:
        """Build a message from raw RFC 822 input.

        Raises :class:`MalformedMessage` when the input has no usable
        header/body structure and :class:`CodecFailure` when a text part
        cannot be decoded.
        """
        if isinstance(raw, str):
            raw = raw.encode("utf-8", "surrogateescape")
        config = config or MimeConfig()
        framed = frame(raw)
        root = Part.from_framed(framed, config)
        msg = cls(root, config=config, linesep=detect_linesep(raw))
        logger.debug(
            "message_parsed",
            content_type=root.content_type,
            headers=len(root.headers),
            parts=sum(1 for _ in root.iter_parts()),
        )
        return msg

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._root is None

    def close(self) -> None:
        """Release the part tree and its buffers. Safe to call twice."""
        if self._root is None:
            return
        for part in self._root.iter_parts():
            part._body = b""
            part._text = None
        self._root.children.clear()
        self._root = None
        logger.debug("message_closed")

    def __enter__(self) -> Message:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def root(self) -> Part:
        if self._root is None:
            raise MessageClosed("message is closed")
        return self._root

    @property
    def headers(self) -> HeaderStore:
        return self.root.headers

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------

    def header(self, key: str) -> str:
        """First value of *key*, or "" when absent."""
        return self.headers.get(key, "") or ""

    def header_values(self, key: str) -> list[str]:
        return self.headers.get_all(key)

    def set_header(self, key: str, value: str) -> None:
        self.headers.set(key, value)

    def add_header(self, key: str, value: str) -> None:
        self.headers.add(key, value)

    def remove_header(self, key: str) -> bool:
        return self.headers.remove_first(key)

    def remove_all_headers(self, key: str) -> bool:
        return self.headers.remove_all(key)

    def replace_header(self, key: str, old_value: str, new_value: str) -> None:
        self.headers.replace(key, old_value, new_value)

    @property
    def subject(self) -> str:
        return decode_header_text(self.headers.get("Subject"))

    @subject.setter
    def subject(self, value: str) -> None:
        self.headers.set("Subject", value)

    @property
    def content_type(self) -> str:
        return self.root.content_type

    # ------------------------------------------------------------------
    # Address headers
    # ------------------------------------------------------------------

    @staticmethod
    def _address_header(name: str, error: str) -> AddressHeader:
        member = AddressHeader.lookup(name)
        if member is None:
            raise UnknownAddressHeader(error.format(name), name)
        return member

    def addresses(self, header: str) -> list[Address]:
        """All addresses of *header*, merged across repeated entries."""
        member = self._address_header(header, "unknown header {}")
        return [
            address
            for value in self.headers.get_all(member.value)
            for address in parse_address_list(value)
        ]

    def from_address(self) -> str:
        """Email of the first ``From`` mailbox, or ""."""
        found = self.addresses(AddressHeader.FROM.value)
        return found[0].email if found else ""

    def _write_addresses(self, member: AddressHeader, addresses: list[Address]) -> None:
        self.headers.collapse(member.value, format_address_list(addresses))

    def add_address(self, header: str, name: str | None, email: str) -> None:
        member = self._address_header(header, "can't add to header {}")
        if not is_valid_email(email):
            raise ValueError(f"invalid email address {email!r}")
        self._write_addresses(member, [*self.addresses(member.value), Address(email, name or None)])

    def clear_address(self, header: str) -> None:
        member = self._address_header(header, "unknown header {}")
        self.headers.remove_all(member.value)

    def parse_and_append_addresses(self, header: str, text: str) -> None:
        """Parse *text* as an address list and append what survives."""
        member = self._address_header(header, "can't add to header {}")
        parsed = parse_address_list(text)
        self._write_addresses(member, [*self.addresses(member.value), *parsed])

    def append_address_list(self, header: str, addresses: Iterable[Address]) -> None:
        """Append structured addresses; an empty list still leaves the header present."""
        member = self._address_header(header, "can't add to header {}")
        self._write_addresses(member, [*self.addresses(member.value), *addresses])

    # ------------------------------------------------------------------
    # Part tree
    # ------------------------------------------------------------------

    def parts(self) -> Iterator[Part]:
        """Parts below a multipart root, pre-order; a single-part root yields itself."""
        root = self.root
        if not root.is_multipart():
            yield root
            return
        for child in root.children:
            yield from child.iter_parts()

    def walk(self, visitor: Visitor) -> None:
        """Call *visitor* on every part yielded by :meth:`parts`.

        Exceptions from the visitor stop the walk and propagate.
        """
        for part in self.parts():
            visitor(part)

    def attachments(self) -> list[Part]:
        return [part for part in self.parts() if part.is_attachment()]

    def add_html_alternative_to_plain_text(self, html: str) -> bool:
        """Turn a ``text/plain`` message into ``multipart/alternative`` with *html*.

        Returns False, leaving the message untouched, for any other root.
        """
        plain = self.root
        if plain.content_type != "text/plain":
            return False

        headers = plain.headers
        plain.headers = HeaderStore(headers.extract(is_content_header))
        self._root = Part(
            "multipart/alternative",
            headers=headers,
            children=[plain, Part.text_part(html, "html", config=self.config)],
        )
        if "MIME-Version" not in headers:
            headers.add("MIME-Version", "1.0")
        logger.info("html_alternative_added", html_length=len(html))
        return True

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self) -> bytes:
        """Serialize headers and part tree, re-encoding edited text parts."""
        return self.root.to_bytes(self.config, self.config.linesep or self._linesep)


def parse(raw: bytes | str, config: MimeConfig | None = None) -> Message:
    return Message.parse(raw, config)
