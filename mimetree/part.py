"""MIME part tree: one :class:`Part` per entity, children owned exclusively."""

from __future__ import annotations

import re
import uuid
from collections.abc import Callable, Iterator
from email.header import Header
from email.utils import encode_rfc2231, quote
from typing import Any

import structlog

from . import codec
from .config import MimeConfig
from .framer import FramedPart
from .headers import HeaderStore, decode_header_text
from .normalize import (
    maintype,
    normalize_charset,
    normalize_content_type,
    normalize_transfer_encoding,
)

logger = structlog.get_logger()

Visitor = Callable[["Part"], Any]

# Leaf text types that carry the readable body and are never attachments by name alone.
PRIMARY_TEXT_TYPES = frozenset({"text/plain", "text/html"})

_TSPECIALS_RE = re.compile(r'[\s()<>@,;:\\"/\[\]?=]')


class Part:
    """One node of the MIME tree.

    ``text`` is only present for ``text/*`` parts and holds the decoded
    content.  ``children`` is only populated for ``multipart/*`` parts.
    """

    def __init__(
        self,
        content_type: str = "text/plain",
        content_type_params: dict[str, str] | None = None,
        *,
        headers: HeaderStore | None = None,
        disposition: str | None = None,
        disposition_params: dict[str, str] | None = None,
        transfer_encoding: str = "7bit",
        body: bytes = b"",
        text: str | None = None,
        children: list[Part] | None = None,
        preamble: str | None = None,
        epilogue: str | None = None,
    ) -> None:
        self.content_type = normalize_content_type(content_type)
        self.content_type_params = dict(content_type_params or {})
        self.disposition = disposition.lower() if disposition else None
        self.disposition_params = dict(disposition_params or {})
        self.transfer_encoding = normalize_transfer_encoding(transfer_encoding)
        self.headers = headers if headers is not None else HeaderStore()
        self.children: list[Part] = list(children or [])
        self.preamble = preamble
        self.epilogue = epilogue
        self._body = body
        self._text = text if self.is_text() else None
        self._text_changed = False
        # content description as last written into self.headers
        self._described: tuple | None = None

    @classmethod
    def from_framed(
        cls,
        framed: FramedPart,
        config: MimeConfig,
        *,
        headers: HeaderStore | None = None,
    ) -> Part:
        part = cls(
            framed.content_type,
            framed.content_type_params,
            headers=headers if headers is not None else HeaderStore(framed.headers),
            disposition=framed.disposition,
            disposition_params=framed.disposition_params,
            transfer_encoding=framed.transfer_encoding,
            body=framed.body,
            children=[cls.from_framed(child, config) for child in framed.children],
            preamble=framed.preamble,
            epilogue=framed.epilogue,
        )
        if part.is_text():
            part._text = codec.decode(
                framed.body,
                part.transfer_encoding,
                part._decode_charset(config),
                errors=config.decode_errors,
            )
        part._described = part._description()
        return part

    @classmethod
    def text_part(
        cls,
        text: str,
        subtype: str = "plain",
        *,
        config: MimeConfig | None = None,
    ) -> Part:
        """A new ``text/<subtype>`` leaf, encoded on first export."""
        config = config or MimeConfig()
        part = cls(
            f"text/{subtype}",
            {"charset": config.default_charset},
            transfer_encoding=config.text_transfer_encoding,
            text=text,
        )
        part._text_changed = True
        return part

    def __repr__(self) -> str:
        return f"<Part {self.content_type} children={len(self.children)}>"

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def is_multipart(self) -> bool:
        return maintype(self.content_type) == "multipart"

    def is_text(self) -> bool:
        return maintype(self.content_type) == "text"

    def is_attachment(self) -> bool:
        """Explicit ``attachment`` disposition, or a named non-body leaf."""
        if self.is_multipart():
            return False
        if self.disposition == "attachment":
            return True
        return bool(self.filename()) and self.content_type not in PRIMARY_TEXT_TYPES

    def filename(self) -> str:
        """Filename from disposition params, falling back to the content-type name."""
        name = self.disposition_params.get("filename") or self.content_type_params.get("name") or ""
        if "=?" in name:
            name = decode_header_text(name)
        return name

    @property
    def charset(self) -> str | None:
        return normalize_charset(self.content_type_params.get("charset"))

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    @property
    def text(self) -> str | None:
        return self._text

    def set_text(self, value: str) -> None:
        if not self.is_text():
            raise TypeError(f"{self.content_type} part has no text content")
        self._text = value
        self._text_changed = True

    @property
    def body(self) -> bytes:
        """Transfer-encoded body as it will be exported (stale until export after set_text)."""
        return self._body

    def payload(self) -> bytes:
        """Fully decoded bytes of a leaf part."""
        if self.is_multipart():
            raise TypeError("multipart parts have no payload of their own")
        if self._text_changed:
            text = self._text or ""
            charset = self.charset or "utf-8"
            return text.encode(charset if codec.can_encode(text, charset) else "utf-8")
        return codec.decode_bytes(self._body, self.transfer_encoding)

    def _decode_charset(self, config: MimeConfig) -> str:
        charset = self.charset
        if charset is None:
            return config.default_charset
        if not codec.charset_exists(charset):
            logger.warning("charset_fallback", declared=charset, used=config.default_charset)
            return config.default_charset
        return charset

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def iter_parts(self) -> Iterator[Part]:
        """Yield this part and all descendants, pre-order, in document order."""
        stack = [self]
        while stack:
            part = stack.pop()
            yield part
            # children are read after the part was handed out, so a visitor
            # may still populate them
            stack.extend(reversed(part.children))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def _description(self) -> tuple:
        return (
            self.content_type,
            dict(self.content_type_params),
            self.disposition,
            dict(self.disposition_params),
            self.transfer_encoding,
        )

    def _reencode(self, config: MimeConfig, linesep: str) -> None:
        text = self._text or ""
        charset = self.charset or config.default_charset
        if not codec.can_encode(text, charset):
            charset = config.default_charset
        encoding = codec.canonical_encoding(self.transfer_encoding)
        if encoding not in ("base64", "quoted-printable", "8bit", "binary"):
            if encoding not in codec.IDENTITY_ENCODINGS or not text.isascii():
                encoding = config.text_transfer_encoding

        self._body = codec.encode(text, encoding, charset, linesep=linesep)
        if charset != self.charset:
            self.content_type_params["charset"] = charset
        self.transfer_encoding = encoding
        self._text_changed = False
        logger.debug("part_reencoded", content_type=self.content_type, encoding=encoding, charset=charset)

    def _sync_content_headers(self) -> None:
        description = self._description()
        if description == self._described:
            return
        self.headers.put("Content-Type", format_params(self.content_type, self.content_type_params))
        if not self.is_multipart():
            self.headers.put("Content-Transfer-Encoding", self.transfer_encoding)
        if self.disposition:
            self.headers.put(
                "Content-Disposition", format_params(self.disposition, self.disposition_params)
            )
        else:
            self.headers.remove_all("Content-Disposition")
        self._described = description

    def to_bytes(self, config: MimeConfig, linesep: str = "\n") -> bytes:
        """Serialize this part, its headers and all descendants."""
        if self._text_changed:
            self._reencode(config, linesep)
        if self.is_multipart() and not self.content_type_params.get("boundary"):
            self.content_type_params["boundary"] = f"=_{uuid.uuid4().hex}"
        self._sync_content_headers()

        eol = linesep.encode("ascii")
        chunks = [
            format_header(key, value, linesep=linesep, max_line_length=config.max_line_length)
            for key, value in self.headers.items()
        ]
        chunks.append(eol)

        if not self.is_multipart():
            chunks.append(self._body)
            return b"".join(chunks)

        boundary = self.content_type_params["boundary"].encode("ascii")
        if self.preamble:
            chunks.append(_raw(self.preamble) + eol)
        for child in self.children:
            chunks.append(b"--" + boundary + eol)
            chunks.append(child.to_bytes(config, linesep))
            chunks.append(eol)
        chunks.append(b"--" + boundary + b"--" + eol)
        if self.epilogue:
            chunks.append(_raw(self.epilogue))
        return b"".join(chunks)


def walk(node: Part, visitor: Visitor) -> None:
    """Call *visitor* on *node* and every descendant, pre-order.

    An exception raised by the visitor stops the traversal and propagates;
    changes made to already-visited parts are kept.
    """
    for part in node.iter_parts():
        visitor(part)


# ----------------------------------------------------------------------
# Header rendering
# ----------------------------------------------------------------------


def _raw(value: str) -> bytes:
    # surrogate escapes carry undecodable input bytes through unchanged
    return value.encode("utf-8", "surrogateescape")


def format_params(value: str, params: dict[str, str]) -> str:
    """Render ``value; key=val`` with quoting or RFC 2231 encoding as needed."""
    out = [value]
    for key, val in params.items():
        if not val.isascii():
            out.append(f"{key}*={encode_rfc2231(val, 'utf-8')}")
        elif not val or _TSPECIALS_RE.search(val):
            out.append(f'{key}="{quote(val)}"')
        else:
            out.append(f"{key}={val}")
    return "; ".join(out)


def _has_surrogates(value: str) -> bool:
    return any("\udc80" <= ch <= "\udcff" for ch in value)


def format_header(key: str, value: str, *, linesep: str = "\n", max_line_length: int = 78) -> bytes:
    """Render one header line, folding long ASCII values and RFC 2047 encoding others."""
    if _has_surrogates(value):
        return _raw(f"{key}: {value}{linesep}")
    if value.isascii():
        return (_fold(key, value, max_line_length, linesep) + linesep).encode("ascii")
    encoded = Header(value, "utf-8", header_name=key, maxlinelen=max_line_length).encode(
        linesep=linesep
    )
    return f"{key}: {encoded}{linesep}".encode("ascii")


_FWS_SPLIT_RE = re.compile(r"(?=[ \t])")


def _fold(key: str, value: str, width: int, linesep: str) -> str:
    # folds only at existing whitespace, so unfolding restores the value exactly
    line = f"{key}: {value}"
    if len(line) <= width:
        return line
    words = _FWS_SPLIT_RE.split(value)
    lines = []
    current = f"{key}: {words[0]}"
    for word in words[1:]:
        if len(current) + len(word) > width and word.strip():
            lines.append(current)
            current = word
        else:
            current += word
    lines.append(current)
    return linesep.join(lines)
