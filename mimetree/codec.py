"""Transfer-encoding and charset codec used for part bodies.

Bodies are stored exactly as framed.  Text is produced from them with
:func:`decode` and turned back into body bytes with :func:`encode`.
Transfer coding itself is delegated to the ``email`` package; this module
only adds the charset handling around it.
"""

from __future__ import annotations

import codecs
import email.base64mime
import email.message
import email.quoprimime

from .errors import CodecFailure

IDENTITY_ENCODINGS = frozenset({"7bit", "8bit", "binary", "none", ""})
UU_ENCODINGS = frozenset({"x-uuencode", "uuencode", "uue", "x-uue"})
_ALIASES = {"8-bit": "8bit", "7-bit": "7bit", "quoted_printable": "quoted-printable"}


def canonical_encoding(transfer_encoding: str | None) -> str:
    value = (transfer_encoding or "7bit").strip().lower()
    return _ALIASES.get(value, value)


def decode_bytes(raw: bytes, transfer_encoding: str | None) -> bytes:
    """Undo the transfer encoding of *raw*.

    Damaged base64 and quoted-printable bodies are decoded as far as the
    ``email`` package tolerates rather than rejected.
    """
    encoding = canonical_encoding(transfer_encoding)
    if encoding in IDENTITY_ENCODINGS:
        return raw
    if encoding not in ("base64", "quoted-printable") and encoding not in UU_ENCODINGS:
        raise CodecFailure(f"unsupported transfer encoding {encoding}", encoding=encoding)
    carrier = email.message.Message()
    carrier["Content-Transfer-Encoding"] = encoding
    carrier.set_payload(raw.decode("ascii", "surrogateescape"))
    return carrier.get_payload(decode=True)


def decode(
    raw: bytes,
    transfer_encoding: str | None,
    charset: str,
    *,
    errors: str = "replace",
) -> str:
    """Transfer-decode *raw* and transcode it from *charset* into text.

    Line endings are normalized to ``\\n``.
    """
    data = decode_bytes(raw, transfer_encoding)
    try:
        text = data.decode(charset, errors=errors)
    except LookupError as exc:
        raise CodecFailure(
            f"unknown charset {charset}",
            encoding=canonical_encoding(transfer_encoding),
            charset=charset,
        ) from exc
    except UnicodeDecodeError as exc:
        raise CodecFailure(
            f"body is not valid {charset}",
            encoding=canonical_encoding(transfer_encoding),
            charset=charset,
        ) from exc
    return text.replace("\r\n", "\n")


def charset_exists(charset: str) -> bool:
    try:
        codecs.lookup(charset)
    except LookupError:
        return False
    return True


def can_encode(text: str, charset: str) -> bool:
    try:
        text.encode(charset)
    except (UnicodeEncodeError, LookupError):
        return False
    return True


def encode(
    text: str,
    transfer_encoding: str | None,
    charset: str,
    *,
    linesep: str = "\n",
) -> bytes:
    """Transcode *text* into *charset* and apply the transfer encoding."""
    encoding = canonical_encoding(transfer_encoding)
    try:
        data = text.replace("\r\n", "\n").encode(charset)
    except (UnicodeEncodeError, LookupError) as exc:
        raise CodecFailure(
            f"cannot encode text as {charset}", encoding=encoding, charset=charset
        ) from exc

    if encoding == "base64":
        # base64 carries canonical CRLF line breaks inside the payload
        encoded = email.base64mime.body_encode(data.replace(b"\n", b"\r\n"), eol=linesep)
        return encoded.encode("ascii")
    if encoding == "quoted-printable":
        # quoprimime works on one char per byte
        return email.quoprimime.body_encode(data.decode("latin-1"), eol=linesep).encode("ascii")
    if encoding == "7bit" and not data.isascii():
        raise CodecFailure("7bit body cannot carry 8-bit data", encoding=encoding, charset=charset)
    if encoding in IDENTITY_ENCODINGS:
        return data.replace(b"\n", linesep.encode("ascii"))
    raise CodecFailure(f"unsupported transfer encoding {encoding}", encoding=encoding, charset=charset)
