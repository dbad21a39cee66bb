"""Frame raw RFC 822 bytes into header lines and per-part body bytes.

The lexical work is done by the standard library ``email`` parser; this
module only reshapes its output into :class:`FramedPart` trees holding
raw header values, content descriptions and undecoded bodies.
"""

from __future__ import annotations

import email
import email.message
import email.policy
import email.utils
from dataclasses import dataclass, field

from .errors import MalformedMessage
from .headers import unfold
from .normalize import maintype, normalize_content_type, normalize_transfer_encoding


@dataclass
class FramedPart:
    """One MIME entity as found in the input."""

    headers: list[tuple[str, str]]
    content_type: str
    content_type_params: dict[str, str]
    disposition: str | None = None
    disposition_params: dict[str, str] = field(default_factory=dict)
    transfer_encoding: str = "7bit"
    body: bytes = b""
    children: list[FramedPart] = field(default_factory=list)
    preamble: str | None = None
    epilogue: str | None = None


def detect_linesep(raw: bytes) -> str:
    """Line separator that ends the first line of *raw*."""
    nl = raw.find(b"\n")
    return "\r\n" if nl > 0 and raw[nl - 1 : nl] == b"\r" else "\n"


def frame(raw: bytes) -> FramedPart:
    """Frame a complete message.

    Raises :class:`MalformedMessage` when no header block can be found
    or a multipart entity has no usable boundary.
    """
    if not raw or not raw.strip():
        raise MalformedMessage("empty message")

    msg = email.message_from_bytes(raw, policy=email.policy.default)
    if not msg.keys():
        raise MalformedMessage("no header block found")
    return _frame_part(msg)


def _params(part: email.message.Message, header: str) -> dict[str, str]:
    params = part.get_params(header=header)
    if not params:
        return {}
    # first entry is the value itself (type/subtype or disposition)
    return {
        key: email.utils.collapse_rfc2231_value(value)
        for key, value in params[1:]
        if key
    }


def _frame_part(part: email.message.Message) -> FramedPart:
    content_type = normalize_content_type(part.get("Content-Type"), default=part.get_default_type())
    framed = FramedPart(
        headers=[(key, unfold(value)) for key, value in part.raw_items()],
        content_type=content_type,
        content_type_params=_params(part, "content-type"),
        disposition=part.get_content_disposition(),
        disposition_params=_params(part, "content-disposition"),
        transfer_encoding=normalize_transfer_encoding(part.get("Content-Transfer-Encoding")),
    )

    if maintype(content_type) == "multipart":
        if not part.is_multipart():
            raise MalformedMessage(f"{content_type} part has no usable boundary")
        framed.children = [_frame_part(child) for child in part.get_payload()]
        framed.preamble = part.preamble
        framed.epilogue = part.epilogue
    elif part.is_multipart():
        # message/rfc822 and friends: keep the enclosed message opaque
        framed.body = b"".join(inner.as_bytes(policy=email.policy.compat32) for inner in part.get_payload())
    else:
        payload = part.get_payload()
        framed.body = payload.encode("ascii", "surrogateescape") if isinstance(payload, str) else b""
    return framed
