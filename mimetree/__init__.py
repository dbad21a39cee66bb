"""mimetree: a mutable MIME message document model."""

from .addresses import Address, format_address, format_address_list, parse_address_list
from .config import MimeConfig
from .errors import (
    AddressHeaderWriteRejected,
    CodecFailure,
    HeaderNotFound,
    MalformedMessage,
    MessageClosed,
    MimeError,
    UnknownAddressHeader,
)
from .headers import HeaderEntry, HeaderStore
from .logging import setup_logging
from .message import Message, parse
from .normalize import AddressHeader
from .part import Part, walk

__all__ = [
    "Address",
    "AddressHeader",
    "AddressHeaderWriteRejected",
    "CodecFailure",
    "HeaderEntry",
    "HeaderNotFound",
    "HeaderStore",
    "MalformedMessage",
    "Message",
    "MessageClosed",
    "MimeConfig",
    "MimeError",
    "Part",
    "UnknownAddressHeader",
    "format_address",
    "format_address_list",
    "parse",
    "parse_address_list",
    "setup_logging",
    "walk",
]
