"""Exception hierarchy for the MIME document model."""

from __future__ import annotations


class MimeError(Exception):
    """Base class for every error raised by mimetree."""


class MalformedMessage(MimeError):
    """Raised when raw input has no recognizable header/body structure."""


class UnknownAddressHeader(MimeError):
    """Raised when an address operation names a non-address header."""

    def __init__(self, message: str, header: str) -> None:
        super().__init__(message)
        self.header = header


class AddressHeaderWriteRejected(MimeError):
    """Raised when a generic set would overwrite an address header."""

    def __init__(self, header: str) -> None:
        super().__init__(
            f"address header {header} requires add_address/clear_address"
        )
        self.header = header


class HeaderNotFound(MimeError):
    """Raised when no header entry matches both key and value."""

    def __init__(self, key: str, value: str) -> None:
        super().__init__("failed to find header with matching key & value")
        self.key = key
        self.value = value


class CodecFailure(MimeError):
    """Raised when a part body cannot be transfer-decoded or encoded."""

    def __init__(self, message: str, *, encoding: str, charset: str | None = None) -> None:
        super().__init__(message)
        self.encoding = encoding
        self.charset = charset


class MessageClosed(MimeError):
    """Raised when a released message is used again."""
