"""Message-model settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class MimeConfig(BaseSettings):
    """Codec and serialization defaults for parsed messages."""

    model_config = {"env_prefix": "MIME_"}

    default_charset: str = Field(
        default="utf-8",
        description="Charset for new text parts and for text with no usable declared charset",
    )
    text_transfer_encoding: Literal["quoted-printable", "base64", "8bit"] = Field(
        default="quoted-printable",
        description="Transfer encoding for new text parts and for 7bit parts that gain non-ASCII text",
    )
    linesep: Literal["\n", "\r\n"] | None = Field(
        default=None,
        description="Line separator used on export; None keeps the one detected in the input",
    )
    max_line_length: int = Field(
        default=78,
        ge=20,
        description="Width at which exported header lines are folded",
    )
    decode_errors: Literal["strict", "replace", "ignore", "surrogateescape"] = Field(
        default="replace",
        description="Error handler for body bytes that are invalid in their charset",
    )
    log_level: str = Field(default="INFO", description="Root log level for the CLI")
    log_json: bool = Field(default=False, description="Emit JSON log lines from the CLI")
