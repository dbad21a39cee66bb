"""Shared EML samples and fixtures for the mimetree test suite."""

from __future__ import annotations

from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import pytest

from mimetree import MimeConfig

# ------------------------------------------------------------------
# Literal samples
# ------------------------------------------------------------------

PLAIN_TEXT = "kien image below\n\n[image: Inline image 1]\n\n--\nKien Pham\nSoftware Engineer, SendGrid\n"
HTML_TEXT = (
    '<div dir="ltr">kien image below<div><img src="cid:ii_1463f6eb06c77530" '
    'alt="Inline image 1"></div></div>\n'
)
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF"

_ALTERNATIVE_BODY = b"""\
--001a11c2a2ac9a8e5b04faf3c4b0
Content-Type: text/plain; charset=UTF-8

kien image below

[image: Inline image 1]

--
Kien Pham
Software Engineer, SendGrid

--001a11c2a2ac9a8e5b04faf3c4b0
Content-Type: text/html; charset=UTF-8
Content-Transfer-Encoding: quoted-printable

<div dir=3D"ltr">kien image below<div><img src=3D"cid:ii_1463f6eb06c77530" a=
lt=3D"Inline image 1"></div></div>

"""

_IMAGE_PART = b"""\
Content-Type: image/jpeg; name="kien.jpg"
Content-Disposition: inline; filename="kien.jpg"
Content-Transfer-Encoding: base64
Content-ID: <ii_1463f6eb06c77530>
X-Attachment-Id: ii_1463f6eb06c77530

/9j/4AAQSkZJRg==
"""

_COMMON_HEADERS = b"""\
MIME-Version: 1.0
Received: by 10.220.10.1 with HTTP; Tue, 3 Jun 2014 16:12:09 -0700 (PDT)
Date: Tue, 3 Jun 2014 16:12:09 -0700
Message-ID: <CAGPJ=uY91HEGoszHE9ELkB3wfcNJN4NGORM9q-vV8o_XJceBmg@mail.gmail.com>
Subject: test inline image attachment
From: Kien Pham <kien@sendgrid.com>
To: Kien Pham <kpham@sendgrid.com>
"""

MESSAGE_ID = "<CAGPJ=uY91HEGoszHE9ELkB3wfcNJN4NGORM9q-vV8o_XJceBmg@mail.gmail.com>"

# multipart/alternative root holding text, html and the inline image
INLINE_MULTIPART_EML = (
    _COMMON_HEADERS
    + b"Content-Type: multipart/alternative; boundary=001a11c2a2ac9a8e5b04faf3c4b0\n\n"
    + _ALTERNATIVE_BODY
    + b"--001a11c2a2ac9a8e5b04faf3c4b0\n"
    + _IMAGE_PART
    + b"--001a11c2a2ac9a8e5b04faf3c4b0--\n"
)

# multipart/related root: [multipart/alternative[text, html], image]
NESTED_MULTIPART_EML = (
    _COMMON_HEADERS
    + b"Content-Type: multipart/related; boundary=001a11c2a2ac9a8e6004faf3c4b1\n\n"
    + b"--001a11c2a2ac9a8e6004faf3c4b1\n"
    + b"Content-Type: multipart/alternative; boundary=001a11c2a2ac9a8e5b04faf3c4b0\n\n"
    + _ALTERNATIVE_BODY
    + b"--001a11c2a2ac9a8e5b04faf3c4b0--\n\n"
    + b"--001a11c2a2ac9a8e6004faf3c4b1\n"
    + _IMAGE_PART
    + b"--001a11c2a2ac9a8e6004faf3c4b1--\n"
)

TEXT_PLAIN_EML = b"""\
MIME-Version: 1.0
Date: Tue, 3 Jun 2014 16:12:09 -0700
Message-ID: <textplain-001@mail.example.com>
Subject: plain text only
From: Kien Pham <kien@sendgrid.com>
To: Kien Pham <kpham@sendgrid.com>
Content-Type: text/plain; charset=UTF-8
Content-Transfer-Encoding: 7bit

just some plain text
"""

MULTIPLE_HEADERS_EML = b"""\
MIME-Version: 1.0
Received: from mail.example.com by mx.example.net; Tue, 3 Jun 2014 16:12:09 -0700
Date: Tue, 3 Jun 2014 16:12:09 -0700
Message-ID: <multi-headers-001@mail.example.com>
Subject: multiple headers
From: Kien Pham <kpham@sendgrid.com>
Sender: Kane <kane@sendgrid.com>
Reply-To: Isaac <isaac@sendgrid.com>
To: Kien Pham <kien@sendgrid.com>
Cc: Tim <tim@sendgrid.com>
Bcc: Trevor <trevor@sendgrid.com>
X-HEADER: 1
X-HEADER: 2
X-Mailer: mimetree-tests
X-HEADER: 3
Content-Type: text/plain; charset=UTF-8

body with several headers
"""

ATTACHMENT_WITH_NAME_EML = b"""\
MIME-Version: 1.0
Subject: attachment with name
From: sender@example.com
To: recipient@example.com
Content-Type: application/pdf; name="report.pdf"
Content-Disposition: attachment; filename="report.pdf"
Content-Transfer-Encoding: base64

JVBERi0xLjQ=
"""

ATTACHMENT_WITHOUT_NAME_EML = b"""\
MIME-Version: 1.0
Subject: attachment without name
From: sender@example.com
To: recipient@example.com
Content-Type: application/octet-stream
Content-Disposition: attachment
Content-Transfer-Encoding: base64

JVBERi0xLjQ=
"""

INLINE_ATTACHMENT_EML = b"""\
MIME-Version: 1.0
Subject: inline attachment
From: sender@example.com
To: recipient@example.com
Content-Type: image/jpeg; name="kien.jpg"
Content-Disposition: inline; filename="kien.jpg"
Content-Transfer-Encoding: base64

/9j/4AAQSkZJRg==
"""

INLINE_HTML_EML = b"""\
MIME-Version: 1.0
Subject: inline html
From: sender@example.com
To: recipient@example.com
Content-Type: text/html; charset=UTF-8; name="index.html"
Content-Disposition: inline; filename="index.html"

<p>hello</p>
"""


# ------------------------------------------------------------------
# Builders
# ------------------------------------------------------------------


def _build_mixed_email(
    *,
    body_text: str = "Plain body",
    body_html: str = "<p>HTML body</p>",
    attachments: list[tuple[str, str, bytes]] | None = None,
) -> bytes:
    """Build a multipart/mixed email with an alternative body and attachments."""
    msg = MIMEMultipart("mixed")
    msg["Subject"] = "Multipart Email"
    msg["From"] = "Sender <sender@example.com>"
    msg["To"] = "recipient@example.com"
    msg["Message-ID"] = "<multi-001@example.com>"
    msg["Date"] = "Mon, 01 Jun 2025 12:00:00 +0000"

    alt = MIMEMultipart("alternative")
    alt.attach(MIMEText(body_text, "plain"))
    alt.attach(MIMEText(body_html, "html"))
    msg.attach(alt)

    for filename, content_type, payload in attachments or []:
        maintype, subtype = content_type.split("/", 1)
        part = MIMEBase(maintype, subtype)
        part.set_payload(payload)
        encoders.encode_base64(part)
        part.add_header("Content-Disposition", "attachment", filename=filename)
        msg.attach(part)

    return msg.as_bytes()


@pytest.fixture
def config() -> MimeConfig:
    return MimeConfig()


@pytest.fixture
def mixed_eml_bytes() -> bytes:
    return _build_mixed_email(
        attachments=[
            ("report.pdf", "application/pdf", b"%PDF-1.4 fake pdf content"),
            ("data.csv", "text/csv", b"col1,col2\na,b\n"),
        ],
    )
