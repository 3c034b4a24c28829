"""Single-file uploads: plain HTML, MHTML archives and ZIP archives."""

from __future__ import annotations

import re
from email import policy
from email.message import Message
from email.parser import BytesParser
from pathlib import PurePath
from typing import Optional

from ..errors import NoHtmlContentError, UnsupportedFileError

HTML_FILE_SUFFIXES = (".html", ".htm")
MHTML_FILE_SUFFIXES = (".mhtml", ".mht")
ARCHIVE_FILE_SUFFIXES = (".zip",)

_HTML_SPAN_RE = re.compile(r"<html[^>]*>.*</html>", re.IGNORECASE | re.DOTALL)


def classify_upload(filename: str) -> str:
    """Return ``html``, ``mhtml`` or ``archive`` for a supported upload name."""
    suffix = PurePath(filename).suffix.lower()
    if suffix in HTML_FILE_SUFFIXES:
        return "html"
    if suffix in MHTML_FILE_SUFFIXES:
        return "mhtml"
    if suffix in ARCHIVE_FILE_SUFFIXES:
        return "archive"
    raise UnsupportedFileError(
        f"Unsupported file type '{suffix or filename}'. Use .html, .htm, .mhtml, .mht or .zip."
    )


def decode_text(payload: bytes, charset: Optional[str] = None) -> str:
    try:
        return payload.decode(charset or "utf-8-sig", errors="replace")
    except LookupError:
        return payload.decode("utf-8-sig", errors="replace")


def extract_mhtml_html(payload: bytes) -> str:
    """Return the first HTML document carried by an MHTML file.

    The first ``text/html`` MIME part wins, with its transfer encoding
    decoded. Files that do not parse as MIME fall back to the first
    ``<html>...</html>`` span of the raw text.
    """
    message = BytesParser(policy=policy.default).parsebytes(payload)
    html = _first_html_part(message)
    if html is not None:
        return html

    match = _HTML_SPAN_RE.search(decode_text(payload))
    if match is None:
        raise NoHtmlContentError("No HTML content found in MHTML file")
    return match.group(0)


def _first_html_part(message: Message) -> Optional[str]:
    if not message.is_multipart():
        # A bare document without MIME headers parses as a single text/plain body.
        return None
    for part in message.walk():
        if part.is_multipart() or part.get_content_type() != "text/html":
            continue
        body = part.get_payload(decode=True)
        if not body:
            continue
        return decode_text(body, part.get_content_charset())
    return None


__all__ = [
    "ARCHIVE_FILE_SUFFIXES",
    "HTML_FILE_SUFFIXES",
    "MHTML_FILE_SUFFIXES",
    "classify_upload",
    "decode_text",
    "extract_mhtml_html",
]
