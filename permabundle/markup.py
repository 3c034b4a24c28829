"""Regex helpers for locating regions and dependency tags in markup."""

from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

from .models import Reference

HEAD_RE = re.compile(r"<head\b[^>]*>([\s\S]*?)</head>", re.IGNORECASE)
BODY_RE = re.compile(r"<body\b[^>]*>([\s\S]*?)</body>", re.IGNORECASE)
TITLE_RE = re.compile(r"<title\b[^>]*>([\s\S]*?)</title>", re.IGNORECASE)
LINK_TAG_RE = re.compile(r"<link\b[^>]*>", re.IGNORECASE)
DEPENDENCY_TAG_RE = re.compile(
    r"<link\b[^>]*>|<script\b[^>]*>\s*</script\s*>", re.IGNORECASE
)
IMG_TAG_RE = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
STRAY_TAG_RE = re.compile(r"</?(?:html|head|body)\b[^>]*>", re.IGNORECASE)
ATTRIBUTE_RE = re.compile(
    r"""([^\s=/>"']+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>"']+)))?"""
)

EXTERNAL_PREFIXES: Tuple[str, ...] = ("http://", "https://", "//")


def parse_attributes(tag: str) -> Dict[str, str]:
    """Return lower-cased attribute names mapped to their (unquoted) values."""
    inner = re.sub(r"^<\s*[\w-]+", "", tag).rstrip(">").rstrip("/")
    attributes: Dict[str, str] = {}
    for match in ATTRIBUTE_RE.finditer(inner):
        name = match.group(1).lower()
        value = next((group for group in match.groups()[1:] if group is not None), "")
        attributes.setdefault(name, value)
    return attributes


def is_external(value: str) -> bool:
    return value.strip().lower().startswith(EXTERNAL_PREFIXES)


def stylesheet_href(tag: str) -> Optional[str]:
    """Return the href of a ``<link rel=stylesheet>`` tag, else None."""
    attributes = parse_attributes(tag)
    rel_tokens = attributes.get("rel", "").lower().split()
    if "stylesheet" not in rel_tokens:
        return None
    href = attributes.get("href", "").strip()
    return href or None


def reference_from_tag(tag: str) -> Optional[Reference]:
    """Return the reference declared by a link or script tag, else None."""
    if tag[:5].lower() == "<link":
        href = stylesheet_href(tag)
        if href:
            return Reference(kind=Reference.STYLESHEET, value=href, tag=tag)
        return None
    opening = tag[: tag.index(">") + 1]
    src = parse_attributes(opening).get("src", "").strip()
    if src:
        return Reference(kind=Reference.SCRIPT, value=src, tag=tag)
    return None


def split_regions(document: str) -> Tuple[str, str]:
    """Split a document into (head, body) inner markup.

    Without a head pair the head region is empty; without a body pair the
    whole document is the body region.
    """
    head_match = HEAD_RE.search(document)
    body_match = BODY_RE.search(document)
    head = head_match.group(1) if head_match else ""
    body = body_match.group(1) if body_match else document
    return head, body


def extract_title(document: str) -> Optional[str]:
    match = TITLE_RE.search(document)
    if not match:
        return None
    title = match.group(1).strip()
    return title or None


def strip_stray_tags(markup: str) -> str:
    return STRAY_TAG_RE.sub("", markup)


def strip_title(markup: str) -> str:
    return TITLE_RE.sub("", markup)


__all__ = [
    "extract_title",
    "is_external",
    "parse_attributes",
    "reference_from_tag",
    "split_regions",
    "strip_stray_tags",
    "strip_title",
    "stylesheet_href",
]
