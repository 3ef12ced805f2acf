"""Content fingerprinting and plain-text helpers.

Fingerprints are SHA-256 digests of normalized plain text: markup stripped,
lowercased, whitespace runs collapsed to one space, ends trimmed. Two texts
that differ only in markup, case or spacing therefore share a fingerprint.

Blank input yields the empty string, which callers treat as "no fingerprint"
and never as a duplicate key.
"""

import hashlib
import re
from typing import Optional

from bs4 import BeautifulSoup

EMPTY_FINGERPRINT = ""

_WHITESPACE_RE = re.compile(r"\s+")


def html_to_text(content: Optional[str]) -> str:
    """Strip markup and collapse whitespace."""
    if not content or not content.strip():
        return ""
    text = BeautifulSoup(content, "html.parser").get_text(" ")
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_text(content: Optional[str]) -> str:
    return html_to_text(content).lower()


def generate_content_hash(content: Optional[str]) -> str:
    """Return the 64-character hex fingerprint of ``content``, or ``""`` if it has no text."""
    normalized = normalize_text(content)
    if not normalized:
        return EMPTY_FINGERPRINT
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def create_snippet(content: Optional[str], max_length: int = 200) -> str:
    """Plain-text preview of at most ``max_length`` characters, ellipsis-truncated."""
    text = html_to_text(content)
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."
