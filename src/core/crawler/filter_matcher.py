"""Keyword and regex filtering for candidate items.

A source may carry a keyword list and a regex list. Each non-empty list is
an independent requirement on the combined text (title and body joined by a
space):

- keywords: at least one must occur as a case-insensitive substring
  (an empty keyword occurs in every text)
- regex: at least one pattern must match somewhere, case-insensitively

Empty lists impose no constraint. Patterns that fail to compile are logged
and skipped, so they never match and never raise.
"""

import logging
import re
from functools import lru_cache
from typing import Optional, Pattern, Sequence, Tuple

logger = logging.getLogger(__name__)


def build_combined_text(title: Optional[str], body: Optional[str]) -> str:
    return f"{title or ''} {body or ''}"


@lru_cache(maxsize=512)
def _compile(pattern: str) -> Optional[Pattern[str]]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        logger.warning(
            f"Invalid regex pattern ignored: {pattern}",
            extra={"pattern": pattern, "error": str(e)}
        )
        return None


def compile_patterns(patterns: Sequence[str]) -> Tuple[Pattern[str], ...]:
    """Compile patterns case-insensitively, dropping the malformed ones."""
    compiled = (_compile(p) for p in patterns if p is not None)
    return tuple(p for p in compiled if p is not None)


def matches_keywords(keywords: Optional[Sequence[str]], text: str) -> bool:
    if not keywords:
        return True
    lowered = text.lower()
    return any(keyword.lower() in lowered for keyword in keywords if keyword is not None)


def matches_patterns(patterns: Optional[Sequence[str]], text: str) -> bool:
    if not patterns:
        return True
    return any(p.search(text) for p in compile_patterns(patterns))


def matches_filters(
    keywords: Optional[Sequence[str]],
    patterns: Optional[Sequence[str]],
    title: Optional[str],
    body: Optional[str],
) -> bool:
    """Decide whether a candidate item passes its source's filters.

    Args:
        keywords: Source keyword list, may be empty or None
        patterns: Source regex list, may be empty or None
        title: Candidate title
        body: Candidate body (raw, possibly HTML)

    Returns:
        True if every non-empty filter axis is satisfied
    """
    text = build_combined_text(title, body)

    if not matches_keywords(keywords, text):
        logger.debug("Content does not match keyword filters")
        return False

    if not matches_patterns(patterns, text):
        logger.debug("Content does not match regex filters")
        return False

    return True
