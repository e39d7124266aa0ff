"""
Overlay extracted key terms onto formatted note markup.

Rules applied to every term:
  - longer terms claim text before shorter ones, so "cell membrane" is wrapped
    whole and "cell" cannot split it
  - whole words only, case-insensitive ("cell" never matches inside "cellular")
  - occurrences inside a tag (attribute values, tag names) are left alone
  - blank terms are ignored

All spans are located on the unmodified input and rendered in one pass, so
the markers inserted for one term are never seen while matching another.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence, Tuple

Span = Tuple[int, int]

DEFAULT_TAG = "mark"


def _term_pattern(term: str) -> re.Pattern[str]:
    # Lookarounds instead of \b so terms ending in punctuation ("C++") still match
    return re.compile(rf"(?<!\w){re.escape(term)}(?!\w)", re.IGNORECASE)


def is_inside_tag(text: str, position: int) -> bool:
    """True when ``position`` sits between a '<' and its closing '>'."""
    last_open = text.rfind("<", 0, position)
    if last_open == -1:
        return False
    last_close = text.rfind(">", 0, position)
    return last_open > last_close


def _overlaps(span: Span, claimed: Sequence[Span]) -> bool:
    start, end = span
    return any(start < c_end and c_start < end for c_start, c_end in claimed)


def order_terms(terms: Iterable[str]) -> List[str]:
    """Non-blank terms, stripped, longest first (ties keep input order)."""
    cleaned = [term.strip() for term in terms if term and term.strip()]
    return sorted(cleaned, key=len, reverse=True)


def find_term_spans(text: str, terms: Iterable[str]) -> List[Span]:
    claimed: List[Span] = []
    for term in order_terms(terms):
        for match in _term_pattern(term).finditer(text):
            span = match.span()
            if is_inside_tag(text, span[0]):
                continue
            if _overlaps(span, claimed):
                continue
            claimed.append(span)
    return sorted(claimed)


def highlight_key_terms(text: str, terms: Sequence[str], tag: str = DEFAULT_TAG) -> str:
    """Return ``text`` with each occurrence of each term wrapped in ``<tag>``."""
    if not text or not terms:
        return text

    spans = find_term_spans(text, terms)
    if not spans:
        return text

    parts: List[str] = []
    cursor = 0
    for start, end in spans:
        parts.append(text[cursor:start])
        parts.append(f"<{tag}>{text[start:end]}</{tag}>")
        cursor = end
    parts.append(text[cursor:])
    return "".join(parts)


def remove_highlights(text: str, tag: str = DEFAULT_TAG) -> str:
    """Strip ``<tag>`` wrappers added by :func:`highlight_key_terms`.

    Every ``<tag>`` element is unwrapped, including any the input already
    carried, so the round trip is exact only for text without ``<tag>`` of
    its own. Pick another ``tag`` when the source may contain ``<mark>``.
    """
    if not text:
        return text
    pattern = re.compile(rf"<{re.escape(tag)}>(.*?)</{re.escape(tag)}>", re.DOTALL)
    return pattern.sub(r"\1", text)
