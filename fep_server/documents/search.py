"""
Search — Keyword scoring and snippet extraction.

Deliberately simple: one point per query word found in the text, two
bonus points per matched word when the whole query appears verbatim.
"""

from __future__ import annotations

from typing import List


def _words(query: str) -> List[str]:
    return [w for w in query.lower().split() if w]


def calculate_score(text: str, query: str) -> int:
    """Score text against a query (case-insensitive)."""
    lower_text = text.lower()
    lower_query = query.lower()
    phrase_match = lower_query in lower_text

    score = 0
    for word in _words(query):
        if word in lower_text:
            score += 1
            if phrase_match:
                score += 2
    return score


def get_snippet(text: str, query: str, max_length: int = 200) -> str:
    """Excerpt of text around the earliest query word match."""
    lower_text = text.lower()

    first_match = -1
    for word in _words(query):
        idx = lower_text.find(word)
        if idx != -1 and (first_match == -1 or idx < first_match):
            first_match = idx

    if first_match == -1:
        return text[:max_length] + ("..." if len(text) > max_length else "")

    start = max(0, first_match - 50)
    end = min(len(text), start + max_length)
    snippet = text[start:end]

    if start > 0:
        snippet = "..." + snippet
    if end < len(text):
        snippet = snippet + "..."
    return snippet
