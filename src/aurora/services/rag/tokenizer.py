from __future__ import annotations

import re

STOP_WORDS = frozenset(
    {
        "the", "and", "a", "an", "of", "in", "on", "to", "is", "are", "for", "with",
        "that", "this", "it", "as", "by", "at", "from", "be", "or", "we", "you",
    }
)

_LINE_BREAKS = re.compile(r"[\r\n]+")
_NON_TERM_CHARS = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def tokenize(text: str) -> list[str]:
    normalized = _LINE_BREAKS.sub(" ", text.lower())
    normalized = _NON_TERM_CHARS.sub(" ", normalized)
    return [
        token
        for token in _WHITESPACE.split(normalized)
        if len(token) > 2 and token not in STOP_WORDS
    ]
