from __future__ import annotations

import re

DEFAULT_MAX_CHARS = 1200
PARAGRAPH_SEPARATOR = "\n\n"

_LINE_BREAKS = re.compile(r"[\r\n]+")


def split_paragraphs(text: str) -> list[str]:
    return [paragraph.strip() for paragraph in _LINE_BREAKS.split(text) if paragraph.strip()]


def chunk_text(text: str, *, max_chars: int = DEFAULT_MAX_CHARS) -> list[str]:
    """Pack paragraphs into chunks of at most ``max_chars`` characters.

    Paragraphs are joined with a blank line while they fit. A paragraph that
    is longer than ``max_chars`` on its own is sliced into fixed-size pieces
    and its tail becomes the start of the next chunk.
    """
    if max_chars <= 0:
        raise ValueError("max_chars must be > 0")

    chunks: list[str] = []
    buffer = ""

    for paragraph in split_paragraphs(text):
        candidate = f"{buffer}{PARAGRAPH_SEPARATOR}{paragraph}" if buffer else paragraph
        if len(candidate) <= max_chars:
            buffer = candidate
            continue

        if buffer.strip():
            chunks.append(buffer.strip())
        buffer = paragraph

        while len(buffer) > max_chars:
            piece = buffer[:max_chars].strip()
            if piece:
                chunks.append(piece)
            buffer = buffer[max_chars:]

    if buffer.strip():
        chunks.append(buffer.strip())

    return chunks
