from __future__ import annotations

from collections.abc import Callable
import io

from docx import Document
from pypdf import PdfReader

from aurora.services.rag.errors import ExtractionError

PDF_MEDIA_TYPE = "application/pdf"


def _extract_pdf(content: bytes) -> str:
    reader = PdfReader(io.BytesIO(content))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _extract_docx(content: bytes) -> str:
    document = Document(io.BytesIO(content))
    return "\n".join(paragraph.text for paragraph in document.paragraphs)


def _extract_plain(content: bytes) -> str:
    return content.decode("utf-8", errors="replace")


def select_extractor(filename: str | None, media_type: str | None) -> Callable[[bytes], str]:
    name = (filename or "").lower()
    media = media_type or ""

    if name.endswith(".pdf") or media == PDF_MEDIA_TYPE:
        return _extract_pdf
    if name.endswith(".docx") or "word" in media:
        return _extract_docx
    return _extract_plain


def extract_text(content: bytes, *, filename: str | None = None, media_type: str | None = None) -> str:
    extractor = select_extractor(filename, media_type)
    try:
        return extractor(content)
    except Exception as exc:
        raise ExtractionError(f"Could not extract text from {filename or 'upload'}: {exc}") from exc
