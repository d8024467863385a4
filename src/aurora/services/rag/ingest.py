from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
import logging
from threading import Lock
import uuid

from aurora.services.rag.chunker import DEFAULT_MAX_CHARS, chunk_text
from aurora.services.rag.errors import EmptyContentError, InternalError
from aurora.services.rag.extractor import extract_text
from aurora.services.rag.index_store import IndexStore
from aurora.services.rag.tokenizer import tokenize
from aurora.services.rag.types import ChunkRecord, DocumentMeta, Index, IngestionSummary

logger = logging.getLogger(__name__)

UNTITLED_DOCUMENT = "untitled"

# Ingestion is load-modify-save on the whole index; one writer at a time.
_INGEST_LOCK = Lock()


def _new_id() -> str:
    return str(uuid.uuid4())


def term_frequencies(tokens: list[str]) -> dict[str, float]:
    counts = Counter(tokens)
    if not counts:
        return {}
    max_count = max(counts.values())
    return {term: count / max_count for term, count in counts.items()}


def index_document(
    index: Index,
    *,
    doc_id: str,
    name: str,
    text: str,
    max_chars: int = DEFAULT_MAX_CHARS,
) -> tuple[Index, int]:
    """Add one document to a copy of ``index``.

    Returns the updated index and the number of chunks the document produced.
    ``index`` itself is left untouched.
    """
    if not text.strip():
        raise EmptyContentError()

    updated = index.copy()
    chunks = chunk_text(text, max_chars=max_chars)

    for chunk in chunks:
        term_frequency = term_frequencies(tokenize(chunk))
        for term in term_frequency:
            updated.document_frequency[term] = updated.document_frequency.get(term, 0) + 1

        updated.chunks.append(
            ChunkRecord(
                id=_new_id(),
                doc_id=doc_id,
                text=chunk,
                term_frequency=term_frequency,
            )
        )
        updated.total_chunks += 1

    updated.documents[doc_id] = DocumentMeta(
        id=doc_id,
        name=name,
        chunk_count=len(chunks),
        uploaded_at=datetime.now(timezone.utc).isoformat(),
    )
    return updated, len(chunks)


def ingest_document(
    store: IndexStore,
    *,
    name: str,
    text: str,
    max_chars: int = DEFAULT_MAX_CHARS,
    doc_id: str | None = None,
) -> IngestionSummary:
    if not text.strip():
        raise EmptyContentError()

    resolved_doc_id = doc_id or _new_id()

    with _INGEST_LOCK:
        index = store.load()
        updated, chunk_count = index_document(
            index,
            doc_id=resolved_doc_id,
            name=name,
            text=text,
            max_chars=max_chars,
        )
        try:
            store.save(updated)
        except Exception as exc:
            raise InternalError(f"Failed to persist index: {exc}") from exc

    logger.info(
        "Ingested document id=%s name=%s chunks=%d total_chunks=%d",
        resolved_doc_id,
        name,
        chunk_count,
        updated.total_chunks,
    )
    return IngestionSummary(doc_id=resolved_doc_id, name=name, chunk_count=chunk_count)


def ingest_upload(
    store: IndexStore,
    *,
    content: bytes,
    filename: str | None,
    media_type: str | None = None,
    max_chars: int = DEFAULT_MAX_CHARS,
) -> IngestionSummary:
    text = extract_text(content, filename=filename, media_type=media_type)
    return ingest_document(
        store,
        name=filename or UNTITLED_DOCUMENT,
        text=text,
        max_chars=max_chars,
    )
