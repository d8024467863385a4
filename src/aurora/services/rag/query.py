from __future__ import annotations

from collections import Counter
from collections.abc import Collection, Mapping
import math

from aurora.services.rag.errors import EmptyIndexError
from aurora.services.rag.index_store import IndexStore
from aurora.services.rag.tokenizer import tokenize
from aurora.services.rag.types import Index, QueryHit, QueryOutcome

DEFAULT_TOP_K = 3
NORM_EPSILON = 1e-10


def _idf(term: str, index: Index) -> float:
    # Recomputed on every query; the corpus size and df keep growing.
    total = max(1, index.total_chunks)
    return math.log(total / (1 + index.document_frequency.get(term, 0)))


def _tfidf_vector(term_frequency: Mapping[str, float], index: Index) -> dict[str, float]:
    return {term: weight * _idf(term, index) for term, weight in term_frequency.items()}


def _query_vector(tokens: list[str], index: Index) -> dict[str, float]:
    counts = Counter(tokens)
    max_count = max(counts.values())
    return _tfidf_vector({term: count / max_count for term, count in counts.items()}, index)


def _norm(vector: Mapping[str, float]) -> float:
    return math.sqrt(sum(value * value for value in vector.values())) + NORM_EPSILON


def _cosine(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    dot = sum(value * b[term] for term, value in a.items() if term in b)
    score = dot / (_norm(a) * _norm(b))
    return score if math.isfinite(score) else 0.0


def search_index(
    index: Index,
    *,
    message: str,
    top_k: int = DEFAULT_TOP_K,
    doc_filter: Collection[str] | None = None,
) -> QueryOutcome:
    if top_k < 1:
        raise ValueError("top_k must be >= 1")
    if not index.chunks:
        raise EmptyIndexError()

    tokens = tokenize(message)
    if not tokens:
        return QueryOutcome(status="insufficient_query")

    query_vector = _query_vector(tokens, index)
    allowed_docs = set(doc_filter) if doc_filter else None

    hits = [
        QueryHit(
            chunk_id=chunk.id,
            doc_id=chunk.doc_id,
            text=chunk.text,
            score=_cosine(query_vector, _tfidf_vector(chunk.term_frequency, index)),
        )
        for chunk in index.chunks
        if allowed_docs is None or chunk.doc_id in allowed_docs
    ]

    # list.sort is stable, so equal scores keep ingestion order
    hits.sort(key=lambda hit: hit.score, reverse=True)
    top_hits = [hit for hit in hits[:top_k] if hit.score > 0]

    if not top_hits:
        return QueryOutcome(status="no_relevant_content")
    return QueryOutcome(status="ok", hits=top_hits)


def query_store(
    store: IndexStore,
    *,
    message: str,
    top_k: int = DEFAULT_TOP_K,
    doc_filter: Collection[str] | None = None,
) -> QueryOutcome:
    return search_index(store.load(), message=message, top_k=top_k, doc_filter=doc_filter)


def format_sources(hits: list[QueryHit]) -> str:
    return "\n\n---\n\n".join(
        f"[Source {position}] (doc: {hit.doc_id})\n\n{hit.text}"
        for position, hit in enumerate(hits, start=1)
    )
