from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


@dataclass(frozen=True)
class DocumentMeta:
    id: str
    name: str
    chunk_count: int
    uploaded_at: str


@dataclass(frozen=True)
class ChunkRecord:
    id: str
    doc_id: str
    text: str
    term_frequency: dict[str, float]


@dataclass
class Index:
    documents: dict[str, DocumentMeta] = field(default_factory=dict)
    chunks: list[ChunkRecord] = field(default_factory=list)
    document_frequency: dict[str, int] = field(default_factory=dict)
    total_chunks: int = 0

    def copy(self) -> Index:
        return Index(
            documents=dict(self.documents),
            chunks=list(self.chunks),
            document_frequency=dict(self.document_frequency),
            total_chunks=self.total_chunks,
        )


@dataclass(frozen=True)
class IngestionSummary:
    doc_id: str
    name: str
    chunk_count: int


@dataclass(frozen=True)
class QueryHit:
    chunk_id: str
    doc_id: str
    text: str
    score: float


QueryStatus = Literal["ok", "insufficient_query", "no_relevant_content"]


@dataclass(frozen=True)
class QueryOutcome:
    status: QueryStatus
    hits: list[QueryHit] = field(default_factory=list)
