from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aurora.db import init_db
from aurora.models import IndexSnapshotRecord
from aurora.services.rag.types import ChunkRecord, DocumentMeta, Index

logger = logging.getLogger(__name__)

INDEX_FORMAT_VERSION = "v1"
DEFAULT_SNAPSHOT_ID = "default"


class IndexStore(Protocol):
    def load(self) -> Index: ...

    def save(self, index: Index) -> None: ...


def index_to_payload(index: Index) -> dict[str, Any]:
    return {
        "version": INDEX_FORMAT_VERSION,
        "saved_at": datetime.now(timezone.utc).isoformat(),
        "documents": {
            doc_id: {
                "id": document.id,
                "name": document.name,
                "chunk_count": document.chunk_count,
                "uploaded_at": document.uploaded_at,
            }
            for doc_id, document in index.documents.items()
        },
        "chunks": [
            {
                "id": chunk.id,
                "doc_id": chunk.doc_id,
                "text": chunk.text,
                "term_frequency": chunk.term_frequency,
            }
            for chunk in index.chunks
        ],
        "document_frequency": index.document_frequency,
        "total_chunks": index.total_chunks,
    }


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _document_from_payload(doc_id: str, item: object) -> DocumentMeta:
    if not isinstance(item, dict):
        raise ValueError(f"document {doc_id!r} must be an object")

    name = item.get("name")
    chunk_count = item.get("chunk_count")
    uploaded_at = item.get("uploaded_at")
    if item.get("id") != doc_id or not isinstance(name, str):
        raise ValueError(f"document {doc_id!r} has an invalid id or name")
    if not _is_int(chunk_count) or not isinstance(uploaded_at, str):
        raise ValueError(f"document {doc_id!r} has an invalid chunk_count or uploaded_at")

    return DocumentMeta(id=doc_id, name=name, chunk_count=chunk_count, uploaded_at=uploaded_at)


def _chunk_from_payload(item: object) -> ChunkRecord:
    if not isinstance(item, dict):
        raise ValueError("chunk entries must be objects")

    chunk_id = item.get("id")
    doc_id = item.get("doc_id")
    text = item.get("text")
    term_frequency = item.get("term_frequency")
    if not isinstance(chunk_id, str) or not isinstance(doc_id, str) or not isinstance(text, str):
        raise ValueError("chunk entries need string id, doc_id and text")
    if not isinstance(term_frequency, dict) or not all(
        isinstance(term, str) and _is_number(weight) for term, weight in term_frequency.items()
    ):
        raise ValueError(f"chunk {chunk_id!r} has an invalid term_frequency map")

    return ChunkRecord(
        id=chunk_id,
        doc_id=doc_id,
        text=text,
        term_frequency={term: float(weight) for term, weight in term_frequency.items()},
    )


def index_from_payload(payload: object) -> Index:
    if not isinstance(payload, dict):
        raise ValueError("index payload must be an object")

    raw_documents = payload.get("documents")
    raw_chunks = payload.get("chunks")
    raw_frequency = payload.get("document_frequency")
    total_chunks = payload.get("total_chunks")

    if not isinstance(raw_documents, dict):
        raise ValueError("'documents' must be an object")
    if not isinstance(raw_chunks, list):
        raise ValueError("'chunks' must be a list")
    if not isinstance(raw_frequency, dict) or not all(
        isinstance(term, str) and _is_int(count) for term, count in raw_frequency.items()
    ):
        raise ValueError("'document_frequency' must map terms to integers")
    if not _is_int(total_chunks) or total_chunks != len(raw_chunks):
        raise ValueError("'total_chunks' must equal the number of chunks")

    documents = {
        doc_id: _document_from_payload(doc_id, item) for doc_id, item in raw_documents.items()
    }
    chunks = [_chunk_from_payload(item) for item in raw_chunks]
    for chunk in chunks:
        if chunk.doc_id not in documents:
            raise ValueError(f"chunk {chunk.id!r} references unknown document {chunk.doc_id!r}")

    return Index(
        documents=documents,
        chunks=chunks,
        document_frequency=dict(raw_frequency),
        total_chunks=total_chunks,
    )


class JsonIndexStore:
    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Index:
        if not self._path.exists():
            logger.debug("Index store %s not found; starting from an empty index", self._path)
            return Index()

        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
            return index_from_payload(payload)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            logger.warning(
                "Index store %s is unreadable or malformed (%s); treating it as empty",
                self._path,
                exc,
            )
            return Index()

    def save(self, index: Index) -> None:
        tmp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
        self._path.parent.mkdir(parents=True, exist_ok=True)

        try:
            tmp_path.write_text(
                json.dumps(index_to_payload(index), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            os.replace(tmp_path, self._path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()


class SqlIndexStore:
    """Keeps the whole index as one JSON row in the ``index_snapshots`` table."""

    def __init__(self, engine: Engine, *, snapshot_id: str = DEFAULT_SNAPSHOT_ID) -> None:
        self._engine = engine
        self._snapshot_id = snapshot_id
        init_db(engine)

    def load(self) -> Index:
        try:
            with Session(self._engine) as session:
                record = session.get(IndexSnapshotRecord, self._snapshot_id)
                payload = record.payload_json if record is not None else None
        except (SQLAlchemyError, ValueError) as exc:
            logger.warning(
                "Index snapshot %r could not be read (%s); treating it as empty",
                self._snapshot_id,
                exc,
            )
            return Index()

        if payload is None:
            logger.debug("Index snapshot %r not found; starting from an empty index", self._snapshot_id)
            return Index()

        try:
            return index_from_payload(payload)
        except ValueError as exc:
            logger.warning(
                "Index snapshot %r is malformed (%s); treating it as empty",
                self._snapshot_id,
                exc,
            )
            return Index()

    def save(self, index: Index) -> None:
        with Session(self._engine) as session:
            session.merge(
                IndexSnapshotRecord(
                    id=self._snapshot_id,
                    payload_json=index_to_payload(index),
                    updated_at=datetime.now(timezone.utc),
                )
            )
            session.commit()
