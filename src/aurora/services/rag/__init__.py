from aurora.services.rag.ingest import ingest_document, ingest_upload
from aurora.services.rag.query import query_store, search_index
from aurora.services.rag.types import IngestionSummary, QueryHit, QueryOutcome

__all__ = [
    "IngestionSummary",
    "QueryHit",
    "QueryOutcome",
    "ingest_document",
    "ingest_upload",
    "query_store",
    "search_index",
]
