from functools import lru_cache
import logging
from pathlib import Path
from typing import Annotated, Any

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from aurora.config import configure_logging, get_settings
from aurora.db import get_engine
from aurora.services.rag import ingest_upload, query_store
from aurora.services.rag.errors import (
    InternalError,
    InvalidRequestError,
    MissingInputError,
    RagError,
    TransportError,
)
from aurora.services.rag.index_store import IndexStore, JsonIndexStore, SqlIndexStore
from aurora.services.rag.query import format_sources
from aurora.services.rag.types import QueryHit

logger = logging.getLogger(__name__)

app = FastAPI(title="Aurora Document Q&A API", version="0.1.0")

SENTINEL_ANSWERS = {
    "insufficient_query": "Please ask using more keywords.",
    "no_relevant_content": "No relevant content found in uploaded materials.",
}


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    message: str | None = None
    top_k: int | None = Field(default=None, ge=1, le=20, alias="topK")
    docs: list[str] | None = None


@lru_cache
def _sql_index_store(engine: Engine) -> SqlIndexStore:
    # one store per engine so the snapshot table is created once
    return SqlIndexStore(engine)


def get_index_store() -> IndexStore:
    settings = get_settings()
    if settings.rag_store_backend == "sql":
        return _sql_index_store(get_engine())
    return JsonIndexStore(Path(settings.rag_store_path))


def _error_response(exc: RagError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(RagError)
async def handle_rag_error(request: Request, exc: RagError) -> JSONResponse:
    return _error_response(exc)


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        return _error_response(TransportError())
    return await http_exception_handler(request, exc)


def _describe_validation_error(error: dict[str, Any]) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{field or 'body'}: {error.get('msg', 'invalid value')}"


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = [_describe_validation_error(error) for error in exc.errors()]
    return _error_response(InvalidRequestError("; ".join(problems) or None))


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(InternalError(str(exc) or None))


def _source(hit: QueryHit) -> dict[str, object]:
    return {
        "chunk_id": hit.chunk_id,
        "doc_id": hit.doc_id,
        "score": round(hit.score, 6),
        "text": hit.text,
    }


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/rag/upload")
def upload_document(
    store: Annotated[IndexStore, Depends(get_index_store)],
    file: Annotated[UploadFile | None, File()] = None,
) -> dict[str, Any]:
    if file is None:
        raise MissingInputError("No file uploaded (field name must be `file`)")

    settings = get_settings()

    try:
        summary = ingest_upload(
            store,
            content=file.file.read(),
            filename=file.filename,
            media_type=file.content_type,
            max_chars=settings.rag_chunk_max_chars,
        )
    except RagError:
        raise
    except Exception as exc:
        logger.exception("Upload processing failed for %s", file.filename)
        raise InternalError(str(exc) or "Upload processing failed") from exc

    return {"id": summary.doc_id, "name": summary.name, "chunks": summary.chunk_count}


@app.post("/rag/chat")
def chat(
    store: Annotated[IndexStore, Depends(get_index_store)],
    request: ChatRequest | None = None,
) -> dict[str, Any]:
    message = request.message if request is not None else None
    if not message:
        raise MissingInputError("No message provided")

    settings = get_settings()
    top_k = request.top_k or settings.rag_default_top_k

    try:
        outcome = query_store(store, message=message, top_k=top_k, doc_filter=request.docs)
    except RagError:
        raise
    except Exception as exc:
        logger.exception("Query failed")
        raise InternalError(str(exc) or "Server error") from exc

    if outcome.status != "ok":
        return {"status": outcome.status, "answer": SENTINEL_ANSWERS[outcome.status], "sources": []}

    return {
        "status": outcome.status,
        "answer": format_sources(outcome.hits),
        "sources": [_source(hit) for hit in outcome.hits],
    }


@app.get("/rag/documents")
def list_documents(store: Annotated[IndexStore, Depends(get_index_store)]) -> list[dict[str, Any]]:
    try:
        index = store.load()
    except Exception as exc:
        logger.exception("Listing documents failed")
        raise InternalError(str(exc) or "Server error") from exc

    return [
        {
            "id": document.id,
            "name": document.name,
            "chunk_count": document.chunk_count,
            "uploaded_at": document.uploaded_at,
        }
        for document in index.documents.values()
    ]


def run() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run("aurora.main:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    run()
