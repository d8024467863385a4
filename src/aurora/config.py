from dataclasses import dataclass
from functools import lru_cache
import logging
import os

STORE_BACKENDS = {"json", "sql"}


def _to_bool(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(value: str | None, *, default: int, minimum: int) -> int:
    if value is None:
        return default
    parsed = int(value)
    return max(minimum, parsed)


def _to_backend(value: str | None) -> str:
    backend = (value or "json").strip().lower()
    if backend not in STORE_BACKENDS:
        raise ValueError(f"RAG_STORE_BACKEND must be one of {sorted(STORE_BACKENDS)}, got {value!r}")
    return backend


@dataclass(frozen=True)
class Settings:
    database_url: str
    db_echo: bool
    rag_store_backend: str
    rag_store_path: str
    rag_chunk_max_chars: int
    rag_default_top_k: int
    log_level: str


@lru_cache
def get_settings() -> Settings:
    return Settings(
        database_url=os.getenv("API_DATABASE_URL", "sqlite+pysqlite:///data/aurora.db"),
        db_echo=_to_bool(os.getenv("API_DB_ECHO"), default=False),
        rag_store_backend=_to_backend(os.getenv("RAG_STORE_BACKEND")),
        rag_store_path=os.getenv("RAG_STORE_PATH", "data/vectorstore.json"),
        rag_chunk_max_chars=_to_int(os.getenv("RAG_CHUNK_MAX_CHARS"), default=1200, minimum=1),
        rag_default_top_k=_to_int(os.getenv("RAG_DEFAULT_TOP_K"), default=3, minimum=1),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
