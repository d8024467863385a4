from __future__ import annotations

import argparse
import mimetypes
from pathlib import Path
import sys

from aurora.config import Settings, configure_logging, get_settings
from aurora.db import get_engine
from aurora.services.rag import ingest_upload
from aurora.services.rag.errors import RagError
from aurora.services.rag.index_store import IndexStore, JsonIndexStore, SqlIndexStore


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="aurora-ingest",
        description="Ingest local documents (.pdf, .docx or plain text) into the retrieval index",
    )
    parser.add_argument("paths", nargs="+", help="Files to ingest")
    parser.add_argument(
        "--store-path",
        default=settings.rag_store_path,
        help="JSON index store path (ignored when RAG_STORE_BACKEND=sql)",
    )
    parser.add_argument(
        "--max-chars",
        type=int,
        default=settings.rag_chunk_max_chars,
        help="Maximum chunk size in characters",
    )
    return parser


def _resolve_store(settings: Settings, store_path: str) -> IndexStore:
    if settings.rag_store_backend == "sql":
        return SqlIndexStore(get_engine())
    return JsonIndexStore(Path(store_path))


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(settings)
    store = _resolve_store(settings, args.store_path)

    failures = 0
    for raw_path in args.paths:
        path = Path(raw_path)
        try:
            summary = ingest_upload(
                store,
                content=path.read_bytes(),
                filename=path.name,
                media_type=mimetypes.guess_type(path.name)[0],
                max_chars=args.max_chars,
            )
        except (OSError, RagError) as exc:
            failures += 1
            print(f"[aurora-ingest] failed path={path} error={exc}", file=sys.stderr, flush=True)
            continue

        print(
            "[aurora-ingest] completed "
            f"id={summary.doc_id} "
            f"name={summary.name} "
            f"chunks={summary.chunk_count}",
            flush=True,
        )

    if failures:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
