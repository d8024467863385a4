from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from aurora.config import get_settings
from aurora.db import get_engine
from aurora.main import _sql_index_store, app


def _clear_caches() -> None:
    get_settings.cache_clear()
    get_engine.cache_clear()
    _sql_index_store.cache_clear()


@pytest.fixture(autouse=True)
def reset_api_caches() -> Iterator[None]:
    _clear_caches()
    yield
    _clear_caches()


@pytest.fixture
def store_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    path = tmp_path / "rag" / "vectorstore.json"
    monkeypatch.setenv("RAG_STORE_BACKEND", "json")
    monkeypatch.setenv("RAG_STORE_PATH", str(path))
    return path


@pytest.fixture
def client(store_path: Path) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
