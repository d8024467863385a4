from pathlib import Path

import pytest

from aurora.ingest import main
from aurora.services.rag.index_store import JsonIndexStore


def test_ingest_cli_indexes_files(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("RAG_STORE_BACKEND", "json")
    source = tmp_path / "ops.md"
    source.write_text("predictive maintenance\n\nwarehouse inventory", encoding="utf-8")
    store_path = tmp_path / "rag" / "vectorstore.json"

    main([str(source), "--store-path", str(store_path), "--max-chars", "30"])

    output = capsys.readouterr().out
    assert "[aurora-ingest] completed" in output
    assert "name=ops.md chunks=2" in output
    index = JsonIndexStore(store_path).load()
    assert index.total_chunks == 2


def test_ingest_cli_reports_failures(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("RAG_STORE_BACKEND", "json")
    blank = tmp_path / "blank.txt"
    blank.write_text("   ", encoding="utf-8")
    store_path = tmp_path / "vectorstore.json"

    with pytest.raises(SystemExit) as excinfo:
        main([str(blank), str(tmp_path / "missing.txt"), "--store-path", str(store_path)])

    assert excinfo.value.code == 1
    errors = capsys.readouterr().err
    assert errors.count("[aurora-ingest] failed") == 2
    assert not store_path.exists()
