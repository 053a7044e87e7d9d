"""Tests for photo-up CLI helpers."""
import json
import logging
import os

import pytest

from photo_uploader.cli import (
    CLIError,
    _load_env_file,
    _require_user_id,
    _setup_logging,
    run_cli,
)
from photo_uploader.orchestrator.file_collector import FileCollector


def test_load_env_file(tmp_path, monkeypatch):
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "# comment",
                "INDEX_API_URL=http://localhost:8080",
                "PHOTO_UPLOADER_USER_ID='user-42'",
                "export PHOTO_UPLOADER_DATA_DIR=/tmp/photos",
            ]
        ),
        encoding="utf-8",
    )

    # setenv first so monkeypatch restores the keys _load_env_file writes
    for key in ("INDEX_API_URL", "PHOTO_UPLOADER_USER_ID", "PHOTO_UPLOADER_DATA_DIR"):
        monkeypatch.setenv(key, "placeholder")
        monkeypatch.delenv(key)

    _load_env_file(env_path)

    assert os.environ["INDEX_API_URL"] == "http://localhost:8080"
    assert os.environ["PHOTO_UPLOADER_USER_ID"] == "user-42"
    assert os.environ["PHOTO_UPLOADER_DATA_DIR"] == "/tmp/photos"


def test_load_env_file_missing(tmp_path):
    with pytest.raises(CLIError, match="not found"):
        _load_env_file(tmp_path / "nope.env")


def test_require_user_id(monkeypatch):
    monkeypatch.delenv("PHOTO_UPLOADER_USER_ID", raising=False)
    assert _require_user_id("u1") == "u1"
    with pytest.raises(CLIError):
        _require_user_id(None)
    monkeypatch.setenv("PHOTO_UPLOADER_USER_ID", "from-env")
    assert _require_user_id(None) == "from-env"


def test_setup_logging_defaults_to_silent(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    mode = _setup_logging(debug=False, silent=False, log_level=None)
    assert mode == "silent"
    logging.disable(logging.NOTSET)


def test_setup_logging_debug_mode():
    mode = _setup_logging(debug=True, silent=False, log_level=None)
    assert mode == "DEBUG"
    assert logging.getLogger().isEnabledFor(logging.DEBUG) is True
    logging.disable(logging.NOTSET)


def test_file_collector_expands_folders(tmp_path):
    (tmp_path / "album").mkdir()
    (tmp_path / "album" / "b.jpg").write_bytes(b"b")
    (tmp_path / "album" / "a.png").write_bytes(b"a")
    (tmp_path / "single.gif").write_bytes(b"g")

    paths = FileCollector.collect_paths([tmp_path / "album", tmp_path / "single.gif", tmp_path / "missing"])

    assert [p.name for p in paths] == ["a.png", "b.jpg", "single.gif"]


def test_upload_command_end_to_end(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("INDEX_API_URL", raising=False)
    monkeypatch.delenv("DATASTORE_API_URL", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    (tmp_path / "one.jpg").write_bytes(b"one")
    (tmp_path / "two.png").write_bytes(b"two")
    data_dir = tmp_path / "data"

    code = run_cli(
        ["--user-id", "u1", "--data-dir", str(data_dir), "upload", "--plain", "one.jpg", "two.png"]
    )

    assert code == 0
    records = json.loads((data_dir / "records" / "users" / "u1" / "images.json").read_text(encoding="utf-8"))
    assert sorted(r["fileName"] for r in records) == ["one.jpg", "two.png"]
    assert all(r["storagePath"].startswith("user-images/u1/u1-") for r in records)
    assert len(list((data_dir / "blobs" / "user-images" / "u1").iterdir())) == 2

    assert run_cli(["--user-id", "u1", "--data-dir", str(data_dir), "gallery"]) == 0


def test_upload_command_with_rejected_file_returns_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("INDEX_API_URL", raising=False)
    monkeypatch.delenv("DATASTORE_API_URL", raising=False)
    (tmp_path / "notes.txt").write_text("hello")

    code = run_cli(["--user-id", "u1", "--data-dir", str(tmp_path / "d"), "upload", "--plain", "notes.txt"])

    assert code == 1


def test_missing_user_id_is_an_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PHOTO_UPLOADER_USER_ID", raising=False)
    assert run_cli(["gallery"]) == 1


def test_search_requires_index_url(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("INDEX_API_URL", raising=False)
    assert run_cli(["--user-id", "u1", "search", "beach"]) == 1


def test_search_with_malformed_response_prints_error(tmp_path, monkeypatch, capsys):
    import httpx

    import photo_uploader.services as services

    real_client = services.HTTPAPIClient

    def client_factory(base_url):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="not json"))
        return real_client(base_url, transport=transport)

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("INDEX_API_URL", "https://index.test")
    monkeypatch.setattr(services, "HTTPAPIClient", client_factory)

    assert run_cli(["--user-id", "u1", "search", "beach"]) == 1
    assert "ERROR: search failed" in capsys.readouterr().err


def test_progress_display_counts():
    from photo_uploader.cli_progress import BatchProgressDisplay
    from photo_uploader.models import SourceFile
    from photo_uploader.orchestrator import BatchState, UploadTask

    tasks = [UploadTask(SourceFile("a.jpg", b"a")), UploadTask(SourceFile("b.jpg", b"b"))]
    display = BatchProgressDisplay(live=False)
    display.on_batch_created(BatchState(tasks))
    assert display.summary() == "0 of 2 completed"

    tasks[0].start()
    tasks[0].complete("https://cdn/a")
    display.on_task_update(tasks[0].snapshot())
    tasks[1].start()
    tasks[1].fail("disk full")
    display.on_task_update(tasks[1].snapshot())

    assert display.completed == 1
    assert display.failed == 1
    assert display.summary() == "1 of 2 completed · 1 failed"
