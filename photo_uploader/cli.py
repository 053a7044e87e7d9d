"""Command line interface for photo_uploader."""
from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from .cli_progress import (
    BatchProgressDisplay,
    render_configuration_summary,
    render_gallery,
    render_search_results,
)
from .errors import UploaderError


DEFAULT_DATA_DIR = ".photo-uploader"


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug or --log-level is provided.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    if silent or (not debug and not log_level and not os.getenv("LOG_LEVEL")):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    elif log_level:
        level = getattr(logging, log_level.upper(), logging.INFO)
    else:
        level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    from rich.logging import RichHandler

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _require_user_id(user_id: Optional[str]) -> str:
    uid = user_id or os.getenv("PHOTO_UPLOADER_USER_ID")
    if not uid:
        raise CLIError("no user id: pass --user-id or set PHOTO_UPLOADER_USER_ID")
    return uid


async def _run_upload(
    sources: Sequence[Path],
    user_id: str,
    data_dir: Path,
    index_url: Optional[str],
    datastore_url: Optional[str],
    live: bool,
) -> int:
    from .models import UploadConfig
    from .orchestrator import BatchOrchestrator
    from .orchestrator.file_collector import FileCollector
    from .services import (
        HTTPAPIClient,
        HTTPRecordStore,
        IndexingClient,
        LocalBinaryStore,
        LocalRecordStore,
        MetadataRepository,
        StaticIdentity,
        StorageService,
    )

    try:
        files = FileCollector.collect_files(sources)
    except OSError as exc:
        raise CLIError(f"could not read selected files: {exc}") from exc
    if not files:
        raise CLIError("no files found in the given paths")

    config = UploadConfig()
    async with contextlib.AsyncExitStack() as stack:
        if datastore_url:
            datastore_api = await stack.enter_async_context(HTTPAPIClient(datastore_url))
            record_store = HTTPRecordStore(datastore_api)
        else:
            record_store = LocalRecordStore(data_dir / "records")

        notifier = None
        if index_url:
            index_api = await stack.enter_async_context(HTTPAPIClient(index_url))
            notifier = IndexingClient(index_api)

        orchestrator = await stack.enter_async_context(
            BatchOrchestrator(
                StaticIdentity(user_id),
                StorageService(LocalBinaryStore(data_dir / "blobs"), config),
                MetadataRepository(record_store, config),
                notifier=notifier,
                config=config,
            )
        )

        display = BatchProgressDisplay(live=live)
        orchestrator.on_validation_error(display.on_validation_error)
        orchestrator.on_batch_created(display.on_batch_created)
        orchestrator.on_task_update(display.on_task_update)
        orchestrator.on_batch_settled(display.on_batch_settled)
        orchestrator.on_notification_failed(display.on_notification_failed)

        result = await orchestrator.upload(files)
        await orchestrator.wait_notifications()
        orchestrator.dismiss()

    if result.total_files == 0:
        return 1
    return 0 if result.all_success else 1


async def _run_search(user_id: str, index_url: Optional[str], text: str, k: int) -> int:
    import httpx

    from .errors import SearchError
    from .services import APIError, HTTPAPIClient, IndexingClient

    if not index_url:
        raise CLIError("INDEX_API_URL environment variable is not set")
    try:
        async with HTTPAPIClient(index_url) as api:
            results = await IndexingClient(api).search(user_id, text, k=k)
    except (APIError, SearchError, httpx.HTTPError) as exc:
        raise CLIError(f"search failed: {exc}") from exc
    render_search_results(text, results)
    return 0


async def _run_gallery(user_id: str, data_dir: Path, limit: Optional[int]) -> int:
    from .models import UploadConfig
    from .services import LocalRecordStore

    store = LocalRecordStore(data_dir / "records")
    records = await store.list(UploadConfig().collection_for(user_id), limit=limit)
    render_gallery(records)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photo-up",
        description="Upload photos in batches and search them through the indexing backend.",
    )
    parser.add_argument(
        "-u",
        "--user-id",
        default=None,
        help="Authenticated user id (default from PHOTO_UPLOADER_USER_ID)",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help=f"Local storage directory (default from PHOTO_UPLOADER_DATA_DIR or {DEFAULT_DATA_DIR})",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument("--version", action="version", version="photo-up (from photo_uploader)")

    sub = parser.add_subparsers(dest="command")

    upload = sub.add_parser("upload", help="Upload image files or folders")
    upload.add_argument("sources", nargs="+", type=Path, help="Image files or folders")
    upload.add_argument(
        "--no-index",
        action="store_true",
        help="Do not notify the indexing backend",
    )
    upload.add_argument(
        "--plain",
        action="store_true",
        help="Print a final table instead of a live display",
    )

    search = sub.add_parser("search", help="Search your photos by text")
    search.add_argument("text", help="Search text")
    search.add_argument("-k", type=int, default=5, help="Number of results (default 5)")

    gallery = sub.add_parser("gallery", help="List uploaded images, newest first")
    gallery.add_argument("--limit", type=int, default=None, help="Show at most this many")
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if args.command is None:
        parser.print_help()
        return 0

    data_dir = (
        args.data_dir
        or Path(os.getenv("PHOTO_UPLOADER_DATA_DIR") or DEFAULT_DATA_DIR)
    ).expanduser()
    index_url = os.getenv("INDEX_API_URL")
    datastore_url = os.getenv("DATASTORE_API_URL")

    try:
        user_id = _require_user_id(args.user_id)

        if args.command == "upload":
            if args.no_index:
                index_url = None
            render_configuration_summary(
                {
                    "User": user_id,
                    "Sources": ", ".join(str(s) for s in args.sources),
                    "Data Dir": str(data_dir),
                    "Records": datastore_url or str(data_dir / "records"),
                    "Index API": index_url or "(disabled)",
                    "Env File": str(used_env_file) if used_env_file else "-",
                    "Logging": effective_log_mode,
                }
            )
            return asyncio.run(
                _run_upload(
                    sources=args.sources,
                    user_id=user_id,
                    data_dir=data_dir,
                    index_url=index_url,
                    datastore_url=datastore_url,
                    live=not args.plain,
                )
            )
        if args.command == "search":
            return asyncio.run(_run_search(user_id, index_url, args.text, args.k))
        if args.command == "gallery":
            return asyncio.run(_run_gallery(user_id, data_dir, args.limit))
        raise CLIError(f"unknown command: {args.command}")
    except (CLIError, UploaderError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
