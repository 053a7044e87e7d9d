"""
Local record store - JSON documents on disk with ordered subscriptions.

Each collection path maps to one JSON file holding a list of records.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
import asyncio
import json
import logging
import uuid

from ..protocols import ISubscribableRecordStore

logger = logging.getLogger(__name__)

SERVER_TIMESTAMP = "__server_timestamp__"
"""Sentinel replaced by the store with its own creation time."""

SnapshotCallback = Callable[[List[Dict[str, Any]]], None]


class LocalRecordStore(ISubscribableRecordStore):
    """
    Record store persisted as JSON files under a root directory.

    Snapshots are ordered by ``order_by`` (newest first by default).
    """

    def __init__(self, root: Path, order_by: str = "uploadedAt", descending: bool = True):
        self._root = Path(root).expanduser()
        self._order_by = order_by
        self._descending = descending
        self._lock = asyncio.Lock()
        self._subscribers: Dict[str, List[SnapshotCallback]] = {}

    def _file_for(self, collection_path: str) -> Path:
        parts = [p for p in collection_path.strip("/").split("/") if p]
        if not parts or any(p in (".", "..") for p in parts):
            raise ValueError(f"Invalid collection path: {collection_path!r}")
        return self._root.joinpath(*parts).with_suffix(".json")

    def _read(self, collection_path: str) -> List[Dict[str, Any]]:
        path = self._file_for(collection_path)
        if not path.exists():
            return []
        return json.loads(path.read_text(encoding="utf-8"))

    def _write(self, collection_path: str, records: List[Dict[str, Any]]) -> None:
        path = self._file_for(collection_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(json.dumps(records, indent=2), encoding="utf-8")
        tmp.replace(path)

    def _ordered(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return sorted(
            records,
            key=lambda r: r.get(self._order_by) or "",
            reverse=self._descending,
        )

    @staticmethod
    def _resolve_sentinels(record: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        return {k: (now if v == SERVER_TIMESTAMP else v) for k, v in record.items()}

    async def create(self, collection_path: str, record: Dict[str, Any]) -> str:
        record_id = uuid.uuid4().hex
        stored = {"id": record_id, **self._resolve_sentinels(record)}
        async with self._lock:
            records = await asyncio.to_thread(self._read, collection_path)
            records.append(stored)
            await asyncio.to_thread(self._write, collection_path, records)
        self._publish(collection_path, records)
        return record_id

    async def list(self, collection_path: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Ordered snapshot of a collection."""
        records = await asyncio.to_thread(self._read, collection_path)
        ordered = self._ordered(records)
        return ordered[:limit] if limit is not None else ordered

    def subscribe(self, collection_path: str, callback: SnapshotCallback) -> Callable[[], None]:
        """
        Call ``callback`` with the ordered snapshot now and after every create.

        Returns a function that removes the subscription.
        """
        snapshot = self._ordered(self._read(collection_path))
        self._subscribers.setdefault(collection_path, []).append(callback)
        callback(snapshot)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(collection_path, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def _publish(self, collection_path: str, records: List[Dict[str, Any]]) -> None:
        callbacks = self._subscribers.get(collection_path, [])[:]
        if not callbacks:
            return
        snapshot = self._ordered(records)
        for callback in callbacks:
            try:
                callback(list(snapshot))
            except Exception as e:
                logger.error(f"Error in record subscriber for {collection_path}: {e}")
