"""
Storage Service - Single Responsibility: put image bytes into the binary store.

Builds the per-user object path and turns collaborator failures into
StorageError.
"""
from pathlib import Path
from typing import Dict, Optional, Tuple
import asyncio
import logging
import mimetypes
import time

from ..errors import StorageError
from ..models import SourceFile, UploadConfig
from ..protocols import IBinaryStore

logger = logging.getLogger(__name__)


class LocalBinaryStore:
    """
    Binary store backed by a local directory.

    Implements IBinaryStore; returned URLs are file:// URIs.
    """

    def __init__(self, root: Path):
        self._root = Path(root).expanduser().resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _target(self, path: str) -> Path:
        target = (self._root / path).resolve()
        if self._root not in target.parents:
            raise ValueError(f"Path escapes storage root: {path}")
        return target

    async def write(self, path: str, data: bytes) -> str:
        target = self._target(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        await asyncio.to_thread(_write)
        return target.as_uri()


class StorageService:
    """
    Service for writing uploaded images to the binary store.

    Object paths look like ``user-images/{uid}/{uid}-{timestamp_ms}.{ext}``.
    """

    def __init__(self, store: IBinaryStore, config: Optional[UploadConfig] = None):
        self._store = store
        self._config = config or UploadConfig()
        self._last_stamp: Dict[str, int] = {}  # uid -> last issued timestamp

    def _next_timestamp(self, uid: str) -> int:
        """Millisecond timestamp, strictly increasing per user."""
        stamp = int(time.time() * 1000)
        last = self._last_stamp.get(uid)
        if last is not None and stamp <= last:
            stamp = last + 1
        self._last_stamp[uid] = stamp
        return stamp

    @staticmethod
    def _extension_for(source: SourceFile) -> str:
        if source.extension:
            return Path(source.name).suffix
        if source.content_type:
            return mimetypes.guess_extension(source.content_type) or ""
        return ""

    def build_path(self, uid: str, source: SourceFile) -> str:
        filename = f"{uid}-{self._next_timestamp(uid)}{self._extension_for(source)}"
        return f"{self._config.storage_prefix}/{uid}/{filename}"

    async def store(self, uid: str, source: SourceFile) -> Tuple[str, str]:
        """
        Write the file's bytes and return its fetchable URL.

        Args:
            uid: Owning user id
            source: File to store

        Returns:
            (url, storage_path)

        Raises:
            StorageError: if the write or URL retrieval fails
        """
        storage_path = self.build_path(uid, source)
        try:
            url = await self._store.write(storage_path, source.data)
        except Exception as exc:
            raise StorageError(f"Failed to store {source.name}: {exc}") from exc
        if not url:
            raise StorageError(f"Binary store returned no URL for {source.name}")
        logger.debug(f"Stored {source.name} at {storage_path}")
        return url, storage_path
