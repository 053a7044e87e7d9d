"""
Metadata Repository - Single Responsibility: persist image metadata records.

Implements Repository Pattern for data access.
"""
from typing import Any, Dict, Optional
import logging

from ..errors import PersistenceError
from ..models import SourceFile, UploadConfig
from ..protocols import IAPIClient, IRecordStore
from .record_store import SERVER_TIMESTAMP

logger = logging.getLogger(__name__)


class HTTPRecordStore(IRecordStore):
    """
    Record store backed by the datastore API.

    ``create`` posts to ``/{collection_path}`` and reads the id from the
    JSON response. Server-timestamp fields are left out of the payload for
    the API to fill in.
    """

    def __init__(self, api_client: IAPIClient):
        self._api = api_client

    async def create(self, collection_path: str, record: Dict[str, Any]) -> str:
        payload = {k: v for k, v in record.items() if v != SERVER_TIMESTAMP}
        response = await self._api.post(f"/{collection_path.strip('/')}", json=payload)
        body = response.json()
        record_id = body.get("id") if isinstance(body, dict) else None
        if not record_id:
            raise ValueError(f"Datastore response carried no record id: {body!r}")
        return str(record_id)


class MetadataRepository:
    """
    Repository for saving image metadata to the record store.

    Abstracts the record layout; the store assigns ``uploadedAt``.
    """

    def __init__(self, store: IRecordStore, config: Optional[UploadConfig] = None):
        """
        Initialize repository.

        Args:
            store: Record store collaborator
            config: Upload configuration (collection layout)
        """
        self._store = store
        self._config = config or UploadConfig()

    @staticmethod
    def build_record(url: str, storage_path: str, source: SourceFile) -> Dict[str, Any]:
        return {
            "url": url,
            "storagePath": storage_path,
            "fileName": source.name,
            "fileSize": source.size,
            "fileType": source.content_type,
            "uploadedAt": SERVER_TIMESTAMP,
        }

    async def save_image(
        self,
        uid: str,
        url: str,
        storage_path: str,
        source: SourceFile,
    ) -> str:
        """
        Save the image record in the user's collection.

        Returns:
            Record id

        Raises:
            PersistenceError: if the store rejects the record
        """
        collection = self._config.collection_for(uid)
        try:
            record_id = await self._store.create(
                collection, self.build_record(url, storage_path, source)
            )
        except Exception as exc:
            raise PersistenceError(f"Failed to save metadata for {source.name}: {exc}") from exc
        logger.debug(f"Saved record {record_id} in {collection}")
        return record_id
