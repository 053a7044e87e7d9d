"""Services for photo_uploader."""
from .api_client import APIError, HTTPAPIClient
from .identity import StaticIdentity
from .indexer import IndexingClient
from .preview import PreviewHandle, PreviewService
from .record_store import SERVER_TIMESTAMP, LocalRecordStore
from .repository import HTTPRecordStore, MetadataRepository
from .storage import LocalBinaryStore, StorageService
from .validator import FileValidator, ValidatedSelection

__all__ = [
    "APIError",
    "HTTPAPIClient",
    "StaticIdentity",
    "IndexingClient",
    "PreviewHandle",
    "PreviewService",
    "SERVER_TIMESTAMP",
    "LocalRecordStore",
    "HTTPRecordStore",
    "MetadataRepository",
    "LocalBinaryStore",
    "StorageService",
    "FileValidator",
    "ValidatedSelection",
]
