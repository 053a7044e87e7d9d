"""
photo_uploader - batch photo upload orchestration.

Each selected file becomes an upload task (store bytes -> save metadata ->
expose URL). Tasks of one batch run concurrently; the successful URLs are
handed to the indexing backend once the whole batch has settled.

Usage:
    from photo_uploader import BatchOrchestrator, SourceFile
    from photo_uploader.services import (
        LocalBinaryStore, LocalRecordStore, MetadataRepository,
        StaticIdentity, StorageService,
    )

    orchestrator = BatchOrchestrator(
        StaticIdentity("user-1"),
        StorageService(LocalBinaryStore(Path("blobs"))),
        MetadataRepository(LocalRecordStore(Path("records"))),
    )
    async with orchestrator:
        result = await orchestrator.upload([SourceFile.from_path(p) for p in paths])
        orchestrator.dismiss()
"""
from .errors import (
    AuthenticationError,
    NotificationError,
    PersistenceError,
    StatusTransitionError,
    StorageError,
    UploaderError,
    ValidationError,
)
from .models import (
    AuthenticatedUser,
    SearchResult,
    SourceFile,
    TaskSnapshot,
    UploadConfig,
    UploadStatus,
)
from .orchestrator import BatchOrchestrator, BatchState, BatchUploadResult, UploadTask
from .services import FileValidator, ValidatedSelection

__version__ = "0.1.0"
__all__ = [
    # Main
    "BatchOrchestrator",
    "BatchState",
    "BatchUploadResult",
    "UploadTask",
    "FileValidator",
    "ValidatedSelection",
    # Models
    "AuthenticatedUser",
    "SearchResult",
    "SourceFile",
    "TaskSnapshot",
    "UploadConfig",
    "UploadStatus",
    # Errors
    "UploaderError",
    "ValidationError",
    "AuthenticationError",
    "StorageError",
    "PersistenceError",
    "NotificationError",
    "StatusTransitionError",
]
