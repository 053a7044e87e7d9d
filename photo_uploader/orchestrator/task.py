"""Upload task - one file's trip through store, persist and expose."""
from typing import Awaitable, Callable, Optional
import logging

from ..errors import PersistenceError, StatusTransitionError, StorageError
from ..models import SourceFile, TaskSnapshot, UploadStatus
from ..services.preview import PreviewHandle
from ..services.repository import MetadataRepository
from ..services.storage import StorageService
from ..utils.ids import generate_task_id

logger = logging.getLogger(__name__)

STORED_PROGRESS = 50
UNAUTHENTICATED_MESSAGE = "User not authenticated"

ChangeCallback = Callable[[TaskSnapshot], Awaitable[None]]


class UploadTask:
    """
    Unit of work for one file.

    The task is the only writer of its own status cell (status, progress,
    result_url, error_message). Observers read ``snapshot()``.
    """

    def __init__(
        self,
        source_file: SourceFile,
        preview: Optional[PreviewHandle] = None,
        task_id: Optional[str] = None,
    ):
        self.id = task_id or generate_task_id()
        self.source_file = source_file
        self.preview = preview
        self._status = UploadStatus.PENDING
        self._progress = 0
        self._result_url: Optional[str] = None
        self._error_message: Optional[str] = None

    def __repr__(self) -> str:
        return f"UploadTask(id={self.id!r}, file={self.source_file.name!r}, status={self._status.value})"

    @property
    def status(self) -> UploadStatus:
        return self._status

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def result_url(self) -> Optional[str]:
        return self._result_url

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def is_terminal(self) -> bool:
        return self._status.is_terminal

    def snapshot(self) -> TaskSnapshot:
        return TaskSnapshot(
            task_id=self.id,
            filename=self.source_file.name,
            file_size=self.source_file.size,
            status=self._status,
            progress=self._progress,
            preview_uri=self.preview.uri if self.preview else None,
            result_url=self._result_url,
            error_message=self._error_message,
        )

    # State transitions

    def _require(self, expected: UploadStatus, target: UploadStatus) -> None:
        if self._status is not expected:
            raise StatusTransitionError(
                f"Task {self.id}: cannot go from {self._status.value} to {target.value}"
            )

    def start(self) -> None:
        self._require(UploadStatus.PENDING, UploadStatus.UPLOADING)
        self._status = UploadStatus.UPLOADING

    def advance(self, progress: int) -> None:
        """Raise progress while uploading; never lowers it, never reaches 100."""
        self._require(UploadStatus.UPLOADING, UploadStatus.UPLOADING)
        self._progress = max(self._progress, min(progress, 99))

    def complete(self, url: str) -> None:
        self._require(UploadStatus.UPLOADING, UploadStatus.COMPLETED)
        self._result_url = url
        self._progress = 100
        self._status = UploadStatus.COMPLETED

    def fail(self, message: str) -> None:
        self._require(UploadStatus.UPLOADING, UploadStatus.ERROR)
        self._error_message = message
        self._status = UploadStatus.ERROR

    # Pipeline

    async def run(
        self,
        uid: Optional[str],
        storage: StorageService,
        repository: MetadataRepository,
        on_change: Optional[ChangeCallback] = None,
    ) -> TaskSnapshot:
        """
        Store the bytes, then write the metadata record.

        Storage and persistence failures end the task in ``error``; they are
        never raised to the caller. Without a signed-in ``uid`` the task fails
        before touching storage.
        """
        async def changed() -> None:
            if on_change:
                await on_change(self.snapshot())

        self.start()
        await changed()
        name = self.source_file.name

        if not uid:
            logger.warning(f"Upload failed for {name}: {UNAUTHENTICATED_MESSAGE}")
            self.fail(UNAUTHENTICATED_MESSAGE)
            await changed()
            return self.snapshot()

        try:
            url, storage_path = await storage.store(uid, self.source_file)
        except StorageError as exc:
            logger.warning(f"Upload failed for {name}: {exc}")
            self.fail(str(exc))
            await changed()
            return self.snapshot()

        self.advance(STORED_PROGRESS)
        await changed()

        try:
            await repository.save_image(uid, url, storage_path, self.source_file)
        except PersistenceError as exc:
            logger.warning(f"Metadata failed for {name}, orphaned blob at {storage_path}: {exc}")
            self.fail(str(exc))
            await changed()
            return self.snapshot()

        self.complete(url)
        logger.info(f"Uploaded {name} -> {url}")
        await changed()
        return self.snapshot()
