"""Core orchestrator - fans out one upload task per file and joins them."""
from typing import Any, Callable, Iterable, List, Optional, Set
import asyncio
import logging

from ..errors import AuthenticationError, NotificationError, ValidationError
from ..models import SourceFile, TaskSnapshot, UploadConfig
from ..protocols import IIdentityProvider, IIndexNotifier
from ..services.preview import PreviewService
from ..services.repository import MetadataRepository
from ..services.storage import StorageService
from ..services.validator import FileValidator, ValidatedSelection
from ..utils.events import EventEmitter
from .batch import BatchState
from .models import BatchUploadResult
from .task import UploadTask

logger = logging.getLogger(__name__)


class BatchOrchestrator:
    """
    Orchestrates batch uploads using injected services.

    All tasks of a batch run concurrently with no cap; ``run_batch`` returns
    only once every task is terminal. The indexing notification is
    dispatched in the background after the result is final.

    Usage:
        async with BatchOrchestrator(identity, storage, repository, notifier) as orchestrator:
            orchestrator.on_task_update(display.on_task_update)
            result = await orchestrator.upload(files)
            orchestrator.dismiss()
    """

    def __init__(
        self,
        identity: IIdentityProvider,
        storage: StorageService,
        repository: MetadataRepository,
        notifier: Optional[IIndexNotifier] = None,
        config: Optional[UploadConfig] = None,
        previews: Optional[PreviewService] = None,
        validator: Optional[FileValidator] = None,
    ):
        self._identity = identity
        self._storage = storage
        self._repository = repository
        self._notifier = notifier
        self._config = config or UploadConfig()
        self._previews = previews or PreviewService()
        self._validator = validator or FileValidator(self._config)
        self._events = EventEmitter()
        self._batch: Optional[BatchState] = None
        self._notifications: Set[asyncio.Task] = set()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.wait_notifications()

    @property
    def batch(self) -> Optional[BatchState]:
        """Most recently created batch."""
        return self._batch

    @property
    def previews(self) -> PreviewService:
        return self._previews

    # Event subscription methods
    def on_batch_created(self, callback: Callable[[BatchState], Any]):
        """Called before any task starts. Receives BatchState."""
        self._events.on("batch_created", callback)

    def on_task_update(self, callback: Callable[[TaskSnapshot], Any]):
        """Called on every task transition. Receives TaskSnapshot."""
        self._events.on("task_update", callback)

    def on_batch_settled(self, callback: Callable[[BatchState, List[str]], Any]):
        """Called once all tasks are terminal. Receives (BatchState, urls)."""
        self._events.on("batch_settled", callback)

    def on_validation_error(self, callback: Callable[[ValidationError], Any]):
        """Called when a selection contains rejected files."""
        self._events.on("validation_error", callback)

    def on_notification_failed(self, callback: Callable[[NotificationError], Any]):
        """Called when the indexing backend could not be notified."""
        self._events.on("notification_failed", callback)

    def _require_user(self) -> str:
        user = self._identity.current_user()
        if user is None:
            raise AuthenticationError("You must be logged in to upload images")
        return user.uid

    def validate(self, files: Iterable[SourceFile]) -> ValidatedSelection:
        return self._validator.validate(files)

    async def upload(self, files: Iterable[SourceFile]) -> BatchUploadResult:
        """
        Validate a selection and upload the accepted files.

        Rejected files are reported through ``validation_error`` before any
        task starts and do not block the accepted ones.

        Raises:
            AuthenticationError: if nobody is signed in
        """
        self._require_user()
        selection = self.validate(files)

        error = selection.error
        if error is not None:
            logger.warning(str(error))
            await self._events.emit("validation_error", error)

        if not selection.accepted:
            return BatchUploadResult(
                total_files=0,
                uploaded_files=0,
                failed_files=0,
                rejected_files=list(selection.rejected),
                error=selection.error_message,
            )

        urls = await self.run_batch(selection.accepted)
        batch = self._batch
        assert batch is not None
        return BatchUploadResult(
            total_files=batch.total_count,
            uploaded_files=batch.completed_count,
            failed_files=batch.failed_count,
            urls=urls,
            rejected_files=list(selection.rejected),
            error=selection.error_message,
        )

    def create_batch(self, files: Iterable[SourceFile]) -> BatchState:
        tasks = [UploadTask(f, preview=self._previews.create(f)) for f in files]
        return BatchState(tasks, self._previews)

    async def run_batch(self, accepted_files: Iterable[SourceFile]) -> List[str]:
        """
        Upload every file concurrently and return the successful URLs.

        The list follows task creation order. Individual failures are
        recorded on their task; this coroutine does not raise for them. If
        nobody is signed in every task ends in ``error``.
        """
        user = self._identity.current_user()
        uid = user.uid if user is not None else None
        batch = self.create_batch(accepted_files)
        self._batch = batch
        await self._events.emit("batch_created", batch)

        logger.info(f"Starting batch: {len(batch)} files")

        async def on_change(snapshot: TaskSnapshot) -> None:
            await self._events.emit("task_update", snapshot)

        await asyncio.gather(
            *(
                task.run(uid, self._storage, self._repository, on_change=on_change)
                for task in batch.tasks
            )
        )

        urls = batch.successful_urls()
        logger.info(
            f"Batch settled: {batch.completed_count} completed, {batch.failed_count} failed"
        )
        await self._events.emit("batch_settled", batch, urls)

        if urls and uid:
            self._dispatch_notification(uid, urls)
        return urls

    def _dispatch_notification(self, uid: str, urls: List[str]) -> None:
        if self._notifier is None:
            logger.debug("No index notifier configured, skipping notification")
            return
        task = asyncio.create_task(self._notify(uid, list(urls)))
        self._notifications.add(task)
        task.add_done_callback(self._notifications.discard)

    async def _notify(self, uid: str, urls: List[str]) -> None:
        assert self._notifier is not None
        try:
            await self._notifier.notify(uid, urls)
            logger.info(f"Indexing backend notified about {len(urls)} photo(s)")
        except NotificationError as exc:
            logger.warning(f"Indexing notification failed: {exc}")
            await self._events.emit("notification_failed", exc)
        except Exception as exc:
            logger.exception("Index notifier raised an unexpected error")
            await self._events.emit("notification_failed", NotificationError(str(exc)))

    async def wait_notifications(self) -> None:
        """Wait for background notifications still in flight."""
        if self._notifications:
            await asyncio.gather(*list(self._notifications))

    def dismiss(self) -> bool:
        """Dismiss the current batch; ignored until it is settled."""
        if self._batch is None:
            return False
        return self._batch.dismiss()
