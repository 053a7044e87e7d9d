"""Batch state - the fixed set of tasks from one file selection."""
from typing import Iterable, List, Optional, Tuple
import logging

from ..models import TaskSnapshot, UploadStatus
from ..services.preview import PreviewService
from .task import UploadTask

logger = logging.getLogger(__name__)


class BatchState:
    """
    Ordered, fixed collection of upload tasks.

    Counts are derived from the task cells on every read; nothing aggregate
    is stored.
    """

    def __init__(self, tasks: Iterable[UploadTask], previews: Optional[PreviewService] = None):
        self._tasks: Tuple[UploadTask, ...] = tuple(tasks)
        self._previews = previews
        self._dismissed = False

    @property
    def tasks(self) -> Tuple[UploadTask, ...]:
        return self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def total_count(self) -> int:
        return len(self._tasks)

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self._tasks if t.status is UploadStatus.COMPLETED)

    @property
    def failed_count(self) -> int:
        return sum(1 for t in self._tasks if t.status is UploadStatus.ERROR)

    @property
    def is_settled(self) -> bool:
        return self.completed_count + self.failed_count == len(self._tasks)

    @property
    def is_dismissed(self) -> bool:
        return self._dismissed

    def snapshot(self) -> Tuple[TaskSnapshot, ...]:
        return tuple(t.snapshot() for t in self._tasks)

    def successful_urls(self) -> List[str]:
        """URLs of completed tasks, in task creation order."""
        return [
            t.result_url
            for t in self._tasks
            if t.status is UploadStatus.COMPLETED and t.result_url
        ]

    def dismiss(self) -> bool:
        """
        Close the batch and release every preview handle.

        Only allowed once the batch is settled. Returns True if the batch
        was dismissed by this call.
        """
        if self._dismissed:
            return False
        if not self.is_settled:
            logger.warning(
                f"Ignoring dismiss: {self.completed_count + self.failed_count}/{len(self._tasks)} tasks settled"
            )
            return False
        self._dismissed = True
        for task in self._tasks:
            if task.preview is not None and self._previews is not None:
                self._previews.revoke(task.preview)
        return True
