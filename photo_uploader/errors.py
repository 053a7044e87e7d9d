"""Exception hierarchy for the upload pipeline."""
from typing import List, Optional, Sequence


class UploaderError(Exception):
    """Base class for all photo_uploader errors."""


class ValidationError(UploaderError):
    """Raised (or reported) when selected files are not acceptable images."""

    def __init__(self, rejected: Sequence[str]):
        self.rejected: List[str] = list(rejected)
        super().__init__(
            f"Invalid file format: {', '.join(self.rejected)}. Please upload images only."
        )


class AuthenticationError(UploaderError):
    """Raised when an upload is attempted without an authenticated user."""


class StorageError(UploaderError):
    """Binary write or URL retrieval failed."""


class PersistenceError(UploaderError):
    """Metadata record could not be written."""


class NotificationError(UploaderError):
    """Indexing backend call failed or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SearchError(UploaderError):
    """Search answer could not be read as a list of ranked results."""


class StatusTransitionError(UploaderError):
    """An upload task was asked to leave a terminal status or skip a state."""
