"""
Models for photo_uploader.

Immutable dataclasses shared by services, orchestrator and CLI.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union
import mimetypes


DEFAULT_MIME_TYPES: Tuple[str, ...] = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/heic",
    "image/heif",
    "image/webp",
    "image/gif",
    "image/bmp",
    "image/tiff",
    "image/x-adobe-dng",
    "image/dng",
)

DEFAULT_EXTENSIONS: Tuple[str, ...] = (
    ".jpg",
    ".jpeg",
    ".png",
    ".heic",
    ".heif",
    ".webp",
    ".gif",
    ".bmp",
    ".tiff",
    ".tif",
    ".dng",
)


class UploadStatus(Enum):
    """Status of a single upload task."""
    PENDING = "pending"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (UploadStatus.COMPLETED, UploadStatus.ERROR)


@dataclass(frozen=True)
class SourceFile:
    """Immutable handle to a selected file: name, size, declared type and bytes."""
    name: str
    data: bytes = field(repr=False)
    content_type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """Lowercased trailing extension including the dot, or '' when absent."""
        return Path(self.name).suffix.lower()

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "SourceFile":
        """Read a file from disk; the declared type is guessed from its name."""
        file_path = Path(path)
        content_type, _ = mimetypes.guess_type(file_path.name)
        return cls(
            name=file_path.name,
            data=file_path.read_bytes(),
            content_type=content_type or "",
        )


@dataclass(frozen=True)
class AuthenticatedUser:
    """Opaque handle returned by the identity provider."""
    uid: str
    display_name: Optional[str] = None


@dataclass(frozen=True)
class TaskSnapshot:
    """Point-in-time copy of an upload task's observable state."""
    task_id: str
    filename: str
    file_size: int
    status: UploadStatus
    progress: int
    preview_uri: Optional[str] = None
    result_url: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass(frozen=True)
class SearchResult:
    """One hit returned by the indexing backend's search endpoint."""
    rank: int
    score: float
    url: str


@dataclass(frozen=True)
class UploadConfig:
    """Immutable configuration for upload operations."""
    allowed_mime_types: Tuple[str, ...] = DEFAULT_MIME_TYPES
    allowed_extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    storage_prefix: str = "user-images"
    images_collection: str = "users/{uid}/images"
    search_k: int = 5

    def collection_for(self, uid: str) -> str:
        """Per-user metadata collection path."""
        return self.images_collection.format(uid=uid)
