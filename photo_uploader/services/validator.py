"""
File Validator - Single Responsibility: decide which selected files are images.

A file passes if its declared MIME type OR its extension is allow-listed.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..errors import ValidationError
from ..models import SourceFile, UploadConfig


@dataclass(frozen=True)
class ValidatedSelection:
    """Partition of one user selection into accepted files and rejected names."""
    accepted: Tuple[SourceFile, ...]
    rejected: Tuple[str, ...]

    @property
    def error(self) -> Optional[ValidationError]:
        if not self.rejected:
            return None
        return ValidationError(self.rejected)

    @property
    def error_message(self) -> Optional[str]:
        error = self.error
        return str(error) if error else None


class FileValidator:
    """Classifies candidate files against MIME type and extension allow-lists."""

    def __init__(self, config: Optional[UploadConfig] = None):
        config = config or UploadConfig()
        self._mime_types = frozenset(t.lower() for t in config.allowed_mime_types)
        self._extensions = frozenset(e.lower() for e in config.allowed_extensions)

    def is_valid_type(self, content_type: str) -> bool:
        return bool(content_type) and content_type.lower() in self._mime_types

    def is_valid_extension(self, filename: str) -> bool:
        _, dot, ext = filename.rpartition(".")
        if not dot:
            return False
        return f".{ext.lower()}" in self._extensions

    def is_accepted(self, file: SourceFile) -> bool:
        return self.is_valid_type(file.content_type) or self.is_valid_extension(file.name)

    def validate(self, files: Iterable[SourceFile]) -> ValidatedSelection:
        accepted: List[SourceFile] = []
        rejected: List[str] = []
        for file in files:
            if self.is_accepted(file):
                accepted.append(file)
            else:
                rejected.append(file.name)
        return ValidatedSelection(accepted=tuple(accepted), rejected=tuple(rejected))
