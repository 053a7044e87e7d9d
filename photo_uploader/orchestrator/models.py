"""Orchestrator data models."""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class BatchUploadResult:
    """Result of one file-selection upload."""
    total_files: int
    uploaded_files: int
    failed_files: int
    urls: List[str] = field(default_factory=list)
    rejected_files: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.uploaded_files > 0

    @property
    def all_success(self) -> bool:
        return self.failed_files == 0 and not self.rejected_files
