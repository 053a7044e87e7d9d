"""Orchestrator package - coordinates batch upload workflows."""
from .batch import BatchState
from .core import BatchOrchestrator
from .models import BatchUploadResult
from .task import UploadTask

__all__ = ["BatchOrchestrator", "BatchState", "BatchUploadResult", "UploadTask"]
