"""
Preview Service - Single Responsibility: hand out revocable preview handles.

A preview handle is a local ``preview:`` URI that resolves to the source
bytes until it is revoked.
"""
from dataclasses import dataclass
from typing import Dict, Optional
import logging
import uuid

from ..models import SourceFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreviewHandle:
    """Revocable reference to a locally rendered copy of a file."""
    uri: str
    filename: str


class PreviewService:
    """Registry of live preview handles."""

    def __init__(self):
        self._live: Dict[str, SourceFile] = {}

    @property
    def live_count(self) -> int:
        return len(self._live)

    def create(self, source: SourceFile) -> PreviewHandle:
        uri = f"preview:{uuid.uuid4()}"
        self._live[uri] = source
        return PreviewHandle(uri=uri, filename=source.name)

    def resolve(self, handle: PreviewHandle) -> Optional[bytes]:
        """Bytes behind a live handle, or None once revoked."""
        source = self._live.get(handle.uri)
        return source.data if source else None

    def revoke(self, handle: PreviewHandle) -> bool:
        """Release a handle. Returns False if it was already released."""
        if self._live.pop(handle.uri, None) is None:
            logger.warning(f"Preview {handle.uri} for {handle.filename} already revoked")
            return False
        return True
