"""
Protocols (Interfaces) for the external collaborators.

Following Interface Segregation Principle - small, focused interfaces.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable

from .models import AuthenticatedUser


@runtime_checkable
class IIdentityProvider(Protocol):
    """Interface for the session/identity provider."""

    def current_user(self) -> Optional[AuthenticatedUser]:
        """Return the signed-in user, or None."""
        ...


@runtime_checkable
class IBinaryStore(Protocol):
    """Interface for binary object storage."""

    async def write(self, path: str, data: bytes) -> str:
        """Store bytes at path and return a fetchable URL."""
        ...


@runtime_checkable
class IAPIClient(Protocol):
    """Interface for API operations."""

    async def post(self, endpoint: str, json: Dict) -> Any:
        """POST request to API."""
        ...

    async def get(self, endpoint: str) -> Any:
        """GET request to API."""
        ...


class IRecordStore(ABC):
    """Interface for the metadata record store."""

    @abstractmethod
    async def create(self, collection_path: str, record: Dict[str, Any]) -> str:
        """Create a record and return its id."""
        pass


class ISubscribableRecordStore(IRecordStore):
    """Record store that also supports ordered real-time subscriptions."""

    @abstractmethod
    def subscribe(
        self,
        collection_path: str,
        callback: Callable[[List[Dict[str, Any]]], Any],
    ) -> Callable[[], None]:
        """Subscribe to ordered snapshots; returns an unsubscribe function."""
        pass


class IIndexNotifier(ABC):
    """Interface for the indexing backend notification."""

    @abstractmethod
    async def notify(self, user_id: str, urls: List[str]) -> Any:
        """Tell the indexing backend about newly stored photo URLs."""
        pass
