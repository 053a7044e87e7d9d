"""HTTP client for the semantic indexing backend."""
from __future__ import annotations

from typing import Any, List

import httpx

from ..errors import NotificationError, SearchError
from ..models import SearchResult
from ..protocols import IAPIClient, IIndexNotifier
from .api_client import APIError


class IndexingClient(IIndexNotifier):
    """
    Talks to the indexing backend.

    - ``POST /upload`` with ``{userId, photoURLs}`` registers new photos.
    - ``POST /search`` with ``{userId, text, k}`` returns ranked URLs.
    """

    def __init__(self, api_client: IAPIClient):
        self._api = api_client

    async def notify(self, user_id: str, urls: List[str]) -> Any:
        """
        Send newly stored photo URLs for indexing.

        Raises:
            NotificationError: on transport failure or any non-2xx answer
        """
        try:
            response = await self._api.post(
                "/upload", json={"userId": user_id, "photoURLs": list(urls)}
            )
        except APIError as exc:
            raise NotificationError(str(exc), status_code=exc.status_code) from exc
        except httpx.HTTPError as exc:
            raise NotificationError(f"Indexing request failed: {exc}") from exc

        if not response.is_success:
            raise NotificationError(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError:
            return None

    async def search(self, user_id: str, text: str, k: int = 5) -> List[SearchResult]:
        """
        Semantic search over the user's indexed photos.

        Raises:
            APIError: on a non-2xx answer
            SearchError: when the body is not JSON or a result lacks a field
        """
        response = await self._api.post(
            "/search", json={"userId": user_id, "text": text, "k": k}
        )
        try:
            body = response.json() or {}
            return [
                SearchResult(
                    rank=int(item["rank"]),
                    score=float(item["score"]),
                    url=str(item["url"]),
                )
                for item in body.get("results") or []
            ]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise SearchError(f"Malformed search response: {exc!r}") from exc
