"""HTTP adapter for backend API operations."""
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx


class APIError(RuntimeError):
    """Raised when the API answers with an error status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class HTTPAPIClient:
    """
    HTTP client adapter for API calls.

    Implements IAPIClient protocol. Each call issues exactly one request;
    there is no retry policy.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _raise_for_status(response: httpx.Response, method: str, endpoint: str) -> None:
        if response.status_code < 400:
            return
        try:
            error_detail = response.json()
        except ValueError:
            error_detail = response.text
        raise APIError(
            f"API error {response.status_code} on {method} {endpoint}: {error_detail}",
            response.status_code,
        )

    async def post(self, endpoint: str, json: Dict) -> Any:
        if not self._client:
            raise RuntimeError("HTTPAPIClient not initialized. Use 'async with' context.")
        response = await self._client.post(endpoint, json=json)
        self._raise_for_status(response, "POST", endpoint)
        return response

    async def get(self, endpoint: str) -> Any:
        if not self._client:
            raise RuntimeError("HTTPAPIClient not initialized. Use 'async with' context.")
        response = await self._client.get(endpoint)
        self._raise_for_status(response, "GET", endpoint)
        return response
