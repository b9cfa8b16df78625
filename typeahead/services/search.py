"""Search providers consumed by the pipeline."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol, Sequence

import httpx

from typeahead.config import PipelineSettings, ProviderSettings
from typeahead.logging import logger
from typeahead.services.exceptions import ProviderError
from typeahead.utils.retry import retry_async

FRUITS: tuple[str, ...] = (
    "apple",
    "banana",
    "apricot",
    "blueberry",
    "orange",
    "grape",
    "avocado",
    "kiwi",
    "strawberry",
    "watermelon",
    "lemon",
    "lime",
    "mango",
    "peach",
    "pear",
    "pineapple",
)


class SearchProvider(Protocol):
    async def search(self, query: str) -> Sequence[str]:
        ...


class MockSearchService:
    """In-memory provider that filters a fixed catalogue after a fake delay."""

    def __init__(
        self,
        data: Sequence[str] = FRUITS,
        *,
        latency_seconds: float = 0.5,
    ) -> None:
        self._data = list(data)
        self._latency = latency_seconds

    async def search(self, query: str) -> Sequence[str]:
        logger.info("mock_search", query=query)
        if self._latency > 0:
            await asyncio.sleep(self._latency)

        if not query:
            return list(self._data)

        needle = query.lower()
        return [item for item in self._data if needle in item.lower()]


class HttpSearchService:
    """Query a remote `/search` endpoint returning a JSON list of strings."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: ProviderSettings | None = None,
    ) -> None:
        self._client = http_client
        self._settings = settings or ProviderSettings(kind="http")

    async def search(self, query: str) -> Sequence[str]:
        base_url = self._settings.base_url
        if not base_url:
            raise ProviderError("Search endpoint URL is not configured.")

        url = f"{str(base_url).rstrip('/')}/search"
        headers = self._headers()

        async def _request() -> httpx.Response:
            response = await self._client.get(
                url,
                params={"q": query},
                headers=headers,
                timeout=self._settings.request_timeout_seconds,
            )
            response.raise_for_status()
            return response

        logger.info("http_search", query=query)
        try:
            response = await retry_async(
                _request,
                max_attempts=self._settings.max_attempts,
                base_delay=self._settings.retry_base_delay,
                retry_on=(httpx.HTTPError,),
                logger=logger,
                operation_name="http_search",
            )
        except httpx.HTTPStatusError as exc:
            detail = exc.response.text[:500] if exc.response is not None else str(exc)
            status_code = exc.response.status_code if exc.response is not None else "unknown"
            raise ProviderError(f"Search request failed ({status_code}): {detail}") from exc
        except httpx.RequestError as exc:
            raise ProviderError(f"Search request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError("Search endpoint returned invalid JSON.") from exc
        return _extract_results(payload)

    def _headers(self) -> dict[str, str]:
        if not self._settings.api_key:
            return {}
        return {"Authorization": f"Bearer {self._settings.api_key.get_secret_value()}"}


def _extract_results(payload: Any) -> list[str]:
    if isinstance(payload, dict):
        payload = payload.get("results")
    if not isinstance(payload, list):
        raise ProviderError("Search payload must be a list or contain a `results` list.")
    if not all(isinstance(item, str) for item in payload):
        raise ProviderError("Search results must be strings.")
    return payload


def build_provider(
    settings: PipelineSettings,
    http_client: httpx.AsyncClient | None = None,
) -> SearchProvider:
    """Return the provider selected by ``settings.provider.kind``."""

    provider_settings = settings.provider
    if provider_settings.kind == "http":
        if http_client is None:
            raise ProviderError("The HTTP search provider needs an httpx.AsyncClient.")
        return HttpSearchService(http_client, settings=provider_settings)
    return MockSearchService(latency_seconds=provider_settings.mock_latency_ms / 1000)


__all__ = [
    "FRUITS",
    "HttpSearchService",
    "MockSearchService",
    "SearchProvider",
    "build_provider",
]
