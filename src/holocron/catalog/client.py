"""Async HTTP client for the read-only films API.

Two reads: the whole collection and one film by id. Every failure is
raised as a ``RemoteError`` subclass; nothing is retried here.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from holocron.config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    APIConfig,
)
from holocron.exceptions import MalformedResponseError, TransportError

from .models import MovieRecord
from .normalizer import normalize, normalize_many, unwrap_payload

logger = logging.getLogger(__name__)

COLLECTION_FAILURE = "Failed to fetch movies"
ITEM_FAILURE = "Failed to fetch movie"


class FilmsClient:
    """Thin async client over ``GET /films`` and ``GET /films/{id}``.

    Pass ``client`` to reuse an existing ``httpx.AsyncClient`` (tests use
    one backed by ``httpx.MockTransport``); it is then not closed here.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._user_agent = user_agent
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_config(
        cls, api: APIConfig, client: httpx.AsyncClient | None = None,
    ) -> FilmsClient:
        return cls(
            api.base_url,
            timeout=api.timeout_seconds,
            user_agent=api.user_agent,
            client=client,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                headers={
                    "User-Agent": self._user_agent,
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> FilmsClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _get_json(self, path: str, failure: str) -> Any:
        client = await self._get_client()
        url = f"{self._base_url}{path}"
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("GET %s returned HTTP %d", url, status)
            raise TransportError(
                f"{failure}: HTTP error! status: {status}", status=status,
            ) from e
        except httpx.RequestError as e:
            logger.warning("GET %s failed: %s", url, e)
            raise TransportError(f"{failure}: {str(e) or type(e).__name__}") from e

        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.warning("GET %s returned a non-JSON body", url)
            raise MalformedResponseError(
                f"{failure}: invalid JSON body", status=response.status_code,
            ) from e

    async def fetch_all(self) -> list[MovieRecord]:
        """Fetch every film, normalized, in response order."""
        payload = await self._get_json("/films", COLLECTION_FAILURE)
        if payload is None:
            return []
        if isinstance(payload, Mapping):
            payload = payload.get("results", payload.get("result"))
        if not isinstance(payload, list):
            raise MalformedResponseError(
                f"{COLLECTION_FAILURE}: expected a list of films",
            )
        records = normalize_many(payload)
        logger.debug("Fetched %d films from %s", len(records), self._base_url)
        return records

    async def fetch_by_id(self, film_id: str | int) -> MovieRecord:
        """Fetch one film. Accepts bare and ``result``-wrapped bodies."""
        path = f"/films/{quote(str(film_id).strip(), safe='')}"
        payload = await self._get_json(path, ITEM_FAILURE)
        if not isinstance(payload, Mapping):
            raise MalformedResponseError(f"{ITEM_FAILURE}: expected a film object")
        return normalize(unwrap_payload(payload))
