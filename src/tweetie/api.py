"""Remote list timeline API."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

import httpx

from tweetie.errors import FetchError
from tweetie.logging import get_logger
from tweetie.models import ListIdentifier, TimelineCursor

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.twitter.com/1.1"
LIST_FEED_PATH = "/lists/statuses.json"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_PAGE_SIZE = 100


class TwitterAPIProtocol(Protocol):
    def timeline(
        self,
        token: str,
        list_id: ListIdentifier,
        cursor: TimelineCursor,
    ) -> list[dict[str, Any]]:
        """Return raw status objects of a list feed newer than the cursor."""


ApiFactory = Callable[[], TwitterAPIProtocol]


class TwitterAPI:
    """List feed client over httpx with bearer-token auth."""

    USER_AGENT = "tweetie/0.1"

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        count: int = DEFAULT_PAGE_SIZE,
        client: httpx.Client | None = None,
    ) -> None:
        if count <= 0:
            raise FetchError("Page size 'count' must be positive.")
        self._base_url = base_url.rstrip("/")
        self._count = count
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout,
            headers={"User-Agent": self.USER_AGENT, "Accept": "application/json"},
        )

    def timeline(
        self,
        token: str,
        list_id: ListIdentifier,
        cursor: TimelineCursor,
    ) -> list[dict[str, Any]]:
        params = {
            "owner_screen_name": list_id.username,
            "slug": list_id.slug,
            "count": str(self._count),
        }
        if not cursor.is_initial:
            params["since_id"] = str(cursor.since_id)

        url = f"{self._base_url}{LIST_FEED_PATH}"
        try:
            response = self._client.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"List feed '{list_id}' returned HTTP {exc.response.status_code}."
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Could not reach list feed '{list_id}': {exc}.") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(f"List feed '{list_id}' returned invalid JSON.") from exc
        if not isinstance(payload, list):
            raise FetchError(
                f"List feed '{list_id}' returned {type(payload).__name__}; expected a JSON array."
            )

        statuses = [entry for entry in payload if isinstance(entry, dict)]
        logger.debug("Fetched %d statuses for %s", len(statuses), list_id)
        return statuses

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
