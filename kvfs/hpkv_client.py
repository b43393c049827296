"""HTTP client for the HPKV record/list REST API."""

import asyncio
from typing import Any, Dict, Optional

import httpx

from common.constants import (
    HPKV_MAX_RETRIES,
    HPKV_RETRY_BACKOFF_MULTIPLIER,
    HPKV_TIMEOUT_SECONDS,
    STORE_MAX_VALUE_SIZE,
)
from common.logging_config import get_logger
from kvfs.exceptions import StoreError, UnauthorizedError
from kvfs.kv_store import KVStore, ListItem, ListPage

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class HPKVClient(KVStore):
    """
    Async HPKV client with retry logic for transient failures.

    Connect errors, timeouts, 429 and 5xx responses are retried with
    exponential backoff; anything still failing surfaces as StoreError.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        timeout: float = HPKV_TIMEOUT_SECONDS,
        max_retries: int = HPKV_MAX_RETRIES,
        retry_backoff: float = HPKV_RETRY_BACKOFF_MULTIPLIER,
        max_value_size: int = STORE_MAX_VALUE_SIZE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HPKV client.

        Args:
            api_url: Base URL of the HPKV endpoint (e.g., "https://api-eu-1.hpkv.io")
            api_key: HPKV API key
            timeout: Per-request timeout in seconds
            max_retries: Retry attempts after the first try
            retry_backoff: Backoff multiplier; attempt n waits retry_backoff ** n seconds
            max_value_size: Largest value the store accepts
            transport: Optional httpx transport (used by tests)

        Raises:
            UnauthorizedError: If api_url or api_key is missing
        """
        if not api_url or not api_key:
            raise UnauthorizedError("API key and API URL are required")

        self.api_url = api_url
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.max_value_size = max_value_size
        self._client = httpx.AsyncClient(
            base_url=api_url,
            timeout=timeout,
            headers={"x-api-key": api_key},
            transport=transport,
        )
        logger.debug(f"Initialized HPKVClient [base_url={api_url}]")

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HPKVClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on transient failures.

        Args:
            method: HTTP method
            endpoint: API endpoint path ("/record" or "/list")
            params: Query parameters
            json: JSON body

        Returns:
            The final HTTP response (any status)

        Raises:
            StoreError: If the endpoint stays unreachable after all retries
        """
        for attempt in range(self.max_retries + 1):
            try:
                response = await self._client.request(method, endpoint, params=params, json=json)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                if attempt < self.max_retries:
                    delay = self.retry_backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{self.max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s"
                    )
                    await asyncio.sleep(delay)
                    continue
                logger.error(f"Network error (max retries exceeded): {method} {endpoint} error={e}")
                raise StoreError(f"Network error: {e}") from e
            except httpx.HTTPError as e:
                logger.error(f"HTTP error calling HPKV: {method} {endpoint} error={e}")
                raise StoreError(f"Network error: {e}") from e

            if response.status_code in RETRYABLE_STATUS_CODES and attempt < self.max_retries:
                delay = self.retry_backoff ** attempt
                logger.warning(
                    f"Server error (attempt {attempt + 1}/{self.max_retries + 1}): "
                    f"{method} {endpoint} status={response.status_code}, retrying in {delay}s"
                )
                await asyncio.sleep(delay)
                continue

            return response

        raise StoreError("Max retries exceeded")

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        body = response.text or "Unknown error"
        logger.error(f"HPKV API Error ({response.status_code}): {body[:200]}")
        raise StoreError(
            f"HPKV API Error ({response.status_code}): {body[:200]}",
            status_code=response.status_code,
        )

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise StoreError(f"Invalid JSON from HPKV API: {e}") from e
        if not isinstance(data, dict):
            raise StoreError("Invalid response from HPKV API")
        return data

    async def get(self, key: str) -> Optional[str]:
        response = await self._request("GET", "/record", params={"key": key})
        if response.status_code == 404:
            return None
        self._raise_for_status(response)

        value = self._json(response).get("value")
        if not isinstance(value, str):
            raise StoreError(f"Record {key} found but has no string value")
        return value

    async def put(self, key: str, value: str) -> None:
        """
        Upsert a record.

        The size limit counts characters of ``value``, not encoded bytes.

        Raises:
            StoreError: If value is longer than max_value_size or the call fails
        """
        if len(value) > self.max_value_size:
            raise StoreError(
                f"Value for {key} is {len(value)} characters, "
                f"store limit is {self.max_value_size}",
                status_code=413,
            )
        response = await self._request("POST", "/record", json={"key": key, "value": value})
        self._raise_for_status(response)

    async def delete(self, key: str) -> bool:
        response = await self._request("DELETE", "/record", params={"key": key})
        if response.status_code == 404:
            return False
        self._raise_for_status(response)
        return True

    async def list(
        self,
        prefix: str,
        delimiter: Optional[str] = None,
        marker: Optional[str] = None,
    ) -> ListPage:
        params = {"prefix": prefix}
        if delimiter:
            params["delimiter"] = delimiter
        if marker:
            params["marker"] = marker

        response = await self._request("GET", "/list", params=params)
        self._raise_for_status(response)

        data = self._json(response)
        raw_items = data.get("items")
        if not isinstance(raw_items, list):
            raise StoreError("Invalid response from HPKV list API")

        items = [
            ListItem(
                key=item["key"],
                version=item.get("version"),
                created_at=item.get("createdAt"),
                updated_at=item.get("updatedAt"),
            )
            for item in raw_items
            if isinstance(item, dict) and "key" in item
        ]
        return ListPage(items=items, next_marker=data.get("nextMarker") or None)
