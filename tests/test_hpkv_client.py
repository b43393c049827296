"""Unit tests for HPKVClient."""

import json

import httpx
import pytest

from kvfs.exceptions import StoreError, UnauthorizedError
from kvfs.hpkv_client import HPKVClient
from kvfs.kv_store import list_all_keys


@pytest.fixture
def sleeps(monkeypatch):
    """Record backoff delays instead of sleeping."""
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr("kvfs.hpkv_client.asyncio.sleep", fake_sleep)
    return delays


def make_client(handler, **kwargs):
    return HPKVClient(
        api_url="http://hpkv.test",
        api_key="test-key",
        transport=httpx.MockTransport(handler),
        **kwargs
    )


@pytest.fixture
def records():
    return {}


@pytest.fixture
def mock_transport_handler(records):
    """Handler emulating the HPKV record and list endpoints."""
    def handler(request):
        assert request.headers["x-api-key"] == "test-key"

        if request.url.path == "/record" and request.method == "GET":
            key = request.url.params["key"]
            if key not in records:
                return httpx.Response(404, json={"error": "Record not found"})
            return httpx.Response(200, json={"key": key, "value": records[key]})

        if request.url.path == "/record" and request.method == "POST":
            body = json.loads(request.content)
            records[body["key"]] = body["value"]
            return httpx.Response(200, json={"success": True})

        if request.url.path == "/record" and request.method == "DELETE":
            key = request.url.params["key"]
            if records.pop(key, None) is None:
                return httpx.Response(404, json={"error": "Record not found"})
            return httpx.Response(200, json={"success": True})

        if request.url.path == "/list":
            prefix = request.url.params["prefix"]
            marker = request.url.params.get("marker")
            keys = sorted(k for k in records if k.startswith(prefix) and (marker is None or k > marker))
            page, rest = keys[:2], keys[2:]
            return httpx.Response(200, json={
                "items": [{"key": k, "version": 1} for k in page],
                "nextMarker": page[-1] if rest else None,
            })

        return httpx.Response(404)

    return handler


def test_missing_credentials_rejected():
    with pytest.raises(UnauthorizedError):
        HPKVClient(api_url="", api_key="key")
    with pytest.raises(UnauthorizedError):
        HPKVClient(api_url="http://hpkv.test", api_key=None)


@pytest.mark.asyncio
async def test_record_round_trip(mock_transport_handler, records):
    async with make_client(mock_transport_handler) as client:
        assert await client.get("/f.__meta__") is None

        await client.put("/f.__meta__", '{"mode":33188}')
        assert records["/f.__meta__"] == '{"mode":33188}'
        assert await client.get("/f.__meta__") == '{"mode":33188}'

        assert await client.delete("/f.__meta__") is True
        assert await client.delete("/f.__meta__") is False


@pytest.mark.asyncio
async def test_list_follows_next_marker(mock_transport_handler, records):
    for key in ["/d/a", "/d/b", "/d/c", "/d/d", "/d/e", "/other"]:
        records[key] = "v"

    async with make_client(mock_transport_handler) as client:
        keys = await list_all_keys(client, "/d/")

    assert keys == ["/d/a", "/d/b", "/d/c", "/d/d", "/d/e"]


@pytest.mark.asyncio
async def test_put_rejects_oversized_value_without_request():
    def handler(request):
        raise AssertionError("no request expected")

    async with make_client(handler, max_value_size=8) as client:
        with pytest.raises(StoreError) as exc_info:
            await client.put("k", "x" * 9)

    assert exc_info.value.status_code == 413


@pytest.mark.asyncio
async def test_error_status_raises_store_error():
    def handler(request):
        return httpx.Response(403, text="Forbidden: bad key")

    async with make_client(handler) as client:
        with pytest.raises(StoreError) as exc_info:
            await client.get("k")

    assert exc_info.value.status_code == 403
    assert "HPKV API Error (403)" in str(exc_info.value)


@pytest.mark.asyncio
async def test_server_errors_are_retried(sleeps):
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(503, text="busy")
        return httpx.Response(200, json={"key": "k", "value": "v"})

    async with make_client(handler, max_retries=2, retry_backoff=2.0) as client:
        assert await client.get("k") == "v"

    assert len(calls) == 3
    assert sleeps == [1.0, 2.0]


@pytest.mark.asyncio
async def test_retries_exhausted_returns_last_error(sleeps):
    def handler(request):
        return httpx.Response(500, text="still broken")

    async with make_client(handler, max_retries=1) as client:
        with pytest.raises(StoreError) as exc_info:
            await client.put("k", "v")

    assert exc_info.value.status_code == 500
    assert len(sleeps) == 1


@pytest.mark.asyncio
async def test_connect_errors_are_retried_then_raised(sleeps):
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(handler, max_retries=2) as client:
        with pytest.raises(StoreError) as exc_info:
            await client.delete("k")

    assert len(calls) == 3
    assert "Network error" in str(exc_info.value)


@pytest.mark.asyncio
async def test_client_errors_are_not_retried(sleeps):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(400, text="bad request")

    async with make_client(handler, max_retries=3) as client:
        with pytest.raises(StoreError):
            await client.list("/")

    assert len(calls) == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_invalid_list_response():
    def handler(request):
        return httpx.Response(200, json={"unexpected": True})

    async with make_client(handler) as client:
        with pytest.raises(StoreError):
            await client.list("/")


@pytest.mark.asyncio
async def test_value_limit_counts_characters(mock_transport_handler, records):
    value = "\xff" * 3000

    async with make_client(mock_transport_handler, max_value_size=3072) as client:
        await client.put("/f.chunk0", value)
        assert await client.get("/f.chunk0") == value

    assert records["/f.chunk0"] == value
    assert len(value.encode("utf-8")) > 3072
