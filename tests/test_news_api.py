"""
News endpoint tests: CRUD lifecycle over HTTP, status-code mapping of
service errors, pagination parameters and diagnostic headers.

Each test creates the data it needs through the API.
"""
from datetime import datetime

import pytest
from httpx import AsyncClient

NEWS_URL = "/api/v1/news"


async def _create(client: AsyncClient, title: str = "Breaking news", **overrides) -> dict:
    payload = {
        "title": title,
        "content": "Something happened today.",
        "author": "reporter",
        "tags": ["world"],
    }
    payload.update(overrides)
    resp = await client.post(NEWS_URL, json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_diagnostic_headers(async_client: AsyncClient):
    await _create(async_client)
    resp = await async_client.get(NEWS_URL)
    assert "x-response-time-ms" in resp.headers
    # COUNT + page SELECT + author and tag selectinloads
    assert int(resp.headers["x-query-count"]) >= 2


@pytest.mark.asyncio
async def test_query_count_is_per_request(async_client: AsyncClient):
    await _create(async_client)
    resp = await async_client.get("/health")
    assert resp.headers["x-query-count"] == "0"
    assert float(resp.headers["x-response-time-ms"]) >= 0


# ---------------------------------------------------------------------------
# Create / read
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_and_get_news(async_client: AsyncClient):
    created = await _create(async_client, tags=["world", "politics"])
    assert created["title"] == "Breaking news"
    assert created["author"]["name"] == "reporter"

    resp = await async_client.get(f"{NEWS_URL}/{created['id']}")
    assert resp.status_code == 200
    detail = resp.json()
    assert detail["content"] == "Something happened today."
    assert {t["name"] for t in detail["tags"]} == {"world", "politics"}
    assert detail["create_date"] is not None
    assert detail["last_update_date"] is not None


@pytest.mark.asyncio
async def test_get_missing_news_returns_404(async_client: AsyncClient):
    resp = await async_client.get(f"{NEWS_URL}/99999")
    assert resp.status_code == 404
    body = resp.json()
    assert body["error_code"] == "000001"
    assert "99999" in body["message"]


@pytest.mark.asyncio
async def test_duplicate_title_returns_409(async_client: AsyncClient):
    await _create(async_client, "Same headline")
    resp = await async_client.post(NEWS_URL, json={
        "title": "Same headline",
        "content": "A different body.",
        "author": "someone",
        "tags": [],
    })
    assert resp.status_code == 409
    body = resp.json()
    assert body["error_code"] == "000003"
    assert body["details"]

    # The failed request rolled back entirely, including the new author.
    metrics = (await async_client.get("/api/v1/metrics")).json()
    assert metrics["total_news"] == 1
    assert metrics["total_authors"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "override",
    [
        {"title": "abc"},
        {"content": "tiny"},
        {"author": "ab"},
        {"tags": ["x"]},
    ],
)
async def test_create_validation_errors_return_422(async_client: AsyncClient, override: dict):
    payload = {
        "title": "Valid headline",
        "content": "Valid content text.",
        "author": "reporter",
        "tags": ["world"],
    }
    payload.update(override)
    resp = await async_client.post(NEWS_URL, json=payload)
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# List
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_news_empty(async_client: AsyncClient):
    resp = await async_client.get(NEWS_URL)
    assert resp.status_code == 200
    data = resp.json()
    assert data["items"] == []
    assert data["page_number"] == 1
    assert data["total_pages"] == 0


@pytest.mark.asyncio
async def test_list_news_sorted_and_paged(async_client: AsyncClient):
    for title in ("Bravo story", "Alpha story", "Charlie story"):
        await _create(async_client, title, tags=[])

    resp = await async_client.get(NEWS_URL, params={"page": 1, "page_size": 2, "sort": "title:ASC"})
    assert resp.status_code == 200
    data = resp.json()
    assert [n["title"] for n in data["items"]] == ["Alpha story", "Bravo story"]
    assert data["total"] == 3
    assert data["total_pages"] == 2

    resp = await async_client.get(NEWS_URL, params={"page": 1, "page_size": 10, "sort": "title:down"})
    assert [n["title"] for n in resp.json()["items"]] == ["Charlie story", "Bravo story", "Alpha story"]


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"page": 0}, {"page_size": 0}, {"page_size": 101}])
async def test_list_news_invalid_pagination_returns_422(async_client: AsyncClient, params: dict):
    resp = await async_client.get(NEWS_URL, params=params)
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_news(async_client: AsyncClient):
    created = await _create(async_client)

    resp = await async_client.put(f"{NEWS_URL}/{created['id']}", json={
        "title": "Revised headline",
        "content": "Revised body text.",
        "author": "editor",
        "tags": ["science"],
    })
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["title"] == "Revised headline"
    assert updated["author"]["name"] == "editor"
    assert [t["name"] for t in updated["tags"]] == ["science"]
    assert _parse(updated["last_update_date"]) >= _parse(created["last_update_date"])

    detail = (await async_client.get(f"{NEWS_URL}/{created['id']}")).json()
    assert detail["title"] == "Revised headline"
    assert [t["name"] for t in detail["tags"]] == ["science"]


@pytest.mark.asyncio
async def test_update_missing_news_returns_404(async_client: AsyncClient):
    resp = await async_client.put(f"{NEWS_URL}/99999", json={
        "title": "Ghost story",
        "content": "Nobody wrote this.",
        "tags": [],
    })
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_delete_news(async_client: AsyncClient):
    created = await _create(async_client)

    resp = await async_client.delete(f"{NEWS_URL}/{created['id']}")
    assert resp.status_code == 204

    resp = await async_client.get(f"{NEWS_URL}/{created['id']}")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_missing_news_returns_404(async_client: AsyncClient):
    resp = await async_client.delete(f"{NEWS_URL}/99999")
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_metrics_counts(async_client: AsyncClient):
    await _create(async_client, "First story", tags=["world", "sports"])
    await _create(async_client, "Second story", author="columnist", tags=["world"])

    resp = await async_client.get("/api/v1/metrics")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_news"] == 2
    assert data["total_authors"] == 2
    assert data["total_tags"] == 2
    assert data["avg_tags_per_news"] == 1.5
    assert set(data["cache_info"]) == {"hits", "misses", "hit_rate"}
