from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import replace

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from rebrander.api.deps import get_ghost_client_factory, get_http_client
from rebrander.config import get_settings
from rebrander.main import app
from tests.fakes import TEST_ADMIN_KEY, InMemoryGhostClient


def _site_handler(request: httpx.Request) -> httpx.Response:
  if request.url.host == "ghost.test":
    return httpx.Response(200, json={"site": {"title": "Mock Ghost", "url": "https://ghost.test"}})
  raise httpx.ConnectError("connection refused", request=request)


async def _mock_http_client() -> AsyncIterator[httpx.AsyncClient]:
  async with httpx.AsyncClient(transport=httpx.MockTransport(_site_handler)) as client:
    yield client


@pytest.fixture
async def async_client() -> AsyncIterator[AsyncClient]:
  app.dependency_overrides[get_http_client] = _mock_http_client
  async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
    yield client
  app.dependency_overrides.clear()


@pytest.fixture
def mock_routes_enabled(ghost: InMemoryGhostClient) -> InMemoryGhostClient:
  app.dependency_overrides[get_settings] = lambda: replace(get_settings(), mock_routes_enabled=True)
  app.dependency_overrides[get_ghost_client_factory] = lambda: lambda url, key: ghost
  return ghost


@pytest.mark.anyio
async def test_health_reports_version(async_client: AsyncClient) -> None:
  response = await async_client.get("/health")

  assert response.status_code == 200
  assert response.json() == {"status": "ok", "version": "0.1.0"}
  assert response.headers["x-request-id"]


@pytest.mark.anyio
async def test_details_returns_site_info(async_client: AsyncClient) -> None:
  response = await async_client.post("/details", json={"url": "https://ghost.test"})

  assert response.status_code == 200
  assert response.json()["site"]["title"] == "Mock Ghost"


@pytest.mark.anyio
async def test_details_probe_failure_is_bad_request(async_client: AsyncClient) -> None:
  response = await async_client.post("/details", json={"url": "https://not-ghost.test"})

  assert response.status_code == 400
  assert response.json()["detail"].startswith("Failed to get site info")
  assert response.json()["requestId"] == response.headers["x-request-id"]


@pytest.mark.anyio
async def test_details_rejects_invalid_body(async_client: AsyncClient) -> None:
  response = await async_client.post("/details", json={"url": "not a url"})

  assert response.status_code == 422


@pytest.mark.anyio
async def test_mock_routes_are_hidden_by_default(async_client: AsyncClient) -> None:
  response = await async_client.post("/mock/delete", json={"url": "https://ghost.test", "token": TEST_ADMIN_KEY})

  assert response.status_code == 404


@pytest.mark.anyio
async def test_mock_routes_seed_and_clear_posts(async_client: AsyncClient, mock_routes_enabled: InMemoryGhostClient) -> None:
  ghost = mock_routes_enabled
  await ghost.create_mock_post(title="real post", text="unrelated content")

  created = await async_client.post("/mock/create", json={"url": "https://ghost.test", "token": TEST_ADMIN_KEY, "targetString": "Acme", "count": 3})

  assert created.status_code == 200
  assert len(created.json()["created"]) == 3
  assert sorted(post.title for post in ghost.posts.values()) == ["Acme 0", "Acme 1", "Acme 2", "real post"]
  assert all("TEST_DATA Acme" in ghost.posts[post_id].lexical for post_id in created.json()["created"])

  deleted = await async_client.post("/mock/delete", json={"url": "https://ghost.test", "token": TEST_ADMIN_KEY})

  assert deleted.status_code == 200
  assert deleted.json() == {"deleted": 3, "failed": 0}
  assert [post.title for post in ghost.posts.values()] == ["real post"]
