"""Shared FastAPI dependencies for reaching Ghost sites."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from fastapi import Depends, HTTPException, status

from rebrander.config import Settings, get_settings
from rebrander.jobs.session import GhostClientFactory
from rebrander.services.ghost import GhostClient, build_ghost_client


async def get_http_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[httpx.AsyncClient]:  # noqa: B008
  """Yield a short-lived httpx client for unauthenticated probes."""
  async with httpx.AsyncClient(timeout=settings.ghost_timeout_seconds) as client:
    yield client


def get_ghost_client_factory(settings: Settings = Depends(get_settings)) -> GhostClientFactory:  # noqa: B008
  """Return a factory building an Admin API client from a site URL and an ``id:secret`` key."""

  def _factory(url: str, admin_key: str) -> GhostClient:
    return build_ghost_client(url, admin_key, settings)

  return _factory


def require_mock_routes(settings: Settings = Depends(get_settings)) -> None:  # noqa: B008
  # Hidden rather than forbidden, so probing does not reveal the routes exist.
  if not settings.mock_routes_enabled:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
