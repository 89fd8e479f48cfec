"""Shared fixtures for the rebrander test suite."""

from __future__ import annotations

import os
import tempfile

# Keep rotated test logs out of the repository.
os.environ.setdefault("REBRANDER_LOG_DIR", tempfile.mkdtemp(prefix="rebrander-logs-"))

import pytest  # noqa: E402

from tests.fakes import InMemoryGhostClient, RecordingConnection  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
  return "asyncio"


@pytest.fixture
def ghost() -> InMemoryGhostClient:
  return InMemoryGhostClient()


@pytest.fixture
def connection() -> RecordingConnection:
  return RecordingConnection()
