"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from rebrander.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

APP_VERSION = "0.1.0"
MAX_GHOST_PAGE_SIZE = 100


@dataclass(frozen=True)
class Settings:
  """Typed settings for the rebrander service."""

  environment: str
  debug: bool
  allowed_origins: tuple[str, ...]
  log_dir: str
  log_max_bytes: int
  log_backup_count: int
  log_http_4xx: bool
  ghost_page_size: int
  ghost_timeout_seconds: float
  mock_routes_enabled: bool


def _parse_bool(raw: str | None) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None:
    return False

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  # CORS stays disabled when no origins are configured.
  if not raw:
    return ()

  origins = tuple(origin.strip() for origin in raw.split(",") if origin.strip())

  if "*" in origins:
    raise ValueError("REBRANDER_ALLOWED_ORIGINS must not include wildcard origins.")

  return origins


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("REBRANDER_ENV", "development").strip().lower()
  debug = _parse_bool(os.getenv("REBRANDER_DEBUG"))
  log_dir = (os.getenv("REBRANDER_LOG_DIR") or "./logs").strip()

  log_max_bytes = int(os.getenv("REBRANDER_LOG_MAX_BYTES", "5242880"))  # 5MB default
  if log_max_bytes <= 0:
    raise ValueError("REBRANDER_LOG_MAX_BYTES must be a positive integer.")

  log_backup_count = int(os.getenv("REBRANDER_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("REBRANDER_LOG_BACKUP_COUNT must be zero or a positive integer.")

  # Allow opt-in logging of 4xx HTTPExceptions for diagnostics.
  log_http_4xx = _parse_bool(os.getenv("REBRANDER_LOG_HTTP_4XX"))

  # Ghost caps admin API pages at 100 posts.
  ghost_page_size = int(os.getenv("REBRANDER_GHOST_PAGE_SIZE", "25"))
  if not 1 <= ghost_page_size <= MAX_GHOST_PAGE_SIZE:
    raise ValueError(f"REBRANDER_GHOST_PAGE_SIZE must be between 1 and {MAX_GHOST_PAGE_SIZE}.")

  ghost_timeout_seconds = float(os.getenv("REBRANDER_GHOST_TIMEOUT_SECONDS", "30"))
  if ghost_timeout_seconds <= 0:
    raise ValueError("REBRANDER_GHOST_TIMEOUT_SECONDS must be positive.")

  # Mock routes write to a real Ghost site, so they are opt-in.
  mock_routes_enabled = _parse_bool(os.getenv("REBRANDER_MOCK_ROUTES_ENABLED"))

  return Settings(
    environment=environment,
    debug=debug,
    allowed_origins=_parse_origins(os.getenv("REBRANDER_ALLOWED_ORIGINS")),
    log_dir=log_dir,
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    log_http_4xx=log_http_4xx,
    ghost_page_size=ghost_page_size,
    ghost_timeout_seconds=ghost_timeout_seconds,
    mock_routes_enabled=mock_routes_enabled,
  )
