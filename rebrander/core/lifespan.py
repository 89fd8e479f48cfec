import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from rebrander.config import APP_VERSION, get_settings
from rebrander.core.logging import _initialize_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Set up logging once uvicorn has installed its own handlers."""
  settings = get_settings()
  logger = logging.getLogger("rebrander.core.lifespan")

  try:
    _initialize_logging(settings)
  except RuntimeError:
    # The console still works when the log directory cannot be created.
    logger.warning("File logging unavailable; continuing with default handlers.", exc_info=True)

  logger.info("Rebrander %s started environment=%s mock_routes=%s", APP_VERSION, settings.environment, settings.mock_routes_enabled)
  if settings.mock_routes_enabled:
    logger.warning("Mock data routes are enabled; they create and delete posts on the target site.")

  yield

  logger.info("Rebrander shutting down.")
