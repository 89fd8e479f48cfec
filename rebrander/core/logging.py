import logging
import logging.handlers
import sys
import time
import traceback
from pathlib import Path
from types import TracebackType

from rebrander.config import Settings

LOG_LINE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"
# Keep the first traceback line plus this many trailing lines on the console.
CONSOLE_TRACEBACK_TAIL = 5

_LOG_FILE_PATH: Path | None = None
_LOGGING_INITIALIZED = False


class TruncatedFormatter(logging.Formatter):
  """Formatter that shortens tracebacks to their header and last few frames."""

  def formatException(self, ei: tuple[type[BaseException] | None, BaseException | None, TracebackType | None]) -> str:  # noqa: N802
    lines = traceback.format_exception(*ei)
    if len(lines) > CONSOLE_TRACEBACK_TAIL + 1:
      return "".join(lines[:1] + ["    ...\n"] + lines[-CONSOLE_TRACEBACK_TAIL:])
    return "".join(lines)


def backup_namer(default_name: str) -> str:
  """Name rotated files ``rebrander.log-1`` instead of ``rebrander.log.1``."""
  stem, _, suffix = default_name.rpartition(".")
  if stem and suffix.isdigit():
    return f"{stem}-{suffix}"
  return default_name


def _build_handlers(settings: Settings) -> tuple[logging.Handler, logging.Handler, Path]:
  """Create the console handler and a rotating file handler under the configured log directory."""
  log_dir = Path(settings.log_dir).resolve()
  try:
    log_dir.mkdir(parents=True, exist_ok=True)
  except OSError as exc:
    raise RuntimeError(f"Failed to create log directory at {log_dir}: {exc}") from exc

  log_path = log_dir / f"rebrander_{time.strftime('%Y%m%d_%H%M%S')}.log"

  stream = logging.StreamHandler(sys.stdout)
  stream.setFormatter(TruncatedFormatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))

  file_handler = logging.handlers.RotatingFileHandler(log_path, encoding="utf-8", maxBytes=settings.log_max_bytes, backupCount=settings.log_backup_count)
  file_handler.namer = backup_namer
  file_handler.setFormatter(logging.Formatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))
  return stream, file_handler, log_path


def setup_logging(settings: Settings) -> Path:
  """Route the root, uvicorn, and fastapi loggers through the same handlers."""
  stream_handler, file_handler, log_path = _build_handlers(settings)
  for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
    log = logging.getLogger(logger_name)
    log.handlers = [stream_handler, file_handler]
    log.propagate = False

  level = logging.DEBUG if settings.debug else logging.INFO
  logging.basicConfig(level=level, handlers=[stream_handler, file_handler], force=True)
  # httpx logs every request at INFO; a rebrand issues thousands.
  logging.getLogger("httpx").setLevel(logging.WARNING)
  return log_path


def _initialize_logging(settings: Settings) -> None:
  """Initialize logging once per process."""
  global _LOG_FILE_PATH, _LOGGING_INITIALIZED
  if _LOGGING_INITIALIZED:
    return
  _LOG_FILE_PATH = setup_logging(settings)
  _LOGGING_INITIALIZED = True
  logging.getLogger("rebrander.core.logging").info("Logging initialized. Writing to %s", _LOG_FILE_PATH)
