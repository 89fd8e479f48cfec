"""Rebrand session protocol bound to a single WebSocket connection.

A session waits for one configuration message, probes the Ghost site,
enumerates every matching post, then drives a batch of find-and-replace
updates while streaming ``status``/``error``/``success`` events back to the
client. Events go through a queue drained by one writer task, so the initial
status is always first and ``success`` always last.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol

from pydantic import ValidationError

from rebrander.core.errors import ConfigValidationError, GhostError, ParseError
from rebrander.jobs.batch import BatchRun, Mutation, run_batch
from rebrander.jobs.faults import with_fault_injection
from rebrander.jobs.models import RebrandJob, UpdateStatus, notification_interval
from rebrander.schema.updates import ItemErrorEvent, RebrandRequest, StatusEvent, SuccessEvent, encode_event, item_error_event, status_event, success_event
from rebrander.services.ghost import GhostClient
from rebrander.utils.safe_parse import safe_parse

logger = logging.getLogger(__name__)

CLOSE_NORMAL = 1000
CLOSE_SERVER_ERROR = 1011
CLOSE_CLIENT_ERROR = 4400
# RFC 6455 limits the close reason to 123 bytes of UTF-8.
MAX_CLOSE_REASON_BYTES = 123

GhostClientFactory = Callable[[str, str], GhostClient]
Event = StatusEvent | ItemErrorEvent | SuccessEvent


class Connection(Protocol):
  """The duplex channel a session writes to; Starlette's WebSocket satisfies it."""

  async def send_text(self, data: str) -> None: ...

  async def close(self, code: int = CLOSE_NORMAL, reason: str | None = None) -> None: ...


class SessionState(str, Enum):
  AWAITING_CONFIG = "awaiting_config"
  AUTHENTICATING = "authenticating"
  RUNNING = "running"
  TERMINATED = "terminated"


def _summarize_validation_error(exc: ValidationError) -> str:
  parts = []
  for error in exc.errors():
    location = ".".join(str(part) for part in error["loc"]) or "message"
    parts.append(f"{location}: {error['msg']}")
  return "; ".join(parts)


def truncate_close_reason(reason: str) -> str:
  encoded = reason.encode("utf-8")
  if len(encoded) <= MAX_CLOSE_REASON_BYTES:
    return reason
  return encoded[:MAX_CLOSE_REASON_BYTES].decode("utf-8", errors="ignore")


def parse_rebrand_request(raw: str | bytes) -> RebrandRequest:
  """Decode and validate a configuration message.

  Raises ParseError when the message is not JSON and ConfigValidationError
  when it does not match the configuration schema.
  """
  payload: Any = safe_parse(raw)
  try:
    return RebrandRequest.model_validate(payload)
  except ValidationError as exc:
    raise ConfigValidationError(_summarize_validation_error(exc)) from exc


class RebrandSession:
  """State machine for one update connection: awaiting config, authenticating, running, terminated."""

  def __init__(self, connection: Connection, *, client_factory: GhostClientFactory, rng: random.Random | None = None) -> None:
    self._connection = connection
    self._client_factory = client_factory
    self._rng = rng
    self._state = SessionState.AWAITING_CONFIG
    self._closed = False
    self._client: GhostClient | None = None
    self._job: RebrandJob | None = None
    self._batch: BatchRun | None = None
    self._interval = 1
    self._events: asyncio.Queue[Event] = asyncio.Queue()
    self._writer: asyncio.Task[None] | None = None

  @property
  def state(self) -> SessionState:
    return self._state

  @property
  def job(self) -> RebrandJob | None:
    return self._job

  async def on_message(self, raw: str | bytes) -> None:
    """Handle an inbound frame; only the first one configures the session."""
    if self._state is not SessionState.AWAITING_CONFIG:
      # A session runs at most one job; later messages are dropped.
      logger.warning("Ignoring message received while session is %s", self._state.value)
      return

    try:
      await self._start(raw)
    except Exception:
      logger.exception("Rebrand session failed unexpectedly")
      await self._terminate(CLOSE_SERVER_ERROR, "Server error")

  def on_close(self, code: int | None = None, reason: str | None = None) -> None:
    """Peer teardown: stop dispatching new updates immediately."""
    logger.info("WebSocket closed code=%s reason=%s state=%s", code, reason, self._state.value)
    # The peer is gone, so there is nothing left to close on our side.
    self._closed = True
    self._shutdown()

  async def wait(self) -> None:
    """Wait for event delivery and in-flight updates to finish, then release the Ghost client."""
    if self._writer is not None:
      await asyncio.wait([self._writer])
    if self._batch is not None:
      await self._batch.wait()
    if self._client is not None:
      await self._client.aclose()

  async def _start(self, raw: str | bytes) -> None:
    try:
      request = parse_rebrand_request(raw)
    except ParseError:
      logger.warning("Invalid request, expected valid JSON")
      await self._terminate(CLOSE_CLIENT_ERROR, "Invalid request, expected valid JSON")
      return
    except ConfigValidationError as exc:
      logger.warning("Invalid request: %s", exc)
      await self._terminate(CLOSE_CLIENT_ERROR, f"Invalid request: {exc}")
      return

    self._state = SessionState.AUTHENTICATING
    if request.flake_percentage > 0:
      logger.info("Flake percentage is set, update will fail on %.0f%% of posts", request.flake_percentage * 100)

    # A failed probe means the URL is probably not a Ghost site.
    try:
      self._client = self._client_factory(request.base_url, request.token)
      site = await self._client.get_site_info()
    except GhostError as exc:
      logger.warning("Unable to get site info url=%s error=%s", request.base_url, exc.message)
      await self._terminate(CLOSE_CLIENT_ERROR, f"Unable to get site info: {exc.message}")
      return
    if self._state is SessionState.TERMINATED:
      return

    logger.info("Updating posts at %s (%s) with %d concurrent updates", request.base_url, site.site.title, request.concurrent_updates)
    self._state = SessionState.RUNNING

    # Collect every id before editing: edited posts drop out of the filter and shift page boundaries.
    try:
      post_ids = await self._client.get_all_post_ids(request.target_string)
    except (GhostError, ParseError) as exc:
      logger.warning("Unable to update posts url=%s error=%s", request.base_url, exc)
      await self._terminate(CLOSE_CLIENT_ERROR, f"Unable to update posts: {exc}")
      return
    if self._state is SessionState.TERMINATED:
      return

    self._job = RebrandJob(target_string=request.target_string, replacement_string=request.replacement_string, concurrent_updates=request.concurrent_updates, flake_percentage=request.flake_percentage, total=len(post_ids))
    self._interval = notification_interval(request.concurrent_updates)
    self._writer = asyncio.create_task(self._drain_events(), name="rebrand-session-writer")

    # The first event tells the client how many posts may change.
    self._emit(status_event(self._job.total, 0))
    if self._job.total == 0:
      self._emit(success_event(0, 0))
      return

    self._batch = run_batch(post_ids, self._build_mutation(request), self._on_status, concurrency_limit=request.concurrent_updates)

  def _build_mutation(self, request: RebrandRequest) -> Mutation:
    client = self._client
    assert client is not None

    async def _replace(post_id: str) -> bool:
      return await client.replace_text_in_post(post_id, request.target_string, request.replacement_string)

    return with_fault_injection(_replace, request.flake_percentage, rng=self._rng)

  def _on_status(self, post_id: str, status: UpdateStatus) -> None:
    job = self._job
    assert job is not None
    job.record(post_id, status)

    if status is UpdateStatus.ERROR:
      logger.info("Error updating post %s", post_id)
      self._emit(item_error_event(post_id))
    elif status is UpdateStatus.SKIPPED:
      # Matched the case-insensitive filter but not the exact-case target.
      logger.debug("Post %s did not contain the target string", post_id)

    if job.processed % self._interval == 0:
      self._emit(status_event(job.total, job.processed))

    if job.complete:
      logger.info("Rebrand complete total=%d updated=%d skipped=%d errors=%d", job.total, job.updated_count, job.skipped_count, job.error_count)
      self._emit(success_event(job.total, job.error_count, job.skipped_count))

  def _emit(self, event: Event) -> None:
    if self._state is SessionState.TERMINATED:
      return
    self._events.put_nowait(event)

  async def _drain_events(self) -> None:
    try:
      while True:
        event = await self._events.get()
        await self._connection.send_text(encode_event(event))
        if isinstance(event, SuccessEvent):
          await self._terminate(CLOSE_NORMAL, "Update complete")
          return
    except Exception as exc:  # noqa: BLE001
      logger.warning("Failed to deliver progress event; aborting update error_type=%s error=%s", type(exc).__name__, exc)
      self._closed = True
      self._shutdown(stop_writer=False)

  def _shutdown(self, *, stop_writer: bool = True) -> None:
    self._state = SessionState.TERMINATED
    if self._batch is not None:
      self._batch.abort()
    if stop_writer and self._writer is not None and not self._writer.done():
      self._writer.cancel()

  async def _terminate(self, code: int, reason: str) -> None:
    self._state = SessionState.TERMINATED
    if self._closed:
      return
    self._closed = True
    await self._connection.close(code=code, reason=truncate_close_reason(reason))
