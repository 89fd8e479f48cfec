"""Bounded-concurrency, cooperatively cancellable fan-out over a list of post ids."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from rebrander.jobs.models import UpdateStatus

logger = logging.getLogger(__name__)

Mutation = Callable[[str], Awaitable[bool]]
StatusCallback = Callable[[str, UpdateStatus], None]


class BatchRun:
  """A running batch: one task per id, at most ``concurrency_limit`` mutations in flight.

  ``abort()`` only stops tasks that have not yet passed their start check;
  mutations already in progress finish and report their status.
  """

  def __init__(self, ids: Sequence[str], mutate: Mutation, on_status: StatusCallback, *, concurrency_limit: int) -> None:
    if concurrency_limit < 1:
      raise ValueError("concurrency_limit must be at least 1")
    self.total = len(ids)
    self._mutate = mutate
    self._on_status = on_status
    self._semaphore = asyncio.Semaphore(concurrency_limit)
    self._aborted = False
    self._tasks = [asyncio.create_task(self._process(item_id), name=f"rebrand-item-{item_id}") for item_id in ids]

  @property
  def aborted(self) -> bool:
    return self._aborted

  def abort(self) -> None:
    """Stop dispatching new mutations. Safe to call repeatedly."""
    if not self._aborted:
      logger.info("Aborting batch of %d items", self.total)
    self._aborted = True

  async def _process(self, item_id: str) -> None:
    async with self._semaphore:
      if self._aborted:
        return

      try:
        changed = await self._mutate(item_id)
      except Exception as exc:  # noqa: BLE001
        logger.warning("Update failed for item=%s error_type=%s error=%s", item_id, type(exc).__name__, exc)
        status = UpdateStatus.ERROR
      else:
        status = UpdateStatus.UPDATED if changed else UpdateStatus.SKIPPED

      self._on_status(item_id, status)

  async def wait(self) -> None:
    """Wait until every task has reported or skipped because of an abort."""
    if self._tasks:
      await asyncio.gather(*self._tasks)


def run_batch(ids: Sequence[str], mutate: Mutation, on_status: StatusCallback, *, concurrency_limit: int = 100) -> BatchRun:
  """Start mutating ``ids`` in the running event loop and return immediately.

  ``on_status`` is called exactly once per dispatched id with UPDATED when
  ``mutate`` returns True, SKIPPED when it returns False, and ERROR when it
  raises. Completion order across ids is not defined.
  """
  return BatchRun(ids, mutate, on_status, concurrency_limit=concurrency_limit)
