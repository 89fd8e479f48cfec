"""Synthetic failures for demonstrating error handling in the UI."""

from __future__ import annotations

import logging
import random

from rebrander.core.errors import InjectedFault
from rebrander.jobs.batch import Mutation

logger = logging.getLogger(__name__)


def with_fault_injection(mutate: Mutation, rate: float, *, rng: random.Random | None = None) -> Mutation:
  """Wrap ``mutate`` so that a ``rate`` fraction of calls fail with InjectedFault before doing any work."""
  if rate <= 0:
    return mutate

  chooser = rng or random.Random()
  logger.info("Fault injection enabled; %.0f%% of updates will fail", rate * 100)

  async def _mutate(item_id: str) -> bool:
    if chooser.random() < rate:
      raise InjectedFault("Test error")
    return await mutate(item_id)

  return _mutate
