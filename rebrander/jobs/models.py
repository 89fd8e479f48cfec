"""Domain models for rebrand jobs."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum


class UpdateStatus(str, Enum):
  """Terminal status of a single post in a batch."""

  UPDATED = "updated"
  SKIPPED = "skipped"
  ERROR = "error"


def notification_interval(concurrent_updates: int) -> int:
  """Emit a status event roughly ten times per window of concurrent updates."""
  # Round half up so 5 concurrent updates still report every item rather than every 0.
  return max(1, math.floor(concurrent_updates / 10 + 0.5))


@dataclass
class RebrandJob:
  """Runtime state of one rebrand; owned by a single session."""

  target_string: str
  replacement_string: str
  concurrent_updates: int
  flake_percentage: float = 0.0
  total: int = 0
  processed: int = 0
  updated_count: int = 0
  skipped_count: int = 0
  error_count: int = 0
  outcomes: list[tuple[str, UpdateStatus]] = field(default_factory=list)

  @property
  def complete(self) -> bool:
    return self.processed >= self.total

  def record(self, post_id: str, status: UpdateStatus) -> None:
    """Count one terminal status."""
    self.outcomes.append((post_id, status))
    self.processed += 1
    if status is UpdateStatus.ERROR:
      self.error_count += 1
    elif status is UpdateStatus.SKIPPED:
      self.skipped_count += 1
    else:
      self.updated_count += 1
