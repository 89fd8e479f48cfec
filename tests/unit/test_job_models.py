from __future__ import annotations

import pytest

from rebrander.jobs.models import RebrandJob, UpdateStatus, notification_interval


@pytest.mark.parametrize(("concurrent_updates", "expected"), [(1, 1), (4, 1), (5, 1), (14, 1), (15, 2), (100, 10), (1000, 100)])
def test_notification_interval(concurrent_updates: int, expected: int) -> None:
  assert notification_interval(concurrent_updates) == expected


def test_job_counts_each_status() -> None:
  job = RebrandJob(target_string="Acme", replacement_string="Globex", concurrent_updates=10, total=3)

  job.record("a", UpdateStatus.UPDATED)
  job.record("b", UpdateStatus.SKIPPED)
  assert not job.complete
  job.record("c", UpdateStatus.ERROR)

  assert job.complete
  assert (job.processed, job.updated_count, job.skipped_count, job.error_count) == (3, 1, 1, 1)
  assert job.outcomes[-1] == ("c", UpdateStatus.ERROR)
