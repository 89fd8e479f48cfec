from __future__ import annotations

import random

import pytest

from rebrander.core.errors import InjectedFault
from rebrander.jobs.faults import with_fault_injection


async def _succeed(item_id: str) -> bool:
  return True


def test_zero_rate_returns_original_mutation() -> None:
  assert with_fault_injection(_succeed, 0) is _succeed


@pytest.mark.anyio
async def test_full_rate_fails_before_mutating() -> None:
  calls: list[str] = []

  async def _mutate(item_id: str) -> bool:
    calls.append(item_id)
    return True

  flaky = with_fault_injection(_mutate, 1.0)

  with pytest.raises(InjectedFault) as exc_info:
    await flaky("post-1")

  assert calls == []
  assert exc_info.value.error_type == "TestError"
  assert str(exc_info.value) == "Test error"


@pytest.mark.anyio
async def test_partial_rate_is_roughly_proportional() -> None:
  flaky = with_fault_injection(_succeed, 0.25, rng=random.Random(1234))
  failures = 0
  for index in range(2000):
    try:
      await flaky(f"post-{index}")
    except InjectedFault:
      failures += 1

  assert 400 < failures < 600
