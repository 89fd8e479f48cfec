"""Minimal .env support so local runs can keep Ghost settings out of the shell."""

from __future__ import annotations

import os
from pathlib import Path

_QUOTES = ('"', "'")


def default_env_path() -> Path:
  """Return the .env path at the repository root."""

  return Path(__file__).resolve().parents[2] / ".env"


def parse_env_text(text: str) -> dict[str, str]:
  """Parse KEY=value lines, skipping comments, blanks, and malformed entries."""

  values: dict[str, str] = {}
  for raw_line in text.splitlines():
    line = raw_line.strip()
    if not line or line.startswith("#"):
      continue
    # Accept shell-style `export KEY=value` lines copied from scripts.
    line = line.removeprefix("export ").lstrip()
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
      continue
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
      value = value[1:-1]
    values[key] = value
  return values


def load_env_file(path: Path, *, override: bool = False) -> None:
  """Copy values from a .env file into os.environ; existing variables win unless override is set."""

  if not path.is_file():
    return

  for key, value in parse_env_text(path.read_text(encoding="utf-8")).items():
    if override or key not in os.environ:
      os.environ[key] = value
