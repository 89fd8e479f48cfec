"""Decode arbitrary transport payloads into structured values."""

from __future__ import annotations

from typing import Any

import msgspec

from rebrander.core.errors import ParseError


def safe_parse(payload: str | bytes) -> Any:
  """Decode a JSON payload, raising ParseError instead of a decoder-specific exception."""
  try:
    return msgspec.json.decode(payload)
  except msgspec.DecodeError as exc:
    raise ParseError(str(exc)) from exc
