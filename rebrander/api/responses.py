"""Helpers for returning msgspec values from FastAPI routes."""

from __future__ import annotations

import msgspec
from starlette.responses import Response


def encode_msgspec_response(payload: msgspec.Struct, *, status_code: int = 200) -> Response:
  """Encode a Struct as JSON, skipping FastAPI's pydantic serialization path."""
  return Response(content=msgspec.json.encode(payload), status_code=status_code, media_type="application/json")
