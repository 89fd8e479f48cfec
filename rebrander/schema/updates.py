"""Wire contracts for the update WebSocket: the inbound configuration and outbound progress events."""

from __future__ import annotations

from typing import Annotated

import msgspec
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, HttpUrl, StrictStr

ADMIN_KEY_PATTERN = r"^[a-z0-9]+:[a-z0-9]+$"
DEFAULT_CONCURRENT_UPDATES = 100
MAX_CONCURRENT_UPDATES = 1000


class RebrandRequest(BaseModel):
  """Configuration message that starts a rebrand session."""

  url: HttpUrl = Field(validation_alias=AliasChoices("url", "remoteUrl"), description="Base URL of the Ghost site.")
  token: StrictStr = Field(validation_alias=AliasChoices("token", "credential"), pattern=ADMIN_KEY_PATTERN, description="Ghost Admin API key in id:secret form.")
  target_string: StrictStr = Field(min_length=1, validation_alias=AliasChoices("targetString", "target_string"))
  replacement_string: StrictStr = Field(min_length=1, validation_alias=AliasChoices("replacementString", "replacement_string"))
  concurrent_updates: int = Field(default=DEFAULT_CONCURRENT_UPDATES, ge=1, le=MAX_CONCURRENT_UPDATES, validation_alias=AliasChoices("concurrentUpdates", "concurrencyLimit"))
  flake_percentage: float = Field(default=0.0, ge=0.0, le=1.0, validation_alias=AliasChoices("flakePercentage", "faultInjectionRate"), description="Fraction of updates forced to fail, for exercising error handling.")
  model_config = ConfigDict(extra="forbid")

  @property
  def base_url(self) -> str:
    """Site URL without a trailing slash, ready for path concatenation."""
    return str(self.url).rstrip("/")


class SiteDetailsRequest(BaseModel):
  """Body of the site details probe route."""

  url: HttpUrl


class MockCreateRequest(BaseModel):
  """Body of the mock post creation route."""

  url: HttpUrl
  token: StrictStr = Field(pattern=ADMIN_KEY_PATTERN)
  target_string: StrictStr = Field(min_length=1, alias="targetString")
  count: int = Field(ge=1, le=MAX_CONCURRENT_UPDATES)


class MockDeleteRequest(BaseModel):
  """Body of the mock post cleanup route."""

  url: HttpUrl
  token: StrictStr = Field(pattern=ADMIN_KEY_PATTERN)


class StatusData(msgspec.Struct):
  total: int
  processed: int


class ItemErrorData(msgspec.Struct, rename="camel"):
  post_id: str


class SuccessData(msgspec.Struct):
  total: int
  success: int
  error: int
  skipped: int = 0


class StatusEvent(msgspec.Struct, tag="status", tag_field="type"):
  """Periodic progress: ``processed`` of ``total`` posts have a terminal status."""

  data: StatusData


class ItemErrorEvent(msgspec.Struct, tag="error", tag_field="type"):
  """A single post failed to update."""

  data: ItemErrorData


class SuccessEvent(msgspec.Struct, tag="success", tag_field="type"):
  """Terminal event: every post has been processed."""

  data: SuccessData


ProgressEvent = Annotated[StatusEvent | ItemErrorEvent | SuccessEvent, msgspec.Meta(description="Outbound update event")]


def status_event(total: int, processed: int) -> StatusEvent:
  return StatusEvent(data=StatusData(total=total, processed=processed))


def item_error_event(post_id: str) -> ItemErrorEvent:
  return ItemErrorEvent(data=ItemErrorData(post_id=post_id))


def success_event(total: int, error: int, skipped: int = 0) -> SuccessEvent:
  return SuccessEvent(data=SuccessData(total=total, success=total - error, error=error, skipped=skipped))


def encode_event(event: StatusEvent | ItemErrorEvent | SuccessEvent) -> str:
  """Serialize an event as the JSON text frame sent to clients."""
  return msgspec.json.encode(event).decode("utf-8")


def decode_event(raw: str | bytes) -> StatusEvent | ItemErrorEvent | SuccessEvent:
  """Parse a JSON text frame back into an event."""
  return msgspec.json.decode(raw, type=ProgressEvent)


class MockCreateResult(msgspec.Struct):
  """Ids of the posts created by the mock seeding route."""

  created: list[str]


class MockDeleteResult(msgspec.Struct):
  deleted: int
  failed: int
