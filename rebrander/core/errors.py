"""Error taxonomy for rebrand sessions and the Ghost Admin API client."""

from __future__ import annotations


class RebrandError(Exception):
  """Base class for every error raised by the rebrander."""


class ConfigValidationError(RebrandError):
  """Raised when a session configuration message is missing or malformed."""


class ParseError(RebrandError):
  """Raised when a payload is not valid structured data or does not match its schema."""


class GhostError(RebrandError):
  """A failure reported by, or while talking to, a Ghost site."""

  error_type = "GhostError"

  def __init__(self, message: str, *, error_type: str | None = None) -> None:
    super().__init__(message)
    self.message = message
    if error_type is not None:
      self.error_type = error_type

  def __str__(self) -> str:
    return self.message


class AuthenticationError(GhostError):
  """The Admin API key could not be used to sign requests, or was rejected."""

  error_type = "AuthenticationError"


class ProbeFailure(GhostError):
  """The site metadata probe failed; the URL is probably not a Ghost site."""

  error_type = "GhostSiteInfoError"


class FetchError(GhostError):
  """A list request returned an error envelope instead of a page of posts."""

  error_type = "FetchError"


class RemoteError(GhostError):
  """Ghost rejected a read or write for a single post."""

  error_type = "GhostPostError"


class UpdateConflict(RemoteError):
  """Ghost refused an update because the post changed since it was read."""

  error_type = "UpdateCollisionError"


class InjectedFault(RemoteError):
  """Synthetic failure used to exercise error handling paths."""

  error_type = "TestError"
