"""Signed short-lived JWTs for the Ghost Admin API."""

from __future__ import annotations

import time
from collections.abc import Callable

import jwt

from rebrander.core.errors import AuthenticationError

TOKEN_LIFETIME_SECONDS = 5 * 60
# Regenerate once the cached token is within a minute of expiring.
REFRESH_MARGIN_SECONDS = 60
ADMIN_AUDIENCE = "/admin/"


class AdminTokenGenerator:
  """Build and cache Admin API JWTs from an ``id:secret`` key.

  ``get()`` returns the cached token while it has more than a minute left and
  signs a fresh one otherwise.
  """

  def __init__(self, key_id: str, secret: str, *, clock: Callable[[], float] = time.time) -> None:
    self._key_id = key_id
    self._secret = secret
    self._clock = clock
    self._token = ""
    self._refresh_at = 0.0

  @classmethod
  def from_admin_key(cls, admin_key: str, *, clock: Callable[[], float] = time.time) -> AdminTokenGenerator:
    """Split an Admin API key of the form ``id:secret``."""
    key_id, sep, secret = admin_key.partition(":")
    if not sep or not key_id or not secret:
      raise AuthenticationError("Admin API key must be in id:secret form")
    return cls(key_id, secret, clock=clock)

  def _secret_bytes(self) -> bytes:
    try:
      return bytes.fromhex(self._secret)
    except ValueError as exc:
      raise AuthenticationError("Admin API key secret is not valid hex") from exc

  def get(self) -> str:
    """Return a valid token, signing a new one when the cached token is near expiry."""
    now = self._clock()
    if now >= self._refresh_at:
      issued_at = int(now)
      claims = {"iat": issued_at, "exp": issued_at + TOKEN_LIFETIME_SECONDS, "aud": ADMIN_AUDIENCE}
      self._token = jwt.encode(claims, self._secret_bytes(), algorithm="HS256", headers={"kid": self._key_id})
      self._refresh_at = now + TOKEN_LIFETIME_SECONDS - REFRESH_MARGIN_SECONDS
    return self._token
