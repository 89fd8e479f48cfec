from __future__ import annotations

import jwt
import pytest

from rebrander.core.errors import AuthenticationError
from rebrander.services.token_generator import AdminTokenGenerator

KEY_ID = "6489f1a2b3c4d5e6f7a8b9c0"
SECRET = "a1b2c3d4e5f60718293a4b5c6d7e8f90a1b2c3d4e5f60718293a4b5c6d7e8f90"


class FakeClock:
  def __init__(self, now: float) -> None:
    self.now = now

  def __call__(self) -> float:
    return self.now


def test_token_is_signed_for_admin_audience() -> None:
  clock = FakeClock(1_700_000_000.0)
  token = AdminTokenGenerator.from_admin_key(f"{KEY_ID}:{SECRET}", clock=clock).get()

  header = jwt.get_unverified_header(token)
  claims = jwt.decode(token, bytes.fromhex(SECRET), algorithms=["HS256"], audience="/admin/", options={"verify_exp": False})

  assert header["kid"] == KEY_ID
  assert header["alg"] == "HS256"
  assert claims["iat"] == 1_700_000_000
  assert claims["exp"] - claims["iat"] == 300


def test_token_is_cached_until_a_minute_before_expiry() -> None:
  clock = FakeClock(1_700_000_000.0)
  generator = AdminTokenGenerator(KEY_ID, SECRET, clock=clock)

  first = generator.get()
  clock.now += 239
  assert generator.get() == first

  clock.now += 1
  refreshed = generator.get()
  assert refreshed != first
  assert jwt.decode(refreshed, bytes.fromhex(SECRET), algorithms=["HS256"], audience="/admin/", options={"verify_exp": False})["iat"] == 1_700_000_240


@pytest.mark.parametrize("admin_key", ["no-separator", ":secret", "id:"])
def test_malformed_admin_key_is_rejected(admin_key: str) -> None:
  with pytest.raises(AuthenticationError):
    AdminTokenGenerator.from_admin_key(admin_key)


def test_non_hex_secret_is_rejected_when_signing() -> None:
  generator = AdminTokenGenerator(KEY_ID, "nothex")

  with pytest.raises(AuthenticationError):
    generator.get()
