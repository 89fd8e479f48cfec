"""Helpers for Ghost's NQL filter syntax."""

from __future__ import annotations

import re

# Inside a quoted NQL literal a backslash escapes the next character, so backslashes are escaped along with both quote styles.
_ESCAPE_PATTERN = re.compile(r"['\"\\]")


def escape_filter_value(value: str) -> str:
  """Backslash-escape quotes and backslashes so a value can be embedded in a quoted filter literal."""
  return _ESCAPE_PATTERN.sub(lambda match: "\\" + match.group(0), value)


def build_lexical_filter(target: str) -> str:
  """Build a filter matching posts whose lexical body contains ``target`` (case-insensitive on the Ghost side)."""
  return f"lexical:~'{escape_filter_value(target)}'"
