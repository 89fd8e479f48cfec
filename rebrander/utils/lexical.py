"""Find-and-replace over Ghost's Lexical rich-text documents.

A Lexical document is a JSON object with a ``root`` node. Every node may carry a
``text`` leaf and a ``children`` list of further nodes; all other keys (format,
style, type, version, ...) are opaque and copied through untouched.
"""

from __future__ import annotations

from typing import Any

import msgspec

from rebrander.core.errors import ParseError
from rebrander.utils.safe_parse import safe_parse

LexicalNode = dict[str, Any]


def _validate_node(node: Any, path: str) -> None:
  """Check a node (and its subtree) has the loose Lexical shape."""
  if not isinstance(node, dict):
    raise ParseError(f"Expected an object at {path}")

  text = node.get("text")
  if text is not None and not isinstance(text, str):
    raise ParseError(f"Expected a string at {path}.text")

  children = node.get("children")
  if children is None:
    return
  if not isinstance(children, list):
    raise ParseError(f"Expected an array at {path}.children")

  for index, child in enumerate(children):
    _validate_node(child, f"{path}.children[{index}]")


def deserialize(lexical: str) -> dict[str, Any]:
  """Parse a Lexical string into a document dict, raising ParseError for invalid JSON or a missing root."""
  document = safe_parse(lexical)
  if not isinstance(document, dict) or "root" not in document:
    raise ParseError("Lexical document must be an object with a root node")

  _validate_node(document["root"], "root")
  return document


def replace_text_in_node(node: LexicalNode, target: str, replacement: str) -> tuple[LexicalNode, bool]:
  """Return a rewritten copy of ``node`` and whether any text leaf changed.

  Children are rewritten first, then the node's own ``text``. Matching is exact
  and case-sensitive. The input node is never mutated.
  """
  if not target:
    raise ValueError("target must be a non-empty string")

  rewritten = dict(node)
  changed = False

  children = node.get("children")
  if children is not None:
    new_children = []
    for child in children:
      new_child, child_changed = replace_text_in_node(child, target, replacement)
      new_children.append(new_child)
      changed = changed or child_changed
    rewritten["children"] = new_children

  text = node.get("text")
  if text:
    new_text = text.replace(target, replacement)
    rewritten["text"] = new_text
    changed = changed or new_text != text

  return rewritten, changed


def find_and_replace(lexical: str, target: str, replacement: str) -> tuple[str, bool]:
  """Rewrite every text leaf of a serialized Lexical document.

  Returns the re-serialized document and whether any replacement was made.
  Raises ParseError before rewriting if ``lexical`` is not a valid document.
  """
  document = deserialize(lexical)
  root, changed = replace_text_in_node(document["root"], target, replacement)
  rewritten = {**document, "root": root}
  return msgspec.json.encode(rewritten).decode("utf-8"), changed
