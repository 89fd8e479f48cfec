"""Async client for the parts of the Ghost Admin API used by a rebrand."""

from __future__ import annotations

import logging
from typing import Any

import httpx
import msgspec

from rebrander.config import Settings
from rebrander.core.errors import FetchError, GhostError, ParseError, ProbeFailure, RemoteError, UpdateConflict
from rebrander.schema.ghost import GHOST_POST_FIELDS, ErrorEnvelope, GhostPost, PostsPage, SiteInfo, decode_created_post, decode_error_envelope, decode_post_response, decode_posts_page, decode_site_info
from rebrander.services.post_fetcher import DEFAULT_PAGE_SIZE, PostFetcher
from rebrander.services.token_generator import AdminTokenGenerator
from rebrander.utils.lexical import find_and_replace
from rebrander.utils.safe_parse import safe_parse

logger = logging.getLogger(__name__)

ADMIN_API_PATH = "/ghost/api/admin"
MOCK_DATA_MARKER = "TEST_DATA"


def build_mock_lexical(text: str) -> str:
  """Lexical body with a single paragraph holding ``text``."""
  text_node = {"detail": 0, "format": 0, "mode": "normal", "style": "", "text": text, "type": "extended-text", "version": 1}
  paragraph = {"children": [text_node], "direction": "ltr", "format": "", "indent": 0, "type": "paragraph", "version": 1}
  root = {"children": [paragraph], "direction": "ltr", "format": "", "indent": 0, "type": "root", "version": 1}
  return msgspec.json.encode({"root": root}).decode("utf-8")


def _first_error(envelope: ErrorEnvelope) -> tuple[str, str]:
  error = envelope.errors[0]
  return error.message, error.type


async def fetch_site_info(url: str, *, http_client: httpx.AsyncClient) -> SiteInfo:
  """Probe the unauthenticated site endpoint; a failure usually means the URL is not a Ghost site."""
  try:
    response = await http_client.get(f"{url.rstrip('/')}{ADMIN_API_PATH}/site/")
  except httpx.HTTPError as exc:
    raise ProbeFailure(f"Failed to get site info: {exc}") from exc

  try:
    return decode_site_info(safe_parse(response.content))
  except ParseError as exc:
    raise ProbeFailure(f"Failed to parse site info: {exc}") from exc


class GhostClient:
  """Read, update, create, and delete Ghost posts with a signed Admin API key.

  Every authenticated request signs a header with the token generator, which
  caches the JWT until shortly before it expires. The client owns its httpx
  client unless one is injected; close it with ``aclose()`` or ``async with``.
  """

  def __init__(self, url: str, token_generator: AdminTokenGenerator, *, http_client: httpx.AsyncClient | None = None, timeout: float = 30.0, page_size: int = DEFAULT_PAGE_SIZE) -> None:
    self.url = url.rstrip("/")
    self._tokens = token_generator
    self._owns_http = http_client is None
    self._http = http_client or httpx.AsyncClient(timeout=timeout)
    self._page_size = page_size

  async def __aenter__(self) -> GhostClient:
    return self

  async def __aexit__(self, *exc_info: object) -> None:
    await self.aclose()

  async def aclose(self) -> None:
    if self._owns_http:
      await self._http.aclose()

  def _admin_url(self, path: str) -> str:
    return f"{self.url}{ADMIN_API_PATH}/{path}"

  async def _send(self, method: str, path: str, *, error_cls: type[GhostError], action: str, **kwargs: Any) -> httpx.Response:
    """Issue an authenticated request, mapping transport failures to ``error_cls``."""
    headers = {"Authorization": f"Ghost {self._tokens.get()}"}
    try:
      return await self._http.request(method, self._admin_url(path), headers=headers, **kwargs)
    except httpx.HTTPError as exc:
      raise error_cls(f"Failed to {action}: {exc}") from exc

  async def get_site_info(self) -> SiteInfo:
    return await fetch_site_info(self.url, http_client=self._http)

  async def list_posts(self, params: dict[str, str]) -> PostsPage:
    """Fetch one page of posts; error envelopes raise FetchError, schema mismatches raise ParseError."""
    response = await self._send("GET", "posts/", error_cls=FetchError, action="fetch posts", params=params)
    payload = safe_parse(response.content)

    errors = decode_error_envelope(payload)
    if errors is not None:
      message, error_type = _first_error(errors)
      raise FetchError(f"Failed to fetch posts: {message}", error_type=error_type)
    if response.is_error:
      raise FetchError(f"Failed to fetch posts: {response.status_code}")

    return decode_posts_page(payload)

  def get_post_fetcher(self, *, target_string: str | None = None, limit: int | None = None) -> PostFetcher:
    """Return a fetcher over posts whose body matches ``target_string`` (case-insensitive)."""
    return PostFetcher(self, target_string=target_string, limit=limit or self._page_size)

  async def get_all_post_ids(self, target_string: str) -> list[str]:
    """Enumerate the ids of every matching post before any of them is edited."""
    fetcher = self.get_post_fetcher(target_string=target_string)
    post_ids: list[str] = []

    while fetcher.has_next:
      posts = await fetcher.next()
      post_ids.extend(post.id for post in posts)

    logger.info("Found %d posts matching target on %s (reported total=%d)", len(post_ids), self.url, fetcher.total)
    return post_ids

  async def get_post(self, post_id: str) -> GhostPost:
    response = await self._send("GET", f"posts/{post_id}/", error_cls=RemoteError, action="fetch post", params={"fields": GHOST_POST_FIELDS})
    if response.is_error:
      raise RemoteError(f"Failed to fetch post: {response.status_code}")

    result = decode_post_response(safe_parse(response.content))
    if isinstance(result, ErrorEnvelope):
      message, error_type = _first_error(result)
      raise RemoteError(message, error_type=error_type)
    return result.posts[0]

  async def update_post(self, post_id: str, post: GhostPost) -> None:
    """Write a post back; Ghost validates the payload and rejects stale ``updated_at`` values."""
    response = await self._send("PUT", f"posts/{post_id}/", error_cls=RemoteError, action="update post", json={"posts": [msgspec.to_builtins(post)]})
    if response.is_success:
      return

    if response.status_code == httpx.codes.CONFLICT:
      raise UpdateConflict(f"Failed to update post: {response.text}")
    raise RemoteError(f"Failed to update post: {response.text}")

  async def replace_text_in_post(self, post_id: str, target: str, replacement: str) -> bool:
    """Replace ``target`` in a post body and save it.

    Returns False without writing when the body has no exact-case match, which
    happens because the listing filter is case-insensitive.
    """
    post = await self.get_post(post_id)
    lexical, changed = find_and_replace(post.lexical, target, replacement)
    if not changed:
      return False

    await self.update_post(post_id, msgspec.structs.replace(post, lexical=lexical))
    return True

  async def create_mock_post(self, *, title: str, text: str) -> str:
    """Create a draft post whose body contains ``text``; returns its id."""
    body = {"posts": [{"title": title, "lexical": build_mock_lexical(f"MOCK POST: {text}")}]}
    response = await self._send("POST", "posts/", error_cls=RemoteError, action="create post", json=body)
    if response.is_error:
      raise RemoteError(f"Failed to create post: {response.text}")
    return decode_created_post(safe_parse(response.content)).id

  async def delete_post(self, post_id: str) -> bool:
    response = await self._send("DELETE", f"posts/{post_id}/", error_cls=RemoteError, action="delete post")
    return response.is_success


def build_ghost_client(url: str, admin_key: str, settings: Settings) -> GhostClient:
  """Create a client for ``url`` signed with an ``id:secret`` Admin API key."""
  return GhostClient(url, AdminTokenGenerator.from_admin_key(admin_key), timeout=settings.ghost_timeout_seconds, page_size=settings.ghost_page_size)
