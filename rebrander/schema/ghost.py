"""msgspec structs for the subset of the Ghost Admin API the rebrander reads."""

from __future__ import annotations

from typing import Annotated, Any

import msgspec

from rebrander.core.errors import ParseError


class SiteDetails(msgspec.Struct):
  """Public metadata of a Ghost site."""

  title: str
  description: str | None = None
  logo: str | None = None
  icon: str | None = None
  cover_image: str | None = None
  accent_color: str | None = None
  url: str | None = None
  version: str | None = None


class SiteInfo(msgspec.Struct):
  """Response body of ``GET /ghost/api/admin/site``."""

  site: SiteDetails


class Pagination(msgspec.Struct, kw_only=True):
  """Paging state reported by Ghost in ``meta.pagination``."""

  limit: int
  page: int | None = None
  pages: int | None = None
  total: int | None = None
  next: int | None = None
  prev: int | None = None


class PostsMeta(msgspec.Struct):
  pagination: Pagination


class PostRef(msgspec.Struct):
  """A post reduced to its id, as returned by filtered list requests."""

  id: str


class PostsPage(msgspec.Struct):
  """Response body of ``GET /ghost/api/admin/posts``."""

  meta: PostsMeta
  posts: list[PostRef]


class GhostPost(msgspec.Struct):
  """The fields of a post the rebrander reads and writes back."""

  id: str
  lexical: str
  title: str
  updated_at: str


GHOST_POST_FIELDS = ",".join(GhostPost.__struct_fields__)


class GhostApiError(msgspec.Struct):
  message: str
  type: str


class PostEnvelope(msgspec.Struct):
  posts: Annotated[list[GhostPost], msgspec.Meta(min_length=1, max_length=1)]


class ErrorEnvelope(msgspec.Struct):
  errors: Annotated[list[GhostApiError], msgspec.Meta(min_length=1)]


class CreatedPostEnvelope(msgspec.Struct):
  posts: Annotated[list[PostRef], msgspec.Meta(min_length=1)]


PostResponse = PostEnvelope | ErrorEnvelope


def _convert[T](payload: Any, struct_type: type[T]) -> T:
  try:
    return msgspec.convert(payload, type=struct_type)
  except msgspec.ValidationError as exc:
    raise ParseError(f"Unexpected {struct_type.__name__} shape: {exc}") from exc


def decode_error_envelope(payload: Any) -> ErrorEnvelope | None:
  """Return the error envelope when ``payload`` carries an ``errors`` array, else None."""
  if isinstance(payload, dict) and "errors" in payload:
    return _convert(payload, ErrorEnvelope)
  return None


def decode_post_response(payload: Any) -> PostResponse:
  """Discriminate a single-post response on the presence of ``errors``."""
  errors = decode_error_envelope(payload)
  if errors is not None:
    return errors
  return _convert(payload, PostEnvelope)


def decode_posts_page(payload: Any) -> PostsPage:
  return _convert(payload, PostsPage)


def decode_site_info(payload: Any) -> SiteInfo:
  return _convert(payload, SiteInfo)


def decode_created_post(payload: Any) -> PostRef:
  return _convert(payload, CreatedPostEnvelope).posts[0]
