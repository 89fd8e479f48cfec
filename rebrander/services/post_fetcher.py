"""Pagination-aware enumeration of Ghost posts matching a lexical filter."""

from __future__ import annotations

import logging
from typing import Protocol

from rebrander.schema.ghost import GHOST_POST_FIELDS, Pagination, PostRef, PostsPage
from rebrander.utils.filters import build_lexical_filter

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25


class PostLister(Protocol):
  """Anything that can fetch one page of posts for a set of query parameters."""

  async def list_posts(self, params: dict[str, str]) -> PostsPage: ...


class PostFetcher:
  """Walk the pages of a filtered post listing.

  The cursor is replaced by the pagination Ghost reports with every page, so
  ``has_next`` and ``total`` always describe the most recent response. If the
  matching set changes between requests the total and page count move with it;
  fetching a page, editing its posts out of the filter, then fetching the next
  page skips posts. Enumerate every id first, then mutate.
  """

  def __init__(self, lister: PostLister, *, target_string: str | None = None, limit: int = DEFAULT_PAGE_SIZE, fields: str = GHOST_POST_FIELDS) -> None:
    if limit < 1:
      raise ValueError("limit must be at least 1")
    self._lister = lister
    self._target_string = target_string or None
    self._fields = fields
    self._pagination = Pagination(limit=limit)

  @property
  def has_next(self) -> bool:
    """True unless both the current and last page are known and equal."""
    page = self._pagination.page
    pages = self._pagination.pages
    return page is None or pages is None or page != pages

  @property
  def total(self) -> int:
    return self._pagination.total or 0

  def query_params(self) -> dict[str, str]:
    """Query string for the next page request."""
    next_page = self._pagination.next
    params = {"page": str(next_page if next_page is not None else 1), "limit": str(self._pagination.limit), "fields": self._fields}
    if self._target_string:
      params["filter"] = build_lexical_filter(self._target_string)
    return params

  async def next(self) -> list[PostRef]:
    """Fetch the next page, or return an empty list without a request once exhausted."""
    if not self.has_next:
      return []

    page = await self._lister.list_posts(self.query_params())
    self._pagination = page.meta.pagination
    logger.debug("Fetched post page page=%s pages=%s total=%s count=%s", self._pagination.page, self._pagination.pages, self._pagination.total, len(page.posts))
    return page.posts
