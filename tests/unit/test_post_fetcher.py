from __future__ import annotations

import math

import pytest

from rebrander.schema.ghost import Pagination, PostRef, PostsMeta, PostsPage
from rebrander.services.post_fetcher import PostFetcher


class PagedLister:
  """Serves ``total`` posts in pages of the requested limit, the way Ghost reports pagination."""

  def __init__(self, total: int) -> None:
    self.total = total
    self.requests: list[dict[str, str]] = []

  async def list_posts(self, params: dict[str, str]) -> PostsPage:
    self.requests.append(params)
    page = int(params["page"])
    limit = int(params["limit"])
    pages = max(1, math.ceil(self.total / limit))
    start = (page - 1) * limit
    posts = [PostRef(id=f"post-{index}") for index in range(start, min(start + limit, self.total))]
    pagination = Pagination(page=page, limit=limit, pages=pages, total=self.total, next=page + 1 if page < pages else None, prev=page - 1 if page > 1 else None)
    return PostsPage(meta=PostsMeta(pagination=pagination), posts=posts)


async def _drain(fetcher: PostFetcher) -> list[str]:
  ids: list[str] = []
  while fetcher.has_next:
    ids.extend(post.id for post in await fetcher.next())
  return ids


@pytest.mark.anyio
@pytest.mark.parametrize("total", [0, 1, 24, 25, 26, 100, 101])
@pytest.mark.parametrize("limit", [1, 25, 100])
async def test_fetcher_visits_every_post_once(total: int, limit: int) -> None:
  lister = PagedLister(total)
  fetcher = PostFetcher(lister, target_string="Acme", limit=limit)

  ids = await _drain(fetcher)

  assert ids == [f"post-{index}" for index in range(total)]
  assert len(lister.requests) == max(1, math.ceil(total / limit))
  assert fetcher.total == total
  assert not fetcher.has_next


@pytest.mark.anyio
async def test_first_request_starts_at_page_one_with_filter() -> None:
  lister = PagedLister(3)
  fetcher = PostFetcher(lister, target_string="Bob's", limit=2, fields="id")

  assert fetcher.has_next
  assert fetcher.total == 0
  await fetcher.next()

  assert lister.requests[0] == {"page": "1", "limit": "2", "fields": "id", "filter": "lexical:~'Bob\\'s'"}
  assert fetcher.query_params()["page"] == "2"


@pytest.mark.anyio
async def test_exhausted_fetcher_makes_no_request() -> None:
  lister = PagedLister(2)
  fetcher = PostFetcher(lister, limit=10)

  await fetcher.next()
  assert await fetcher.next() == []

  assert len(lister.requests) == 1
  assert "filter" not in lister.requests[0]


def test_fetcher_rejects_non_positive_limit() -> None:
  with pytest.raises(ValueError):
    PostFetcher(PagedLister(0), limit=0)
