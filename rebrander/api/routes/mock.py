"""Routes that seed and clear test posts on a real Ghost site."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from starlette.responses import Response

from rebrander.api.deps import get_ghost_client_factory, require_mock_routes
from rebrander.api.responses import encode_msgspec_response
from rebrander.core.errors import GhostError, ParseError
from rebrander.jobs.session import GhostClientFactory
from rebrander.schema.updates import MockCreateRequest, MockCreateResult, MockDeleteRequest, MockDeleteResult
from rebrander.services.ghost import MOCK_DATA_MARKER

router = APIRouter(dependencies=[Depends(require_mock_routes)])
logger = logging.getLogger("rebrander.api.routes.mock")


@router.post("/create")
async def create_mock_posts(
  payload: MockCreateRequest,
  client_factory: GhostClientFactory = Depends(get_ghost_client_factory),  # noqa: B008
) -> Response:
  """Create ``count`` posts containing the target string, tagged so /mock/delete can find them."""
  site_url = str(payload.url).rstrip("/")
  created: list[str] = []
  try:
    async with client_factory(site_url, payload.token) as client:
      for index in range(payload.count):
        post_id = await client.create_mock_post(title=f"{payload.target_string} {index}", text=f"{MOCK_DATA_MARKER} {payload.target_string} {index}")
        created.append(post_id)
  except (GhostError, ParseError) as exc:
    logger.warning("Mock post creation stopped url=%s created=%d error=%s", site_url, len(created), exc)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

  logger.info("Created %d mock posts on %s", len(created), site_url)
  return encode_msgspec_response(MockCreateResult(created=created))


@router.post("/delete")
async def delete_mock_posts(
  payload: MockDeleteRequest,
  client_factory: GhostClientFactory = Depends(get_ghost_client_factory),  # noqa: B008
) -> Response:
  """Delete every post whose body carries the mock data marker."""
  site_url = str(payload.url).rstrip("/")
  try:
    async with client_factory(site_url, payload.token) as client:
      post_ids = await client.get_all_post_ids(MOCK_DATA_MARKER)
      deleted = 0
      for post_id in post_ids:
        if await client.delete_post(post_id):
          deleted += 1
  except (GhostError, ParseError) as exc:
    logger.warning("Mock post cleanup failed url=%s error=%s", site_url, exc)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

  logger.info("Deleted %d of %d mock posts on %s", deleted, len(post_ids), site_url)
  return encode_msgspec_response(MockDeleteResult(deleted=deleted, failed=len(post_ids) - deleted))
