import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from starlette.responses import Response

from rebrander.api.deps import get_http_client
from rebrander.api.responses import encode_msgspec_response
from rebrander.core.errors import ProbeFailure
from rebrander.schema.updates import SiteDetailsRequest
from rebrander.services.ghost import fetch_site_info

router = APIRouter()
logger = logging.getLogger("rebrander.api.routes.details")


@router.post("")
async def get_site_details(
  payload: SiteDetailsRequest,
  http_client: httpx.AsyncClient = Depends(get_http_client),  # noqa: B008
) -> Response:
  """Return public site info for a Ghost URL. The site endpoint needs no Admin API key."""
  url = str(payload.url).rstrip("/")
  try:
    site_info = await fetch_site_info(url, http_client=http_client)
  except ProbeFailure as exc:
    logger.info("Site details probe failed url=%s error=%s", url, exc.message)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc

  return encode_msgspec_response(site_info)
