import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from rebrander.api.deps import get_ghost_client_factory
from rebrander.jobs.session import GhostClientFactory, RebrandSession

router = APIRouter()
logger = logging.getLogger("rebrander.api.routes.update")


@router.websocket("/ws")
async def rebrand_updates(
  websocket: WebSocket,
  client_factory: GhostClientFactory = Depends(get_ghost_client_factory),  # noqa: B008
) -> None:
  """Run one rebrand over a WebSocket: one config message in, progress events out."""
  await websocket.accept()
  session = RebrandSession(websocket, client_factory=client_factory)
  logger.info("Update session opened client=%s", websocket.client)

  try:
    # The session may close the socket itself while handling a message.
    while websocket.application_state == WebSocketState.CONNECTED:
      message = await websocket.receive()
      if message["type"] == "websocket.disconnect":
        session.on_close(message.get("code", 1000), message.get("reason"))
        break
      # Configuration may arrive as a text or a binary frame.
      await session.on_message(message.get("text") or message.get("bytes") or b"")
  except WebSocketDisconnect as exc:
    session.on_close(exc.code, exc.reason)
  finally:
    await session.wait()
    logger.info("Update session finished state=%s", session.state.value)
