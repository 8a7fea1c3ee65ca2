"""Socket Route - WebSocket endpoint backed by the app's RealtimeChannel.

Invariants:
    - HTTP middleware never sees WebSocket scopes, so the origin rule is
      enforced here: a foreign Origin is refused (close 1008) before accept
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from bookstore.api.middleware.cors import is_allowed_origin

logger = logging.getLogger(__name__)
router = APIRouter(tags=["realtime"])


@router.websocket("/socket")
async def socket_endpoint(websocket: WebSocket):
    origin = websocket.headers.get("origin")
    if not is_allowed_origin(origin, websocket.app.state.settings.frontend_url):
        logger.warning(f"Refusing socket from origin {origin}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    channel = websocket.app.state.realtime
    await channel.connect(websocket)
    try:
        while True:
            message = await websocket.receive_json()
            await channel.handle_message(websocket, message)
    except WebSocketDisconnect:
        pass
    except ValueError as exc:
        logger.warning(f"Closing socket after undecodable frame: {exc}")
        await websocket.close(code=1003)
    finally:
        channel.disconnect(websocket)
