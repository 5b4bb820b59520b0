"""WebSocket endpoint — live new-article push to browsers.

Learn: Clients connect to /ws and just listen. Each frame they get is
{"event": "new_article", "data": <article>}. Nothing historical is
sent on connect. The only client message understood is
{"type": "ping"}, answered with {"type": "pong"}.

No auth: every visitor sees new articles, logged in or not.
"""

import json

import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from newslive.realtime.gateway import RealtimeGateway, get_gateway

logger = structlog.get_logger()
router = APIRouter()


@router.websocket("/ws")
async def news_websocket(
    websocket: WebSocket,
    gateway: RealtimeGateway = Depends(get_gateway),
):
    await websocket.accept()
    client_id = gateway.connect(websocket)

    try:
        while True:
            data = await websocket.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                continue
            if isinstance(msg, dict) and msg.get("type") == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
    except WebSocketDisconnect:
        pass
    finally:
        gateway.disconnect(client_id)
