from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from telemed_realtime.api.deps import get_gatekeeper, get_hub
from telemed_realtime.application.dto.principal import Principal
from telemed_realtime.application.exceptions import AuthenticationError
from telemed_realtime.config import settings
from telemed_realtime.infrastructure.ws.connection import WebSocketConnection
from telemed_realtime.logging_config import correlation_id_ctx
from telemed_realtime.realtime import events
from telemed_realtime.realtime.connection import deliver
from telemed_realtime.realtime.gatekeeper import ConnectionGatekeeper
from telemed_realtime.realtime.hub import RealtimeHub

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

AUTH_FAILED_CLOSE_CODE = 4001
INTERNAL_ERROR_CLOSE_CODE = 1011


def _bearer_token(websocket: WebSocket, token: str | None) -> str | None:
    if token:
        return token
    scheme, _, credentials = websocket.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


@router.websocket("/ws")
async def ws_realtime(
    websocket: WebSocket,
    hub: Annotated[RealtimeHub, Depends(get_hub)],
    gatekeeper: Annotated[ConnectionGatekeeper, Depends(get_gatekeeper)],
    token: str | None = Query(None),
) -> None:
    try:
        principal = await gatekeeper.admit(_bearer_token(websocket, token))
    except AuthenticationError as exc:
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason=exc.detail)
        return
    except Exception:
        logger.exception("WS handshake failed")
        await websocket.close(code=INTERNAL_ERROR_CLOSE_CODE)
        return

    await websocket.accept()
    connection = WebSocketConnection(websocket)
    cid_token = correlation_id_ctx.set(connection.id)
    await hub.connect(connection, principal)

    heartbeat_task = asyncio.create_task(
        _heartbeat(connection), name=f"ws-heartbeat-{connection.id}",
    )
    try:
        await _read_loop(websocket, connection, principal, hub)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", principal.user_id)
    finally:
        heartbeat_task.cancel()
        await hub.disconnect(connection, principal)
        correlation_id_ctx.reset(cid_token)


async def _heartbeat(connection: WebSocketConnection) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    while True:
        await asyncio.sleep(interval)
        if not await deliver(connection, events.PONG, {}):
            return


async def _read_loop(
    ws: WebSocket,
    connection: WebSocketConnection,
    principal: Principal,
    hub: RealtimeHub,
) -> None:
    while True:
        raw = await ws.receive_text()
        await hub.receive(connection, principal, raw)
