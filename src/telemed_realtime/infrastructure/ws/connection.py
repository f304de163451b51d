from __future__ import annotations

import asyncio
import uuid
from typing import Any

from fastapi import WebSocket

from telemed_realtime.infrastructure.ws.protocol import WsOutbound


class WebSocketConnection:
    """Connection handle over a Starlette WebSocket.

    Sends are serialized so frames reach the client in emission order even
    when several handlers target the same socket.
    """

    def __init__(self, websocket: WebSocket) -> None:
        self.id = uuid.uuid4().hex
        self._ws = websocket
        self._send_lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"WebSocketConnection({self.id})"

    async def send(self, event: str, data: dict[str, Any]) -> None:
        raw = WsOutbound(type=event, data=data).model_dump_json()
        async with self._send_lock:
            await self._ws.send_text(raw)
