"""WebSocket frame envelope shared by both directions."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class WsOutbound(BaseModel):
    """Server -> Client."""

    type: str  # new-message | user-online | incoming-video-call | error | pong ...
    data: dict[str, Any] = {}
