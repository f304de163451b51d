"""FastAPI dependency injection helpers."""
from __future__ import annotations

from fastapi import WebSocket

from telemed_realtime.application.ports.auth import TokenVerifier
from telemed_realtime.config import Settings, settings
from telemed_realtime.infrastructure.auth.hs256_verifier import HS256Verifier
from telemed_realtime.infrastructure.auth.jwks_verifier import JWKSVerifier
from telemed_realtime.realtime.gatekeeper import ConnectionGatekeeper
from telemed_realtime.realtime.hub import RealtimeHub


def build_verifier(cfg: Settings = settings) -> TokenVerifier:
    if cfg.JWT_VERIFY_MODE == "jwks":
        assert cfg.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(cfg.JWKS_URL)
    return HS256Verifier(cfg.JWT_SECRET, cfg.JWT_ALGORITHM)


def get_hub(websocket: WebSocket) -> RealtimeHub:
    return websocket.app.state.hub


def get_gatekeeper(websocket: WebSocket) -> ConnectionGatekeeper:
    return websocket.app.state.gatekeeper
