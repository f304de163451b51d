from __future__ import annotations

from typing import Protocol

from telemed_realtime.domain.entities.user import UserProfile


class UserReader(Protocol):
    async def get_profile(self, user_id: str) -> UserProfile | None: ...
