from __future__ import annotations

from dataclasses import dataclass

from telemed_realtime.domain.entities.user import UserProfile


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Identity extracted from a verified JWT, before the user store lookup."""

    user_id: str
    role: str | None = None


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated connection identity with its profile snapshot."""

    user_id: str
    profile: UserProfile

    @property
    def display_name(self) -> str:
        return self.profile.display_name
