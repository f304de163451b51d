from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UserProfile:
    """Denormalized snapshot of a user, as carried in outbound events."""

    id: str
    first_name: str
    last_name: str
    role: str
    avatar: str = ""
    specialization: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
