from __future__ import annotations

from typing import Protocol

from telemed_realtime.domain.entities.appointment import Appointment


class AppointmentReader(Protocol):
    async def get_by_id(self, appointment_id: str) -> Appointment | None: ...
