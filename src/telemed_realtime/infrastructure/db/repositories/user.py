from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from telemed_realtime.domain.entities.appointment import Appointment
from telemed_realtime.domain.entities.user import UserProfile
from telemed_realtime.infrastructure.db.mappers import user as mapper
from telemed_realtime.infrastructure.db.models.appointment import AppointmentModel
from telemed_realtime.infrastructure.db.models.user import UserModel


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_profile(self, user_id: str) -> UserProfile | None:
        model = await self._session.get(UserModel, user_id)
        return mapper.model_to_profile(model) if model else None


class AppointmentReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, appointment_id: str) -> Appointment | None:
        model = await self._session.get(AppointmentModel, appointment_id)
        return mapper.model_to_appointment(model) if model else None
