from __future__ import annotations

from telemed_realtime.domain.entities.appointment import Appointment
from telemed_realtime.domain.entities.user import UserProfile
from telemed_realtime.infrastructure.db.models.appointment import AppointmentModel
from telemed_realtime.infrastructure.db.models.user import UserModel


def model_to_profile(model: UserModel) -> UserProfile:
    return UserProfile(
        id=model.id,
        first_name=model.first_name,
        last_name=model.last_name,
        role=model.role,
        avatar=model.avatar or "",
        specialization=model.specialization,
    )


def model_to_appointment(model: AppointmentModel) -> Appointment:
    return Appointment(
        id=model.id,
        patient_id=model.patient_id,
        doctor_id=model.doctor_id,
        status=model.status,
    )
