from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Appointment:
    id: str
    patient_id: str
    doctor_id: str
    status: str

    def involves(self, user_id: str) -> bool:
        return user_id in (self.patient_id, self.doctor_id)
