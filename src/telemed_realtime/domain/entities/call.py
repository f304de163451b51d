from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from telemed_realtime.domain.value_objects.enums import CallStatus


@dataclass(frozen=True, slots=True)
class CallDescriptor:
    """Shared state of one call, indexed under both participants.

    Connection handles are opaque to the domain; the realtime layer stores
    its own connection objects here.
    """

    appointment_id: str
    caller_id: str
    callee_id: str
    status: CallStatus
    caller_connection: Any
    callee_connection: Any = None

    def involves(self, user_id: str) -> bool:
        return user_id in (self.caller_id, self.callee_id)

    def counterpart_of(self, user_id: str) -> str:
        return self.callee_id if user_id == self.caller_id else self.caller_id

    def connection_of(self, user_id: str) -> Any:
        if user_id == self.caller_id:
            return self.caller_connection
        return self.callee_connection
