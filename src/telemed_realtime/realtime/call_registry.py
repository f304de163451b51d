"""At most one call per user, each call indexed under both participants."""
from __future__ import annotations

import logging
from dataclasses import replace

from telemed_realtime.application.exceptions import CallBusyError
from telemed_realtime.domain.entities.call import CallDescriptor
from telemed_realtime.domain.value_objects.enums import CallStatus
from telemed_realtime.realtime.connection import Connection

logger = logging.getLogger(__name__)


class CallRegistry:
    """Every method is synchronous so a transition cannot interleave with another.

    Both index entries of a call always reference the same descriptor object.
    """

    def __init__(self) -> None:
        self._calls: dict[str, CallDescriptor] = {}

    def __len__(self) -> int:
        return len({id(call) for call in self._calls.values()})

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._calls

    def get(self, user_id: str) -> CallDescriptor | None:
        return self._calls.get(user_id)

    def is_busy(self, *user_ids: str) -> bool:
        return any(uid in self._calls for uid in user_ids)

    def open(self, call: CallDescriptor) -> CallDescriptor:
        """Index a new call under both parties. First writer wins."""
        if call.caller_id == call.callee_id:
            raise CallBusyError("Cannot call yourself")
        if self.is_busy(call.caller_id, call.callee_id):
            raise CallBusyError("User is busy")
        self._store(call)
        logger.debug("Call opened %s -> %s (%s)", call.caller_id, call.callee_id, call.appointment_id)
        return call

    def accept(
        self,
        caller_id: str,
        callee_id: str,
        callee_connection: Connection,
    ) -> CallDescriptor | None:
        call = self._calls.get(caller_id)
        if call is None or call.caller_id != caller_id or call.callee_id != callee_id:
            return None
        accepted = replace(call, status=CallStatus.ACCEPTED, callee_connection=callee_connection)
        self._store(accepted)
        return accepted

    def close(self, user_id: str) -> CallDescriptor | None:
        """Remove the call user_id takes part in, from both indexes."""
        call = self._calls.get(user_id)
        if call is None:
            return None
        self._remove(call)
        logger.debug("Call closed %s -> %s", call.caller_id, call.callee_id)
        return call

    def close_between(self, user_a: str, user_b: str) -> CallDescriptor | None:
        """Remove the call linking user_a and user_b, if there is one."""
        call = self._calls.get(user_a)
        if call is None or not call.involves(user_b):
            return None
        self._remove(call)
        return call

    def _store(self, call: CallDescriptor) -> None:
        self._calls[call.caller_id] = call
        self._calls[call.callee_id] = call

    def _remove(self, call: CallDescriptor) -> None:
        for uid in (call.caller_id, call.callee_id):
            current = self._calls.get(uid)
            if current is not None and current.caller_id == call.caller_id and current.callee_id == call.callee_id:
                del self._calls[uid]
