from __future__ import annotations

from authgate.application.dto.auth import SessionCredentials
from authgate.domain.exceptions import SessionInvalidError

from .session_store import SessionStore


class RevokeOtherSessionsUseCase:
    def __init__(self, *, session_store: SessionStore):
        self._session_store = session_store

    def execute(self, command: SessionCredentials) -> None:
        if not self._session_store.verify(user_id=command.user_id, session_secret=command.session_secret):
            raise SessionInvalidError("Invalid session.")
        self._session_store.revoke_all(user_id=command.user_id, keep_secret=command.session_secret)
