from __future__ import annotations

from authgate.application.dto.auth import SessionCredentials
from authgate.domain.exceptions import SessionInvalidError

from .session_store import SessionStore


class LogoutSessionUseCase:
    def __init__(self, *, session_store: SessionStore):
        self._session_store = session_store

    def execute(self, command: SessionCredentials) -> None:
        if not command.user_id or not command.session_secret:
            raise SessionInvalidError("Missing session credentials.")
        self._session_store.revoke(user_id=command.user_id, session_secret=command.session_secret)
