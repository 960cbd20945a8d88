from __future__ import annotations

import logging

from authgate.application.dto.auth import SessionCredentials
from authgate.application.ports.accounts_port import AccountsPort
from authgate.domain.exceptions import SessionInvalidError

from .session_store import SessionStore


logger = logging.getLogger(__name__)


class DeleteAccountUseCase:
    def __init__(self, *, accounts_port: AccountsPort, session_store: SessionStore):
        self._accounts_port = accounts_port
        self._session_store = session_store

    def execute(self, command: SessionCredentials) -> None:
        user = self._session_store.authenticate(user_id=command.user_id, session_secret=command.session_secret)
        if user is None:
            raise SessionInvalidError("Invalid session.")

        self._session_store.revoke_all(user_id=user.user_id)
        for linked in user.identities:
            self._accounts_port.unlink_identity(
                method_name=linked.method_name,
                method_value=linked.method_value,
            )
        self._accounts_port.delete_user(user_id=user.user_id)
        logger.info("accounts: deleted user_id=%s identities=%s", user.user_id, len(user.identities))
