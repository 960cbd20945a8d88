from __future__ import annotations

import logging
from dataclasses import replace

from authgate.application.ports.accounts_port import AccountsPort
from authgate.application.ports.session_secret_port import SessionSecretPort
from authgate.domain.entities.user import UserRecord
from authgate.domain.exceptions import AccountNotFoundError

from .auth_common import utcnow


logger = logging.getLogger(__name__)


class SessionStore:
    """Session secrets persisted as a set of hashes on the user record.

    The plaintext secret only exists in the return value of ``issue``; every
    other operation hashes what the client presents and compares hashes.
    Storage errors propagate unchanged.
    """

    def __init__(self, *, accounts_port: AccountsPort, secret_port: SessionSecretPort):
        self._accounts_port = accounts_port
        self._secret_port = secret_port

    def hash(self, session_secret: str) -> str:
        return self._secret_port.hash_session_secret(session_secret=session_secret)

    def issue(self, *, user_id: str) -> str:
        user = self._require_user(user_id)
        session_secret = self._secret_port.generate_session_secret()
        hashes = user.session_token_hashes | {self.hash(session_secret)}
        self._accounts_port.save_user(
            user=replace(user, session_token_hashes=hashes, updated_at=utcnow()),
        )
        logger.info("session_store: issued user_id=%s sessions=%s", user_id, len(hashes))
        return session_secret

    def authenticate(self, *, user_id: str | None, session_secret: str | None) -> UserRecord | None:
        if not user_id or not session_secret:
            return None
        user = self._accounts_port.get_user(user_id=user_id)
        if user is None:
            return None
        if self.hash(session_secret) not in user.session_token_hashes:
            return None
        return user

    def verify(self, *, user_id: str | None, session_secret: str | None) -> bool:
        return self.authenticate(user_id=user_id, session_secret=session_secret) is not None

    def revoke(self, *, user_id: str, session_secret: str) -> None:
        user = self._accounts_port.get_user(user_id=user_id)
        if user is None:
            logger.info("session_store: revoke_skipped reason=account_not_found user_id=%s", user_id)
            return
        hashed = self.hash(session_secret)
        if hashed not in user.session_token_hashes:
            return
        hashes = user.session_token_hashes - {hashed}
        self._accounts_port.save_user(
            user=replace(user, session_token_hashes=hashes, updated_at=utcnow()),
        )
        logger.info("session_store: revoked user_id=%s sessions=%s", user_id, len(hashes))

    def revoke_all(self, *, user_id: str, keep_secret: str | None = None) -> None:
        user = self._require_user(user_id)
        hashes = frozenset({self.hash(keep_secret)}) if keep_secret else frozenset()
        self._accounts_port.save_user(
            user=replace(user, session_token_hashes=hashes, updated_at=utcnow()),
        )
        logger.info(
            "session_store: revoked_all user_id=%s dropped=%s kept=%s",
            user_id,
            len(user.session_token_hashes - hashes),
            len(hashes),
        )

    def _require_user(self, user_id: str) -> UserRecord:
        user = self._accounts_port.get_user(user_id=user_id)
        if user is None:
            raise AccountNotFoundError("User not found.")
        return user
