from __future__ import annotations

import hmac
import logging
from collections.abc import Callable
from uuid import uuid4

from authgate.application.dto.auth import CompleteLoginInput, CompleteLoginOutput
from authgate.application.dto.tokens import LoginState
from authgate.application.ports.accounts_port import AccountsPort
from authgate.application.ports.token_codec_port import TokenCodecPort
from authgate.domain.entities.user import Identity, UserRecord
from authgate.domain.exceptions import AuthError, InvalidStateError, StateMismatchError

from .auth_common import utcnow
from .identity_resolver import IdentityResolver
from .session_store import SessionStore


logger = logging.getLogger(__name__)


def new_user_id() -> str:
    return str(uuid4())


class CompleteLoginUseCase:
    """Second half of the login handshake, run when the provider redirects back.

    The returned ``state`` token must decode and carry the same nonce the
    caller stored at redirect time. Only then is the provider payload
    verified, the user found, linked or created, and a session issued. The
    caller clears its stored state whatever the outcome.
    """

    def __init__(
        self,
        *,
        token_codec: TokenCodecPort,
        identity_resolver: IdentityResolver,
        accounts_port: AccountsPort,
        session_store: SessionStore,
        user_id_factory: Callable[[], str] = new_user_id,
    ):
        self._token_codec = token_codec
        self._identity_resolver = identity_resolver
        self._accounts_port = accounts_port
        self._session_store = session_store
        self._user_id_factory = user_id_factory

    def execute(self, command: CompleteLoginInput) -> CompleteLoginOutput:
        decoded = self._token_codec.try_decode(command.state_token, LoginState)
        if not decoded.ok:
            logger.info("login: rejected reason=%s", decoded.kind.value)
            raise InvalidStateError("Invalid login state.") from decoded.error
        login_state = decoded.value.payload

        if not _same_state(login_state.state, command.stored_state):
            logger.info("login: rejected reason=state_mismatch method=%s", login_state.method)
            raise StateMismatchError("Login state does not match.")

        try:
            identity = self._identity_resolver.verify(method=login_state.method, callback=command.callback)
        except AuthError as exc:
            logger.info("login: rejected reason=%s method=%s", exc.kind.value, login_state.method)
            raise

        user, created, linked = self._resolve_user(identity, command)
        session_secret = self._session_store.issue(user_id=user.user_id)
        logger.info(
            "login: resolved method=%s user_id=%s created=%s linked=%s",
            login_state.method,
            user.user_id,
            created,
            linked,
        )
        return CompleteLoginOutput(
            user_id=user.user_id,
            session_secret=session_secret,
            remember_me=login_state.remember_me,
            referer=login_state.referer,
            created=created,
            linked=linked,
        )

    def _resolve_user(self, identity: Identity, command: CompleteLoginInput) -> tuple[UserRecord, bool, bool]:
        user = self._accounts_port.find_user_by_identity(
            method_name=identity.method_name,
            method_value=identity.method_value,
        )
        if user is not None:
            return user, False, False

        now = utcnow()
        current_user = self._session_store.authenticate(
            user_id=command.current_user_id,
            session_secret=command.current_session_secret,
        )
        if current_user is not None:
            linked_user = self._accounts_port.link_identity(user=current_user, identity=identity, updated_at=now)
            return linked_user, False, True

        created_user = self._accounts_port.create_user(
            user_id=self._user_id_factory(),
            identity=identity,
            created_at=now,
        )
        return created_user, True, False


def _same_state(returned: str, stored: str | None) -> bool:
    if not stored:
        return False
    return hmac.compare_digest(returned.encode("utf-8"), stored.encode("utf-8"))
