from __future__ import annotations

import logging
import secrets
from collections.abc import Callable

from authgate.application.dto.auth import BeginLoginInput, BeginLoginOutput
from authgate.application.dto.tokens import LoginState
from authgate.application.ports.token_codec_port import TokenCodecPort
from authgate.domain.exceptions import UnsupportedMethodError

from .auth_common import safe_referer
from .identity_resolver import IdentityResolver


logger = logging.getLogger(__name__)


def new_state_nonce() -> str:
    return secrets.token_urlsafe(32)


class BeginLoginUseCase:
    def __init__(
        self,
        *,
        token_codec: TokenCodecPort,
        identity_resolver: IdentityResolver,
        nonce_factory: Callable[[], str] = new_state_nonce,
    ):
        self._token_codec = token_codec
        self._identity_resolver = identity_resolver
        self._nonce_factory = nonce_factory

    def execute(self, command: BeginLoginInput) -> BeginLoginOutput:
        if not self._identity_resolver.supports(command.method):
            available = ", ".join(self._identity_resolver.methods) or "none"
            raise UnsupportedMethodError(f"Unsupported login method: {command.method}. Available: {available}.")

        nonce = self._nonce_factory()
        state_token = self._token_codec.encode(
            LoginState(
                state=nonce,
                remember_me=command.remember_me,
                referer=safe_referer(command.referer),
                method=command.method,
            )
        )
        redirect_url = self._identity_resolver.authorization_url(
            method=command.method,
            state_token=state_token,
        )
        logger.info(
            "login: awaiting_callback method=%s remember_me=%s",
            command.method,
            command.remember_me,
        )
        return BeginLoginOutput(
            redirect_url=redirect_url,
            state_cookie_value=nonce,
            state_token=state_token,
        )
