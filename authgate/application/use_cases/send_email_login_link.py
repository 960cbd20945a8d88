from __future__ import annotations

import logging
import time
from collections.abc import Callable
from urllib.parse import urlencode

from authgate.application.dto.auth import SendEmailLoginLinkInput
from authgate.application.dto.tokens import EmailLoginCode, LoginState
from authgate.application.ports.mail_port import MailPort
from authgate.application.ports.token_codec_port import TokenCodecPort
from authgate.domain.exceptions import InvalidStateError

from .auth_common import normalize_email


logger = logging.getLogger(__name__)


class SendEmailLoginLinkUseCase:
    def __init__(
        self,
        *,
        token_codec: TokenCodecPort,
        mail_port: MailPort,
        mail_from_domain: str,
        clock: Callable[[], float] = time.time,
    ):
        self._token_codec = token_codec
        self._mail_port = mail_port
        self._mail_from_domain = mail_from_domain
        self._clock = clock

    def execute(self, command: SendEmailLoginLinkInput) -> str:
        email = normalize_email(command.email)
        if "@" not in email:
            raise ValueError("Invalid email address.")

        decoded = self._token_codec.try_decode(command.state_token, LoginState)
        if not decoded.ok:
            raise InvalidStateError("Invalid login state.") from decoded.error
        if decoded.value.payload.method != "email":
            raise InvalidStateError("Login state was not issued for email sign-in.")

        code = self._token_codec.encode(EmailLoginCode(timestamp=int(self._clock()), email=email))
        link = f"{command.callback_url}?{urlencode({'state': command.state_token, 'code': code})}"
        self._mail_port.send(
            to=email,
            subject=f"Sign-in link for {self._mail_from_domain}",
            text=f"You can sign in to {self._mail_from_domain} at {link}",
        )
        logger.info("email_login: link_sent")
        return link
