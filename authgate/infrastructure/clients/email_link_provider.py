from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from urllib.parse import urlencode

from authgate.application.dto.tokens import EmailLoginCode
from authgate.application.ports.identity_provider_port import IdentityProviderPort
from authgate.application.ports.token_codec_port import TokenCodecPort
from authgate.application.use_cases.auth_common import display_name, normalize_email
from authgate.domain.entities.user import Identity
from authgate.domain.exceptions import AuthErrorKind, InvalidCallbackError, LinkExpiredError


@dataclass(frozen=True)
class EmailLinkProviderSettings:
    login_page_url: str
    link_max_age_seconds: int


class EmailLinkIdentityProvider(IdentityProviderPort):
    """Magic-link sign-in: the callback ``code`` is an encoded EmailLoginCode.

    The link window is checked against the code's own timestamp and is
    independent of the codec's generic max age.
    """

    method_name = "email"

    def __init__(
        self,
        settings: EmailLinkProviderSettings,
        *,
        token_codec: TokenCodecPort,
        clock: Callable[[], float] = time.time,
    ):
        self._settings = settings
        self._token_codec = token_codec
        self._clock = clock

    def authorization_url(self, *, state_token: str) -> str:
        return f"{self._settings.login_page_url}?{urlencode({'state': state_token})}"

    def verify(self, *, callback: Mapping[str, str]) -> Identity:
        decoded = self._token_codec.try_decode(callback.get("code"), EmailLoginCode)
        if decoded.kind is AuthErrorKind.INVALID_TOKEN:
            raise InvalidCallbackError("Invalid email sign-in code.") from decoded.error
        code = decoded.unwrap().payload

        if int(self._clock()) - code.timestamp > self._settings.link_max_age_seconds:
            raise LinkExpiredError("Link expired.")

        email = normalize_email(code.email)
        return Identity(
            method_name="email",
            method_value=email,
            name=display_name(code.name, email),
            email=email,
            picture=code.picture,
        )
