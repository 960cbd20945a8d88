from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx
from google.auth.exceptions import GoogleAuthError, TransportError
from google.auth.transport import requests
from google.oauth2 import id_token

from authgate.application.ports.identity_provider_port import IdentityProviderPort
from authgate.application.use_cases.auth_common import display_name, normalize_email
from authgate.domain.entities.user import Identity
from authgate.domain.exceptions import InvalidCallbackError, ProviderUnavailableError


logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_SCOPE = "openid email profile"


@dataclass(frozen=True)
class GoogleOidcClientSettings:
    client_id: str
    client_secret: str
    redirect_uri: str
    timeout_seconds: float


class GoogleOidcClient(IdentityProviderPort):
    method_name = "google"

    def __init__(self, settings: GoogleOidcClientSettings, *, http_client: httpx.Client | None = None):
        self._settings = settings
        self._http_client = http_client

    def authorization_url(self, *, state_token: str) -> str:
        params = {
            "client_id": self._settings.client_id,
            "redirect_uri": self._settings.redirect_uri,
            "response_type": "code",
            "scope": GOOGLE_SCOPE,
            "state": state_token,
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    def verify(self, *, callback: Mapping[str, str]) -> Identity:
        error = callback.get("error")
        if error:
            raise InvalidCallbackError(f"Google sign-in was not completed: {error}.")
        code = callback.get("code")
        if not code:
            raise InvalidCallbackError("Google callback is missing the authorization code.")

        raw_id_token = self._exchange_code(code)
        try:
            payload = id_token_verify(token=raw_id_token, audience=self._settings.client_id)
        except TransportError as exc:
            raise ProviderUnavailableError("Google certificates are unreachable.") from exc
        except (ValueError, GoogleAuthError) as exc:
            raise InvalidCallbackError("Invalid Google id_token.") from exc

        email = payload.get("email")
        subject = payload.get("sub")
        if not email or not subject:
            raise InvalidCallbackError("Google id_token missing required claims.")

        email_verified_raw = payload.get("email_verified", False)
        email_verified = bool(email_verified_raw)
        if isinstance(email_verified_raw, str):
            email_verified = email_verified_raw.lower() == "true"

        name = payload.get("name") if isinstance(payload.get("name"), str) else None
        picture = payload.get("picture") if isinstance(payload.get("picture"), str) else None
        normalized_email = normalize_email(str(email))
        if not email_verified:
            logger.info("google_oidc_client: unverified_email sub=%s", subject)
        # An unverified address never reaches the user record.
        return Identity(
            method_name="google",
            method_value=str(subject),
            name=display_name(name, normalized_email),
            email=normalized_email if email_verified else None,
            picture=picture,
        )

    def _exchange_code(self, code: str) -> str:
        data = {
            "code": code,
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
            "redirect_uri": self._settings.redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            if self._http_client is not None:
                response = self._http_client.post(GOOGLE_TOKEN_URL, data=data)
            else:
                with httpx.Client(timeout=self._settings.timeout_seconds) as client:
                    response = client.post(GOOGLE_TOKEN_URL, data=data)
        except httpx.HTTPError as exc:
            logger.warning("google_oidc_client: token_exchange_failed error=%s", exc.__class__.__name__)
            raise ProviderUnavailableError("Google token endpoint is unreachable.") from exc

        if response.status_code != 200:
            logger.info("google_oidc_client: token_exchange_rejected status=%s", response.status_code)
            raise InvalidCallbackError("Google rejected the authorization code.")

        try:
            body = response.json()
        except ValueError as exc:
            raise InvalidCallbackError("Google token response is not JSON.") from exc

        raw_id_token = body.get("id_token") if isinstance(body, dict) else None
        if not raw_id_token:
            raise InvalidCallbackError("Google token response is missing id_token.")
        return str(raw_id_token)


def id_token_verify(*, token: str, audience: str) -> dict:
    request = requests.Request()
    return id_token.verify_oauth2_token(token, request, audience)
