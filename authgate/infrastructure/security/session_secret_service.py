from __future__ import annotations

import hashlib
import secrets

from authgate.application.ports.session_secret_port import SessionSecretPort


class Sha256SessionSecretService(SessionSecretPort):
    def __init__(self, *, secret_bytes: int = 48):
        self._secret_bytes = secret_bytes

    def generate_session_secret(self) -> str:
        return secrets.token_urlsafe(self._secret_bytes)

    def hash_session_secret(self, *, session_secret: str) -> str:
        return hashlib.sha256(session_secret.encode("utf-8")).hexdigest()
