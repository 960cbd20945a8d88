from __future__ import annotations

from typing import Protocol


class SessionSecretPort(Protocol):
    def generate_session_secret(self) -> str:
        ...

    def hash_session_secret(self, *, session_secret: str) -> str:
        ...
