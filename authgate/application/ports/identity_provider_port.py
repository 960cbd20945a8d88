from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from authgate.domain.entities.user import Identity


class IdentityProviderPort(Protocol):
    method_name: str

    def authorization_url(self, *, state_token: str) -> str:
        ...

    def verify(self, *, callback: Mapping[str, str]) -> Identity:
        ...
