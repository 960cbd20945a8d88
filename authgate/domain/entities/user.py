from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


IdentMethod = Literal["email", "google"]


@dataclass(frozen=True)
class Identity:
    method_name: IdentMethod
    method_value: str
    name: str
    email: str | None
    picture: str | None

    @property
    def external_key(self) -> str:
        return identity_key(self.method_name, self.method_value)


@dataclass(frozen=True)
class LinkedIdentity:
    method_name: str
    method_value: str

    @property
    def external_key(self) -> str:
        return identity_key(self.method_name, self.method_value)


@dataclass(frozen=True)
class UserRecord:
    user_id: str
    name: str
    email: str | None
    picture: str | None
    session_token_hashes: frozenset[str]
    identities: tuple[LinkedIdentity, ...]
    stripe_customer_id: str | None
    created_at: datetime
    updated_at: datetime

    def has_identity(self, method_name: str, method_value: str) -> bool:
        return any(
            linked.method_name == method_name and linked.method_value == method_value
            for linked in self.identities
        )


def identity_key(method_name: str, method_value: str) -> str:
    return f"{method_name}:{method_value}"
