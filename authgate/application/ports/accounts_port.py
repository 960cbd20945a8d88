from __future__ import annotations

from datetime import datetime
from typing import Protocol

from authgate.domain.entities.user import Identity, UserRecord


class AccountsPort(Protocol):
    def get_user(self, *, user_id: str) -> UserRecord | None:
        ...

    def save_user(self, *, user: UserRecord) -> None:
        ...

    def delete_user(self, *, user_id: str) -> None:
        ...

    def create_user(self, *, user_id: str, identity: Identity, created_at: datetime) -> UserRecord:
        ...

    def find_user_by_identity(self, *, method_name: str, method_value: str) -> UserRecord | None:
        ...

    def link_identity(self, *, user: UserRecord, identity: Identity, updated_at: datetime) -> UserRecord:
        ...

    def unlink_identity(self, *, method_name: str, method_value: str) -> None:
        ...
