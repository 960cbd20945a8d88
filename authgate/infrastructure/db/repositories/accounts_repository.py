from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from authgate.application.ports.accounts_port import AccountsPort
from authgate.application.ports.record_store_port import RecordStorePort
from authgate.domain.entities.user import Identity, LinkedIdentity, UserRecord, identity_key
from authgate.infrastructure.db.mappers.user_record_mapper import map_record_to_user, map_user_to_record


logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
IDENTITIES_COLLECTION = "identities"


class RecordStoreAccountsRepository(AccountsPort):
    def __init__(self, record_store: RecordStorePort):
        self._store = record_store

    def get_user(self, *, user_id: str) -> UserRecord | None:
        row = self._store.get(USERS_COLLECTION, user_id)
        if row is None:
            return None
        return map_record_to_user(row)

    def save_user(self, *, user: UserRecord) -> None:
        self._store.put(USERS_COLLECTION, user.user_id, map_user_to_record(user))

    def delete_user(self, *, user_id: str) -> None:
        self._store.delete(USERS_COLLECTION, user_id)

    def create_user(self, *, user_id: str, identity: Identity, created_at: datetime) -> UserRecord:
        user = UserRecord(
            user_id=user_id,
            name=identity.name,
            email=identity.email,
            picture=identity.picture,
            session_token_hashes=frozenset(),
            identities=(LinkedIdentity(method_name=identity.method_name, method_value=identity.method_value),),
            stripe_customer_id=None,
            created_at=created_at,
            updated_at=created_at,
        )
        # User record before index entry: the index never points at a missing user.
        self.save_user(user=user)
        self._store.put(IDENTITIES_COLLECTION, identity.external_key, {"userID": user_id})
        return user

    def find_user_by_identity(self, *, method_name: str, method_value: str) -> UserRecord | None:
        row = self._store.get(IDENTITIES_COLLECTION, identity_key(method_name, method_value))
        if row is None or not row.get("userID"):
            return None
        user = self.get_user(user_id=str(row["userID"]))
        if user is None:
            logger.warning(
                "accounts_repository: dangling_identity method=%s user_id=%s",
                method_name,
                row["userID"],
            )
        return user

    def link_identity(self, *, user: UserRecord, identity: Identity, updated_at: datetime) -> UserRecord:
        identities = user.identities
        if not user.has_identity(identity.method_name, identity.method_value):
            identities = identities + (
                LinkedIdentity(method_name=identity.method_name, method_value=identity.method_value),
            )
        updated = replace(
            user,
            identities=identities,
            email=identity.email or user.email,
            updated_at=updated_at,
        )
        self.save_user(user=updated)
        self._store.put(IDENTITIES_COLLECTION, identity.external_key, {"userID": user.user_id})
        return updated

    def unlink_identity(self, *, method_name: str, method_value: str) -> None:
        self._store.delete(IDENTITIES_COLLECTION, identity_key(method_name, method_value))
