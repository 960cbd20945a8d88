from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from authgate.domain.entities.user import LinkedIdentity, UserRecord


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def map_record_to_user(row: Mapping[str, Any]) -> UserRecord:
    return UserRecord(
        user_id=str(row["userID"]),
        name=row.get("name") or "",
        email=row.get("email"),
        picture=row.get("picture"),
        session_token_hashes=frozenset(row.get("sessionTokens") or ()),
        identities=tuple(
            LinkedIdentity(method_name=item["methodName"], method_value=item["methodValue"])
            for item in row.get("identities") or ()
        ),
        stripe_customer_id=row.get("stripeCustomerID"),
        created_at=_as_datetime(row["createdAt"]),
        updated_at=_as_datetime(row["updatedAt"]),
    )


def map_user_to_record(user: UserRecord) -> dict[str, Any]:
    return {
        "userID": user.user_id,
        "name": user.name,
        "email": user.email,
        "picture": user.picture,
        "sessionTokens": sorted(user.session_token_hashes),
        "identities": [
            {"methodName": linked.method_name, "methodValue": linked.method_value}
            for linked in user.identities
        ],
        "stripeCustomerID": user.stripe_customer_id,
        "createdAt": user.created_at.isoformat(),
        "updatedAt": user.updated_at.isoformat(),
    }
