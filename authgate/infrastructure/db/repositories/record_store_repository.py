from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from authgate.application.ports.record_store_port import RecordStorePort
from authgate.domain.exceptions import StorageUnavailableError


logger = logging.getLogger(__name__)


class SqlRecordStore(RecordStorePort):
    def __init__(self, engine):
        self._engine = engine

    def get(self, collection: str, key: str) -> dict[str, Any] | None:
        sql = """
            SELECT body
            FROM records
            WHERE collection = :collection
              AND record_key = :record_key
            LIMIT 1
        """
        try:
            with self._engine.connect() as conn:
                row = conn.execute(
                    text(sql),
                    {"collection": collection, "record_key": key},
                ).mappings().first()
        except SQLAlchemyError as exc:
            raise _unavailable("get", collection, exc) from exc
        if row is None:
            return None
        return json.loads(row["body"])

    def put(self, collection: str, key: str, record: Mapping[str, Any]) -> None:
        sql = """
            INSERT INTO records (collection, record_key, body)
            VALUES (:collection, :record_key, :body)
            ON CONFLICT (collection, record_key) DO UPDATE
            SET body = EXCLUDED.body,
                updated_at = CURRENT_TIMESTAMP
        """
        params = {
            "collection": collection,
            "record_key": key,
            "body": json.dumps(dict(record), sort_keys=True),
        }
        try:
            with self._engine.begin() as conn:
                conn.execute(text(sql), params)
        except SQLAlchemyError as exc:
            raise _unavailable("put", collection, exc) from exc

    def delete(self, collection: str, key: str) -> None:
        sql = """
            DELETE FROM records
            WHERE collection = :collection
              AND record_key = :record_key
        """
        try:
            with self._engine.begin() as conn:
                conn.execute(text(sql), {"collection": collection, "record_key": key})
        except SQLAlchemyError as exc:
            raise _unavailable("delete", collection, exc) from exc


def _unavailable(operation: str, collection: str, exc: SQLAlchemyError) -> StorageUnavailableError:
    logger.warning(
        "record_store: %s_failed collection=%s error=%s",
        operation,
        collection,
        exc.__class__.__name__,
    )
    return StorageUnavailableError("Record store is unavailable.")
