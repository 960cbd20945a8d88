from __future__ import annotations

import copy
from collections.abc import Mapping
from threading import Lock
from typing import Any

from authgate.application.ports.record_store_port import RecordStorePort


class InMemoryRecordStore(RecordStorePort):
    """Process-local record table for development and tests."""

    def __init__(self):
        self._lock = Lock()
        self._records: dict[tuple[str, str], dict[str, Any]] = {}

    def get(self, collection: str, key: str) -> dict[str, Any] | None:
        with self._lock:
            record = self._records.get((collection, key))
            return copy.deepcopy(record) if record is not None else None

    def put(self, collection: str, key: str, record: Mapping[str, Any]) -> None:
        with self._lock:
            self._records[(collection, key)] = copy.deepcopy(dict(record))

    def delete(self, collection: str, key: str) -> None:
        with self._lock:
            self._records.pop((collection, key), None)

    def keys(self, collection: str) -> list[str]:
        with self._lock:
            return sorted(key for coll, key in self._records if coll == collection)
