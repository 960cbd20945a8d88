from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class RecordStorePort(Protocol):
    """Keyed record table. Implementations raise StorageUnavailableError on I/O failure."""

    def get(self, collection: str, key: str) -> dict[str, Any] | None:
        ...

    def put(self, collection: str, key: str, record: Mapping[str, Any]) -> None:
        ...

    def delete(self, collection: str, key: str) -> None:
        ...
