"""In-memory storage backend.

Ids are assigned sequentially per scope starting at 1, the way a database
sequence would. Nothing is persisted.
"""

from __future__ import annotations

import threading
from typing import Any, Iterable

from pakay.errors import NotFoundError
from pakay.models import Record


def coerce_id(value: Any) -> int | None:
    """Storage key for value, or None if it cannot be one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


class MemoryBackend:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, dict[int, Record]] = {}
        self._next_id: dict[str, int] = {}

    def store(self, scope: str, data: dict[str, Any] | None = None) -> Record:
        with self._lock:
            record_id = self._next_id.get(scope, 1)
            self._next_id[scope] = record_id + 1
            record = Record(id=record_id, scope=scope, data=dict(data or {}))
            self._records.setdefault(scope, {})[record_id] = record
        return record

    def get(self, scope: str, record_id: Any) -> Record:
        key = coerce_id(record_id)
        record = self._records.get(scope, {}).get(key) if key is not None else None
        if record is None:
            raise NotFoundError(f"No {scope} record with id {record_id!r}")
        return record

    def get_many(self, scope: str, record_ids: Iterable[Any]) -> list[Record]:
        return [self.get(scope, record_id) for record_id in record_ids]

    def list(self, scope: str, **filters: Any) -> list[Record]:
        records = sorted(self._records.get(scope, {}).values(), key=lambda r: r.id)
        return [
            r for r in records
            if all(r.data.get(k) == v for k, v in filters.items())
        ]

    def count_records(self) -> dict[str, int]:
        return {scope: len(records) for scope, records in self._records.items()}
