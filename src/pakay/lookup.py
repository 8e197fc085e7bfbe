"""Record lookup through a scope's decoder ring.

HashidLookup sits in front of a backend for one scope. With
``override_lookup`` on, ``find`` accepts tokens and raw ids alike: every
key goes through ``decode(..., fallback=True)`` first, so anything that is
not a valid token reaches the backend untouched.

ScopedView is a filtered slice of a scope's records. It holds the same
ring and answers the same questions, restricted to its own records.
"""

from __future__ import annotations

from typing import Any, Iterable

from pakay.backends.memory import MemoryBackend, coerce_id
from pakay.decoder import DecoderRing
from pakay.errors import NotFoundError
from pakay.models import Record


def _flatten(ids: Iterable[Any]) -> list[Any]:
    flat: list[Any] = []
    for item in ids:
        if isinstance(item, (list, tuple)):
            flat.extend(_flatten(item))
        else:
            flat.append(item)
    return flat


def normalize_ids(ids: tuple[Any, ...]) -> tuple[list[Any], bool]:
    """Flatten, drop None, de-duplicate in order.

    Also reports whether the caller expects a list back: true when the
    first argument was itself a list, or more than one id survives.
    """
    expects_list = bool(ids) and isinstance(ids[0], (list, tuple))
    unique: list[Any] = []
    for item in _flatten(ids):
        if item is not None and item not in unique:
            unique.append(item)
    return unique, expects_list or len(unique) > 1


class HashidLookup:
    """Token-aware finders for one scope of a backend."""

    def __init__(self, backend: MemoryBackend, scope: str, ring: DecoderRing) -> None:
        self.backend = backend
        self.scope = scope
        self.ring = ring

    def encode_id(self, ids: Any) -> Any:
        return self.ring.encode(ids)

    def decode_id(self, ids: Any, fallback: bool = False) -> Any:
        return self.ring.decode(ids, fallback=fallback)

    def find(self, *ids: Any) -> Record | list[Record]:
        unique, expects_list = normalize_ids(ids)
        if not unique:
            raise NotFoundError(f"Couldn't find {self.scope} without an id")
        if self.ring.config.override_lookup:
            unique = self.ring.decode(unique, fallback=True)
        if expects_list:
            return self.backend.get_many(self.scope, unique)
        return self.backend.get(self.scope, unique[0])

    def find_by_hashid(self, token: Any) -> Record | None:
        """Record for a token, or None. Raw ids are not accepted."""
        record_id = self.ring.decode(token, fallback=False)
        if record_id is None:
            return None
        try:
            return self.backend.get(self.scope, record_id)
        except NotFoundError:
            return None

    def find_by_hashid_strict(self, token: Any) -> Record:
        record = self.find_by_hashid(token)
        if record is None:
            raise NotFoundError(f"No {self.scope} record for {token!r}")
        return record

    def hashid(self, record: Record) -> str | None:
        return self.ring.encode(record.id)

    def to_param(self, record: Record) -> str:
        """External string form of a record."""
        if self.ring.config.override_string_form:
            return self.hashid(record)
        return str(record.id)

    def where(self, **filters: Any) -> ScopedView:
        return ScopedView(self.scope, self.ring, self.backend.list(self.scope, **filters))


class ScopedView:
    """A filtered set of one scope's records, sharing the scope's ring."""

    def __init__(self, scope: str, ring: DecoderRing, records: Iterable[Record]) -> None:
        self.scope = scope
        self.ring = ring
        self._records = {r.id: r for r in records}

    def __iter__(self):
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def encode_id(self, ids: Any) -> Any:
        return self.ring.encode(ids)

    def decode_id(self, ids: Any, fallback: bool = False) -> Any:
        return self.ring.decode(ids, fallback=fallback)

    def find(self, *ids: Any) -> Record | list[Record]:
        unique, expects_list = normalize_ids(ids)
        if not unique:
            raise NotFoundError(f"Couldn't find {self.scope} without an id")
        if self.ring.config.override_lookup:
            unique = self.ring.decode(unique, fallback=True)
        records = [self._get(key) for key in unique]
        return records if expects_list else records[0]

    def find_by_hashid(self, token: Any) -> Record | None:
        record_id = self.ring.decode(token, fallback=False)
        if record_id is None:
            return None
        return self._records.get(record_id)

    def to_param(self, record: Record) -> str:
        if self.ring.config.override_string_form:
            return self.ring.encode(record.id)
        return str(record.id)

    def _get(self, key: Any) -> Record:
        record_id = coerce_id(key)
        record = self._records.get(record_id) if record_id is not None else None
        if record is None:
            raise NotFoundError(f"No {self.scope} record with id {key!r} in this view")
        return record
