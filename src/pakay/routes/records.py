"""Record endpoints — store and read records by token or raw id.

Records are always presented with their external string form as ``id``.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from pakay.deps import get_lookup
from pakay.lookup import HashidLookup
from pakay.models import Record

router = APIRouter(prefix="/api/v1/scopes/{scope}/records", tags=["records"])


def _present(lookup: HashidLookup, record: Record) -> dict[str, Any]:
    return {"id": lookup.to_param(record), "data": record.data}


@router.post("", status_code=201)
def store_record(
    data: dict[str, Any] = Body(...),
    lookup: HashidLookup = Depends(get_lookup),
):
    record = lookup.backend.store(lookup.scope, data)
    return {"id": lookup.to_param(record)}


@router.get("")
def list_records(lookup: HashidLookup = Depends(get_lookup)):
    return [_present(lookup, r) for r in lookup.where()]


@router.get("/{key}")
def get_record(key: str, lookup: HashidLookup = Depends(get_lookup)):
    return _present(lookup, lookup.find(key))
