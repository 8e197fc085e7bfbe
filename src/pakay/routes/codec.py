"""Codec endpoints — encode ids to tokens and back for one scope."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from pakay.decoder import DecoderRing
from pakay.deps import get_ring

router = APIRouter(prefix="/api/v1/scopes/{scope}", tags=["codec"])


@router.get("/encode")
def encode(
    ids: list[int] = Query(..., alias="id"),
    ring: DecoderRing = Depends(get_ring),
):
    return {"tokens": ring.encode(ids)}


@router.get("/decode")
def decode(
    token: list[str] = Query(...),
    fallback: bool = Query(False),
    ring: DecoderRing = Depends(get_ring),
):
    """Decode tokens. Invalid ones come back as null, or as-is with fallback."""
    return {"ids": ring.decode(token, fallback=fallback)}
