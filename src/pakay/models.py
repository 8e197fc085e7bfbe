"""Record model held by the storage backends."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Record(BaseModel):
    """One stored entity. ``id`` is the internal sequential identifier."""

    model_config = ConfigDict(frozen=True)

    id: int
    scope: str
    data: dict[str, Any] = Field(default_factory=dict)
