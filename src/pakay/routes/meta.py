"""Meta endpoints — health, version, record counts, configured scopes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from pakay.backends.memory import MemoryBackend
from pakay.deps import get_backend, get_registry
from pakay.registry import ScopeRegistry

router = APIRouter(prefix="/api/v1", tags=["meta"])


@router.get("/health")
def health():
    return {"status": "ok", "service": "pakay"}


@router.get("/version")
def version(request: Request):
    return {"gateway": request.app.version}


@router.get("/counts")
def counts(backend: MemoryBackend = Depends(get_backend)):
    return backend.count_records()


@router.get("/scopes")
def scopes(registry: ScopeRegistry = Depends(get_registry)):
    """Configured scopes. Salts and alphabets stay on the server."""
    result = []
    for name in registry.scopes():
        config = registry.config_for(name)
        result.append(
            {
                "name": name,
                "prefix": registry.prefix(name),
                "min_length": config.min_length,
                "sign": config.sign,
                "test_mode": config.test_mode,
                "override_lookup": config.override_lookup,
                "override_string_form": config.override_string_form,
            }
        )
    return result
