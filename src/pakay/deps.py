"""FastAPI dependencies for Pakay routes."""

from __future__ import annotations

from fastapi import Depends, Request

from pakay.backends.memory import MemoryBackend
from pakay.decoder import DecoderRing
from pakay.errors import UnknownScopeError
from pakay.lookup import HashidLookup
from pakay.registry import ScopeRegistry


def get_backend(request: Request) -> MemoryBackend:
    """Get the storage backend from app state."""
    return request.app.state.backend


def get_registry(request: Request) -> ScopeRegistry:
    """Get the scope registry from app state."""
    return request.app.state.registry


def get_ring(scope: str, registry: ScopeRegistry = Depends(get_registry)) -> DecoderRing:
    """Decoder ring for the scope in the path. Only configured scopes are served."""
    if scope not in registry:
        raise UnknownScopeError(f"Unknown scope: {scope}")
    return registry.ring(scope)


def get_lookup(
    scope: str,
    backend: MemoryBackend = Depends(get_backend),
    ring: DecoderRing = Depends(get_ring),
) -> HashidLookup:
    return HashidLookup(backend, scope, ring)
