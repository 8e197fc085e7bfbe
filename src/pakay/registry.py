"""Scope registry: one configuration and one decoder ring per scope.

A scope is any named grouping of records, usually an entity type. It can be
given as a plain name or as a class; a class contributes its ``__name__``
and, when it has one, its ``__tablename__`` as the scope tag.

Configurations are derived lazily on first use from the registry's base
(the process-wide default when no base is given) and then kept. Derivation
copies, so replacing the base later never touches a scope already derived.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Union

from pakay import config as hashid_config
from pakay.config import HashidConfig
from pakay.decoder import DecoderRing, scope_prefix

logger = logging.getLogger("pakay.registry")

Scope = Union[str, type]


def scope_name(scope: Scope) -> str:
    return scope if isinstance(scope, str) else scope.__name__


def scope_tag(scope: Scope) -> str:
    if isinstance(scope, str):
        return scope
    return getattr(scope, "__tablename__", None) or scope.__name__


class ScopeRegistry:
    """Lazily derived, memoized configuration and decoder ring per scope."""

    def __init__(self, base: HashidConfig | None = None) -> None:
        self._base = base
        self._lock = threading.Lock()
        self._rings: dict[str, DecoderRing] = {}
        self._prefixes: dict[str, str] = {}

    @property
    def base(self) -> HashidConfig:
        return self._base if self._base is not None else hashid_config.configuration()

    def configure(self, scope: Scope, **overrides: Any) -> HashidConfig:
        """Derive scope's configuration from the base, with overrides.

        Replaces whatever the scope had before.
        """
        name = scope_name(scope)
        config = hashid_config.derive_for_scope(self.base, scope_tag(scope), overrides)
        ring = DecoderRing(config, self.prefix(scope))
        with self._lock:
            self._rings[name] = ring
        logger.debug("Configured scope %s (prefix %r)", name, ring.prefix)
        return config

    def config_for(self, scope: Scope) -> HashidConfig:
        return self.ring(scope).config

    def ring(self, scope: Scope) -> DecoderRing:
        """The scope's decoder ring, deriving a default one on first use."""
        name = scope_name(scope)
        ring = self._rings.get(name)
        if ring is not None:
            return ring
        with self._lock:
            ring = self._rings.get(name)
            if ring is None:
                config = hashid_config.derive_for_scope(self.base, scope_tag(scope))
                ring = DecoderRing(config, self._prefix_locked(name))
                self._rings[name] = ring
                logger.debug("Derived scope %s (prefix %r)", name, ring.prefix)
        return ring

    def prefix(self, scope: Scope) -> str:
        name = scope_name(scope)
        prefix = self._prefixes.get(name)
        if prefix is not None:
            return prefix
        with self._lock:
            return self._prefix_locked(name)

    def _prefix_locked(self, name: str) -> str:
        prefix = self._prefixes.get(name)
        if prefix is None:
            prefix = self._prefixes[name] = scope_prefix(name)
        return prefix

    def reset(self, scope: Scope) -> None:
        """Drop scope's configuration; the next use derives a fresh one."""
        name = scope_name(scope)
        with self._lock:
            self._rings.pop(name, None)
        logger.debug("Reset scope %s", name)

    def scopes(self) -> list[str]:
        return sorted(self._rings)

    def __contains__(self, scope: Scope) -> bool:
        return scope_name(scope) in self._rings
