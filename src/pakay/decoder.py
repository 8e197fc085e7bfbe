"""The decoder ring: integer id obfuscation between clients and storage.

Internal ids are sequential integers. Clients only ever see tokens of the
form ``<prefix>_<payload>``, where the prefix comes from the scope name and
the payload is a hashids encoding seeded with the scope's salt material.

Signed rings encode ``(SIGNING_MARKER, id)`` instead of ``id`` alone, so a
payload that happens to decode under the same seed but was never issued by
this ring is rejected. The marker is not a secret.

Decoding never raises. Anything that cannot be validated comes back as the
fallback value: the original input when ``fallback=True``, else None.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from hashids import Hashids

from pakay.config import HashidConfig
from pakay.errors import DecodeFailure, EncodeError, InvalidOption

logger = logging.getLogger("pakay.decoder")

SIGNING_MARKER = 42

_PREFIX_RE = re.compile(r"^[a-z]+_")
_VALID_PREFIX_RE = re.compile(r"[a-z]+")
_LEADING_INT_RE = re.compile(r"^\s*[+-]?\d+")


def scope_prefix(name: str) -> str:
    """Short code for a scope: its non-lowercase characters, lowercased.

    "UserAccount" -> "ua". Distinct names may share a prefix. Names whose
    prefix would not be stripped again on decode ("users", "Order2") are
    rejected.
    """
    prefix = re.sub(r"[a-z]", "", name).lower()
    if not _VALID_PREFIX_RE.fullmatch(prefix):
        raise InvalidOption(
            f"Scope name {name!r} gives prefix {prefix!r}; "
            "it needs at least one capital letter and no other non-lowercase characters"
        )
    return prefix


def parse_leading_int(value: str) -> int:
    """Leading digits of value as an int, 0 when there are none."""
    match = _LEADING_INT_RE.match(value)
    return int(match.group()) if match else 0


class DecoderRing:
    """Encode and decode ids for a single scope."""

    def __init__(self, config: HashidConfig, prefix: str) -> None:
        self.config = config
        self.prefix = prefix
        self._hashids = Hashids(
            salt=config.seed_material(),
            min_length=config.min_length,
            alphabet=config.alphabet,
        )

    def __repr__(self) -> str:
        return f"DecoderRing(prefix={self.prefix!r}, sign={self.config.sign})"

    # ── Encoding ──────────────────────────────────────────────

    def encode(self, ids: Any) -> Any:
        """Map storage id(s) to client-visible token(s).

        None stays None; lists and tuples are encoded element-wise.
        """
        if isinstance(ids, (list, tuple)):
            return type(ids)(self._encode_one(i) for i in ids)
        return self._encode_one(ids)

    def _encode_one(self, id_: Any) -> str | None:
        if id_ is None:
            return None
        if self.config.test_mode:
            return f"{self.prefix}_{id_}"

        if isinstance(id_, bool) or not isinstance(id_, int) or id_ < 0:
            raise EncodeError(f"Cannot encode {id_!r}: ids must be non-negative integers")
        if self.config.sign:
            payload = self._hashids.encode(SIGNING_MARKER, id_)
        else:
            payload = self._hashids.encode(id_)
        return f"{self.prefix}_{payload}"

    # ── Decoding ──────────────────────────────────────────────

    def decode(self, tokens: Any, fallback: bool = False) -> Any:
        """Map client-visible token(s) back to storage id(s).

        With fallback, a token that does not validate is handed back
        unchanged, which lets callers pass raw ids and tokens alike.
        """
        if isinstance(tokens, (list, tuple)):
            return type(tokens)(self._decode_one(t, fallback) for t in tokens)
        return self._decode_one(tokens, fallback)

    def _decode_one(self, token: Any, fallback: bool) -> Any:
        if token is None:
            return None
        fallback_value = token if fallback else None
        payload = _PREFIX_RE.sub("", str(token), count=1)

        if self.config.test_mode:
            return parse_leading_int(payload)

        try:
            values = self._unhash(payload)
        except DecodeFailure as exc:
            logger.debug("%s: %s, falling back", self.prefix, exc)
            return fallback_value

        if self.config.sign:
            if len(values) == 2 and values[0] == SIGNING_MARKER:
                return values[1]
            logger.debug("%s: unsigned payload %r, falling back", self.prefix, payload)
            return fallback_value
        return values[0]

    def _unhash(self, payload: str) -> tuple[int, ...]:
        try:
            values = self._hashids.decode(payload)
        except (ValueError, TypeError) as exc:
            raise DecodeFailure(f"malformed payload {payload!r}") from exc
        if not values:
            raise DecodeFailure(f"payload {payload!r} does not decode")
        return tuple(values)
