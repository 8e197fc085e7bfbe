"""Error hierarchy for Pakay.

Configuration misuse is the only failure a codec caller ever sees.
Anything wrong with a token degrades to the fallback value instead.
"""

from __future__ import annotations


class PakayError(Exception):
    """Base class for all Pakay errors."""


class InvalidOption(PakayError, ValueError):
    """Unknown configuration key, or a value the codec cannot work with."""


class EncodeError(PakayError, ValueError):
    """Identifier cannot be encoded (negative or not an integer)."""


class DecodeFailure(PakayError):
    """Token payload rejected by the inverse transform.

    Raised and caught inside the decoder only.
    """


class NotFoundError(PakayError, LookupError):
    """No record for the requested identifier."""


class UnknownScopeError(NotFoundError):
    """Scope was never configured on this gateway."""
