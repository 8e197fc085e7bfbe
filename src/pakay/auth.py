"""API key check in front of the codec and record routes.

Tokens are only as opaque as the salt behind them, and the encode route
will mint a valid token for any id. Deployments that expose the gateway
beyond a trusted network set ``api_key`` and every route then requires a
matching X-API-Key header. An empty key leaves the gateway open, which is
what local development and the test suites use.
"""

from __future__ import annotations

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def make_api_key_checker(expected_key: str):
    """Dependency that rejects requests without expected_key (401)."""

    async def require_gateway_key(
        api_key: str | None = Security(_api_key_header),
    ) -> str | None:
        if not expected_key:
            return None
        if api_key != expected_key:
            raise HTTPException(status_code=401, detail="Gateway API key required")
        return api_key

    return require_gateway_key
