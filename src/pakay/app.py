"""Pakay — FastAPI gateway application.

Clients see tokens, storage sees integers. Every id that crosses this
gateway goes through the scope's decoder ring on the way in and out.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from pakay.auth import make_api_key_checker
from pakay.backends.memory import MemoryBackend
from pakay.config import PakayConfig, load_config
from pakay.errors import EncodeError, InvalidOption, NotFoundError, PakayError
from pakay.registry import ScopeRegistry
from pakay.routes import codec, meta, records

logger = logging.getLogger("pakay")
audit_logger = logging.getLogger("pakay.audit")

VERSION = "0.1.0"


def build_registry(config: PakayConfig) -> ScopeRegistry:
    """Registry seeded with the configured base and every configured scope."""
    registry = ScopeRegistry(base=config.hashid)
    for name, overrides in config.scopes.items():
        registry.configure(name, **overrides)
    return registry


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: derive scope rings, open the backend."""
    config: PakayConfig = app.state.config
    app.state.registry = build_registry(config)
    app.state.backend = MemoryBackend()
    scopes = app.state.registry.scopes()
    logger.info("Configured scopes: %s", ", ".join(scopes) or "(none)")
    if config.hashid.test_mode:
        logger.warning("Test mode is on: tokens carry raw ids")
    logger.info("Pakay gateway ready")
    yield
    logger.info("Pakay gateway shut down")


def create_app(config: PakayConfig | None = None) -> FastAPI:
    """Application factory."""
    if config is None:
        config = load_config()

    app = FastAPI(
        title="Pakay",
        description="Id obfuscation gateway: tokens outside, integers inside",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.config = config

    check_key = make_api_key_checker(config.api_key)

    # ── Exception handlers ────────────────────────────────────

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(InvalidOption)
    async def invalid_option_handler(request: Request, exc: InvalidOption):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(EncodeError)
    async def encode_handler(request: Request, exc: EncodeError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(PakayError)
    async def pakay_handler(request: Request, exc: PakayError):
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    # ── Audit middleware ──────────────────────────────────────

    @app.middleware("http")
    async def audit_log(request: Request, call_next):
        start = time.monotonic()
        response = await call_next(request)
        elapsed = time.monotonic() - start
        audit_logger.info(
            "%s %s %d %.3fs",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response

    # ── Routers ───────────────────────────────────────────────

    app.include_router(meta.router, dependencies=[Depends(check_key)])
    app.include_router(codec.router, dependencies=[Depends(check_key)])
    app.include_router(records.router, dependencies=[Depends(check_key)])

    return app
