"""
FastAPI application factory.
Wires the owned collaborators (database, adapters, auth) onto app.state and
maps the error taxonomy onto HTTP responses.
"""
from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from setlone.api import routes, trading, users
from setlone.auth import PasswordHasher, RejectAllVerifier, TokenVerifier, pbkdf2_hasher
from setlone.config.settings import Settings, get_settings
from setlone.database import Database
from setlone.errors import ServiceError
from setlone.exchanges.binance_adapter import BinanceFuturesAdapter
from setlone.exchanges.yahoo_adapter import YahooEquityAdapter
from setlone.observability import RequestTimer, RuntimeObservability
from setlone.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def error_response(message: str, status_code: int) -> JSONResponse:
    payload = ErrorResponse(error=message, status=status_code)
    return JSONResponse(status_code=status_code, content=payload.model_dump())


def _flatten_validation_errors(exc: RequestValidationError) -> str:
    """Return a concise, stable validation message string."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(i) for i in err.get("loc", []) if i != "body")
        msg = err.get("msg", "Invalid value")
        parts.append(f"{loc}: {msg}")
    return "; ".join(parts)


async def service_error_handler(request: Request, exc: ServiceError):
    log_extra = {"path": request.url.path, "error_type": type(exc).__name__, "context": exc.context}
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}", extra=log_extra, exc_info=exc)
    else:
        logger.info(f"{type(exc).__name__}: {exc.message}", extra=log_extra)
    return error_response(exc.public_message(), exc.status_code)


async def http_exception_handler(_: Request, exc: HTTPException):
    details = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return error_response(details, exc.status_code)


async def request_validation_exception_handler(_: Request, exc: RequestValidationError):
    return error_response(_flatten_validation_errors(exc), 422)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled API exception on {request.url.path}: {exc}", exc_info=exc)
    return error_response("Unexpected server error", 500)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    token_verifier: Optional[TokenVerifier] = None,
    password_hasher: Optional[PasswordHasher] = None,
    equity_adapter: Optional[YahooEquityAdapter] = None,
    futures_adapter: Optional[BinanceFuturesAdapter] = None,
) -> FastAPI:
    settings = settings or get_settings()
    database = database or Database(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.app_name}...")
        try:
            database.init_db()
            logger.info("Application started successfully")
            yield
        except Exception as e:
            logger.error(f"Startup failed: {e}", exc_info=True)
            raise
        finally:
            logger.info(f"Shutting down {settings.app_name}...")
            database.dispose()
            logger.info("Shutdown complete")

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

    app.state.settings = settings
    app.state.db = database
    app.state.observability = RuntimeObservability()
    app.state.token_verifier = token_verifier or RejectAllVerifier()
    app.state.password_hasher = password_hasher or pbkdf2_hasher
    app.state.equity_adapter = equity_adapter or YahooEquityAdapter(
        base_url=settings.equity_base_url, timeout_seconds=settings.request_timeout_seconds
    )
    app.state.futures_adapter = futures_adapter or BinanceFuturesAdapter(
        base_url=settings.futures_base_url, timeout_seconds=settings.request_timeout_seconds
    )

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
        timer = RequestTimer()
        response = None
        try:
            response = await call_next(request)
            response.headers["x-request-id"] = request_id
            return response
        finally:
            latency_ms = timer.elapsed_ms()
            failed = response is None or response.status_code >= 500
            app.state.observability.mark_request_timing(latency_ms, failed=failed)
            logger.info(
                "request_complete",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code if response else 500,
                    "latency_ms": round(latency_ms, 2),
                },
            )

    app.include_router(routes.router, prefix=API_PREFIX)
    app.include_router(users.router, prefix=API_PREFIX)
    app.include_router(trading.router, prefix=API_PREFIX)
    return app
