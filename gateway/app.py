"""
FastAPI application entry point for the gateway.

Run with: uvicorn --factory gateway.app:create_app
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from gateway.config import Settings, get_settings
from gateway.dependencies import Services, build_services
from gateway.errors import BadRequest, GatewayError
from gateway.rate_limit import RateLimitResult
from gateway.routes import router

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
}


def _client_key(request: Request, trust_forwarded_for: bool) -> str:
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


def _set_rate_limit_headers(response, result: RateLimitResult) -> None:
    response.headers["X-RateLimit-Limit"] = str(result.limit)
    response.headers["X-RateLimit-Remaining"] = str(result.remaining)
    response.headers["X-RateLimit-Reset"] = str(result.reset_in)


def _summarize_validation(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts) or "Malformed request"


def _install_middleware(app: FastAPI, settings: Settings, services: Services) -> None:
    api_root = settings.api_prefix.rstrip("/") + "/"

    # Registered innermost first: CORS wraps security headers, which wrap the limiter.
    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        if not request.url.path.startswith(api_root):
            return await call_next(request)
        key = _client_key(request, settings.trust_forwarded_for)
        result = await run_in_threadpool(services.rate_limiter.hit, key)
        if result.allowed:
            response = await call_next(request)
        else:
            logger.warning("Rate limit exceeded for %s", key)
            response = JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests",
                    "message": "Too many requests, please try again later.",
                },
            )
        _set_rate_limit_headers(response, result)
        return response

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError):
        if exc.status_code >= 500:
            logger.error(
                "%s %s failed: %s", request.method, request.url.path, exc.message
            )
        return JSONResponse(status_code=exc.status_code, content=exc.as_dict())

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        # Unknown paths and unknown verbs on known paths both read as "not found".
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"error": "Not found"})
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": HTTPStatus(exc.status_code).phrase,
                "message": str(exc.detail),
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        error = BadRequest(_summarize_validation(exc))
        return JSONResponse(status_code=error.status_code, content=error.as_dict())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": "Something went wrong"},
        )


def create_app(
    settings: Optional[Settings] = None, services: Optional[Services] = None
) -> FastAPI:
    settings = settings or get_settings()
    if services is None:
        services = build_services(settings)

    app = FastAPI(title=settings.service_name, version="0.1.0")
    app.state.settings = settings
    app.state.services = services

    _install_middleware(app, settings, services)
    _install_exception_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)

    logger.info("%s ready (environment=%s)", settings.service_name, settings.environment)
    logger.info(
        "Database: %s, token verifier: %s, storage: %s",
        type(services.db).__name__,
        type(services.verifier).__name__,
        type(services.storage).__name__,
    )
    return app
