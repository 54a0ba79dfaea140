"""
Dependency wiring for the FastAPI app.

Clients are built once per application by build_services() and stored on
app.state; request handlers receive them through the get_* dependencies so
tests can pass fakes into create_app().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request

from gateway.auth import (
    FirebaseTokenVerifier,
    InMemoryTokenVerifier,
    Principal,
    TokenVerifier,
    authenticate,
)
from gateway.config import Settings
from gateway.db import DbClient, InMemoryDbClient, PostgresDbClient
from gateway.rate_limit import InMemoryRateLimiter, RateLimiter, RedisRateLimiter
from gateway.storage import InMemoryStorageClient, S3StorageClient, StorageClient

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Process-wide clients shared by every request."""

    db: DbClient
    verifier: TokenVerifier
    storage: StorageClient
    rate_limiter: RateLimiter


def build_db_client(settings: Settings) -> DbClient:
    if settings.use_in_memory_backends or not settings.database_url:
        logger.info("Using in-memory database")
        return InMemoryDbClient()
    return PostgresDbClient(settings.database_url)


def build_token_verifier(settings: Settings) -> TokenVerifier:
    if settings.use_in_memory_backends:
        logger.info("Using in-memory token verifier")
        return InMemoryTokenVerifier()
    return FirebaseTokenVerifier(settings)


def build_storage_client(settings: Settings) -> StorageClient:
    if settings.use_in_memory_backends or not settings.has_object_storage:
        return InMemoryStorageClient()
    return S3StorageClient(
        bucket=settings.storage_bucket,
        region=settings.storage_region or "",
        endpoint=settings.storage_endpoint or "",
        access_key_id=settings.storage_access_key_id or "",
        secret_access_key=settings.storage_secret_access_key or "",
    )


def build_rate_limiter(settings: Settings) -> RateLimiter:
    if settings.redis_url and not settings.use_in_memory_backends:
        return RedisRateLimiter(
            url=settings.redis_url,
            limit=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
            key_prefix=settings.rate_limit_key_prefix,
        )
    return InMemoryRateLimiter(
        limit=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )


def build_services(settings: Settings) -> Services:
    return Services(
        db=build_db_client(settings),
        verifier=build_token_verifier(settings),
        storage=build_storage_client(settings),
        rate_limiter=build_rate_limiter(settings),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db_client(services: Services = Depends(get_services)) -> DbClient:
    return services.db


def get_token_verifier(services: Services = Depends(get_services)) -> TokenVerifier:
    return services.verifier


def get_storage_client(services: Services = Depends(get_services)) -> StorageClient:
    return services.storage


def get_principal(
    authorization: Optional[str] = Header(default=None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> Principal:
    """Verified Principal for the request; raises 401/403 envelopes otherwise."""
    return authenticate(authorization, verifier)
