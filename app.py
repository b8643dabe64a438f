"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import redis.asyncio as aioredis
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.sendgrid import SendGridEmailProvider
from infrastructure.http_client import HttpClient
from infrastructure.identity.firebase import FirebaseIdentityProvider, init_firebase_app
from infrastructure.identity.protocol import IdentityProvider
from repositories.memory_throttle import InMemoryThrottleStore
from repositories.protocols import ThrottleStore
from repositories.redis_throttle import RedisThrottleStore
from repositories.role_repository import RoleRepository
from repositories.throttle_repository import MongoThrottleRepository
from routes.health_routes import router as health_router
from routes.recovery_routes import router as recovery_router
from services.authorization import AuthorizationGate
from services.credential_issuer import CredentialIssuer
from services.notifier import Notifier
from services.rate_limiter import RateLimiter
from services.recovery_service import RecoveryService
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def build_throttle_store(
    settings: AppSettings, db: AsyncDatabase, redis_client: Optional[aioredis.Redis]
) -> ThrottleStore:
    backend = settings.throttle.throttle_backend
    if backend == "redis":
        return RedisThrottleStore(redis_client)
    if backend == "memory":
        return InMemoryThrottleStore()
    return MongoThrottleRepository(db)


def build_recovery_service(
    settings: AppSettings,
    *,
    throttle_store: ThrottleStore,
    db: AsyncDatabase,
    identity: IdentityProvider,
    http_client: Optional[HttpClient] = None,
) -> RecoveryService:
    """Wire RecoveryService and its collaborators from settings."""
    recovery = settings.recovery

    notifier = None
    if recovery.email_configured:
        notifier = Notifier(
            SendGridEmailProvider(
                api_key=recovery.email_api_key,
                from_email=recovery.from_email,
                http_client=http_client or HttpClient(),
            )
        )
    elif settings.is_production:
        log.warning(
            "email_channel_not_configured",
            detail="reset links will be returned in API responses",
        )

    return RecoveryService(
        settings=recovery,
        rate_limiter=RateLimiter(throttle_store),
        authorization=AuthorizationGate(RoleRepository(db)),
        issuer=CredentialIssuer(identity),
        notifier=notifier,
    )


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging, is_production=settings.is_production)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(settings.db.mongodb_uri)
        db = mongo_client[settings.db.db_name]
        app.state.mongo_client = mongo_client
        app.state.db = db

        redis_client = None
        if settings.throttle.throttle_backend == "redis":
            redis_client = aioredis.from_url(
                settings.redis.redis_uri,
                encoding="utf-8",
                decode_responses=True,
            )
        app.state.redis = redis_client

        identity = FirebaseIdentityProvider(init_firebase_app(settings.firebase))
        app.state.identity = identity

        http_client = HttpClient()
        app.state.http_client = http_client

        app.state.recovery_service = build_recovery_service(
            settings,
            throttle_store=build_throttle_store(settings, db, redis_client),
            db=db,
            identity=identity,
            http_client=http_client,
        )
        log.info(
            "app_started",
            throttle_backend=settings.throttle.throttle_backend,
            email_configured=settings.recovery.email_configured,
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await http_client.aclose()
        await mongo_client.close()
        if redis_client is not None:
            await redis_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(recovery_router)

    return app
