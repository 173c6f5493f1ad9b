"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, the websocket endpoint, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from psycopg_pool import AsyncConnectionPool

from fmdb_keys.adapters.geo.ip_api import IpApiGeoLocator
from fmdb_keys.adapters.repository.postgres import check_connection, run_migrations
from fmdb_keys.adapters.smtp.console import ConsoleEmailSender
from fmdb_keys.adapters.smtp.relay import SmtpEmailSender
from fmdb_keys.api.dependencies import get_geo_locator, get_registration_service
from fmdb_keys.api.session import ConnectionSession
from fmdb_keys.config.settings import Settings, get_settings
from fmdb_keys.domain.ports import EmailSender, GeoLocator
from fmdb_keys.domain.registration import RegistrationService

logger = logging.getLogger(__name__)

STATUS_TEXT = "The FMDb API Server - Status: Running"


def build_email_sender(settings: Settings) -> EmailSender:
    """Select the mail transport configured by EMAIL_BACKEND."""
    if settings.email_backend == "console":
        return ConsoleEmailSender()
    return SmtpEmailSender(
        hostname=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.email_user,
        password=settings.email_pass,
        start_tls=settings.smtp_start_tls,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and runs migrations on startup
    - Creates the shared HTTP client for geolocation and the mail sender
    - Closes the HTTP client and connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    # Create connection pool with explicit sizing; callers past max_size queue
    pool = AsyncConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        open=False,
    )
    await pool.open(wait=False)

    if await check_connection(pool):
        logger.info("Running database migrations...")
        await run_migrations(pool)

    http_client = httpx.AsyncClient(timeout=settings.geo_lookup_timeout)

    # Store shared services in app state for dependency injection
    app.state.pool = pool
    app.state.email_sender = build_email_sender(settings)
    app.state.geo_locator = IpApiGeoLocator(http_client, settings.geo_lookup_url)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await http_client.aclose()
    await pool.close()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="fmdb-keys",
    description="FMDb API key registration service - realtime registration over websocket",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_settings().cors_origin],
    allow_methods=["GET", "POST"],
)


@app.get("/", response_class=PlainTextResponse)
async def status_page() -> str:
    """Liveness endpoint."""
    return STATUS_TEXT


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = request.app.state.pool
    async with pool.connection() as conn:
        await conn.execute("SELECT 1")

    return {"status": "healthy"}


@app.websocket("/ws")
async def registration_socket(
    websocket: WebSocket,
    service: RegistrationService = Depends(get_registration_service),
    geo_locator: GeoLocator = Depends(get_geo_locator),
) -> None:
    """Accept a client and run its session until it disconnects."""
    await websocket.accept()
    session = ConnectionSession(websocket, service, geo_locator)
    await session.run()
