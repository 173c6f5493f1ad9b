"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting domain services
and infrastructure adapters into the websocket endpoint. Process-wide
resources (pool, mail sender, geolocator) are created once during app
lifespan startup and stored in app.state.
"""

from fastapi import Depends, WebSocket
from psycopg_pool import AsyncConnectionPool

from fmdb_keys.adapters.repository.postgres import PostgresUserRepository
from fmdb_keys.domain.ports import EmailSender, GeoLocator, UserRepository
from fmdb_keys.domain.registration import RegistrationService


def get_pool(websocket: WebSocket) -> AsyncConnectionPool:
    """Get connection pool from app state."""
    return websocket.app.state.pool


def get_repository(websocket: WebSocket) -> UserRepository:
    """Create repository with connection pool from app state."""
    return PostgresUserRepository(get_pool(websocket))


def get_email_sender(websocket: WebSocket) -> EmailSender:
    """Get the configured email sender (singleton)."""
    return websocket.app.state.email_sender


def get_geo_locator(websocket: WebSocket) -> GeoLocator:
    """Get the shared geolocator (singleton)."""
    return websocket.app.state.geo_locator


def get_registration_service(
    repository: UserRepository = Depends(get_repository),
    email_sender: EmailSender = Depends(get_email_sender),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository and email sender for the domain service.
    """
    return RegistrationService(repository=repository, email_sender=email_sender)
