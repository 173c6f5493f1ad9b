"""
Domain layer - Pure business logic with zero framework imports.

This package contains the API key registration transaction. It defines
its own port interfaces for the store, mail transport and geolocation
provider, so adapters can be swapped without touching the domain.
"""

from .credentials import generate_api_key
from .exceptions import (
    DeliveryError,
    DuplicateIdentityError,
    DuplicateKeyError,
    EnrichmentError,
    PersistenceError,
    RegistrationError,
    ValidationError,
)
from .ports import (
    EmailSender,
    EnrichmentResult,
    GeoLocator,
    RegistrationRequest,
    RegistrationResponse,
    ResponseStatus,
    UserRecord,
    UserRepository,
)
from .registration import RegistrationService

__all__ = [
    "DeliveryError",
    "DuplicateIdentityError",
    "DuplicateKeyError",
    "EmailSender",
    "EnrichmentError",
    "EnrichmentResult",
    "GeoLocator",
    "PersistenceError",
    "RegistrationError",
    "RegistrationRequest",
    "RegistrationResponse",
    "RegistrationService",
    "ResponseStatus",
    "UserRecord",
    "UserRepository",
    "ValidationError",
    "generate_api_key",
]
