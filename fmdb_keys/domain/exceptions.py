"""
Domain exceptions - Semantic error types for registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each registration error carries the fixed message shown to the client;
the exception's own arguments are for server-side logs only.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    public_message = "Server error. Please try again later."


class ValidationError(RegistrationError):
    """A required registration field is missing or empty."""

    public_message = "All fields are required."


class DuplicateIdentityError(RegistrationError):
    """Email already has a user record."""

    public_message = "Email already registered. Please check your email for your API key."


class PersistenceError(RegistrationError):
    """Store unreachable or rejected the write for an unexpected reason."""

    pass


class DuplicateKeyError(PersistenceError):
    """Insert rejected by the unique constraint on email or api_key."""

    pass


class DeliveryError(RegistrationError):
    """Mail transport failed to accept the notification."""

    pass


class EnrichmentError(Exception):
    """IP geolocation lookup failed at the transport level."""

    pass
