"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the data types exchanged with infrastructure and the
interfaces (ports) that the domain requires from it. Adapters implement
these protocols.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


@dataclass(frozen=True)
class UserRecord:
    """Persisted user; one per email, api_key never reused."""

    first_name: str
    last_name: str
    email: str
    api_key: str
    use_case: str


@dataclass(frozen=True)
class RegistrationRequest:
    """Registration input as received from the client (not yet validated)."""

    first_name: str | None
    last_name: str | None
    email: str | None
    use_case: str | None


class ResponseStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class RegistrationResponse:
    """Outcome of one registration transaction, safe to show to the client."""

    status: ResponseStatus
    message: str

    def as_payload(self) -> dict[str, str]:
        return {"status": self.status.value, "message": self.message}


@dataclass(frozen=True)
class EnrichmentResult:
    """
    Approximate location of a client address.

    Only ``ip`` is populated when the provider reports no data; ``available``
    is True only for a successful provider response.
    """

    ip: str
    city: str | None = None
    region: str | None = None
    country: str | None = None
    isp: str | None = None
    available: bool = False
    detail: str | None = None

    def as_payload(self) -> dict[str, str | None]:
        return {
            "ip": self.ip,
            "city": self.city,
            "region": self.region,
            "country": self.country,
            "isp": self.isp,
        }


class UserRepository(Protocol):
    """Port interface for user persistence."""

    async def find_by_email(self, email: str) -> UserRecord | None:
        """
        Look up the user registered under an email address.

        Args:
            email: Normalized email address

        Returns:
            The stored record, or None if the email is not registered
        """
        ...

    async def insert(self, record: UserRecord) -> None:
        """
        Persist a new user record.

        Uniqueness of email and api_key is enforced by the store itself,
        so two racing inserts for the same email cannot both succeed.

        Raises:
            DuplicateKeyError: email or api_key already exists
            PersistenceError: any other storage failure
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    async def send(self, to: str, subject: str, body: str) -> None:
        """
        Send a plain-text email.

        Raises:
            DeliveryError: the transport did not accept the message
        """
        ...


class GeoLocator(Protocol):
    """Port interface for IP geolocation."""

    async def lookup(self, ip: str) -> EnrichmentResult:
        """
        Resolve a client address to approximate location metadata.

        A provider-reported failure yields an ip-only result.

        Raises:
            EnrichmentError: transport-level failure reaching the provider
        """
        ...
