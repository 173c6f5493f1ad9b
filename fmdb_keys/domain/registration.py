"""
Registration domain service - API key issuance transaction.

This module contains the core business logic for user registration.
One registration request runs the following steps strictly in order;
any failing step terminates the transaction:

    1. validate     all four fields present and non-empty
    2. pre-check    find_by_email; an existing record is a duplicate
    3. generate     fresh API key from the credential generator
    4. persist      insert; the store's unique constraint is authoritative
    5. dispatch     email the key to the registrant
    6. respond      success message

The pre-check is advisory only. Two requests for the same email can both
pass it; the loser is caught at step 4 when the store reports a duplicate
key. A dispatch failure after step 4 leaves the record persisted.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .credentials import generate_api_key
from .exceptions import (
    DuplicateIdentityError,
    DuplicateKeyError,
    RegistrationError,
    ValidationError,
)
from .ports import (
    EmailSender,
    RegistrationRequest,
    RegistrationResponse,
    ResponseStatus,
    UserRecord,
    UserRepository,
)

logger = logging.getLogger(__name__)

EMAIL_SUBJECT = "Your FMDb API Key"
EMAIL_BODY = "Hello {first_name},\n\nYour API key is: {api_key}\n\nBest regards,\nThe FMDb Team"
SUCCESS_MESSAGE = "API key generated and sent to your email!"


@dataclass
class RegistrationService:
    """
    Domain service for API key registration.

    Orchestrates the registration flow: validation, duplicate check,
    key generation, persistence and email dispatch.
    """

    repository: UserRepository
    email_sender: EmailSender
    key_factory: Callable[[], str] = field(default=generate_api_key)

    async def handle(self, request: RegistrationRequest) -> RegistrationResponse:
        """
        Run one registration transaction and map its outcome to a response.

        Never raises for registration failures; internal detail is logged
        and the client only sees the error's fixed public message.
        """
        try:
            email = await self.register(request)
        except (ValidationError, DuplicateIdentityError) as exc:
            logger.info("Registration rejected: %s", exc)
            return RegistrationResponse(ResponseStatus.ERROR, exc.public_message)
        except RegistrationError as exc:
            logger.exception("Registration error")
            return RegistrationResponse(ResponseStatus.ERROR, exc.public_message)

        logger.info("API key issued for %s", email)
        return RegistrationResponse(ResponseStatus.SUCCESS, SUCCESS_MESSAGE)

    async def register(self, request: RegistrationRequest) -> str:
        """
        Register a new user and email them an API key.

        Args:
            request: Raw registration fields from the client

        Returns:
            Normalized email address of the new user

        Raises:
            ValidationError: A field is missing or empty
            DuplicateIdentityError: Email already registered
            PersistenceError: Store failure other than a duplicate
            DeliveryError: Key persisted but the email could not be sent
        """
        record = self._validate(request)
        # Stored and compared lowercased; mailed as the user typed it
        recipient = (request.email or "").strip()

        if await self.repository.find_by_email(record.email) is not None:
            raise DuplicateIdentityError(record.email)

        record = UserRecord(
            first_name=record.first_name,
            last_name=record.last_name,
            email=record.email,
            api_key=self.key_factory(),
            use_case=record.use_case,
        )

        try:
            await self.repository.insert(record)
        except DuplicateKeyError as exc:
            raise DuplicateIdentityError(record.email) from exc

        await self.email_sender.send(
            recipient,
            EMAIL_SUBJECT,
            EMAIL_BODY.format(first_name=record.first_name, api_key=record.api_key),
        )
        return record.email

    def _validate(self, request: RegistrationRequest) -> UserRecord:
        """
        Check that every field is present and build an unkeyed record.

        Fields are stripped of surrounding whitespace, so a blank value
        counts as missing.
        """
        fields = {
            "first_name": request.first_name,
            "last_name": request.last_name,
            "email": request.email,
            "use_case": request.use_case,
        }
        cleaned = {name: (value or "").strip() for name, value in fields.items()}
        missing = sorted(name for name, value in cleaned.items() if not value)
        if missing:
            raise ValidationError(f"missing fields: {', '.join(missing)}")

        return UserRecord(
            first_name=cleaned["first_name"],
            last_name=cleaned["last_name"],
            email=self._normalize_email(cleaned["email"]),
            api_key="",
            use_case=cleaned["use_case"],
        )

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()
