"""
Websocket message models.

Pydantic models for parsing client frames. Every frame is a JSON object
``{"event": <name>, "data": <payload>}`` in both directions.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fmdb_keys.domain.ports import RegistrationRequest

REGISTER_EVENT = "register"
LOCATION_INFO_EVENT = "locationInfo"
REGISTRATION_RESPONSE_EVENT = "registrationResponse"


class EventEnvelope(BaseModel):
    """Inbound websocket frame."""

    event: str
    data: Any = None


class RegisterPayload(BaseModel):
    """
    Payload of a ``register`` event.

    Every field is optional here; presence is checked by the domain so a
    missing field gets the same reply as an empty one.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    first_name: str | None = Field(None, alias="firstName")
    last_name: str | None = Field(None, alias="lastName")
    email: str | None = None
    use_case: str | None = None

    def to_request(self) -> RegistrationRequest:
        return RegistrationRequest(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            use_case=self.use_case,
        )


def outbound(event: str, data: dict[str, Any]) -> dict[str, Any]:
    """Build an outbound websocket frame."""
    return {"event": event, "data": data}
