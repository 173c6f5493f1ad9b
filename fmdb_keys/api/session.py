"""
Connection session - one live websocket client.

Session lifecycle (forward-only):

    CONNECTING -> ENRICHING -> ACTIVE -> CLOSED

- CONNECTING: socket accepted, client address resolved
- ENRICHING:  single geolocation lookup; ``locationInfo`` is emitted only
              when the provider has data, lookup errors are logged
- ACTIVE:     ``register`` frames each start an independent registration
              task; the session keeps no registration state
- CLOSED:     client disconnected; in-flight registrations still finish
              but their replies are dropped
"""

import logging
import uuid
from enum import Enum
from typing import Any

import anyio
from anyio.abc import TaskGroup
from fastapi import WebSocket
from pydantic import ValidationError as PayloadError
from starlette.websockets import WebSocketDisconnect, WebSocketState

from fmdb_keys.domain.exceptions import RegistrationError, ValidationError
from fmdb_keys.domain.ports import (
    GeoLocator,
    RegistrationResponse,
    ResponseStatus,
)
from fmdb_keys.domain.registration import RegistrationService

from .models import (
    LOCATION_INFO_EVENT,
    REGISTER_EVENT,
    REGISTRATION_RESPONSE_EVENT,
    EventEnvelope,
    RegisterPayload,
    outbound,
)

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    CONNECTING = "connecting"
    ENRICHING = "enriching"
    ACTIVE = "active"
    CLOSED = "closed"


def resolve_client_ip(forwarded_for: str | None, peer_host: str | None) -> str:
    """
    Pick the client address for a connection.

    The first entry of an X-Forwarded-For header wins over the transport
    peer address.
    """
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return peer_host or ""


class ConnectionSession:
    """Server-side representative of one client's websocket."""

    def __init__(
        self,
        websocket: WebSocket,
        registration_service: RegistrationService,
        geo_locator: GeoLocator,
    ) -> None:
        self.websocket = websocket
        self.registration_service = registration_service
        self.geo_locator = geo_locator
        self.session_id = uuid.uuid4().hex[:12]
        self.state = SessionState.CONNECTING
        peer = websocket.client.host if websocket.client else None
        self.client_ip = resolve_client_ip(websocket.headers.get("x-forwarded-for"), peer)

    async def run(self) -> None:
        """Drive the session from accept until disconnect."""
        await self.enrich()
        try:
            async with anyio.create_task_group() as task_group:
                while True:
                    message = await self.websocket.receive()
                    if message["type"] == "websocket.disconnect":
                        break
                    self.dispatch(task_group, message)
        finally:
            self.state = SessionState.CLOSED
            logger.info("Client disconnected: %s, IP: %s", self.session_id, self.client_ip)

    async def enrich(self) -> None:
        """Look up the client's location and emit it when available."""
        self.state = SessionState.ENRICHING
        try:
            result = await self.geo_locator.lookup(self.client_ip)
        except Exception:
            logger.exception("Error fetching location for %s", self.client_ip)
        else:
            if result.available:
                logger.info(
                    "Client connected: %s, IP: %s, Location: %s, %s, ISP: %s",
                    self.session_id,
                    self.client_ip,
                    result.city,
                    result.country,
                    result.isp,
                )
                await self.emit(LOCATION_INFO_EVENT, result.as_payload())
            else:
                logger.info(
                    "Client connected: %s, IP: %s, Location: unavailable (API response: %s)",
                    self.session_id,
                    self.client_ip,
                    result.detail,
                )
        self.state = SessionState.ACTIVE

    def dispatch(self, task_group: TaskGroup, message: dict[str, Any]) -> None:
        """Route one inbound frame; registrations run as their own task."""
        text = message.get("text")
        if text is None and message.get("bytes") is not None:
            text = message["bytes"].decode("utf-8", errors="replace")
        if text is None:
            return

        try:
            envelope = EventEnvelope.model_validate_json(text)
        except PayloadError:
            logger.warning("Ignoring malformed frame from %s", self.session_id)
            return

        if envelope.event == REGISTER_EVENT:
            task_group.start_soon(self.handle_register, envelope.data)
        else:
            logger.warning("Ignoring unknown event %r from %s", envelope.event, self.session_id)

    async def handle_register(self, data: Any) -> None:
        """
        Run one registration transaction and reply with its outcome.

        Any unexpected failure is contained to this request; sibling
        registrations on the same socket keep running.
        """
        try:
            payload = RegisterPayload.model_validate(data)
        except PayloadError:
            response = RegistrationResponse(ResponseStatus.ERROR, ValidationError.public_message)
        else:
            try:
                response = await self.registration_service.handle(payload.to_request())
            except Exception:
                logger.exception("Registration failed for session %s", self.session_id)
                response = RegistrationResponse(
                    ResponseStatus.ERROR, RegistrationError.public_message
                )
        await self.emit(REGISTRATION_RESPONSE_EVENT, response.as_payload())

    async def emit(self, event: str, data: dict[str, Any]) -> None:
        """Send an event to the client; a gone client is not an error."""
        if self.websocket.client_state == WebSocketState.DISCONNECTED:
            logger.debug("Dropping %s for closed session %s", event, self.session_id)
            return
        try:
            await self.websocket.send_json(outbound(event, data))
        except (WebSocketDisconnect, RuntimeError, OSError):
            logger.debug("Dropping %s for closed session %s", event, self.session_id)
