"""
Unit tests for SmtpEmailSender adapter.

aiosmtplib.send is replaced with an AsyncMock; no network is used.
"""

from unittest.mock import AsyncMock

import aiosmtplib
import pytest

from fmdb_keys.adapters.smtp import relay
from fmdb_keys.adapters.smtp.relay import SmtpEmailSender
from fmdb_keys.domain.exceptions import DeliveryError


@pytest.fixture
def sender() -> SmtpEmailSender:
    return SmtpEmailSender(
        hostname="smtp.example.com",
        port=587,
        username="keys@fmdb.example",
        password="app-password",
    )


class TestBuildMessage:
    def test_headers(self, sender: SmtpEmailSender) -> None:
        message = sender.build_message("a@x.com", "Your FMDb API Key", "Hello Ana")

        assert message["From"] == "The FMDb API <keys@fmdb.example>"
        assert message["To"] == "a@x.com"
        assert message["Subject"] == "Your FMDb API Key"

    def test_plain_text_body(self, sender: SmtpEmailSender) -> None:
        message = sender.build_message("a@x.com", "s", "Hello Ana,\n\nYour API key is: abc")

        assert message.get_content_type() == "text/plain"
        assert message.get_content().rstrip("\n") == "Hello Ana,\n\nYour API key is: abc"


class TestSend:
    @pytest.mark.asyncio
    async def test_send_uses_configured_relay(
        self, sender: SmtpEmailSender, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        send_mock = AsyncMock()
        monkeypatch.setattr(relay.aiosmtplib, "send", send_mock)

        await sender.send("a@x.com", "Your FMDb API Key", "Hello")

        send_mock.assert_awaited_once()
        message = send_mock.call_args.args[0]
        assert message["To"] == "a@x.com"
        kwargs = send_mock.call_args.kwargs
        assert kwargs["hostname"] == "smtp.example.com"
        assert kwargs["port"] == 587
        assert kwargs["username"] == "keys@fmdb.example"
        assert kwargs["password"] == "app-password"
        assert kwargs["start_tls"] is True

    @pytest.mark.asyncio
    async def test_smtp_error_raises_delivery_error(
        self, sender: SmtpEmailSender, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            relay.aiosmtplib, "send", AsyncMock(side_effect=aiosmtplib.SMTPException("auth failed"))
        )

        with pytest.raises(DeliveryError):
            await sender.send("a@x.com", "s", "b")

    @pytest.mark.asyncio
    async def test_connection_error_raises_delivery_error(
        self, sender: SmtpEmailSender, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            relay.aiosmtplib, "send", AsyncMock(side_effect=ConnectionRefusedError())
        )

        with pytest.raises(DeliveryError):
            await sender.send("a@x.com", "s", "b")

    @pytest.mark.asyncio
    async def test_header_unsafe_address_raises_delivery_error(
        self, sender: SmtpEmailSender, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        send_mock = AsyncMock()
        monkeypatch.setattr(relay.aiosmtplib, "send", send_mock)

        with pytest.raises(DeliveryError):
            await sender.send("a@x.com\nBcc: evil@y.com", "s", "b")

        send_mock.assert_not_called()
