"""
Unit tests for IpApiGeoLocator.

Provider responses are served by httpx.MockTransport.
"""

import httpx
import pytest

from fmdb_keys.adapters.geo.ip_api import IpApiGeoLocator
from fmdb_keys.domain.exceptions import EnrichmentError


def locator_for(handler) -> IpApiGeoLocator:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return IpApiGeoLocator(client)


@pytest.mark.asyncio
async def test_success_response_populates_location() -> None:
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(
            200,
            json={
                "status": "success",
                "city": "Lisbon",
                "regionName": "Lisbon",
                "country": "Portugal",
                "isp": "MEO",
            },
        )

    result = await locator_for(handler).lookup("81.0.0.1")

    assert requested == ["http://ip-api.com/json/81.0.0.1"]
    assert result.available is True
    assert result.as_payload() == {
        "ip": "81.0.0.1",
        "city": "Lisbon",
        "region": "Lisbon",
        "country": "Portugal",
        "isp": "MEO",
    }


@pytest.mark.asyncio
async def test_fail_status_yields_ip_only() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "fail", "message": "private range"})

    result = await locator_for(handler).lookup("10.0.0.1")

    assert result.available is False
    assert result.detail == "private range"
    assert result.as_payload() == {
        "ip": "10.0.0.1",
        "city": None,
        "region": None,
        "country": None,
        "isp": None,
    }


@pytest.mark.asyncio
async def test_http_error_status_yields_ip_only() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, text="rate limited")

    result = await locator_for(handler).lookup("81.0.0.1")

    assert result.available is False
    assert result.city is None
    assert result.detail == "HTTP 429"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["not json", "[1, 2]"])
async def test_malformed_body_yields_ip_only(body: str) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=body)

    result = await locator_for(handler).lookup("81.0.0.1")

    assert result.available is False
    assert result.ip == "81.0.0.1"


@pytest.mark.asyncio
async def test_transport_error_raises_enrichment_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(EnrichmentError):
        await locator_for(handler).lookup("81.0.0.1")


@pytest.mark.asyncio
async def test_custom_url_template() -> None:
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, json={"status": "fail"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    await IpApiGeoLocator(client, "https://geo.internal/lookup/{ip}").lookup("1.2.3.4")

    assert requested == ["https://geo.internal/lookup/1.2.3.4"]


@pytest.mark.asyncio
async def test_address_too_long_for_url_yields_ip_only() -> None:
    """An oversized forwarded address cannot form a URL; no request is made."""
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, json={"status": "success"})

    address = "1" * 70_000
    result = await locator_for(handler).lookup(address)

    assert requested == []
    assert result.available is False
    assert result.ip == address
    assert result.detail == "invalid address"
