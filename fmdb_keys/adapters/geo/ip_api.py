"""
IP geolocation adapter - Implements GeoLocator protocol.

Resolves a client address through the ip-api.com JSON endpoint with a
single httpx request. Provider-side "no data" answers (status other than
"success", non-2xx HTTP status, a body that is not a JSON object, or a
client address that does not form a valid URL)
produce an ip-only EnrichmentResult; only transport errors raise.
"""

import logging
from typing import Any

import httpx

from fmdb_keys.domain.exceptions import EnrichmentError
from fmdb_keys.domain.ports import EnrichmentResult

logger = logging.getLogger(__name__)

DEFAULT_URL_TEMPLATE = "http://ip-api.com/json/{ip}"


class IpApiGeoLocator:
    """
    Implements GeoLocator protocol via an ip-api.com compatible service.

    The httpx client is owned by the caller so one connection pool is
    shared by every session.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url_template: str = DEFAULT_URL_TEMPLATE,
    ) -> None:
        self._client = client
        self._url_template = url_template

    async def lookup(self, ip: str) -> EnrichmentResult:
        """
        Look up approximate location metadata for an IP address.

        Args:
            ip: Client address as seen by the server

        Returns:
            EnrichmentResult; available is False when the provider has no data

        Raises:
            EnrichmentError: The provider could not be reached
        """
        url = self._url_template.format(ip=ip)
        try:
            response = await self._client.get(url)
        except httpx.InvalidURL:
            return EnrichmentResult(ip=ip, detail="invalid address")
        except httpx.HTTPError as e:
            raise EnrichmentError(f"Lookup for {ip} failed: {e}") from e

        if not response.is_success:
            return EnrichmentResult(ip=ip, detail=f"HTTP {response.status_code}")

        try:
            data: Any = response.json()
        except ValueError:
            return EnrichmentResult(ip=ip, detail="malformed response")
        if not isinstance(data, dict):
            return EnrichmentResult(ip=ip, detail="malformed response")

        if data.get("status") != "success":
            return EnrichmentResult(ip=ip, detail=data.get("message"))

        return EnrichmentResult(
            ip=ip,
            city=data.get("city"),
            region=data.get("regionName"),
            country=data.get("country"),
            isp=data.get("isp"),
            available=True,
        )
