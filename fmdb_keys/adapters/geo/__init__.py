"""Geolocation adapters."""

from .ip_api import IpApiGeoLocator

__all__ = ["IpApiGeoLocator"]
