"""
IP geolocation lookup against ipapi.co.

Location enrichment is best-effort: any failure degrades to a fixed
"Unknown" record and is never raised to the caller. Loopback and
private-network addresses are answered locally without a network call.
"""

import logging

import httpx
from pydantic import ValidationError

from app.config import settings
from app.metrics import record_geolocation_lookup
from app.schemas import IPLocation, UNKNOWN

logger = logging.getLogger(__name__)


LOCAL_LOCATION = IPLocation(
    country="Local",
    city="Localhost",
    region="Local",
    timezone="Local",
)

UNKNOWN_LOCATION = IPLocation(
    country=UNKNOWN,
    city=UNKNOWN,
    region=UNKNOWN,
    timezone=UNKNOWN,
)

LOOPBACK_ADDRESSES = ("127.0.0.1", "::1")
PRIVATE_PREFIXES = ("192.168.", "10.")


class GeolocationError(Exception):
    """Raised internally when the lookup service gives no usable answer."""


def is_local_address(ip: str) -> bool:
    """Return True for loopback and private-network addresses."""
    return ip in LOOPBACK_ADDRESSES or ip.startswith(PRIVATE_PREFIXES)


async def fetch_ip_location(ip: str) -> IPLocation:
    """
    Query the geolocation service for a public IP.

    Raises:
        GeolocationError: non-success status or unusable payload
        httpx.HTTPError: network failure or timeout
    """
    url = f"{settings.GEOLOCATION_BASE_URL.rstrip('/')}/{ip}/json/"
    logger.debug(f"Requesting geolocation: {url}")

    async with httpx.AsyncClient(timeout=settings.GEOLOCATION_TIMEOUT_SECONDS) as client:
        response = await client.get(url)

    if not response.is_success:
        raise GeolocationError(f"IP API failed with status {response.status_code}")

    try:
        data = response.json()
    except ValueError as e:
        raise GeolocationError(f"IP API returned invalid JSON: {e}")

    if not isinstance(data, dict):
        raise GeolocationError("IP API returned a non-object payload")

    # ipapi.co answers reserved ranges and rate limits with {"error": true, "reason": ...}
    if data.get("error"):
        raise GeolocationError(f"IP API error: {data.get('reason', 'unspecified')}")

    try:
        return IPLocation(
            country=data.get("country_name") or UNKNOWN,
            city=data.get("city") or UNKNOWN,
            region=data.get("region") or UNKNOWN,
            timezone=data.get("timezone") or UNKNOWN,
        )
    except ValidationError as e:
        raise GeolocationError(f"IP API returned malformed fields: {e}")


async def lookup_ip_location(ip: str) -> IPLocation:
    """
    Geolocate an IP address, never failing.

    Args:
        ip: Resolved client IP

    Returns:
        IPLocation from the service, LOCAL_LOCATION for local addresses,
        or UNKNOWN_LOCATION when the lookup fails
    """
    if is_local_address(ip):
        logger.debug(f"Skipping geolocation for local address: {ip}")
        record_geolocation_lookup("local")
        return LOCAL_LOCATION

    try:
        location = await fetch_ip_location(ip)
    except (GeolocationError, httpx.HTTPError) as e:
        logger.warning(f"IP geolocation failed for {ip}: {e!r}")
        record_geolocation_lookup("error")
        return UNKNOWN_LOCATION

    logger.info(f"IP geolocation for {ip}: {location.city}, {location.country}")
    record_geolocation_lookup("success")
    return location
