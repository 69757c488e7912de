"""
Location reconciliation.

Merges the IP lookup, optional GPS fix and browser hints into one
reported place plus the signal it was trusted from.
"""

from typing import Optional

from app.schemas import BestLocation, IPLocation, LocationInfo, UNKNOWN


GPS_CITY_PLACEHOLDER = "GPS Location"

SOURCE_GPS = "gps"
SOURCE_BROWSER = "browser"
SOURCE_IP = "ip"


def build_location_info(
    ip_location: IPLocation,
    gps_latitude: Optional[float] = None,
    gps_longitude: Optional[float] = None,
    gps_accuracy: Optional[float] = None,
    browser_timezone: Optional[str] = None,
    browser_language: Optional[str] = None,
) -> LocationInfo:
    """Assemble the raw location bundle; zero or empty hints count as absent."""
    return LocationInfo(
        ip_country=ip_location.country,
        ip_city=ip_location.city,
        ip_region=ip_location.region,
        ip_timezone=ip_location.timezone,
        gps_latitude=gps_latitude or None,
        gps_longitude=gps_longitude or None,
        gps_accuracy=gps_accuracy or None,
        browser_timezone=browser_timezone or UNKNOWN,
        browser_language=browser_language or UNKNOWN,
    )


def determine_best_location(location: LocationInfo) -> BestLocation:
    """
    Pick the reported place for a submission.

    Priority: GPS fix, then browser timezone, then IP lookup. Country and
    city always come from the IP lookup; a GPS fix only replaces the city
    with a placeholder since coordinates are not reverse-geocoded.
    """
    if location.gps_latitude and location.gps_longitude:
        return BestLocation(
            country=location.ip_country,
            city=GPS_CITY_PLACEHOLDER,
            source=SOURCE_GPS,
        )

    if location.browser_timezone and location.browser_timezone != UNKNOWN:
        return BestLocation(
            country=location.ip_country,
            city=location.ip_city,
            source=SOURCE_BROWSER,
        )

    return BestLocation(
        country=location.ip_country,
        city=location.ip_city,
        source=SOURCE_IP,
    )


def reconcile_location(location: LocationInfo) -> BestLocation:
    """Fill the final_* fields of the bundle in place and return the estimate."""
    best = determine_best_location(location)
    location.final_country = best.country
    location.final_city = best.city
    location.location_source = best.source
    return best
