"""
Pydantic schemas for request/response validation.

This module contains:
- Request models for incoming submissions (validated before any
  persisted record is built)
- Enrichment records stored alongside each message
- Response models for API responses
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


MAX_MESSAGE_LENGTH = 1000

EMPTY_MESSAGE_ERROR = "Message cannot be empty"
MESSAGE_TOO_LONG_ERROR = f"Message too long (max {MAX_MESSAGE_LENGTH} characters)"

UNKNOWN = "Unknown"


# =============================================================================
# Pydantic Request Models
# =============================================================================

class ClientDeviceData(BaseModel):
    """
    Capability bundle reported by the browser.

    Every field is optional; absent values fall back to the defaults
    applied by the device classifier.
    """
    model_config = {"extra": "ignore"}

    platform: Optional[str] = None
    isMobile: Optional[bool] = None
    isTablet: Optional[bool] = None

    screenWidth: Optional[int] = None
    screenHeight: Optional[int] = None
    colorDepth: Optional[int] = None
    pixelRatio: Optional[float] = None

    connectionType: Optional[str] = None
    isOnline: Optional[bool] = None

    touchSupport: Optional[bool] = None
    cookiesEnabled: Optional[bool] = None
    javaEnabled: Optional[bool] = None

    batteryLevel: Optional[float] = None
    batteryCharging: Optional[bool] = None

    hasGyroscope: Optional[bool] = None
    hasAccelerometer: Optional[bool] = None
    hasCompass: Optional[bool] = None


class SendMessageRequest(BaseModel):
    """
    Pydantic model for POST /send-message bodies.

    Only types are checked here; the message content rules are applied
    by validate_message_content() so they can answer with their own
    error text.
    """
    message: Optional[str] = None
    gps_latitude: Optional[float] = None
    gps_longitude: Optional[float] = None
    gps_accuracy: Optional[float] = None
    browser_timezone: Optional[str] = None
    browser_language: Optional[str] = None
    device_info: Optional[ClientDeviceData] = Field(None, alias="deviceInfo")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
        "json_schema_extra": {
            "examples": [
                {
                    "message": "Hello from somewhere",
                    "gps_latitude": 37.0,
                    "gps_longitude": -122.0,
                    "browser_timezone": "America/Los_Angeles",
                    "browser_language": "en-US",
                    "deviceInfo": {"platform": "iPhone", "isMobile": True},
                }
            ]
        },
    }


def validate_message_content(message: Optional[str]) -> str:
    """
    Apply the content rules and return the text to persist.

    The length limit is checked against the untrimmed input while the
    trimmed text is what gets stored.

    Raises:
        ValueError: with the client-facing error text
    """
    if not message or len(message.strip()) == 0:
        raise ValueError(EMPTY_MESSAGE_ERROR)

    if len(message) > MAX_MESSAGE_LENGTH:
        raise ValueError(MESSAGE_TOO_LONG_ERROR)

    return message.strip()


# =============================================================================
# Enrichment Records
# =============================================================================

class IPLocation(BaseModel):
    """Result of an IP geolocation lookup."""
    model_config = {"frozen": True}

    country: str
    city: str
    region: str
    timezone: str


class BestLocation(BaseModel):
    """Reconciled location estimate with the signal it was trusted from."""
    country: str
    city: str
    source: str = Field(..., description="gps, browser or ip")


class LocationInfo(BaseModel):
    """Location sub-record persisted with each message."""
    # IP-based location
    ip_country: str = UNKNOWN
    ip_city: str = UNKNOWN
    ip_region: str = UNKNOWN
    ip_timezone: str = UNKNOWN

    # GPS-based location (if provided)
    gps_latitude: Optional[float] = None
    gps_longitude: Optional[float] = None
    gps_accuracy: Optional[float] = None

    # Browser-detected info
    browser_timezone: str = UNKNOWN
    browser_language: str = UNKNOWN

    # Combined best guess
    final_country: Optional[str] = None
    final_city: Optional[str] = None
    location_source: Optional[str] = None


class DeviceInfo(BaseModel):
    """Device sub-record persisted with each message."""
    userAgent: str
    platform: str = UNKNOWN
    isMobile: bool = False
    isTablet: bool = False
    isDesktop: bool = True

    deviceType: str = "desktop"
    deviceBrand: str = UNKNOWN
    deviceModel: str = UNKNOWN
    operatingSystem: str = UNKNOWN
    osVersion: str = UNKNOWN
    browser: str = UNKNOWN
    browserVersion: str = UNKNOWN

    screenWidth: Optional[int] = None
    screenHeight: Optional[int] = None
    colorDepth: Optional[int] = None
    pixelRatio: Optional[float] = None

    connectionType: str = UNKNOWN
    isOnline: bool = True

    touchSupport: bool = False
    cookiesEnabled: bool = True
    javaEnabled: bool = False

    batteryLevel: Optional[float] = None
    batteryCharging: Optional[bool] = None

    hasGyroscope: bool = False
    hasAccelerometer: bool = False
    hasCompass: bool = False


# =============================================================================
# Pydantic Response Models
# =============================================================================

class DeviceSummary(BaseModel):
    """Short device description echoed back to the sender."""
    type: str
    brand: str
    model: str
    os: str
    browser: str


class SendMessageResponse(BaseModel):
    """Response model for a successful submission."""
    success: bool = True
    message: str = Field(..., description="Confirmation text")
    location: BestLocation
    device: DeviceSummary


class ErrorResponse(BaseModel):
    """Response model for error responses."""
    success: bool = False
    error: str = Field(..., description="Error description")


class MessageRecord(BaseModel):
    """A persisted message as returned by the debug listing."""
    id: int
    content: str
    ipAddress: str
    location: Optional[LocationInfo] = None
    deviceInfo: Optional[DeviceInfo] = None
    timestamp: datetime


class StatsResponse(BaseModel):
    """Response model for GET /stats endpoint."""
    total_messages: int = Field(
        ...,
        ge=0,
        serialization_alias="totalMessages",
        description="Total number of messages"
    )


class HealthResponse(BaseModel):
    """Response model for health check endpoints."""
    status: str = Field(..., description="Health status")
    reason: Optional[str] = Field(None, description="Reason if not ready")
