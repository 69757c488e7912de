"""
Device and user-agent classification.

A best-effort decision table over the lower-cased user-agent string.
Each category (OS, browser, brand/model) takes its first matching branch;
anything unmatched keeps the "Unknown" default.
"""

import re
from typing import Optional

from app.schemas import ClientDeviceData, DeviceInfo, DeviceSummary, UNKNOWN


ANDROID_VERSION = re.compile(r"android ([0-9.]+)")
IOS_VERSION = re.compile(r"os ([0-9_]+)")
MAC_VERSION = re.compile(r"mac os x ([0-9_]+)")

CHROME_VERSION = re.compile(r"chrome/([0-9.]+)")
SAFARI_VERSION = re.compile(r"version/([0-9.]+)")
FIREFOX_VERSION = re.compile(r"firefox/([0-9.]+)")
EDGE_VERSION = re.compile(r"edg/([0-9.]+)")

WINDOWS_VERSIONS = (
    ("windows nt 10.0", "10/11"),
    ("windows nt 6.3", "8.1"),
    ("windows nt 6.1", "7"),
)

IPHONE_MODELS = (
    ("iphone14", "iPhone 14"),
    ("iphone13", "iPhone 13"),
    ("iphone12", "iPhone 12"),
)

# Brands recognised without model inference
BRAND_ONLY = (
    ("oneplus", "OnePlus"),
    ("xiaomi", "Xiaomi"),
    ("huawei", "Huawei"),
)


def _match(pattern: re.Pattern, ua: str) -> Optional[str]:
    found = pattern.search(ua)
    return found.group(1) if found else None


def detect_device_type(device_data: ClientDeviceData) -> str:
    """Form factor as asserted by the client."""
    if device_data.isMobile:
        return "mobile"
    if device_data.isTablet:
        return "tablet"
    return "desktop"


def detect_operating_system(ua: str) -> tuple[str, str]:
    """Return (operating system, version) for a lower-cased user-agent."""
    if "android" in ua:
        return "Android", _match(ANDROID_VERSION, ua) or UNKNOWN

    if "iphone" in ua or "ipad" in ua:
        name = "iPadOS" if "ipad" in ua else "iOS"
        version = _match(IOS_VERSION, ua)
        return name, version.replace("_", ".") if version else UNKNOWN

    if "windows" in ua:
        for marker, version in WINDOWS_VERSIONS:
            if marker in ua:
                return "Windows", version
        return "Windows", UNKNOWN

    if "mac os" in ua:
        version = _match(MAC_VERSION, ua)
        return "macOS", version.replace("_", ".") if version else UNKNOWN

    if "linux" in ua:
        return "Linux", UNKNOWN

    return UNKNOWN, UNKNOWN


def detect_browser(ua: str) -> tuple[str, str]:
    """Return (browser, version) for a lower-cased user-agent."""
    if "chrome" in ua and "edg" not in ua:
        return "Chrome", _match(CHROME_VERSION, ua) or UNKNOWN

    if "safari" in ua and "chrome" not in ua:
        return "Safari", _match(SAFARI_VERSION, ua) or UNKNOWN

    if "firefox" in ua:
        return "Firefox", _match(FIREFOX_VERSION, ua) or UNKNOWN

    if "edg" in ua:
        return "Microsoft Edge", _match(EDGE_VERSION, ua) or UNKNOWN

    return UNKNOWN, UNKNOWN


def detect_brand_and_model(ua: str) -> tuple[str, str]:
    """Return (brand, model) for a lower-cased user-agent."""
    if "iphone" in ua:
        model = UNKNOWN
        if "iphone os" in ua:
            model = next(
                (name for marker, name in IPHONE_MODELS if marker in ua),
                "iPhone",
            )
        return "Apple", model

    if "ipad" in ua:
        return "Apple", "iPad"

    if "samsung" in ua:
        return "Samsung", "Galaxy" if "galaxy" in ua else UNKNOWN

    if "pixel" in ua:
        return "Google", "Pixel"

    for marker, brand in BRAND_ONLY:
        if marker in ua:
            return brand, UNKNOWN

    return UNKNOWN, UNKNOWN


def parse_device_info(user_agent: str, device_data: Optional[ClientDeviceData] = None) -> DeviceInfo:
    """
    Build the device profile for a submission.

    Args:
        user_agent: Raw User-Agent header value
        device_data: Capabilities reported by the browser, if any

    Returns:
        DeviceInfo combining UA classification with pass-through
        client data (falsy client values fall back to defaults)
    """
    data = device_data or ClientDeviceData()
    ua = user_agent.lower()

    operating_system, os_version = detect_operating_system(ua)
    browser, browser_version = detect_browser(ua)
    brand, model = detect_brand_and_model(ua)

    return DeviceInfo(
        userAgent=user_agent,
        platform=data.platform or UNKNOWN,
        isMobile=bool(data.isMobile),
        isTablet=bool(data.isTablet),
        isDesktop=not data.isMobile and not data.isTablet,
        deviceType=detect_device_type(data),
        deviceBrand=brand,
        deviceModel=model,
        operatingSystem=operating_system,
        osVersion=os_version,
        browser=browser,
        browserVersion=browser_version,
        screenWidth=data.screenWidth or None,
        screenHeight=data.screenHeight or None,
        colorDepth=data.colorDepth or None,
        pixelRatio=data.pixelRatio or None,
        connectionType=data.connectionType or UNKNOWN,
        isOnline=data.isOnline if data.isOnline is not None else True,
        touchSupport=bool(data.touchSupport),
        cookiesEnabled=data.cookiesEnabled if data.cookiesEnabled is not None else True,
        javaEnabled=bool(data.javaEnabled),
        batteryLevel=data.batteryLevel or None,
        batteryCharging=data.batteryCharging or None,
        hasGyroscope=bool(data.hasGyroscope),
        hasAccelerometer=bool(data.hasAccelerometer),
        hasCompass=bool(data.hasCompass),
    )


def summarize_device(device: DeviceInfo) -> DeviceSummary:
    """Short form echoed in the submission response."""
    return DeviceSummary(
        type=device.deviceType,
        brand=device.deviceBrand,
        model=device.deviceModel,
        os=device.operatingSystem,
        browser=device.browser,
    )
