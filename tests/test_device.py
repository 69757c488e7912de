"""
Tests for device and user-agent classification.
"""

import pytest

from app.device import (
    detect_brand_and_model,
    detect_browser,
    detect_operating_system,
    parse_device_info,
    summarize_device,
)
from app.schemas import ClientDeviceData
from tests.conftest import (
    ANDROID_CHROME_UA,
    IPHONE_UA,
    LINUX_FIREFOX_UA,
    MAC_SAFARI_UA,
    WINDOWS_EDGE_UA,
)


IPAD_UA = (
    "Mozilla/5.0 (iPad; CPU OS 16_6 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.6 Mobile/15E148 Safari/604.1"
)
SAMSUNG_UA = (
    "Mozilla/5.0 (Linux; Android 14; SAMSUNG SM-S918B) AppleWebKit/537.36 "
    "(KHTML, like Gecko) SamsungBrowser/23.0 Chrome/115.0.0.0 Mobile Safari/537.36"
)


class TestOperatingSystem:
    """First matching OS branch wins."""

    @pytest.mark.parametrize(
        "user_agent, expected",
        [
            (ANDROID_CHROME_UA, ("Android", "13")),
            (IPHONE_UA, ("iOS", "17.1.2")),
            (IPAD_UA, ("iPadOS", "16.6")),
            (WINDOWS_EDGE_UA, ("Windows", "10/11")),
            (MAC_SAFARI_UA, ("macOS", "10.15.7")),
            (LINUX_FIREFOX_UA, ("Linux", "Unknown")),
            ("curl/8.4.0", ("Unknown", "Unknown")),
        ],
    )
    def test_detect(self, user_agent, expected):
        assert detect_operating_system(user_agent.lower()) == expected

    @pytest.mark.parametrize(
        "marker, version",
        [
            ("windows nt 10.0", "10/11"),
            ("windows nt 6.3", "8.1"),
            ("windows nt 6.1", "7"),
            ("windows nt 5.1", "Unknown"),
        ],
    )
    def test_windows_versions(self, marker, version):
        assert detect_operating_system(f"mozilla/5.0 ({marker}; win64)") == ("Windows", version)

    def test_android_wins_over_linux(self):
        assert detect_operating_system("linux; android 13")[0] == "Android"

    def test_android_version(self):
        assert detect_operating_system("mozilla/5.0 (android 13; mobile)") == ("Android", "13")


class TestBrowser:
    """Browser checks with their exclusions."""

    @pytest.mark.parametrize(
        "user_agent, expected",
        [
            (ANDROID_CHROME_UA, ("Chrome", "120.0.6099.43")),
            (IPHONE_UA, ("Safari", "17.1")),
            (MAC_SAFARI_UA, ("Safari", "17.1")),
            (LINUX_FIREFOX_UA, ("Firefox", "121.0")),
            (WINDOWS_EDGE_UA, ("Microsoft Edge", "120.0.2210.61")),
            ("curl/8.4.0", ("Unknown", "Unknown")),
        ],
    )
    def test_detect(self, user_agent, expected):
        assert detect_browser(user_agent.lower()) == expected

    def test_chrome_version(self):
        assert detect_browser("mozilla/5.0 chrome/120.0 safari/537.36") == ("Chrome", "120.0")

    def test_safari_without_version(self):
        assert detect_browser("mozilla/5.0 safari/605.1.15") == ("Safari", "Unknown")


class TestBrandAndModel:
    """Brand and model markers."""

    @pytest.mark.parametrize(
        "user_agent, expected",
        [
            (IPHONE_UA, ("Apple", "iPhone")),
            (IPAD_UA, ("Apple", "iPad")),
            (SAMSUNG_UA, ("Samsung", "Unknown")),
            (ANDROID_CHROME_UA, ("Google", "Pixel")),
            ("mozilla/5.0 (linux; android 13; oneplus a6013)", ("OnePlus", "Unknown")),
            ("mozilla/5.0 (linux; android 12; xiaomi 12)", ("Xiaomi", "Unknown")),
            ("mozilla/5.0 (linux; android 10; huawei p30)", ("Huawei", "Unknown")),
            (MAC_SAFARI_UA, ("Unknown", "Unknown")),
        ],
    )
    def test_detect(self, user_agent, expected):
        assert detect_brand_and_model(user_agent.lower()) == expected

    @pytest.mark.parametrize(
        "marker, model",
        [
            ("iphone14,2", "iPhone 14"),
            ("iphone13,4", "iPhone 13"),
            ("iphone12,1", "iPhone 12"),
        ],
    )
    def test_known_iphone_generations(self, marker, model):
        ua = f"mozilla/5.0 ({marker}; cpu iphone os 16_0 like mac os x)"

        assert detect_brand_and_model(ua) == ("Apple", model)

    def test_iphone_without_os_marker_has_no_model(self):
        assert detect_brand_and_model("someapp/1.0 iphone") == ("Apple", "Unknown")

    def test_samsung_galaxy(self):
        assert detect_brand_and_model("samsung galaxy s23") == ("Samsung", "Galaxy")


class TestParseDeviceInfo:
    """Full device profile assembly."""

    def test_defaults_without_client_data(self):
        device = parse_device_info("Unknown")

        assert device.userAgent == "Unknown"
        assert device.platform == "Unknown"
        assert device.deviceType == "desktop"
        assert device.isMobile is False
        assert device.isTablet is False
        assert device.isDesktop is True
        assert device.deviceBrand == "Unknown"
        assert device.operatingSystem == "Unknown"
        assert device.browser == "Unknown"
        assert device.screenWidth is None
        assert device.connectionType == "Unknown"
        assert device.isOnline is True
        assert device.cookiesEnabled is True
        assert device.touchSupport is False
        assert device.javaEnabled is False
        assert device.batteryLevel is None
        assert device.batteryCharging is None
        assert device.hasGyroscope is False

    def test_mobile_assertion_wins_over_tablet(self):
        device = parse_device_info(IPHONE_UA, ClientDeviceData(isMobile=True, isTablet=True))

        assert device.deviceType == "mobile"
        assert device.isDesktop is False

    def test_tablet(self):
        device = parse_device_info(IPAD_UA, ClientDeviceData(isTablet=True))

        assert device.deviceType == "tablet"
        assert device.operatingSystem == "iPadOS"
        assert device.deviceModel == "iPad"

    def test_form_factor_ignores_user_agent(self):
        device = parse_device_info(IPHONE_UA, ClientDeviceData())

        assert device.deviceType == "desktop"
        assert device.isDesktop is True

    def test_client_data_passed_through(self):
        data = ClientDeviceData(
            platform="Win32",
            screenWidth=2560,
            screenHeight=1440,
            colorDepth=24,
            pixelRatio=1.5,
            connectionType="4g",
            isOnline=False,
            touchSupport=True,
            cookiesEnabled=False,
            javaEnabled=True,
            batteryLevel=0.8,
            batteryCharging=True,
            hasGyroscope=True,
            hasAccelerometer=True,
            hasCompass=True,
        )

        device = parse_device_info(WINDOWS_EDGE_UA, data)

        assert device.platform == "Win32"
        assert (device.screenWidth, device.screenHeight) == (2560, 1440)
        assert device.colorDepth == 24
        assert device.pixelRatio == 1.5
        assert device.connectionType == "4g"
        assert device.isOnline is False
        assert device.touchSupport is True
        assert device.cookiesEnabled is False
        assert device.javaEnabled is True
        assert device.batteryLevel == 0.8
        assert device.batteryCharging is True
        assert device.hasGyroscope is True
        assert device.hasAccelerometer is True
        assert device.hasCompass is True

    def test_falsy_client_values_use_defaults(self):
        data = ClientDeviceData(platform="", screenWidth=0, batteryLevel=0, batteryCharging=False)

        device = parse_device_info("Unknown", data)

        assert device.platform == "Unknown"
        assert device.screenWidth is None
        assert device.batteryLevel is None
        assert device.batteryCharging is None

    def test_summary(self):
        device = parse_device_info(ANDROID_CHROME_UA, ClientDeviceData(isMobile=True))

        summary = summarize_device(device)

        assert summary.model_dump() == {
            "type": "mobile",
            "brand": "Google",
            "model": "Pixel",
            "os": "Android",
            "browser": "Chrome",
        }
