"""
Pytest configuration and shared fixtures.

Points the app at a throwaway SQLite database before any app imports,
and makes sure settings are reloaded with these test env vars.
"""

import os
import tempfile

import pytest

_TEST_DB_DIR = tempfile.mkdtemp(prefix="anonymous-board-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ["GEOLOCATION_BASE_URL"] = "https://ipapi.co"
os.environ["LOG_LEVEL"] = "WARNING"

# Clear settings cache before any app imports to ensure test env vars are used
from app.config import get_settings
get_settings.cache_clear()

from fastapi.testclient import TestClient

from app import storage
from app.main import app
from app.storage import Base


# Private address: geolocation short-circuits to the Local sentinel without a network call
LOCAL_CLIENT_IP = "10.0.0.7"

IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1_2 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1"
)
ANDROID_CHROME_UA = (
    "Mozilla/5.0 (Linux; Android 13; Pixel 7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.6099.43 Mobile Safari/537.36"
)
WINDOWS_EDGE_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.2210.61"
)
MAC_SAFARI_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Safari/605.1.15"
)
LINUX_FIREFOX_UA = "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"


@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    with TestClient(app) as test_client:
        yield test_client
        # Cleanup - drop all tables before the engine is disposed on shutdown
        Base.metadata.drop_all(bind=storage.engine)


def send_message(client, payload, ip: str = LOCAL_CLIENT_IP, user_agent: str = None):
    """Helper to post a submission from a given client IP."""
    headers = {"X-Forwarded-For": ip}
    if user_agent is not None:
        headers["User-Agent"] = user_agent
    return client.post("/send-message", json=payload, headers=headers)
