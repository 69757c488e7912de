"""
Utility functions for the Anonymous Message Board.
"""

import logging
import re

from fastapi import Request

logger = logging.getLogger(__name__)

# Checked in order; the first header present wins
CLIENT_IP_HEADERS = ("x-forwarded-for", "x-real-ip", "x-client-ip")

LOOPBACK_IPV4 = "127.0.0.1"
LOOPBACK_IPV6 = "::1"
IPV4_MAPPED_PREFIX = "::ffff:"

_CREDENTIALS_PATTERN = re.compile(r"//.*:.*@")


def resolve_client_ip(headers, peer_host: str = None) -> str:
    """
    Pick the best-guess originating IP from forwarding headers and peer address.

    Args:
        headers: Case-insensitive mapping of request headers
        peer_host: Transport-level peer address, if known

    Returns:
        Client IP string in IPv4 form whenever the address is IPv4
    """
    ip = None
    for header in CLIENT_IP_HEADERS:
        ip = headers.get(header)
        if ip:
            break
    else:
        ip = peer_host or LOOPBACK_IPV4

    # Proxy chain: the left-most entry is the original client
    if "," in ip:
        ip = ip.split(",")[0].strip()

    if ip == LOOPBACK_IPV6:
        ip = LOOPBACK_IPV4

    if ip.startswith(IPV4_MAPPED_PREFIX):
        ip = ip[len(IPV4_MAPPED_PREFIX):]

    # Nothing left after normalization
    return ip or LOOPBACK_IPV4


def get_client_ip(request: Request) -> str:
    """Resolve the client IP for a FastAPI request."""
    peer_host = request.client.host if request.client else None
    ip = resolve_client_ip(request.headers, peer_host)
    logger.debug(f"Resolved client IP: {ip} (peer: {peer_host})")
    return ip


def mask_database_url(url: str) -> str:
    """Hide credentials embedded in a connection string before logging it."""
    return _CREDENTIALS_PATTERN.sub("//***:***@", url)
