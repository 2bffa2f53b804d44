import ipaddress
import re
from typing import Optional
from urllib.parse import urlparse

SEARCH_ENGINE_DOMAINS = (
    "google.com",
    "bing.com",
    "yahoo.com",
    "duckduckgo.com",
    "ask.com",
    "aol.com",
    "baidu.com",
    "yandex.com",
)

# local@label(.label)+ ; no whitespace, one "@", no empty/edge dots
_LOCAL = r"[^\s@.]+(?:\.[^\s@.]+)*"
_DOMAIN = r"[^\s@.]+(?:\.[^\s@.]+)+"
EMAIL_RE = re.compile(rf"{_LOCAL}@{_DOMAIN}")


def is_email(value: str) -> bool:
    return bool(value) and EMAIL_RE.fullmatch(value) is not None


def normalize_url(value: str) -> str:
    """Add https:// when the user typed a bare host."""
    value = value.strip()
    if not re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", value):
        value = f"https://{value}"
    return value


def hostname_of(url: str) -> Optional[str]:
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


def is_search_engine(url: str) -> bool:
    hostname = hostname_of(url)
    if not hostname:
        return False
    return any(domain in hostname for domain in SEARCH_ENGINE_DOMAINS)


def is_public_address(address: str) -> bool:
    """False for loopback, private, link-local and other non-routable addresses."""
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False
    if ip.version == 6 and ip.ipv4_mapped:
        ip = ip.ipv4_mapped
    return not (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_multicast
        or ip.is_reserved
        or ip.is_unspecified
    )


def ip_literal(hostname: str) -> Optional[str]:
    try:
        return str(ipaddress.ip_address(hostname))
    except ValueError:
        return None
