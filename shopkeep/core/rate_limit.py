"""
Rate limiting for the shopkeep service.

Provides the shared slowapi Limiter, keyed by the real client IP. The
X-Forwarded-For header is only trusted when the direct peer is a known proxy.
"""
import ipaddress
import os

from fastapi import Request
from slowapi import Limiter


IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network

LOGIN_RATE_LIMIT = os.getenv("SHOPKEEP_LOGIN_RATE_LIMIT", "10/minute")


def parse_trusted_proxies(proxy_config: str | None = None) -> list[IPNetwork]:
    """
    Parse trusted proxy IPs.

    The SHOPKEEP_TRUSTED_PROXIES environment variable holds a comma-separated
    list of IP addresses or CIDR ranges allowed to send X-Forwarded-For.

    Example: SHOPKEEP_TRUSTED_PROXIES="10.0.0.1,172.16.0.0/28"

    Returns:
        Trusted networks; a single address becomes a one-address network.
    """
    if proxy_config is None:
        proxy_config = os.getenv("SHOPKEEP_TRUSTED_PROXIES", "")

    trusted = []
    for proxy in proxy_config.split(","):
        proxy = proxy.strip()
        if not proxy:
            continue

        try:
            trusted.append(ipaddress.ip_network(proxy, strict=False))
        except ValueError:
            raise ValueError(f"Invalid trusted proxy: {proxy}") from None

    return trusted


_TRUSTED_PROXIES: list[IPNetwork] | None = None


def get_trusted_proxies() -> list[IPNetwork]:
    """Get cached trusted proxies, parsing on first access."""
    global _TRUSTED_PROXIES
    if _TRUSTED_PROXIES is None:
        _TRUSTED_PROXIES = parse_trusted_proxies()
    return _TRUSTED_PROXIES


def is_trusted(ip: str, networks: list[IPNetwork]) -> bool:
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        # "unknown", test client hosts and other non-addresses
        return False
    return any(address in network for network in networks)


def get_real_client_ip(request: Request) -> str:
    """
    Get the client IP address used as the rate limit key.

    Direct clients could spoof X-Forwarded-For, so it is only honoured when
    the immediate peer is a trusted proxy. In that case the rightmost
    non-trusted address in the chain is the client.
    """
    direct_client_ip = request.client.host if request.client else "unknown"

    trusted_proxies = get_trusted_proxies()
    if not trusted_proxies or not is_trusted(direct_client_ip, trusted_proxies):
        return direct_client_ip

    x_forwarded_for = request.headers.get("X-Forwarded-For")
    if not x_forwarded_for:
        return direct_client_ip

    ips = [ip.strip() for ip in x_forwarded_for.split(",")]
    for ip in reversed(ips):
        if ip and not is_trusted(ip, trusted_proxies):
            return ip

    # All IPs in chain are trusted proxies, use the leftmost (original source)
    return ips[0] if ips[0] else direct_client_ip


limiter = Limiter(key_func=get_real_client_ip)
