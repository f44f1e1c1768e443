"""Origin and protocol-version checks applied before dispatch."""

from collections.abc import Iterable
from urllib.parse import urlsplit

LOCAL_HOSTS = ("localhost", "127.0.0.1")
DEFAULT_ALLOWED_HOSTS = ("mcpcentral.io", "mcp.time.mcpcentral.io")
SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")


def is_valid_origin(origin: str, allowed_hosts: Iterable[str] = DEFAULT_ALLOWED_HOSTS) -> bool:
    """Check an Origin header value.

    Local hosts on any port are accepted, as is any allow-listed host or one of
    its subdomains. Values that do not parse as a URL with a hostname are rejected.
    """
    try:
        hostname = urlsplit(origin).hostname
    except ValueError:
        return False

    if not hostname:
        return False
    if hostname in LOCAL_HOSTS:
        return True

    return any(hostname == host or hostname.endswith("." + host) for host in allowed_hosts)


def is_supported_protocol_version(
    version: str,
    supported_versions: Iterable[str] = SUPPORTED_PROTOCOL_VERSIONS,
) -> bool:
    return version in tuple(supported_versions)
