"""URL validation helpers for attachment URLs (SSRF defense)."""

from __future__ import annotations

import ipaddress
import socket
from urllib.parse import urlsplit, urlunsplit


def _is_ip_global(ip: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    # Rejects loopback, link-local, private RFC1918, multicast, etc.
    return ip.is_global


def _resolve_host(host: str, port: int) -> set[ipaddress.IPv4Address | ipaddress.IPv6Address]:
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except OSError as exc:
        raise ValueError("Attachment URL host could not be resolved") from exc

    resolved: set[ipaddress.IPv4Address | ipaddress.IPv6Address] = set()
    for info in infos:
        sockaddr = info[4]
        if not sockaddr:
            continue
        try:
            resolved.add(ipaddress.ip_address(sockaddr[0]))
        except ValueError:
            continue
    return resolved


def validate_attachment_url(url: str, resolve_dns: bool = False) -> str:
    """
    Validate a user-supplied attachment URL.

    Security goals:
    - Allow only https:// URLs (no javascript:, file:, plain http...).
    - Disallow credentials in the URL.
    - Reject IP literals that are not publicly routable.
    - With `resolve_dns`, resolve the host and reject it when any address
      is internal. Done right before the server fetches the URL.

    Returns a normalized URL (lowercased scheme, no fragment) or raises ValueError.
    """
    candidate = (url or "").strip()
    if not candidate:
        raise ValueError("Attachment URL is required")

    parts = urlsplit(candidate)
    scheme = (parts.scheme or "").lower()
    if scheme != "https":
        raise ValueError("Attachment URL must start with https://")

    if not parts.netloc:
        raise ValueError("Attachment URL must include a host")

    if parts.username or parts.password:
        raise ValueError("Attachment URL must not include credentials")

    host = (parts.hostname or "").strip().lower().rstrip(".")
    if not host:
        raise ValueError("Attachment URL must include a host")

    try:
        port = parts.port or 443
    except ValueError as exc:
        raise ValueError("Attachment URL port is invalid") from exc

    normalized = urlunsplit((scheme, parts.netloc, parts.path, parts.query, ""))

    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        ip = None
    if ip is not None:
        if not _is_ip_global(ip):
            raise ValueError("Attachment URL host is not allowed")
        return normalized

    if host == "localhost" or host.endswith(".localhost"):
        raise ValueError("Attachment URL host is not allowed")

    if resolve_dns:
        resolved_ips = _resolve_host(host, port)
        if not resolved_ips:
            raise ValueError("Attachment URL host could not be resolved")
        for resolved in resolved_ips:
            if not _is_ip_global(resolved):
                raise ValueError("Attachment URL host is not allowed")

    return normalized
