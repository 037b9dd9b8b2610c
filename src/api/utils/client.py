import ipaddress
from typing import Iterable, List, Optional, Union

from fastapi import Request

from src.app.services.request_context import RequestContext

Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


def _parse_networks(trusted_proxies: Iterable[str]) -> List[Network]:
    return [ipaddress.ip_network(entry, strict=False) for entry in trusted_proxies]


def _is_trusted(address: str, networks: List[Network]) -> bool:
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False
    return any(ip in network for network in networks)


def resolve_client_ip(
    peer: Optional[str],
    forwarded_for: Optional[str],
    real_ip: Optional[str],
    trusted_proxies: Iterable[str],
) -> str:
    """
    Client IP for rate limiting and audit.

    Forwarding headers are honoured only when the socket peer is a trusted
    proxy. X-Forwarded-For is walked right to left, skipping trusted hops;
    the first untrusted address is the client.
    """
    if not peer:
        return "unknown"

    networks = _parse_networks(trusted_proxies)
    if not _is_trusted(peer, networks):
        return peer

    if forwarded_for:
        hops = [hop.strip() for hop in forwarded_for.split(",") if hop.strip()]
        for hop in reversed(hops):
            if not _is_trusted(hop, networks):
                return hop
        if hops:
            return hops[0]

    if real_ip and real_ip.strip():
        return real_ip.strip()

    return peer


def get_client_ip(request: Request) -> str:
    return resolve_client_ip(
        request.client.host if request.client else None,
        request.headers.get("x-forwarded-for"),
        request.headers.get("x-real-ip"),
        request.app.state.security.config.trusted_proxies,
    )


def get_request_context(request: Request) -> RequestContext:
    return RequestContext(
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
