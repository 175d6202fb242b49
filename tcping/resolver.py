# tcping/resolver.py
import ipaddress
import logging
import socket
from typing import List, Tuple

from tcping.errors import FamilyMismatch, NoAddressForFamily, ResolutionFailed
from tcping.schemas import AddressFamily, Family, ResolvedTarget

logger = logging.getLogger(__name__)


def _classify(ip) -> Tuple[str, AddressFamily]:
    # IPv4-mapped IPv6 addresses are treated as plain IPv4
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        return str(ip.ipv4_mapped), "v4"
    if ip.version == 4:
        return str(ip), "v4"
    return str(ip), "v6"


def parse_literal(host: str):
    """Return an ipaddress object if host is an IP literal, else None."""
    text = host
    if text.startswith("[") and text.endswith("]"):
        text = text[1:-1]
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        return None


def lookup_ips(host: str) -> List[str]:
    """DNS lookup, returning candidate IPs in resolver order without duplicates."""
    infos = socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    seen = []
    for _family, _type, _proto, _canon, sockaddr in infos:
        ip = sockaddr[0]
        if ip not in seen:
            seen.append(ip)
    return seen


def resolve_address(host: str, family: Family = "auto") -> Tuple[str, AddressFamily]:
    literal = parse_literal(host)
    if literal is not None:
        ip, found = _classify(literal)
        if family == "v4" and found != "v4":
            raise FamilyMismatch(f"address {host} is not an IPv4 address")
        if family == "v6" and found != "v6":
            raise FamilyMismatch(f"address {host} is not an IPv6 address")
        return ip, found

    try:
        raw = lookup_ips(host)
    except (OSError, UnicodeError) as e:
        raise ResolutionFailed(f"failed to resolve {host}: {e}") from e
    if not raw:
        raise ResolutionFailed(f"no IP addresses found for {host}")

    candidates = []
    for text in raw:
        ip = parse_literal(text.split("%", 1)[0])
        if ip is None:
            continue
        candidates.append(_classify(ip) if "%" not in text else (text, "v6"))
    logger.debug("resolved %s -> %s", host, [c[0] for c in candidates])

    if family in ("v4", "v6"):
        for ip, found in candidates:
            if found == family:
                return ip, found
        label = "IPv4" if family == "v4" else "IPv6"
        raise NoAddressForFamily(f"no {label} address found for {host}")

    # auto: first IPv4, otherwise first IPv6
    for wanted in ("v4", "v6"):
        for ip, found in candidates:
            if found == wanted:
                return ip, found
    raise ResolutionFailed(f"no usable IP addresses found for {host}")


def resolve_target(host: str, port: int, family: Family = "auto") -> ResolvedTarget:
    ip, found = resolve_address(host, family)
    target = ResolvedTarget(host=host, ip=ip, family=found, port=port)
    logger.debug("target %s chosen for %s (%s)", target.endpoint, host, target.family_label)
    return target
