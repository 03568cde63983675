"""Structural checks for address values.

An address is either an ``ipaddress`` address object or its packed form
(4 or 16 raw bytes). Nothing beyond the length is checked: loopback,
multicast and friends are all valid addresses here.
"""
import ipaddress
from typing import Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

_PACKED_LENGTHS = (4, 16)


def valid_ip(ip) -> bool:
    """Return True if ip is structurally a v4 or v6 address."""
    if isinstance(ip, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return True
    if isinstance(ip, (bytes, bytearray)):
        return len(ip) in _PACKED_LENGTHS
    return False


def to_address(ip) -> IPAddress:
    """Convert a valid address value to an ipaddress object.

    Callers must check valid_ip() first.
    """
    if isinstance(ip, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return ip
    return ipaddress.ip_address(bytes(ip))


def canonical(ip) -> str:
    """Canonical string form used for host list keys."""
    return str(to_address(ip))


def parse_ip(text: Optional[str]) -> Optional[IPAddress]:
    """Parse a textual address, returning None when it is not one."""
    if not text:
        return None
    try:
        return ipaddress.ip_address(text.strip())
    except ValueError:
        return None


def parse_network(text: Optional[str]) -> Optional[IPNetwork]:
    """Parse CIDR notation (host bits are masked), None when malformed."""
    if not text or "/" not in text:
        return None
    try:
        return ipaddress.ip_network(text.strip(), strict=False)
    except ValueError:
        return None
