"""Network allowlist: membership by prefix containment.

This mirrors the host allowlist for address ranges. Lookups are a linear
scan over the entries in insertion order and will not scale to routing
table sizes.

Overlapping networks aren't detected. Removal matches the exact
canonical range string only, so removing 10.1.0.0/16 leaves an earlier
10.0.0.0/8 entry in place, and that entry still permits 10.1.2.3.
StrictNetACL refuses overlapping additions for callers that want that.
"""
import ipaddress
import logging
import threading
from typing import Iterator, List, Optional

from ipacl.core.errors import AllowlistFormatError, OverlappingNetworkError
from ipacl.core.serialization import (
    Data,
    join_lines,
    quote_entries,
    split_lines,
    unquote_entries,
)
from ipacl.core.validation import IPNetwork, parse_network, to_address, valid_ip

logger = logging.getLogger(__name__)

_NETWORK_TYPES = (ipaddress.IPv4Network, ipaddress.IPv6Network)


class BasicNetACL:
    """Thread-safe list-backed network allowlist."""

    def __init__(self):
        self._allowlist: List[IPNetwork] = []
        self._lock = threading.Lock()

    def permitted(self, ip) -> bool:
        """Return True if any allowlisted network contains the address."""
        if not valid_ip(ip):
            return False
        addr = to_address(ip)
        with self._lock:
            for network in self._allowlist:
                if addr in network:
                    return True
        return False

    def add(self, network: Optional[IPNetwork]) -> None:
        """Append a network. Overlaps and duplicates are kept as-is."""
        if not isinstance(network, _NETWORK_TYPES):
            return
        with self._lock:
            self._allowlist.append(network)

    def remove(self, network: Optional[IPNetwork]) -> None:
        """Remove the first entry whose canonical form equals network's."""
        if not isinstance(network, _NETWORK_TYPES):
            return
        key = str(network)
        with self._lock:
            for i, entry in enumerate(self._allowlist):
                if str(entry) == key:
                    del self._allowlist[i]
                    return

    def entries(self) -> List[str]:
        """Snapshot of the canonical entries in insertion order."""
        with self._lock:
            return [str(n) for n in self._allowlist]

    def __len__(self) -> int:
        with self._lock:
            return len(self._allowlist)

    def __contains__(self, ip) -> bool:
        return self.permitted(ip)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.entries()!r})"

    # ── Compact (JSON string) form ──────────────────────────────

    def to_json(self) -> str:
        """Serialize to a JSON string holding comma-separated networks.

        Like BasicHostACL.to_json, this returns text; the line form returns bytes.
        """
        return quote_entries(self.entries())

    def load_json(self, data: Data) -> None:
        """
        Replace every entry with the networks in a compact-form value.

        Raises:
            AllowlistFormatError: if the value is not quote-delimited or
                any network fails to parse. The list is left untouched.
        """
        networks = []
        for token in unquote_entries(data):
            network = parse_network(token)
            if network is None:
                raise AllowlistFormatError(f"allowlist: invalid network {token}")
            networks.append(network)

        with self._lock:
            self._allowlist = networks

    @classmethod
    def from_json(cls, data: Data) -> "BasicNetACL":
        """Build a new network allowlist from a compact-form value."""
        acl = cls()
        acl.load_json(data)
        return acl


class StrictNetACL(BasicNetACL):
    """Network allowlist that refuses overlapping entries on add."""

    def add(self, network: Optional[IPNetwork]) -> None:
        if not isinstance(network, _NETWORK_TYPES):
            return
        with self._lock:
            for entry in self._allowlist:
                if entry.version == network.version and entry.overlaps(network):
                    logger.warning("Network %s overlaps allowlisted %s", network, entry)
                    raise OverlappingNetworkError(
                        f"allowlist: network {network} overlaps {entry}"
                    )
            self._allowlist.append(network)


def dump_networks(acl: BasicNetACL) -> bytes:
    """Return the allowlist with each network on its own line.

    Insertion order is kept; it decides which entry matches first.
    """
    return join_lines(acl.entries())


def load_networks(data: Data) -> BasicNetACL:
    """Load a network allowlist from the line form."""
    acl = BasicNetACL()
    for line in split_lines(data):
        network = parse_network(line)
        if network is None:
            raise AllowlistFormatError("allowlist: invalid network")
        acl.add(network)
    return acl
