"""Host allowlist: exact matching on individual addresses.

IPv4 addresses are treated differently from IPv6 ones; the IPv4 loopback
does not match the IPv6 loopback, and an IPv4-mapped IPv6 address does
not match its IPv4 form.
"""
import threading
from typing import Iterator, List, Set

from ipacl.core.errors import AllowlistFormatError
from ipacl.core.serialization import (
    Data,
    join_lines,
    quote_entries,
    split_lines,
    unquote_entries,
)
from ipacl.core.validation import canonical, parse_ip, valid_ip


class BasicHostACL:
    """
    Thread-safe set-backed host allowlist.

    A single lock covers the whole set; lookups and mutations never
    interleave.
    """

    def __init__(self):
        self._allowlist: Set[str] = set()
        self._lock = threading.Lock()

    def permitted(self, ip) -> bool:
        """Return True if the address has been allowlisted."""
        if not valid_ip(ip):
            return False
        key = canonical(ip)
        with self._lock:
            return key in self._allowlist

    def add(self, ip) -> None:
        """Allowlist an address. Invalid values are ignored."""
        if not valid_ip(ip):
            return
        key = canonical(ip)
        with self._lock:
            self._allowlist.add(key)

    def remove(self, ip) -> None:
        """Drop an address from the allowlist. Invalid or absent values are ignored."""
        if not valid_ip(ip):
            return
        key = canonical(ip)
        with self._lock:
            self._allowlist.discard(key)

    def entries(self) -> List[str]:
        """Sorted snapshot of the canonical entries."""
        with self._lock:
            return sorted(self._allowlist)

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
        """
        Serialize to a JSON string holding comma-separated hosts.

        Entries come out in set iteration order, which is unspecified.
        Returns text rather than bytes since the value is a JSON document;
        encode it for the wire. Loading accepts either.
        """
        with self._lock:
            return quote_entries(list(self._allowlist))

    def load_json(self, data: Data) -> None:
        """
        Replace every entry with the hosts in a compact-form value.

        Args:
            data: JSON string literal, as produced by to_json()

        Raises:
            AllowlistFormatError: if the value is not quote-delimited or
                any host fails to parse. The list is left untouched.
        """
        entries = _parse_hosts(unquote_entries(data))
        with self._lock:
            self._allowlist = entries

    @classmethod
    def from_json(cls, data: Data) -> "BasicHostACL":
        """Build a new host allowlist from a compact-form value."""
        acl = cls()
        acl.load_json(data)
        return acl


def _parse_hosts(tokens: List[str]) -> Set[str]:
    entries = set()
    for token in tokens:
        ip = parse_ip(token)
        if ip is None:
            raise AllowlistFormatError(f"allowlist: invalid IP address {token}")
        entries.add(str(ip))
    return entries


def dump_hosts(acl: BasicHostACL) -> bytes:
    """Return the allowlist with each address on its own line, sorted."""
    return join_lines(acl.entries())


def load_hosts(data: Data) -> BasicHostACL:
    """Load a host allowlist from the line form.

    Raises AllowlistFormatError if any line is not an address.
    """
    acl = BasicHostACL()
    for line in split_lines(data):
        ip = parse_ip(line)
        if ip is None:
            raise AllowlistFormatError("allowlist: invalid address")
        acl.add(ip)
    return acl
