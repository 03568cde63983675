"""Capability interfaces shared by every allowlist variant.

Callers that only need to gate traffic depend on ``ACL``. Administrative
code that mutates a list depends on ``HostACL`` or ``NetACL``. Real lists
and stubs both satisfy these, so one can be swapped for the other without
touching call sites.
"""
from typing import Protocol, runtime_checkable

from ipacl.core.validation import IPNetwork


@runtime_checkable
class ACL(Protocol):
    """Anything that can answer whether an address is allowlisted."""

    def permitted(self, ip) -> bool:
        ...


@runtime_checkable
class HostACL(ACL, Protocol):
    """An ACL keyed by individual addresses."""

    def add(self, ip) -> None:
        ...

    def remove(self, ip) -> None:
        ...


@runtime_checkable
class NetACL(ACL, Protocol):
    """An ACL keyed by address ranges."""

    def add(self, network: IPNetwork) -> None:
        ...

    def remove(self, network: IPNetwork) -> None:
        ...
