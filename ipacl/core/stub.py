"""Pass-through allowlists for wiring in checks before policy exists.

Every operation permits and logs a warning saying enforcement is off.
Pass ``log=`` to route (or silence) those warnings.
"""
import logging
from typing import Optional

from ipacl.core.validation import IPNetwork

logger = logging.getLogger(__name__)


class HostStub:
    """Stubbed host allowlist."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self._log = log or logger
        self._log.warning("allowlisting is being stubbed")

    def permitted(self, ip) -> bool:
        self._log.warning("allowlist check for %s but allowlisting is stubbed", ip)
        return True

    def add(self, ip) -> None:
        self._log.warning("IP %s added to allowlist but allowlisting is stubbed", ip)

    def remove(self, ip) -> None:
        self._log.warning("IP %s removed from allowlist but allowlisting is stubbed", ip)


class NetStub:
    """Stubbed network allowlist."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self._log = log or logger
        self._log.warning("allowlisting is being stubbed")

    def permitted(self, ip) -> bool:
        self._log.warning("allowlist check for %s but allowlisting is stubbed", ip)
        return True

    def add(self, network: Optional[IPNetwork]) -> None:
        self._log.warning(
            "IP network %s added to allowlist but allowlisting is stubbed", network
        )

    def remove(self, network: Optional[IPNetwork]) -> None:
        self._log.warning(
            "IP network %s removed from allowlist but allowlisting is stubbed", network
        )
