"""IP allowlists: host and network lists, stubs, and ASGI gating."""
from ipacl.core.acl import ACL, HostACL, NetACL
from ipacl.core.errors import (
    AddressLookupError,
    AllowlistConfigError,
    AllowlistError,
    AllowlistFormatError,
    OverlappingNetworkError,
)
from ipacl.core.handler import AllowlistHandler, AllowlistHandlerFunc
from ipacl.core.host import BasicHostACL, dump_hosts, load_hosts
from ipacl.core.lookup import http_request_lookup, net_conn_lookup
from ipacl.core.network import BasicNetACL, StrictNetACL, dump_networks, load_networks
from ipacl.core.stub import HostStub, NetStub
from ipacl.core.validation import parse_ip, parse_network, valid_ip

__all__ = [
    "ACL",
    "HostACL",
    "NetACL",
    "AddressLookupError",
    "AllowlistConfigError",
    "AllowlistError",
    "AllowlistFormatError",
    "OverlappingNetworkError",
    "AllowlistHandler",
    "AllowlistHandlerFunc",
    "BasicHostACL",
    "dump_hosts",
    "load_hosts",
    "http_request_lookup",
    "net_conn_lookup",
    "BasicNetACL",
    "StrictNetACL",
    "dump_networks",
    "load_networks",
    "HostStub",
    "NetStub",
    "parse_ip",
    "parse_network",
    "valid_ip",
]
