"""Tests for ipacl.core.network — prefix-based network allowlist."""
import ipaddress
from concurrent.futures import ThreadPoolExecutor

import pytest

from ipacl.core.acl import ACL, NetACL
from ipacl.core.errors import AllowlistFormatError, OverlappingNetworkError
from ipacl.core.network import BasicNetACL, StrictNetACL, dump_networks, load_networks


def ip(text):
    return ipaddress.ip_address(text)


def net(text):
    return ipaddress.ip_network(text, strict=False)


class TestMembership:

    def setup_method(self):
        self.acl = BasicNetACL()

    def test_satisfies_interfaces(self):
        assert isinstance(self.acl, ACL)
        assert isinstance(self.acl, NetACL)

    def test_contains(self):
        self.acl.add(net("192.168.1.0/24"))
        assert self.acl.permitted(ip("192.168.1.50"))
        assert not self.acl.permitted(ip("192.168.2.50"))

    def test_packed_address(self):
        self.acl.add(net("10.0.0.0/8"))
        assert self.acl.permitted(bytes([10, 1, 2, 3]))

    def test_ipv6(self):
        self.acl.add(net("2001:db8::/32"))
        assert self.acl.permitted(ip("2001:db8::1"))
        assert not self.acl.permitted(ip("2001:db9::1"))

    def test_mixed_families_never_match(self):
        self.acl.add(net("0.0.0.0/0"))
        assert not self.acl.permitted(ip("::1"))
        assert not self.acl.permitted(ip("::ffff:10.0.0.1"))

    def test_add_then_remove(self):
        self.acl.add(net("10.0.0.0/8"))
        self.acl.remove(net("10.0.0.0/8"))
        assert not self.acl.permitted(ip("10.1.2.3"))
        assert len(self.acl) == 0

    def test_remove_twice_is_noop(self):
        self.acl.add(net("10.0.0.0/8"))
        self.acl.add(net("172.16.0.0/12"))
        self.acl.remove(net("10.0.0.0/8"))
        self.acl.remove(net("10.0.0.0/8"))
        assert self.acl.entries() == ["172.16.0.0/12"]

    def test_remove_matches_canonical_form(self):
        self.acl.add(net("10.0.0.0/8"))
        self.acl.remove(net("10.20.30.40/8"))
        assert len(self.acl) == 0

    def test_duplicates_kept(self):
        self.acl.add(net("10.0.0.0/8"))
        self.acl.add(net("10.0.0.0/8"))
        self.acl.remove(net("10.0.0.0/8"))
        assert self.acl.permitted(ip("10.0.0.1"))
        assert len(self.acl) == 1

    @pytest.mark.parametrize("bad", [None, "10.0.0.0/8", ip("10.0.0.1")])
    def test_add_non_network_is_noop(self, bad):
        self.acl.add(bad)
        assert len(self.acl) == 0

    def test_remove_none_is_noop(self):
        self.acl.add(net("10.0.0.0/8"))
        self.acl.remove(None)
        assert len(self.acl) == 1

    @pytest.mark.parametrize("bad", [None, b"\x0a\x00\x00", "10.0.0.1"])
    def test_invalid_address_not_permitted(self, bad):
        self.acl.add(net("0.0.0.0/0"))
        assert not self.acl.permitted(bad)


class TestOverlapLimitation:
    """Containment and exact-match removal are deliberately asymmetric."""

    def setup_method(self):
        self.acl = BasicNetACL()
        self.acl.add(net("10.0.0.0/8"))
        self.acl.add(net("10.1.0.0/16"))

    def test_removing_narrow_range_leaves_broad_one_permitting(self):
        self.acl.remove(net("10.1.0.0/16"))
        assert self.acl.permitted(ip("10.1.2.3"))
        assert self.acl.entries() == ["10.0.0.0/8"]

    def test_removing_broad_range_keeps_narrow_entry(self):
        self.acl.remove(net("10.0.0.0/8"))
        assert self.acl.entries() == ["10.1.0.0/16"]
        assert self.acl.permitted(ip("10.1.2.3"))
        assert not self.acl.permitted(ip("10.2.0.1"))

    def test_removing_unlisted_subnet_is_noop(self):
        self.acl.remove(net("10.2.0.0/16"))
        assert len(self.acl) == 2
        assert self.acl.permitted(ip("10.2.0.1"))


class TestStrictNetACL:

    def test_rejects_overlap(self):
        acl = StrictNetACL()
        acl.add(net("10.0.0.0/8"))
        with pytest.raises(OverlappingNetworkError):
            acl.add(net("10.1.0.0/16"))
        with pytest.raises(OverlappingNetworkError):
            acl.add(net("0.0.0.0/0"))
        assert acl.entries() == ["10.0.0.0/8"]

    def test_accepts_disjoint(self):
        acl = StrictNetACL()
        acl.add(net("10.0.0.0/8"))
        acl.add(net("192.168.0.0/16"))
        acl.add(net("::/0"))
        assert len(acl) == 3

    def test_invalid_is_noop(self):
        acl = StrictNetACL()
        acl.add(None)
        assert len(acl) == 0


class TestConcurrency:

    def test_concurrent_adds_not_lost(self):
        acl = BasicNetACL()
        nets = [ipaddress.IPv4Network((0x0A000000 + (i << 8), 24)) for i in range(300)]

        with ThreadPoolExecutor(max_workers=32) as pool:
            list(pool.map(acl.add, nets))
        with ThreadPoolExecutor(max_workers=32) as pool:
            results = list(pool.map(acl.permitted, [n.network_address + 1 for n in nets]))

        assert all(results)
        assert len(acl) == len(nets)


class TestCompactForm:

    def test_empty(self):
        assert BasicNetACL().to_json() == '""'

    def test_keeps_insertion_order(self):
        acl = BasicNetACL()
        acl.add(net("192.168.0.0/16"))
        acl.add(net("10.0.0.0/8"))
        assert acl.to_json() == '"192.168.0.0/16,10.0.0.0/8"'

    def test_round_trip_preserves_membership(self):
        acl = BasicNetACL()
        for text in ("10.0.0.0/8", "192.168.1.0/24", "2001:db8::/32"):
            acl.add(net(text))

        restored = BasicNetACL.from_json(acl.to_json())
        for text in ("10.9.9.9", "192.168.1.1", "192.168.2.1", "2001:db8::1", "::1"):
            assert restored.permitted(ip(text)) == acl.permitted(ip(text))

    def test_host_bits_masked(self):
        acl = BasicNetACL.from_json('"10.1.2.3/8"')
        assert acl.entries() == ["10.0.0.0/8"]

    def test_requires_quotes(self):
        with pytest.raises(AllowlistFormatError, match="invalid allowlist"):
            BasicNetACL.from_json("abc")

    @pytest.mark.parametrize("token", ["bogus", "10.0.0.1", "10.0.0.0/40"])
    def test_bad_token_fails_whole_load(self, token):
        with pytest.raises(AllowlistFormatError, match="invalid network"):
            BasicNetACL.from_json(f'"10.0.0.0/8,{token}"')

    def test_failed_load_leaves_list_untouched(self):
        acl = BasicNetACL()
        acl.add(net("10.0.0.0/8"))
        with pytest.raises(AllowlistFormatError):
            acl.load_json("abc")
        assert acl.entries() == ["10.0.0.0/8"]

    def test_undecodable_bytes_rejected(self):
        with pytest.raises(AllowlistFormatError, match="invalid allowlist"):
            BasicNetACL.from_json(b'"\xff"')


class TestLineForm:

    def test_dump_keeps_order(self):
        acl = BasicNetACL()
        acl.add(net("192.168.0.0/16"))
        acl.add(net("10.0.0.0/8"))
        assert dump_networks(acl) == b"192.168.0.0/16\n10.0.0.0/8"

    def test_load(self):
        acl = load_networks(b"10.0.0.0/8\n\n2001:db8::/32\n")
        assert acl.entries() == ["10.0.0.0/8", "2001:db8::/32"]

    def test_load_rejects_bad_line(self):
        with pytest.raises(AllowlistFormatError, match="invalid network"):
            load_networks(b"10.0.0.0/8\n10.0.0.1\n")

    def test_load_rejects_undecodable_bytes(self):
        with pytest.raises(AllowlistFormatError, match="invalid allowlist"):
            load_networks(b"10.0.0.0/8\n\xff\n")
