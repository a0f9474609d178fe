"""Unit tests for host, network and range objects."""

import pytest

from wherecp.model.address import Address, NetworkInterval
from wherecp.model.groups import Group
from wherecp.model.objects import Host, Network, Port, Range
from wherecp.util import (
    AddressMaskMismatchError,
    InvalidAddressError,
    InvalidMaskError,
    InvalidRangeError,
    ValidationError,
)


def _iv(start, end):
    return NetworkInterval(Address.parse(start), Address.parse(end))


class TestHost:
    def test_unpack_is_single_address(self):
        assert Host("h", "10.0.0.1").unpack() == _iv("10.0.0.1", "10.0.0.1")

    def test_match_by_address_not_name(self):
        assert Host("a", "10.0.0.1").match(Host("b", "10.0.0.1"))
        assert not Host("a", "10.0.0.1").match(Host("a", "10.0.0.2"))

    def test_contains_only_identical_host(self, lan):
        host = Host("h", "192.168.1.0")
        assert host.contains(Host("other", "192.168.1.0"))
        assert not host.contains(lan)

    def test_invalid_address(self):
        with pytest.raises(InvalidAddressError):
            Host("h", "10.0.0.256")

    def test_uid_is_unique(self):
        assert Host("h", "10.0.0.1").uid != Host("h", "10.0.0.1").uid

    def test_str(self):
        assert str(Host("web1", "1.2.3.4")) == "host web1 (1.2.3.4)"


class TestNetwork:
    def test_unpack(self, lan):
        assert lan.unpack() == _iv("192.168.1.0", "192.168.1.255")

    @pytest.mark.parametrize("netmask", ["255.255.255.0", "24", 24])
    def test_mask_forms(self, netmask):
        net = Network("n", "192.168.1.0", netmask)
        assert net.cidr == "192.168.1.0/24"
        assert net.prefixlen == 24

    def test_address_must_be_network_address(self):
        with pytest.raises(AddressMaskMismatchError):
            Network("n", "192.168.1.2", "255.255.255.0")

    @pytest.mark.parametrize("netmask", ["255.0.255.0", "33", "bogus"])
    def test_invalid_mask(self, netmask):
        with pytest.raises(InvalidMaskError):
            Network("n", "10.0.0.0", netmask)

    def test_from_cidr_requires_prefix(self):
        with pytest.raises(InvalidMaskError):
            Network.from_cidr("n", "10.0.0.0")

    def test_different_prefix_does_not_match(self):
        a = Network.from_cidr("a", "192.168.1.0/24")
        b = Network.from_cidr("b", "192.168.1.0/25")
        assert not a.match(b)
        assert a.match(Network.from_cidr("c", "192.168.1.0/24"))

    def test_contains(self, lan, dhcp):
        assert lan.contains(Host("h", "192.168.1.5"))
        assert lan.contains(Network.from_cidr("sub", "192.168.1.128/25"))
        assert lan.contains(dhcp)
        assert lan.contains(lan)
        assert not lan.contains(Host("h", "192.168.2.1"))
        assert not lan.contains(Network.from_cidr("wide", "192.168.0.0/16"))

    def test_does_not_contain_ports(self, lan):
        assert not lan.contains(Port("p", 80, "tcp"))

    def test_default_route_contains_everything(self):
        default = Network.from_cidr("default", "0.0.0.0/0")
        assert default.contains(Host("h", "255.255.255.255"))
        assert default.contains(Range("r", "0.0.0.0", "255.255.255.255"))


class TestRange:
    def test_unpack(self):
        assert Range("r", "192.168.1.5", "192.168.1.10").unpack() == _iv("192.168.1.5", "192.168.1.10")

    def test_start_after_end(self):
        with pytest.raises(InvalidRangeError):
            Range("r", "192.168.1.10", "192.168.1.5")

    def test_single_address_range(self):
        r = Range("r", "10.0.0.1", "10.0.0.1")
        assert r.contains(Host("h", "10.0.0.1"))

    def test_from_text(self):
        r = Range.from_text("r", "10.0.0.1-10.0.0.9")
        assert r.match(Range("other", "10.0.0.1", "10.0.0.9"))

    @pytest.mark.parametrize("text", ["10.0.0.1", "10.0.0.1-10.0.0.2-10.0.0.3", "x-y"])
    def test_from_text_rejects(self, text):
        with pytest.raises(ValidationError):
            Range.from_text("r", text)

    def test_contains(self, dhcp):
        assert dhcp.contains(Host("h", "192.168.1.100"))
        assert dhcp.contains(Host("h", "192.168.1.200"))
        assert not dhcp.contains(Host("h", "192.168.1.201"))
        assert dhcp.contains(Network.from_cidr("n", "192.168.1.128/26"))
        assert not dhcp.contains(Network.from_cidr("n", "192.168.1.0/24"))

    def test_match_ignores_name(self, dhcp):
        assert dhcp.match(Range("other", "192.168.1.100", "192.168.1.200"))
        assert not dhcp.match(Range("dhcp", "192.168.1.100", "192.168.1.199"))


class TestGroupArgument:
    def test_network_contains_group(self, lan, dhcp):
        grp = Group("g")
        grp.add(dhcp)
        grp.add(Host("h", "192.168.1.7"))
        assert lan.contains(grp)
        grp.add(Host("outside", "10.0.0.1"))
        assert not lan.contains(grp)

    def test_empty_group_not_contained(self, dhcp):
        assert not dhcp.contains(Group("empty"))
