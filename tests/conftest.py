"""Shared pytest fixtures for model, query and loader tests."""

import textwrap

import pytest

from wherecp.model.groups import Group, PortGroup
from wherecp.model.objects import Host, Network, Port, PortRange, Range
from wherecp.model.policy import Rule

POLICY_YAML = textwrap.dedent("""\
    name: office
    hosts:
      - {name: web1, address: 192.168.1.10, comment: "web server"}
      - {name: dns, address: 8.8.8.8}
      - {name: admin, address: 10.0.0.5}
    networks:
      - {name: lan, address: 192.168.1.0/24}
      - {name: dmz, address: 10.0.0.0, mask: 255.255.255.0}
    ranges:
      - {name: dhcp, start: 192.168.1.100, end: 192.168.1.200}
    groups:
      - {name: internal, members: [lan, inner]}
      - {name: inner, members: [dhcp]}
    ports:
      - {name: https, protocol: tcp, port: 443}
      - {name: domain, protocol: udp, port: 53}
    port_ranges:
      - {name: high, protocol: tcp, start: 8000, end: 8100}
    port_groups:
      - {name: web, members: [https, high]}
    rules:
      - {number: 20, source: [internal], destination: [dns], service: [domain], action: allow}
      - {number: 10, source: [lan], destination: [web1], service: [web], action: allow}
      - {number: 30, source: [admin], destination: [dmz], service: [https], action: deny, comment: "no admin"}
""")


def make_group(name, *members, cls=Group):
    grp = cls(name)
    for member in members:
        grp.add(member)
    return grp


@pytest.fixture
def lan():
    return Network.from_cidr("lan", "192.168.1.0/24")


@pytest.fixture
def web1():
    return Host("web1", "192.168.1.10")


@pytest.fixture
def dns():
    return Host("dns", "8.8.8.8")


@pytest.fixture
def rule(dns):
    """Rule 10: 192.168.1.1 and 10.0.0.0/8 to 8.8.8.8 on tcp/443 and udp/53."""
    source = make_group("rule-10-source", Host("gw", "192.168.1.1"), Network.from_cidr("ten", "10.0.0.0/8"))
    destination = make_group("rule-10-destination", dns)
    service = make_group(
        "rule-10-service",
        Port("https", 443, "tcp"),
        Port("domain", 53, "udp"),
        PortRange("high", 8000, 8100, "tcp"),
        cls=PortGroup,
    )
    return Rule(10, source, destination, service)


@pytest.fixture
def dhcp():
    return Range("dhcp", "192.168.1.100", "192.168.1.200")


@pytest.fixture
def policy_text():
    return POLICY_YAML


@pytest.fixture
def policy_file(tmp_path):
    path = tmp_path / "policy.yaml"
    path.write_text(POLICY_YAML, encoding="utf-8")
    return path
