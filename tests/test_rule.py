"""Unit tests for rules and rule component selectors."""

from wherecp.model.groups import Group, PortGroup
from wherecp.model.objects import Host, Network, Port, PortRange
from wherecp.model.policy import SELECTORS, Rule, in_any, in_destination, in_service, in_source


class TestSelectors:
    def test_components(self, rule):
        assert in_source(rule) is rule.source
        assert in_destination(rule) is rule.destination
        assert in_service(rule) is rule.service

    def test_any_nests_source_and_destination(self, rule):
        merged = in_any(rule)
        assert merged.name == "any"
        assert merged.groups == [rule.destination, rule.source]
        assert merged.hosts == [] and merged.networks == [] and merged.ranges == []

    def test_any_is_transient(self, rule):
        assert in_any(rule) is not in_any(rule)
        count = rule.source.count()
        in_any(rule)
        assert rule.source.count() == count

    def test_selector_table(self):
        assert set(SELECTORS) == {"source", "destination", "service", "any"}


class TestRule:
    def test_has(self, rule):
        gw = Host("probe", "192.168.1.1")
        assert rule.has(gw, in_source)
        assert not rule.has(gw, in_destination)
        assert rule.has(gw, in_any)
        assert rule.has(Host("probe", "8.8.8.8"), in_any)

    def test_has_network_is_exact(self, rule):
        assert rule.has(Network.from_cidr("probe", "10.0.0.0/8"), in_source)
        assert not rule.has(Network.from_cidr("probe", "10.1.0.0/16"), in_source)

    def test_contains_net(self, rule):
        assert rule.contains_net(Network.from_cidr("probe", "10.1.0.0/16"), in_source)
        assert rule.contains_net(Host("probe", "10.200.0.1"), in_any)
        assert not rule.contains_net(Host("probe", "11.0.0.1"), in_any)

    def test_contains_port(self, rule):
        assert rule.contains_port(Port("probe", 8050, "tcp"))
        assert rule.contains_port(PortRange("probe", 8000, 8100, "tcp"))
        assert not rule.contains_port(Port("probe", 53, "tcp"))

    def test_components_are_shared(self, rule):
        rule.destination.add(Host("late", "1.1.1.1"))
        assert rule.has(Host("probe", "1.1.1.1"), in_destination)

    def test_action_name(self):
        assert Rule(1, Group("s"), Group("d"), PortGroup("v")).action_name == "allow"
        assert Rule(1, Group("s"), Group("d"), PortGroup("v"), action=False).action_name == "deny"

    def test_str(self, rule):
        assert str(rule) == "rule 10"
