"""Section-specific extractors that read a YAML policy file and produce model objects.

Policy file layout:

    hosts:
      - {name: web1, address: 192.168.1.10, comment: "web server"}
    networks:
      - {name: lan, address: 192.168.1.0/24}
      - {name: dmz, address: 10.0.0.0, mask: 255.255.255.0}
    ranges:
      - {name: dhcp, start: 192.168.1.100, end: 192.168.1.200}
    groups:
      - {name: internal, members: [lan, dhcp]}
    ports:
      - {name: https, protocol: tcp, port: 443}
    port_ranges:
      - {name: high, protocol: tcp, start: 8000, end: 8100}
    port_groups:
      - {name: web, members: [https, high]}
    rules:
      - {number: 10, source: [internal], destination: [web1], service: [web], action: allow}

Group members and rule components refer to objects by name.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

import yaml

from ..defaults import POLICY_ACTIONS
from ..model.config import Inventory
from ..model.groups import Group, PortGroup
from ..model.objects import Host, Network, Port, PortRange, Range
from ..model.policy import Rule
from ..util import MembershipError, PolicyLoadError, ValidationError

log = logging.getLogger(__name__)


def _entries(data: Dict[str, Any], section: str) -> List[Dict[str, Any]]:
    entries = data.get(section) or []
    if not isinstance(entries, list):
        raise PolicyLoadError("section must be a list", section)
    for entry in entries:
        if not isinstance(entry, dict):
            raise PolicyLoadError(f"entry must be a mapping: {entry!r}", section)
    return entries


def _require(entry: Dict[str, Any], key: str, section: str) -> Any:
    value = entry.get(key)
    if value is None or value == "":
        label = entry.get("name", entry.get("number", "?"))
        raise PolicyLoadError(f"'{label}' is missing '{key}'", section)
    return value


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def extract_hosts(data: Dict[str, Any]) -> List[Host]:
    """Extract from the 'hosts' section."""
    results = []
    for entry in _entries(data, "hosts"):
        name = _text(_require(entry, "name", "hosts"))
        try:
            results.append(Host(name, _text(_require(entry, "address", "hosts")), _text(entry.get("comment"))))
        except ValidationError as exc:
            raise PolicyLoadError(f"host '{name}': {exc}", "hosts") from exc
    return results


def extract_networks(data: Dict[str, Any]) -> List[Network]:
    """Extract from the 'networks' section.

    Accepts either CIDR notation in 'address' or a separate 'mask'
    (dotted quad or prefix length).
    """
    results = []
    for entry in _entries(data, "networks"):
        name = _text(_require(entry, "name", "networks"))
        address = _text(_require(entry, "address", "networks"))
        comment = _text(entry.get("comment"))
        try:
            if entry.get("mask") is not None:
                results.append(Network(name, address, _text(entry["mask"]), comment))
            else:
                results.append(Network.from_cidr(name, address, comment))
        except ValidationError as exc:
            raise PolicyLoadError(f"network '{name}': {exc}", "networks") from exc
    return results


def extract_ranges(data: Dict[str, Any]) -> List[Range]:
    """Extract from the 'ranges' section ('start'/'end' or 'range: a-b')."""
    results = []
    for entry in _entries(data, "ranges"):
        name = _text(_require(entry, "name", "ranges"))
        comment = _text(entry.get("comment"))
        try:
            if entry.get("range"):
                results.append(Range.from_text(name, _text(entry["range"]), comment))
            else:
                start = _text(_require(entry, "start", "ranges"))
                end = _text(_require(entry, "end", "ranges"))
                results.append(Range(name, start, end, comment))
        except ValidationError as exc:
            raise PolicyLoadError(f"range '{name}': {exc}", "ranges") from exc
    return results


def extract_ports(data: Dict[str, Any]) -> List[Port]:
    """Extract from the 'ports' section."""
    results = []
    for entry in _entries(data, "ports"):
        name = _text(_require(entry, "name", "ports"))
        try:
            results.append(Port(
                name,
                _require(entry, "port", "ports"),
                _text(entry.get("protocol", "tcp")),
                _text(entry.get("comment")),
            ))
        except ValidationError as exc:
            raise PolicyLoadError(f"port '{name}': {exc}", "ports") from exc
    return results


def extract_port_ranges(data: Dict[str, Any]) -> List[PortRange]:
    """Extract from the 'port_ranges' section."""
    results = []
    for entry in _entries(data, "port_ranges"):
        name = _text(_require(entry, "name", "port_ranges"))
        try:
            results.append(PortRange(
                name,
                _require(entry, "start", "port_ranges"),
                _require(entry, "end", "port_ranges"),
                _text(entry.get("protocol", "tcp")),
                _text(entry.get("comment")),
            ))
        except ValidationError as exc:
            raise PolicyLoadError(f"port range '{name}': {exc}", "port_ranges") from exc
    return results


def _add_members(grp, names: Iterable[Any], lookup: Callable[[str], Optional[Any]], section: str):
    for member_name in names:
        member = lookup(_text(member_name))
        if member is None:
            raise PolicyLoadError(f"'{grp.name}' refers to unknown object '{member_name}'", section)
        try:
            grp.add(member)
        except MembershipError as exc:
            raise PolicyLoadError(f"'{grp.name}': {exc}", section) from exc


def _member_names(entry: Dict[str, Any], key: str, section: str) -> List[Any]:
    names = entry.get(key) or []
    if isinstance(names, str):
        names = [names]
    if not isinstance(names, list):
        raise PolicyLoadError(f"'{key}' must be a list of names", section)
    return names


def extract_groups(data: Dict[str, Any], inventory: Inventory, section: str = "groups", factory=Group,
                   lookup: Optional[Callable[[str], Optional[Any]]] = None) -> list:
    """Extract from a group section.

    Groups are created first and filled second, so members may refer to
    groups defined further down the section.
    """
    entries = _entries(data, section)
    lookup = lookup or inventory.find_address
    created: Dict[str, Any] = {}
    for entry in entries:
        name = _text(_require(entry, "name", section))
        if name in created or lookup(name) is not None:
            raise PolicyLoadError(f"duplicate object name '{name}'", section)
        created[name] = factory(name, _text(entry.get("comment")))

    def resolve(name: str):
        return created.get(name) or lookup(name)

    for entry in entries:
        grp = created[_text(entry["name"])]
        _add_members(grp, _member_names(entry, "members", section), resolve, section)
        log.debug(f"Extracted {grp} with {grp.count()} member(s)")
    return list(created.values())


def extract_rules(data: Dict[str, Any], inventory: Inventory) -> List[Rule]:
    """Extract from the 'rules' section.

    Each rule gets its own source, destination and service groups holding
    the named objects.
    """
    results = []
    for entry in _entries(data, "rules"):
        number = _require(entry, "number", "rules")
        if isinstance(number, bool) or not isinstance(number, int):
            raise PolicyLoadError(f"rule number must be an integer: {number!r}", "rules")

        action = entry.get("action", "allow")
        if isinstance(action, bool):
            allowed = action
        elif _text(action).lower() in POLICY_ACTIONS:
            allowed = POLICY_ACTIONS[_text(action).lower()]
        else:
            raise PolicyLoadError(f"rule {number}: unknown action '{action}'", "rules")

        source = Group(f"rule-{number}-source")
        destination = Group(f"rule-{number}-destination")
        service = PortGroup(f"rule-{number}-service")
        _add_members(source, _member_names(entry, "source", "rules"), inventory.find_address, "rules")
        _add_members(destination, _member_names(entry, "destination", "rules"), inventory.find_address, "rules")
        _add_members(service, _member_names(entry, "service", "rules"), inventory.find_service, "rules")

        results.append(Rule(number, source, destination, service, allowed, _text(entry.get("comment"))))
    return results


def _store_unique(store, objs: list, find, section: str):
    for obj in objs:
        if find(obj.name) is not None:
            raise PolicyLoadError(f"duplicate object name '{obj.name}'", section)
        store.create(obj)


def extract_all(data: Dict[str, Any], inventory: Optional[Inventory] = None) -> Inventory:
    """Run every extractor and return the filled inventory."""
    inventory = inventory or Inventory()

    _store_unique(inventory.hosts, extract_hosts(data), inventory.find_address, "hosts")
    _store_unique(inventory.networks, extract_networks(data), inventory.find_address, "networks")
    _store_unique(inventory.ranges, extract_ranges(data), inventory.find_address, "ranges")
    for grp in extract_groups(data, inventory):
        inventory.groups.create(grp)

    _store_unique(inventory.ports, extract_ports(data), inventory.find_service, "ports")
    _store_unique(inventory.port_ranges, extract_port_ranges(data), inventory.find_service, "port_ranges")
    port_groups = extract_groups(data, inventory, section="port_groups", factory=PortGroup,
                                 lookup=inventory.find_service)
    for grp in port_groups:
        inventory.port_groups.create(grp)

    for rule in extract_rules(data, inventory):
        inventory.rules.insert(rule)

    log.info(f"Loaded {len(inventory.rules)} rule(s), {len(inventory.groups)} group(s), "
             f"{len(inventory.port_groups)} port group(s)")
    return inventory


def load_policy(text: str, source_file: str = "") -> Inventory:
    """Load a YAML policy document into an Inventory."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise PolicyLoadError(f"invalid YAML: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PolicyLoadError("policy file must be a mapping of sections")

    inventory = Inventory(name=_text(data.get("name")), source_file=source_file)
    return extract_all(data, inventory)
