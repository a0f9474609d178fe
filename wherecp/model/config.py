"""Top-level policy container."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from ..store import HostStore, NetworkStore, ObjectStore, RangeStore, RuleStore
from .groups import Group, NetworkMember, PortGroup, PortMember
from .objects import Port, PortRange


def _store(kind: str) -> ObjectStore:
    store: ObjectStore = ObjectStore()
    store.kind = kind
    return store


@dataclass
class Inventory:
    """Holds every object of a loaded policy, one store per kind."""

    # Address objects
    hosts: HostStore = field(default_factory=HostStore)
    networks: NetworkStore = field(default_factory=NetworkStore)
    ranges: RangeStore = field(default_factory=RangeStore)
    groups: ObjectStore[Group] = field(default_factory=lambda: _store("group"))

    # Service objects
    ports: ObjectStore[Port] = field(default_factory=lambda: _store("port"))
    port_ranges: ObjectStore[PortRange] = field(default_factory=lambda: _store("port range"))
    port_groups: ObjectStore[PortGroup] = field(default_factory=lambda: _store("port group"))

    # Policy
    rules: RuleStore = field(default_factory=RuleStore)

    # Metadata
    name: str = ""
    source_file: str = ""

    def find_group(self, name: str) -> Optional[Group]:
        found = self.groups.find(name)
        return found[0] if found else None

    def find_address(self, name: str) -> Optional[NetworkMember]:
        """Look up a host, network, range or group by name."""
        for store in (self.hosts, self.networks, self.ranges, self.groups):
            found = store.find(name)
            if found:
                return found[0]
        return None

    def find_service(self, name: str) -> Optional[PortMember]:
        """Look up a port, port range or port group by name."""
        for store in (self.ports, self.port_ranges, self.port_groups):
            found = store.find(name)
            if found:
                return found[0]
        return None

    def group_catalog(self) -> Dict[str, Union[Group, PortGroup]]:
        """Name -> group mapping used to resolve group names in queries."""
        catalog: Dict[str, Union[Group, PortGroup]] = {}
        for grp in self.port_groups.all():
            catalog[grp.name] = grp
        for grp in self.groups.all():
            catalog[grp.name] = grp
        return catalog
