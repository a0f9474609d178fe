"""Recursive, sorted group containers for address and service objects.

Each member collection is kept in a total order so that membership checks
can binary search and two groups can be compared pairwise:

    hosts            by address
    networks/ranges  by (start, end), smaller interval first on equal start
    ports            by (number, protocol)
    port ranges      by (start, end, protocol)
    nested groups    by name (case-sensitive)
"""

import bisect
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Union

from ..util import CyclicMembershipError, DuplicateMemberError, UnsupportedObjectError, new_uid
from .objects import Host, Network, Port, PortRange, Range

log = logging.getLogger(__name__)


def _host_key(host: Host):
    return host.address


def _interval_key(obj):
    return obj.unpack()


def _port_key(port: Port):
    return (port.number, port.protocol)


def _name_key(grp):
    return grp.name


def _candidates(items: list, key_value, key) -> list:
    """Return the members of a sorted list whose sort key equals ``key_value``."""
    if not items:
        return []
    # Single element lists are checked directly instead of searched.
    if len(items) == 1:
        return items[:1]
    lo = bisect.bisect_left(items, key_value, key=key)
    hi = bisect.bisect_right(items, key_value, lo=lo, key=key)
    return items[lo:hi]


class _SortedGroup:
    """Algorithms shared by Group and PortGroup.

    Subclasses declare their leaf collections in ``_members`` as
    ``(member type, attribute name, sort key)``; nested groups of the same
    class always live in ``groups`` ordered by name.
    """

    _kind = "group"
    _members: tuple = ()

    def _slot_for(self, obj):
        for member_type, attr, key in self._members:
            if isinstance(obj, member_type):
                return getattr(self, attr), key
        if isinstance(obj, type(self)):
            return self.groups, _name_key
        raise UnsupportedObjectError(obj, f"{self._kind} '{self.name}'")

    def _walk(self) -> Iterator["_SortedGroup"]:
        """Yield this group and every nested group depth first, each once."""
        seen = set()
        stack = [self]
        while stack:
            grp = stack.pop()
            if id(grp) in seen:
                continue
            seen.add(id(grp))
            yield grp
            stack.extend(reversed(grp.groups))

    def _owns(self, obj) -> bool:
        items, key = self._slot_for(obj)
        return any(candidate.match(obj) for candidate in _candidates(items, key(obj), key))

    def _covers(self, obj) -> bool:
        for _, attr, _ in self._members:
            if any(member.contains(obj) for member in getattr(self, attr)):
                return True
        return False

    def add(self, obj):
        """Insert ``obj`` into its sorted collection.

        Raises DuplicateMemberError if the object (or an equal-valued twin) is
        already a member here or in a nested group.
        """
        items, key = self._slot_for(obj)
        if self.has_object(obj):
            raise DuplicateMemberError(obj, self.name)
        if isinstance(obj, type(self)) and any(grp is self for grp in obj._walk()):
            raise CyclicMembershipError(obj.name, self.name)

        # Insert after members with an equal key so neighbours keep their order.
        index = bisect.bisect_right(items, key(obj), key=key)
        items.insert(index, obj)
        log.debug(f"Added {obj} to {self._kind} '{self.name}' at index {index}")

    def has_object(self, obj) -> bool:
        """Exact membership: true if this group or any nested group owns a
        member matching ``obj``. Stops at the first hit."""
        self._slot_for(obj)
        return any(grp._owns(obj) for grp in self._walk())

    def contains(self, obj) -> bool:
        """Loose containment: true if a member here or in a nested group
        covers ``obj``. A group argument is contained when all of its
        members are."""
        if isinstance(obj, type(self)):
            members = list(obj.members())
            return bool(members) and all(self.contains(m) for m in members)
        self._slot_for(obj)
        return any(grp._covers(obj) for grp in self._walk())

    def match(self, other) -> bool:
        """True if both groups share a name and identical members."""
        return isinstance(other, type(self)) and self.name == other.name and self.match_content(other)

    def match_content(self, other) -> bool:
        """True if both groups hold the same members.

        Collections are sorted, so equal groups have equal members at the
        same index.
        """
        seen = set()
        stack = [(self, other)]
        while stack:
            a, b = stack.pop()
            if (id(a), id(b)) in seen:
                continue
            seen.add((id(a), id(b)))
            for _, attr, _ in self._members:
                mine, theirs = getattr(a, attr), getattr(b, attr)
                if len(mine) != len(theirs):
                    return False
                if not all(x.match(y) for x, y in zip(mine, theirs)):
                    return False
            if len(a.groups) != len(b.groups):
                return False
            for x, y in zip(a.groups, b.groups):
                if not isinstance(y, type(x)) or x.name != y.name:
                    return False
                stack.append((x, y))
        return True

    def members(self) -> Iterator:
        """Iterate every leaf member reachable from this group."""
        for grp in self._walk():
            for _, attr, _ in self._members:
                yield from list(getattr(grp, attr))

    def unpack(self) -> list:
        """Fresh snapshot of every member interval, nested groups included."""
        return [member.unpack() for member in self.members()]

    def count(self) -> int:
        """Number of direct members."""
        return sum(len(getattr(self, attr)) for _, attr, _ in self._members) + len(self.groups)

    def __str__(self) -> str:
        return f"{self._kind} {self.name}"


@dataclass(eq=False)
class Group(_SortedGroup):
    """Container for hosts, networks, ranges and nested groups."""

    name: str
    comment: str = ""
    uid: str = field(default_factory=new_uid)
    hosts: List[Host] = field(default_factory=list, init=False)
    networks: List[Network] = field(default_factory=list, init=False)
    ranges: List[Range] = field(default_factory=list, init=False)
    groups: List["Group"] = field(default_factory=list, init=False)

    _members = (
        (Host, "hosts", _host_key),
        (Network, "networks", _interval_key),
        (Range, "ranges", _interval_key),
    )


@dataclass(eq=False)
class PortGroup(_SortedGroup):
    """Container for ports, port ranges and nested port groups."""

    name: str
    comment: str = ""
    uid: str = field(default_factory=new_uid)
    ports: List[Port] = field(default_factory=list, init=False)
    ranges: List[PortRange] = field(default_factory=list, init=False)
    groups: List["PortGroup"] = field(default_factory=list, init=False)

    _kind = "port group"
    _members = (
        (Port, "ports", _port_key),
        (PortRange, "ranges", _interval_key),
    )


NetworkMember = Union[Host, Network, Range, Group]
PortMember = Union[Port, PortRange, PortGroup]
