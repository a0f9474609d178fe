"""Address and service object data models."""

from dataclasses import dataclass, field
from enum import IntEnum, auto
from typing import Union

from ..defaults import PORT_MAX, PORT_MIN
from ..util import (
    AddressMaskMismatchError,
    InvalidAddressError,
    InvalidMaskError,
    InvalidPortError,
    InvalidRangeError,
    UnknownProtocolError,
    new_uid,
)
from .address import (
    Address,
    NetworkInterval,
    broadcast,
    is_netmask,
    mask_to_prefix,
    prefix_to_mask,
)


def _covers(interval, other, interval_type) -> bool:
    """True if everything ``other`` unpacks to lies inside ``interval``.

    Objects from a different space (ports vs addresses) are never covered.
    """
    unpacked = other.unpack()
    if isinstance(unpacked, interval_type):
        return interval.contains(unpacked)
    if not isinstance(unpacked, list) or not unpacked or not all(isinstance(i, interval_type) for i in unpacked):
        return False
    return all(interval.contains(i) for i in unpacked)


def _parse_mask(value: Union[str, int, Address]) -> Address:
    """Accept a dotted-quad netmask, a prefix length or an Address."""
    if isinstance(value, int) or (isinstance(value, str) and value.isdigit()):
        return prefix_to_mask(value)
    try:
        netmask = Address.parse(value)
    except InvalidAddressError:
        raise InvalidMaskError(f"invalid subnet mask: {value!r}") from None
    if not is_netmask(netmask):
        raise InvalidMaskError(f"invalid subnet mask: {netmask}")
    return netmask


@dataclass(eq=False)
class Host:
    """A single IPv4 address."""

    name: str
    address: Address
    comment: str = ""
    uid: str = field(default_factory=new_uid)

    def __post_init__(self):
        self.address = Address.parse(self.address)

    def unpack(self) -> NetworkInterval:
        return NetworkInterval(self.address, self.address)

    def match(self, other) -> bool:
        return isinstance(other, Host) and self.address == other.address

    def contains(self, other) -> bool:
        # A host only contains an identical host.
        return self.match(other)

    def __str__(self) -> str:
        return f"host {self.name} ({self.address})"


@dataclass(eq=False)
class Network:
    """An IPv4 subnet.

    ``address`` must be the base address of the subnet: ``192.168.1.0`` with
    mask ``255.255.255.0`` is valid, ``192.168.1.2`` is rejected rather than
    silently masked.
    """

    name: str
    address: Address
    mask: Address
    comment: str = ""
    uid: str = field(default_factory=new_uid)

    def __post_init__(self):
        self.address = Address.parse(self.address)
        self.mask = _parse_mask(self.mask)
        if self.address & self.mask != self.address:
            raise AddressMaskMismatchError(self.address, self.mask)

    @classmethod
    def from_cidr(cls, name: str, cidr: str, comment: str = "") -> "Network":
        """Build a network from ``a.b.c.d/len`` notation."""
        addr, sep, prefix = cidr.strip().partition("/")
        if not sep:
            raise InvalidMaskError(f"missing prefix length: {cidr!r}")
        return cls(name, addr, prefix_to_mask(prefix), comment)

    @property
    def prefixlen(self) -> int:
        return mask_to_prefix(self.mask)

    @property
    def cidr(self) -> str:
        return f"{self.address}/{self.prefixlen}"

    def unpack(self) -> NetworkInterval:
        return NetworkInterval(self.address, broadcast(self.address, self.mask))

    def match(self, other) -> bool:
        return (
            isinstance(other, Network)
            and self.address == other.address
            and self.mask == other.mask
        )

    def contains(self, other) -> bool:
        return _covers(self.unpack(), other, NetworkInterval)

    def __str__(self) -> str:
        return f"network {self.name} ({self.cidr})"


@dataclass(eq=False)
class Range:
    """An inclusive range of IPv4 addresses."""

    name: str
    start_address: Address
    end_address: Address
    comment: str = ""
    uid: str = field(default_factory=new_uid)

    def __post_init__(self):
        self.start_address = Address.parse(self.start_address)
        self.end_address = Address.parse(self.end_address)
        if self.start_address > self.end_address:
            raise InvalidRangeError(self.start_address, self.end_address)

    @classmethod
    def from_text(cls, name: str, text: str, comment: str = "") -> "Range":
        """Build a range from ``start-end`` notation, e.g. ``10.0.0.1-10.0.0.9``."""
        parts = text.strip().split("-")
        if len(parts) != 2:
            raise InvalidAddressError(f"invalid range string: {text!r}")
        return cls(name, parts[0], parts[1], comment)

    def unpack(self) -> NetworkInterval:
        return NetworkInterval(self.start_address, self.end_address)

    def match(self, other) -> bool:
        return (
            isinstance(other, Range)
            and self.start_address == other.start_address
            and self.end_address == other.end_address
        )

    def contains(self, other) -> bool:
        return _covers(self.unpack(), other, NetworkInterval)

    def __str__(self) -> str:
        return f"range {self.name} ({self.start_address}-{self.end_address})"


class Protocol(IntEnum):
    TCP = auto()
    UDP = auto()
    ICMP = auto()
    ARP = auto()
    IP = auto()

    @classmethod
    def parse(cls, value: Union[str, "Protocol"]) -> "Protocol":
        if isinstance(value, Protocol):
            return value
        if not isinstance(value, str):
            raise UnknownProtocolError(repr(value))
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise UnknownProtocolError(value) from None

    def __str__(self) -> str:
        return self.name.lower()


def _parse_port(value: Union[str, int]) -> int:
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPortError(f"invalid port number: {value!r}")
    if not PORT_MIN <= value <= PORT_MAX:
        raise InvalidPortError(f"port number out of range: {value}")
    return value


@dataclass(frozen=True, order=True)
class PortInterval:
    """Closed interval of port numbers qualified by protocol."""

    start: int
    end: int
    protocol: Protocol

    def contains(self, other: "PortInterval") -> bool:
        return (
            self.protocol == other.protocol
            and self.start <= other.start
            and other.end <= self.end
        )

    def __str__(self) -> str:
        if self.start == self.end:
            return f"{self.protocol}/{self.start}"
        return f"{self.protocol}/{self.start}-{self.end}"


@dataclass(eq=False)
class Port:
    name: str
    number: int
    protocol: Protocol
    comment: str = ""
    uid: str = field(default_factory=new_uid)

    def __post_init__(self):
        self.number = _parse_port(self.number)
        self.protocol = Protocol.parse(self.protocol)

    def unpack(self) -> PortInterval:
        return PortInterval(self.number, self.number, self.protocol)

    def match(self, other) -> bool:
        return (
            isinstance(other, Port)
            and self.number == other.number
            and self.protocol == other.protocol
        )

    def contains(self, other) -> bool:
        return self.match(other)

    def __str__(self) -> str:
        return f"port {self.name} ({self.protocol}/{self.number})"


@dataclass(eq=False)
class PortRange:
    name: str
    start: int
    end: int
    protocol: Protocol
    comment: str = ""
    uid: str = field(default_factory=new_uid)

    def __post_init__(self):
        self.start = _parse_port(self.start)
        self.end = _parse_port(self.end)
        self.protocol = Protocol.parse(self.protocol)
        if self.start > self.end:
            raise InvalidRangeError(self.start, self.end)

    def unpack(self) -> PortInterval:
        return PortInterval(self.start, self.end, self.protocol)

    def match(self, other) -> bool:
        return (
            isinstance(other, PortRange)
            and self.start == other.start
            and self.end == other.end
            and self.protocol == other.protocol
        )

    def contains(self, other) -> bool:
        return _covers(self.unpack(), other, PortInterval)

    def __str__(self) -> str:
        return f"port range {self.name} ({self.protocol}/{self.start}-{self.end})"
