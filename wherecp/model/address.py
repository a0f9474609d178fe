"""Fixed-width IPv4 address arithmetic and the interval every network object reduces to."""

import ipaddress
from dataclasses import dataclass
from typing import Union

from ..defaults import ADDRESS_BITS, ADDRESS_MAX
from ..util import InvalidAddressError, InvalidMaskError


@dataclass(frozen=True, order=True)
class Address:
    """A 32-bit unsigned IPv4 address.

    Supports ``&`` (mask), ``|``, ``~`` (complement, kept to 32 bits) and
    total ordering over the integer value.
    """

    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidAddressError(f"address value must be an integer: {self.value!r}")
        if not 0 <= self.value <= ADDRESS_MAX:
            raise InvalidAddressError(f"address value out of range: {self.value}")

    @classmethod
    def parse(cls, text: Union[str, "Address"]) -> "Address":
        """Parse a dotted-quad string, e.g. ``Address.parse('192.168.1.1')``."""
        if isinstance(text, Address):
            return text
        if not isinstance(text, str):
            raise InvalidAddressError(f"invalid address: {text!r}")
        try:
            return cls(int(ipaddress.IPv4Address(text.strip())))
        except ValueError:
            raise InvalidAddressError(f"invalid address: {text!r}") from None

    def __and__(self, other: "Address") -> "Address":
        return Address(self.value & other.value)

    def __or__(self, other: "Address") -> "Address":
        return Address(self.value | other.value)

    def __invert__(self) -> "Address":
        return Address(self.value ^ ADDRESS_MAX)

    def __str__(self) -> str:
        return str(ipaddress.IPv4Address(self.value))

    def __repr__(self) -> str:
        return f"Address('{self}')"


def mask(addr: Address, netmask: Address) -> Address:
    """Base address of the subnet ``addr`` lies in."""
    return addr & netmask


def broadcast(addr: Address, netmask: Address) -> Address:
    """Last address of the subnet ``addr`` lies in."""
    return addr | ~netmask


def is_netmask(netmask: Address) -> bool:
    """True when the mask is a run of ones followed by a run of zeros."""
    host_bits = (~netmask).value
    return host_bits & (host_bits + 1) == 0


def prefix_to_mask(prefix: Union[str, int]) -> Address:
    """Convert a prefix length to a netmask.

    Example: prefix_to_mask('24') -> Address('255.255.255.0')
    """
    if isinstance(prefix, str):
        if not prefix.isdigit():
            raise InvalidMaskError(f"invalid subnet mask: /{prefix}")
        prefix = int(prefix)
    if isinstance(prefix, bool) or not isinstance(prefix, int) or not 0 <= prefix <= ADDRESS_BITS:
        raise InvalidMaskError(f"invalid subnet mask: /{prefix}")
    return Address((ADDRESS_MAX << (ADDRESS_BITS - prefix)) & ADDRESS_MAX)


def mask_to_prefix(netmask: Address) -> int:
    return bin(netmask.value).count("1")


@dataclass(frozen=True, order=True)
class NetworkInterval:
    """Closed interval ``[start, end]`` in address space."""

    start: Address
    end: Address

    def contains(self, other: "NetworkInterval") -> bool:
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"
