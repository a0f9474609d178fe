"""Exceptions, uid generation and logging setup."""

import logging
import uuid


class WherecpError(Exception):
    """Base class for every error raised by wherecp."""


class ValidationError(WherecpError):
    """Raised when an object is constructed from invalid values."""


class InvalidAddressError(ValidationError):
    pass


class InvalidMaskError(ValidationError):
    pass


class AddressMaskMismatchError(ValidationError):
    """Raised when a network address is not the base address of its subnet."""

    def __init__(self, address, mask):
        self.address = address
        self.mask = mask
        super().__init__(f"address not the network address for supplied subnet: {address}/{mask}")


class InvalidRangeError(ValidationError):
    """Raised when a range starts after it ends."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"range start must not be greater than the end: {start}-{end}")


class InvalidPortError(ValidationError):
    pass


class UnknownProtocolError(ValidationError):
    def __init__(self, protocol: str):
        self.protocol = protocol
        super().__init__(f"invalid protocol: {protocol!r}")


class MembershipError(WherecpError):
    """Raised for invalid group membership operations."""


class DuplicateMemberError(MembershipError):
    def __init__(self, obj, group_name: str):
        self.obj = obj
        self.group_name = group_name
        super().__init__(f"object is already a member of group '{group_name}': {obj}")


class CyclicMembershipError(MembershipError):
    def __init__(self, member_name: str, group_name: str):
        super().__init__(f"adding group '{member_name}' to '{group_name}' would create a cycle")


class UnsupportedObjectError(MembershipError):
    def __init__(self, obj, context: str = ""):
        self.obj = obj
        where = f" for {context}" if context else ""
        super().__init__(f"unsupported object type{where}: {type(obj).__name__}")


class QueryError(WherecpError):
    """Raised for malformed query text."""

    def __init__(self, message: str, pos: int = -1):
        self.pos = pos
        super().__init__(f"offset {pos}: {message}" if pos >= 0 else message)


class QueryScanError(QueryError):
    pass


class QueryParseError(QueryError):
    pass


class StoreError(WherecpError):
    pass


class NotFoundError(StoreError):
    def __init__(self, kind: str, uid: str):
        self.uid = uid
        super().__init__(f"{kind} not found: {uid}")


class DuplicateObjectError(StoreError):
    def __init__(self, kind: str, uid: str):
        self.uid = uid
        super().__init__(f"{kind} already in store: {uid}")


class PolicyLoadError(WherecpError):
    """Raised when a policy file cannot be turned into objects."""

    def __init__(self, message: str, section: str = ""):
        self.section = section
        super().__init__(f"[{section}] {message}" if section else message)


def new_uid() -> str:
    return str(uuid.uuid4())


def setup_logging(verbose: bool = False):
    """Configure logging for the query tool."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )
