"""In-memory object stores keyed by uid.

Stores own the only mutable references to their collections and guard them
with a lock, so they can be shared between threads. Objects are replaced
wholesale on update, never mutated in place.
"""

import bisect
import logging
import threading
from typing import Generic, Iterable, List, Optional, TypeVar

from .model.address import Address
from .model.objects import Host, Network, Range
from .model.policy import Rule
from .util import DuplicateObjectError, NotFoundError

log = logging.getLogger(__name__)

T = TypeVar("T")


class ObjectStore(Generic[T]):
    kind = "object"

    def __init__(self, objects: Optional[Iterable[T]] = None):
        self._objects: List[T] = []
        self._lock = threading.RLock()
        for obj in objects or ():
            self.create(obj)

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)

    def _index(self, uid: str) -> int:
        for i, obj in enumerate(self._objects):
            if obj.uid == uid:
                return i
        raise NotFoundError(self.kind, uid)

    def _insert(self, obj: T):
        self._objects.append(obj)

    def all(self) -> List[T]:
        """Return a copy of the stored objects."""
        with self._lock:
            return list(self._objects)

    def get(self, uid: str) -> T:
        with self._lock:
            return self._objects[self._index(uid)]

    def exists(self, uid: str) -> bool:
        with self._lock:
            return any(obj.uid == uid for obj in self._objects)

    def create(self, obj: T):
        with self._lock:
            if self.exists(obj.uid):
                raise DuplicateObjectError(self.kind, obj.uid)
            self._insert(obj)
        log.debug(f"Stored {self.kind} {obj.uid}")

    def update(self, uid: str, updated: T):
        with self._lock:
            i = self._index(uid)
            # The replacement may take a new uid, but never one already stored.
            if updated.uid != uid and self.exists(updated.uid):
                raise DuplicateObjectError(self.kind, updated.uid)
            del self._objects[i]
            self._insert(updated)
        log.debug(f"Updated {self.kind} {uid}")

    def delete(self, uid: str):
        with self._lock:
            del self._objects[self._index(uid)]
        log.debug(f"Deleted {self.kind} {uid}")

    def find(self, name: str) -> List[T]:
        """Return every stored object with the given name."""
        with self._lock:
            return [obj for obj in self._objects if getattr(obj, "name", None) == name]


class HostStore(ObjectStore[Host]):
    kind = "host"

    def with_address(self, address: str) -> List[Host]:
        """Return every host whose address equals ``address``."""
        wanted = Address.parse(address)
        with self._lock:
            return [h for h in self._objects if h.address == wanted]


class NetworkStore(ObjectStore[Network]):
    kind = "network"

    def with_address(self, cidr: str) -> List[Network]:
        """Return every network equal to ``cidr``, e.g. ``192.168.0.0/24``."""
        wanted = Network.from_cidr("", cidr)
        with self._lock:
            return [n for n in self._objects if n.match(wanted)]


class RangeStore(ObjectStore[Range]):
    kind = "range"

    def with_address(self, text: str) -> List[Range]:
        """Return every range equal to ``text``, e.g. ``10.0.0.1-10.0.0.9``."""
        wanted = Range.from_text("", text)
        with self._lock:
            return [r for r in self._objects if r.match(wanted)]


class RuleStore(ObjectStore[Rule]):
    """Rules ordered by rule number; equal numbers keep insertion order."""

    kind = "rule"

    def _insert(self, rule: Rule):
        i = bisect.bisect_right(self._objects, rule.number, key=lambda r: r.number)
        self._objects.insert(i, rule)

    def insert(self, rule: Rule):
        self.create(rule)
