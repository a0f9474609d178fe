"""Firewall rule model and the selectors that pick one of its components."""

from dataclasses import dataclass, field
from typing import Callable, Union

from ..defaults import ACTION_NAMES, ANY_GROUP_NAME
from ..util import new_uid
from .groups import Group, PortGroup, _name_key


@dataclass(eq=False)
class Rule:
    """A firewall rule.

    The component groups are referenced, not copied: changes made to them by
    their owners are visible through the rule. A rule is updated by building
    a new one and replacing it wholesale.
    """

    number: int
    source: Group
    destination: Group
    service: PortGroup
    action: bool = True
    comment: str = ""
    uid: str = field(default_factory=new_uid)

    @property
    def action_name(self) -> str:
        return ACTION_NAMES[bool(self.action)]

    def has(self, obj, selector: "Selector") -> bool:
        return selector(self).has_object(obj)

    def contains_net(self, obj, selector: "Selector") -> bool:
        return selector(self).contains(obj)

    def contains_port(self, obj) -> bool:
        return self.service.contains(obj)

    def __str__(self) -> str:
        return f"rule {self.number}"


Selector = Callable[[Rule], Union[Group, PortGroup]]


def in_source(rule: Rule) -> Group:
    return rule.source


def in_destination(rule: Rule) -> Group:
    return rule.destination


def in_service(rule: Rule) -> PortGroup:
    return rule.service


def in_any(rule: Rule) -> Group:
    """Transient group nesting the rule's source and destination.

    The nested groups are the rule's own objects. The merged group is built
    for one evaluation and never stored.
    """
    merged = Group(ANY_GROUP_NAME, comment=f"source and destination of {rule}")
    merged.groups = sorted([rule.source, rule.destination], key=_name_key)
    return merged


SELECTORS = {
    "source": in_source,
    "destination": in_destination,
    "service": in_service,
    "any": in_any,
}
