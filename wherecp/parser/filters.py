"""Predicate combinators evaluated against a Rule.

A predicate is a function ``Rule -> bool``; errors raised while evaluating
one propagate to the caller. Predicates are plain closures and can be
evaluated against any number of rules.

Example:
    pred = and_(has(host_a, in_source), has(host_b, in_destination))
    pred(rule)
"""

from typing import Callable

from ..model.policy import Rule, Selector

Predicate = Callable[[Rule], bool]


def and_(*preds: Predicate) -> Predicate:
    """True only if every predicate is true; stops at the first false."""

    def evaluate(rule: Rule) -> bool:
        for pred in preds:
            if not pred(rule):
                return False
        return True

    return evaluate


def or_(*preds: Predicate) -> Predicate:
    """True if any predicate is true; stops at the first true."""

    def evaluate(rule: Rule) -> bool:
        for pred in preds:
            if pred(rule):
                return True
        return False

    return evaluate


def not_(pred: Predicate) -> Predicate:
    def evaluate(rule: Rule) -> bool:
        return not pred(rule)

    return evaluate


def has(obj, selector: Selector) -> Predicate:
    """True if the selected rule component has ``obj`` as a member."""

    def evaluate(rule: Rule) -> bool:
        return rule.has(obj, selector)

    return evaluate


def contains_net(obj, selector: Selector) -> Predicate:
    """True if the selected address component covers ``obj``."""

    def evaluate(rule: Rule) -> bool:
        return rule.contains_net(obj, selector)

    return evaluate


def contains_port(obj) -> Predicate:
    """True if the rule's service covers ``obj``."""

    def evaluate(rule: Rule) -> bool:
        return rule.contains_port(obj)

    return evaluate
