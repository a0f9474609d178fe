"""Recursive-descent parser that compiles a query into a rule predicate.

Grammar:

    expr     := "(" keyword args ")"
    has      := "has" '"' literal '"' [selector]
    contains := "contains" '"' literal '"' [selector]
    selector := "in" side | "(" "in" side ")"
    and/or   := ("and" | "or") expr+
    not      := "not" expr

Literals are classified, in order, as a host (``192.168.1.1``), a network
(``192.168.1.0/24``), an address range (``10.0.0.1-10.0.0.9``), a service
(``tcp/443`` or ``tcp/8000-8100``) or, failing all of those, a group name.
"""

import logging
import re
from typing import Callable, Dict, List, Mapping, Optional

from ..defaults import QUERY_OBJECT_NAMES, SELECTOR_ALIASES
from ..model.groups import Group, PortGroup
from ..model.objects import Host, Network, Port, PortRange, Range
from ..model.policy import SELECTORS, Selector, in_any, in_service
from ..util import QueryParseError, QueryScanError, ValidationError
from .filters import Predicate, and_, contains_net, contains_port, has, not_, or_
from .tokenizer import Scanner, Token, TokenType

log = logging.getLogger(__name__)

_QUAD = r"\d{1,3}(?:\.\d{1,3}){3}"

HOST_PATTERN = re.compile(_QUAD)
NETWORK_PATTERN = re.compile(rf"({_QUAD})/(\d+)")
RANGE_PATTERN = re.compile(rf"({_QUAD})-({_QUAD})")
SERVICE_PATTERN = re.compile(r"([A-Za-z]+)/(\d+)(?:-(\d+))?")

SERVICE_TYPES = (Port, PortRange, PortGroup)


def _describe(tok: Token) -> str:
    if tok.type == TokenType.EOF:
        return "end of input"
    return f"{tok.type.name.lower()} {tok.value!r}"


class Parser:
    def __init__(self, scanner: Scanner, groups: Optional[Mapping[str, object]] = None):
        self.scanner = scanner
        # Name -> Group/PortGroup used to resolve group literals. Without a
        # catalog a group literal becomes an empty group of that name.
        self.groups = groups
        self._keywords: Dict[str, Callable[[], Predicate]] = {
            "has": self._parse_has,
            "contains": self._parse_contains,
            "and": self._parse_and,
            "or": self._parse_or,
            "not": self._parse_not,
        }

    def _next(self) -> Token:
        while True:
            tok = self.scanner.next_token()
            if tok.type == TokenType.ERROR:
                raise QueryScanError(tok.value, tok.pos)
            if tok.type != TokenType.NEWLINE:
                return tok

    def _expect(self, token_type: TokenType, what: str) -> Token:
        tok = self._next()
        if tok.type != token_type:
            raise QueryParseError(f"expected {what} but got {_describe(tok)}", tok.pos)
        return tok

    def parse(self) -> Predicate:
        tok = self._next()
        if tok.type == TokenType.EOF:
            raise QueryParseError("empty query", tok.pos)
        if tok.type != TokenType.LEFT_PAREN:
            raise QueryParseError(f"expected '(' but got {_describe(tok)}", tok.pos)
        pred = self._parse_expression()
        tok = self._next()
        if tok.type != TokenType.EOF:
            raise QueryParseError(f"unexpected {_describe(tok)} after end of expression", tok.pos)
        return pred

    def _parse_expression(self) -> Predicate:
        """Parse the rest of an expression whose '(' was already consumed."""
        tok = self._expect(TokenType.KEYWORD, "keyword")
        handler = self._keywords.get(tok.value)
        if handler is None:
            raise QueryParseError(f"unknown keyword: {tok.value!r}", tok.pos)
        return handler()

    # --- keywords ---

    def _parse_has(self) -> Predicate:
        obj = self._parse_literal()
        return has(obj, self._parse_selector(obj))

    def _parse_contains(self) -> Predicate:
        obj = self._parse_literal()
        selector = self._parse_selector(obj)
        if selector is in_service:
            return contains_port(obj)
        return contains_net(obj, selector)

    def _parse_and(self) -> Predicate:
        return and_(*self._parse_operands("and"))

    def _parse_or(self) -> Predicate:
        return or_(*self._parse_operands("or"))

    def _parse_not(self) -> Predicate:
        self._expect(TokenType.LEFT_PAREN, "'(' after 'not'")
        pred = self._parse_expression()
        self._expect(TokenType.RIGHT_PAREN, "')' closing 'not'")
        return not_(pred)

    def _parse_operands(self, keyword: str) -> List[Predicate]:
        preds = []
        while True:
            tok = self._next()
            if tok.type == TokenType.LEFT_PAREN:
                preds.append(self._parse_expression())
            elif tok.type == TokenType.RIGHT_PAREN:
                break
            else:
                raise QueryParseError(f"expected '(' or ')' in '{keyword}' but got {_describe(tok)}", tok.pos)
        if not preds:
            raise QueryParseError(f"'{keyword}' needs at least one expression", tok.pos)
        return preds

    # --- has/contains arguments ---

    def _parse_literal(self):
        self._expect(TokenType.QUOTE, "opening quote")
        tok = self._expect(TokenType.PARAMETER, "quoted literal")
        self._expect(TokenType.QUOTE, "closing quote")
        try:
            return self._build_object(tok.value.strip(), tok.pos)
        except ValidationError as exc:
            raise QueryParseError(f"invalid literal {tok.value!r}: {exc}", tok.pos) from exc

    def _build_object(self, text: str, pos: int):
        if not text:
            raise QueryParseError("empty literal", pos)
        if HOST_PATTERN.fullmatch(text):
            return Host(QUERY_OBJECT_NAMES["host"], text)
        if NETWORK_PATTERN.fullmatch(text):
            return Network.from_cidr(QUERY_OBJECT_NAMES["network"], text)
        m = RANGE_PATTERN.fullmatch(text)
        if m:
            return Range(QUERY_OBJECT_NAMES["range"], m.group(1), m.group(2))
        m = SERVICE_PATTERN.fullmatch(text)
        if m:
            protocol, start, end = m.groups()
            if end is not None:
                return PortRange(QUERY_OBJECT_NAMES["port_range"], start, end, protocol)
            return Port(QUERY_OBJECT_NAMES["port"], start, protocol)
        return self._lookup_group(text, pos)

    def _lookup_group(self, name: str, pos: int):
        if self.groups is None:
            return Group(name)
        grp = self.groups.get(name)
        if grp is None:
            raise QueryParseError(f"unknown group: {name!r}", pos)
        return grp

    def _parse_selector(self, obj) -> Selector:
        """Parse an optional ``in <side>`` clause and the closing ')'."""
        service = isinstance(obj, SERVICE_TYPES)
        tok = self._next()
        if tok.type == TokenType.RIGHT_PAREN:
            return in_service if service else in_any

        if tok.type == TokenType.LEFT_PAREN:
            kw = self._expect(TokenType.KEYWORD, "'in'")
            if kw.value != "in":
                raise QueryParseError(f"expected 'in' but got {_describe(kw)}", kw.pos)
            side = self._expect(TokenType.PARAMETER, "rule side")
            self._expect(TokenType.RIGHT_PAREN, "')' closing 'in'")
        elif tok.type == TokenType.PARAMETER and tok.value == "in":
            side = self._expect(TokenType.PARAMETER, "rule side")
        else:
            raise QueryParseError(f"expected 'in' or ')' but got {_describe(tok)}", tok.pos)
        self._expect(TokenType.RIGHT_PAREN, "')'")

        canonical = SELECTOR_ALIASES.get(side.value)
        if canonical is None:
            raise QueryParseError(f"unknown rule side: {side.value!r}", side.pos)
        if service and canonical != "service":
            raise QueryParseError(f"services can only be looked up in the service, not {side.value!r}", side.pos)
        if not service and canonical == "service":
            raise QueryParseError("only services can be looked up in the service", side.pos)
        return SELECTORS[canonical]


def parse(text: str, groups: Optional[Mapping[str, object]] = None) -> Predicate:
    """Compile query text into a predicate over rules.

    Raises QueryScanError or QueryParseError for malformed queries; no
    partial predicate is ever returned.
    """
    pred = Parser(Scanner(text), groups=groups).parse()
    log.debug(f"Parsed query: {text}")
    return pred
