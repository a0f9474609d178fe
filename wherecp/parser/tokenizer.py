"""Character-level scanner for the rule query language.

    (and (has "192.168.1.1" in src) (has "tcp/443" in svc))

The scanner is a small state machine: each state function consumes some
input, may queue tokens, and returns the next state. ``next_token`` runs
states until a token is available. Malformed input produces an ERROR token
and scanning carries on, so one bad character does not hide the rest of the
query.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Deque, Iterator, Optional

EOF = ""


class TokenType(Enum):
    EOF = auto()
    ERROR = auto()
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    KEYWORD = auto()
    PARAMETER = auto()
    QUOTE = auto()
    NEWLINE = auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str = ""
    pos: int = 0                # offset of the token in the input


StateFn = Callable[[], Optional["StateFn"]]


def is_space(ch: str) -> bool:
    return ch in (" ", "\t", "\r")


def is_param_char(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


def is_keyword_char(ch: str) -> bool:
    return ch != EOF and not is_space(ch) and ch not in '()"\n'


class Scanner:
    def __init__(self, text: str, name: str = "query"):
        self.name = name
        self.text = text
        self.start = 0          # start of the pending token
        self.pos = 0            # current read position
        self._state: Optional[StateFn] = self._lex_any
        self._tokens: Deque[Token] = deque()

    def next_token(self) -> Token:
        """Return the next token; EOF once the input is exhausted."""
        while not self._tokens:
            if self._state is None:
                return Token(TokenType.EOF, "", len(self.text))
            self._state = self._state()
        return self._tokens.popleft()

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == TokenType.EOF:
                return

    # --- input buffer ---

    def _next(self) -> str:
        if self.pos >= len(self.text):
            return EOF
        ch = self.text[self.pos]
        self.pos += 1
        return ch

    def _peek(self) -> str:
        if self.pos >= len(self.text):
            return EOF
        return self.text[self.pos]

    def _backup(self):
        self.pos -= 1

    def _ignore(self):
        self.start = self.pos

    def _skip_whitespace(self):
        while is_space(self._peek()):
            self.pos += 1
        self._ignore()

    def _emit(self, token_type: TokenType, value: Optional[str] = None):
        if value is None:
            value = self.text[self.start:self.pos]
        self._tokens.append(Token(token_type, value, self.start))
        self.start = self.pos

    def _error(self, message: str) -> StateFn:
        self._tokens.append(Token(TokenType.ERROR, message, self.start))
        self.start = self.pos
        return self._lex_any

    # --- states ---

    def _lex_any(self) -> Optional[StateFn]:
        self._skip_whitespace()
        ch = self._next()
        if ch == EOF:
            return None
        if ch == "\n":
            self._emit(TokenType.NEWLINE)
            return self._lex_any
        if ch == "(":
            self._emit(TokenType.LEFT_PAREN)
            return self._lex_keyword
        if ch == ")":
            self._emit(TokenType.RIGHT_PAREN)
            return self._lex_any
        self._backup()
        return self._lex_param

    def _lex_keyword(self) -> Optional[StateFn]:
        # A keyword may start on the line after its paren.
        while is_space(self._peek()) or self._peek() == "\n":
            self.pos += 1
        self._ignore()
        while is_keyword_char(self._peek()):
            self.pos += 1
        if self.pos == self.start:
            found = repr(self._peek()) if self._peek() else "end of input"
            return self._error(f"expected keyword after '(' but got: {found}")
        self._emit(TokenType.KEYWORD)
        return self._lex_param

    def _lex_param(self) -> Optional[StateFn]:
        self._skip_whitespace()
        ch = self._next()
        if ch == EOF:
            return None
        if ch in (")", "\n"):
            self._backup()
            return self._lex_any
        if ch == "(":
            self._emit(TokenType.LEFT_PAREN)
            return self._lex_keyword
        if ch == '"':
            self._emit(TokenType.QUOTE)
            return self._lex_inside_quote
        if is_param_char(ch):
            while is_param_char(self._peek()):
                self.pos += 1
            self._emit(TokenType.PARAMETER)
            return self._lex_any
        return self._error(f"expected parameter but got: {ch!r}")

    def _lex_inside_quote(self) -> Optional[StateFn]:
        while self._peek() not in ('"', EOF):
            self.pos += 1
        if self._peek() == EOF:
            self._error("missing closing quote")
            return None
        self._emit(TokenType.PARAMETER)
        return self._lex_closing_quote

    def _lex_closing_quote(self) -> Optional[StateFn]:
        # Only entered with the closing quote as the next character.
        self.pos += 1
        self._emit(TokenType.QUOTE)
        return self._lex_any


def tokenize(text: str) -> list:
    """Scan the whole query and return its tokens, EOF included."""
    return list(Scanner(text))
