"""Unit tests for the query scanner."""

import pytest

from wherecp.parser.tokenizer import Scanner, Token, TokenType, tokenize

T = TokenType


def _types(text):
    return [tok.type for tok in tokenize(text)]


def _pairs(text):
    return [(tok.type, tok.value) for tok in tokenize(text)]


class TestTokens:
    def test_nested_query(self):
        assert _pairs('(and (has "192.168.1.1" in src) (has "8.8.8.8" in dst))') == [
            (T.LEFT_PAREN, "("),
            (T.KEYWORD, "and"),
            (T.LEFT_PAREN, "("),
            (T.KEYWORD, "has"),
            (T.QUOTE, '"'),
            (T.PARAMETER, "192.168.1.1"),
            (T.QUOTE, '"'),
            (T.PARAMETER, "in"),
            (T.PARAMETER, "src"),
            (T.RIGHT_PAREN, ")"),
            (T.LEFT_PAREN, "("),
            (T.KEYWORD, "has"),
            (T.QUOTE, '"'),
            (T.PARAMETER, "8.8.8.8"),
            (T.QUOTE, '"'),
            (T.PARAMETER, "in"),
            (T.PARAMETER, "dst"),
            (T.RIGHT_PAREN, ")"),
            (T.RIGHT_PAREN, ")"),
            (T.EOF, ""),
        ]

    def test_positions(self):
        toks = tokenize('(has "10.0.0.1" in src)')
        assert [tok.pos for tok in toks] == [0, 1, 5, 6, 14, 16, 19, 22, 23]

    def test_last_character_is_scanned(self):
        toks = tokenize("(not (has \"x\"))")
        assert toks[-2] == Token(T.RIGHT_PAREN, ")", 14)

    def test_quoted_text_keeps_spaces(self):
        assert _pairs('(has "my group")')[3] == (T.PARAMETER, "my group")

    def test_empty_quote(self):
        assert _pairs('(has "")')[2:5] == [(T.QUOTE, '"'), (T.PARAMETER, ""), (T.QUOTE, '"')]

    def test_newlines(self):
        assert _types('(or\n(has "a")\n)') == [
            T.LEFT_PAREN, T.KEYWORD, T.NEWLINE, T.LEFT_PAREN, T.KEYWORD,
            T.QUOTE, T.PARAMETER, T.QUOTE, T.RIGHT_PAREN, T.NEWLINE, T.RIGHT_PAREN, T.EOF,
        ]

    def test_parenthesised_selector(self):
        assert _types('(has "a" (in src))') == [
            T.LEFT_PAREN, T.KEYWORD, T.QUOTE, T.PARAMETER, T.QUOTE,
            T.LEFT_PAREN, T.KEYWORD, T.PARAMETER, T.RIGHT_PAREN, T.RIGHT_PAREN, T.EOF,
        ]

    def test_newline_before_keyword(self):
        assert _pairs('(\n  has "a")')[:2] == [(T.LEFT_PAREN, "("), (T.KEYWORD, "has")]
        assert tokenize('(\nhas "a")')[1] == Token(T.KEYWORD, "has", 2)

    def test_closing_quote_then_text(self):
        assert _pairs('(has "a"b)')[4:6] == [(T.QUOTE, '"'), (T.PARAMETER, "b")]

    @pytest.mark.parametrize("text", ["", "   ", "\t\r "])
    def test_blank_input(self, text):
        assert _types(text) == [T.EOF]


class TestErrors:
    def test_bad_parameter_character_recovers(self):
        toks = tokenize('(has @ "x")')
        assert toks[2].type == T.ERROR
        assert toks[2].value == "expected parameter but got: '@'"
        assert [tok.type for tok in toks[3:]] == [T.QUOTE, T.PARAMETER, T.QUOTE, T.RIGHT_PAREN, T.EOF]

    def test_missing_keyword(self):
        toks = tokenize("( )")
        assert toks[1].type == T.ERROR
        assert "expected keyword" in toks[1].value
        assert toks[2].type == T.RIGHT_PAREN

    def test_missing_closing_quote(self):
        toks = tokenize('(has "abc')
        assert toks[-2] == Token(T.ERROR, "missing closing quote", 6)
        assert toks[-1].type == T.EOF


class TestScanner:
    def test_eof_repeats(self):
        scanner = Scanner("()")
        list(scanner)
        assert scanner.next_token() == Token(T.EOF, "", 2)
        assert scanner.next_token().type == T.EOF

    def test_pull_one_at_a_time(self):
        scanner = Scanner('(has "a")')
        assert scanner.next_token().type == T.LEFT_PAREN
        assert scanner.next_token() == Token(T.KEYWORD, "has", 1)
