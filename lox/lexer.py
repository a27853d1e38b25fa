"""Lexer for Lox source text.

The lexeme grammar is declared as a set of lark terminals and tokenised with
lark's basic lexer in lexer-only mode. Lark tries terminals in a fixed order
(priority, then maximal width), which gives the two-character operators and
line comments precedence over their one-character prefixes.

Two catch-all terminals with negative priority keep scanning alive on bad
input: an opening quote that never closes matches UNTERMINATED_STRING up to
the end of the text, and any other stray character matches UNEXPECTED_CHAR.
Both are turned into diagnostics and dropped from the token stream.
"""

from __future__ import annotations

from typing import List

from lark import Lark

from .errors import Diagnostic
from .tokens import KEYWORDS, Token, TokenType


LOX_LEXEMES = r"""
    LEFT_PAREN: "("
    RIGHT_PAREN: ")"
    LEFT_BRACE: "{"
    RIGHT_BRACE: "}"
    COMMA: ","
    DOT: "."
    MINUS: "-"
    PLUS: "+"
    SEMICOLON: ";"
    SLASH: "/"
    STAR: "*"

    BANG_EQUAL: "!="
    BANG: "!"
    EQUAL_EQUAL: "=="
    EQUAL: "="
    GREATER_EQUAL: ">="
    GREATER: ">"
    LESS_EQUAL: "<="
    LESS: "<"

    // A trailing '.' without a digit after it is left for DOT
    NUMBER: /[0-9]+(\.[0-9]+)?/
    STRING: /"[^"]*"/
    IDENTIFIER: /[A-Za-z_][A-Za-z0-9_]*/

    LINE_COMMENT: /\/\/[^\n]*/
    WHITESPACE: /[ \t\r]+/
    NEWLINE: /\n/

    UNTERMINATED_STRING.-1: /"[^"]*/
    UNEXPECTED_CHAR.-2: /./

    %ignore LINE_COMMENT
    %ignore WHITESPACE
    %ignore NEWLINE
"""


LOX_LEXER = Lark(
    LOX_LEXEMES,
    parser=None,
    lexer='basic',
)


class Lexer:
    """Converts source text into a flat list of tokens ending with EOF.

    Lexical errors are collected in `errors`; scanning never stops early.
    """

    def __init__(self, source: str):
        self.source = source
        self.tokens: List[Token] = []
        self.errors: List[Diagnostic] = []

    def scan_tokens(self) -> List[Token]:
        self.tokens = []
        self.errors = []
        for raw in LOX_LEXER.lex(self.source):
            kind = raw.type
            text = str(raw)
            # Strings may span lines; the token belongs to the line it ends on
            line = raw.end_line
            if kind == 'UNTERMINATED_STRING':
                self.errors.append(Diagnostic(line, 'Unterminated string.'))
                continue
            if kind == 'UNEXPECTED_CHAR':
                self.errors.append(Diagnostic(line, 'Unexpected character.'))
                continue
            if kind == 'NUMBER':
                self.tokens.append(Token(TokenType.NUMBER, text, float(text), line))
            elif kind == 'STRING':
                self.tokens.append(Token(TokenType.STRING, text, text[1:-1], line))
            elif kind == 'IDENTIFIER':
                token_type = KEYWORDS.get(text, TokenType.IDENTIFIER)
                self.tokens.append(Token(token_type, text, None, line))
            else:
                self.tokens.append(Token(TokenType[kind], text, None, line))
        self.tokens.append(Token(TokenType.EOF, '', None, self.source.count('\n') + 1))
        return self.tokens


def scan_tokens(source: str) -> List[Token]:
    """Tokenize `source`, discarding any lexical diagnostics."""
    return Lexer(source).scan_tokens()
