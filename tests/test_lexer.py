from lox.lexer import Lexer
from lox.tokens import TokenType


def lex(source):
    lexer = Lexer(source)
    tokens = lexer.scan_tokens()
    return tokens, lexer.errors


def kinds(tokens):
    return [t.type for t in tokens]


def test_punctuation_and_operators():
    tokens, errors = lex('(){},.-+;/* ! != = == > >= < <=')
    assert errors == []
    assert kinds(tokens) == [
        TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN,
        TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
        TokenType.COMMA, TokenType.DOT, TokenType.MINUS, TokenType.PLUS,
        TokenType.SEMICOLON, TokenType.SLASH, TokenType.STAR,
        TokenType.BANG, TokenType.BANG_EQUAL,
        TokenType.EQUAL, TokenType.EQUAL_EQUAL,
        TokenType.GREATER, TokenType.GREATER_EQUAL,
        TokenType.LESS, TokenType.LESS_EQUAL,
        TokenType.EOF,
    ]


def test_two_character_operators_win_without_spaces():
    tokens, _ = lex('a<=b!=c==d')
    assert kinds(tokens) == [
        TokenType.IDENTIFIER, TokenType.LESS_EQUAL, TokenType.IDENTIFIER,
        TokenType.BANG_EQUAL, TokenType.IDENTIFIER, TokenType.EQUAL_EQUAL,
        TokenType.IDENTIFIER, TokenType.EOF,
    ]


def test_keywords_and_identifiers():
    tokens, _ = lex('var orchid = nil or fun_1;')
    assert kinds(tokens) == [
        TokenType.VAR, TokenType.IDENTIFIER, TokenType.EQUAL, TokenType.NIL,
        TokenType.OR, TokenType.IDENTIFIER, TokenType.SEMICOLON, TokenType.EOF,
    ]
    assert tokens[1].lexeme == 'orchid'
    assert tokens[5].lexeme == 'fun_1'


def test_number_literals_are_floats():
    tokens, _ = lex('12 3.25')
    assert tokens[0].literal == 12.0
    assert isinstance(tokens[0].literal, float)
    assert tokens[1].literal == 3.25
    assert tokens[1].lexeme == '3.25'


def test_trailing_dot_is_not_part_of_number():
    tokens, errors = lex('1234.')
    assert errors == []
    assert kinds(tokens) == [TokenType.NUMBER, TokenType.DOT, TokenType.EOF]
    assert tokens[0].lexeme == '1234'


def test_leading_dot_is_not_part_of_number():
    tokens, _ = lex('.5')
    assert kinds(tokens) == [TokenType.DOT, TokenType.NUMBER, TokenType.EOF]


def test_string_literal_drops_quotes():
    tokens, _ = lex('"hello world"')
    assert tokens[0].type == TokenType.STRING
    assert tokens[0].lexeme == '"hello world"'
    assert tokens[0].literal == 'hello world'


def test_multiline_string_counts_lines():
    lexer = Lexer('"a\nb"\nx')
    tokens = lexer.scan_tokens()
    assert tokens[0].literal == 'a\nb'
    assert tokens[0].line == 2
    assert tokens[1].line == 3
    assert tokens[-1].type == TokenType.EOF
    assert tokens[-1].line == 3


def test_comments_are_skipped():
    tokens, _ = lex('// nothing here\nprint 1; // trailing\n')
    assert kinds(tokens) == [TokenType.PRINT, TokenType.NUMBER, TokenType.SEMICOLON, TokenType.EOF]
    assert tokens[0].line == 2


def test_unterminated_string_is_reported():
    lexer = Lexer('print "oops;\n')
    tokens = lexer.scan_tokens()
    assert [str(e) for e in lexer.errors] == ['[line 2] Error: Unterminated string.']
    assert kinds(tokens) == [TokenType.PRINT, TokenType.EOF]


def test_unexpected_characters_do_not_stop_scanning():
    lexer = Lexer('var a = 1;\n@ # b')
    tokens = lexer.scan_tokens()
    assert [str(e) for e in lexer.errors] == [
        '[line 2] Error: Unexpected character.',
        '[line 2] Error: Unexpected character.',
    ]
    assert kinds(tokens)[-2:] == [TokenType.IDENTIFIER, TokenType.EOF]


def test_empty_source_is_just_eof():
    tokens, errors = lex('')
    assert errors == []
    assert len(tokens) == 1
    assert tokens[0].type == TokenType.EOF
    assert tokens[0].line == 1
