import pytest

from grubby.errors import LexerError
from grubby.lexer import tokenize


def kinds(source):
    return [(t.type, t.value) for t in tokenize(source)]


def test_keywords_and_identifiers():
    assert kinds('val total = 0') == [
        ('VAL', 'val'), ('IDENTIFIER', 'total'), ('EQUALS', '='), ('INTEGER', '0'),
    ]


def test_keywords_match_whole_words_only():
    tokens = kinds('for foreach format to total in index elseif else')
    assert tokens == [
        ('FOR', 'for'), ('FOREACH', 'foreach'), ('IDENTIFIER', 'format'),
        ('TO', 'to'), ('IDENTIFIER', 'total'), ('IN', 'in'), ('IDENTIFIER', 'index'),
        ('ELSEIF', 'elseif'), ('ELSE', 'else'),
    ]


def test_operators():
    values = [t.value for t in tokenize('a <= b >= c == d != e < f > g + h - i * j / k')]
    assert values[1::2] == ['<=', '>=', '==', '!=', '<', '>', '+', '-', '*', '/']
    assert {t.type for t in tokenize('<= ( ) : ,')} == {'OPERATOR'}


def test_float_before_integer():
    assert kinds('3.25 7') == [('FLOAT', '3.25'), ('INTEGER', '7')]


def test_strings_strip_either_delimiter_and_keep_braces():
    assert kinds("'hello {name}' \"it's\"") == [
        ('STRING', 'hello {name}'), ('STRING', "it's"),
    ]


def test_array_is_one_raw_token():
    assert kinds('[1, 2, x]') == [('ARRAY', '1, 2, x')]


def test_comments_and_whitespace_are_dropped():
    source = """
    // line comment
    println 1 /* block
    comment */ println 2
    """
    assert kinds(source) == [
        ('PRINTLN', 'println'), ('INTEGER', '1'), ('PRINTLN', 'println'), ('INTEGER', '2'),
    ]


def test_token_positions():
    tokens = tokenize('val x = 1\nprintln x')
    assert (tokens[4].line, tokens[4].column) == (2, 1)


def test_unmatched_span_is_fatal():
    with pytest.raises(LexerError) as excinfo:
        tokenize('val x = 1 @oops')
    assert '@oops' in str(excinfo.value)
    assert excinfo.value.err.name == 'LexError'


def test_unterminated_string_is_fatal():
    with pytest.raises(LexerError):
        tokenize("println 'no end")
