import pytest

from moonlet.scanner import END, Scanner


def types(source):
    return [t.type for t in Scanner(source)]


def values(source):
    return [t.value for t in Scanner(source)]


def test_punctuation_prefers_longest_match():
    assert types('... .. . == = ~= <= < >= >') == [
        '...', '..', '.', '==', '=', '~=', '<=', '<', '>=', '>']


def test_keywords_and_names():
    assert types('local nil nilly _x1 while') == ['local', 'nil', 'Name', 'Name', 'while']
    assert values('nilly _x1') == ['nilly', '_x1']


def test_offsets():
    assert [t.offset for t in Scanner('a = 10')] == [0, 2, 4]


def test_end_token():
    scanner = Scanner('   ')
    assert scanner.token.type == END
    assert scanner.token.offset == 3
    assert list(scanner) == []


def test_numbers():
    assert values('3 3.25 007') == [3.0, 3.25, 7.0]
    assert types('1.') == ['Number', '.']
    assert types('1..2') == ['Number', '..', 'Number']


def test_string_escapes():
    assert values(r"'a\tbA\q\\'") == ['a\tbAq\\']
    assert values(r"'\u0041\u00e9'") == ['A\u00e9']
    assert values(r'"it\'s" ' + r"'say \"hi\"'") == ["it's", 'say "hi"']


def test_long_strings():
    assert values('[[\nfoo]]') == ['foo']
    assert values('[==[a]]b]==]') == ['a]]b']
    assert values('[[x\n]]') == ['x\n']


def test_bracket_that_is_not_a_long_string():
    assert types('t[1] t[=') == ['Name', '[', 'Number', ']', 'Name', '[', '=']


def test_comments_are_skipped():
    source = '-- line\nx --[[ block\n ]] y --[==[ ]] ]==] z -- trailing'
    assert values(source) == ['x', 'y', 'z']


def test_shebang_line_is_skipped():
    scanner = Scanner('#!/usr/bin/lua\nx')
    assert scanner.token.type == 'Name'
    assert scanner.token.offset == 15


def test_length_operator_is_not_a_shebang_after_first_char():
    assert types('x = #t') == ['Name', '=', '#', 'Name']


@pytest.mark.parametrize('source, description', [
    ('$', "unexpected character '$'"),
    ("'abc", 'unfinished string'),
    ('"abc\\', 'unfinished string'),
    (r"'\u12'", 'invalid unicode escape'),
    ('[[abc', 'unfinished long string'),
    ('--[[ abc', 'unfinished long comment'),
])
def test_error_tokens(source, description):
    token = Scanner(source).token
    assert token.type == 'Error'
    assert token.value == description
    assert token.offset == 0
