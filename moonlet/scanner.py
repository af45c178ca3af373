"""Tokenizer for Lua source text.

The :class:`Scanner` is a pull iterator: ``token`` always holds the current
token and ``advance()`` moves to the next one. Every token records the
offset into the source where it starts. The end of input is signalled by a
token whose type is the empty string.

Token types are:

* the text itself for punctuation and keywords (``'=='``, ``'while'``)
* ``'Name'`` for identifiers, ``'Number'`` and ``'String'`` for literals
* ``'Error'`` for anything that cannot be scanned; its value describes why
* ``''`` at the end of input
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional

KEYWORDS = frozenset(
    'and break do else elseif end false for function if in local nil not or '
    'repeat return then true until while'.split()
)

# Longest match first.
PUNCTUATION = (
    '...', '..', '==', '~=', '<=', '>=',
    '-', '+', '*', '/', '%', '^', '#', '(', ')', '{', '}', '[', ']',
    ';', ':', ',', '<', '>', '=', '.',
)

ESCAPES = {'b': '\b', 'f': '\f', 'n': '\n', 'r': '\r', 't': '\t'}

DIGITS = '0123456789'
HEX_DIGITS = '0123456789abcdefABCDEF'

END = ''


@dataclass
class Token:
    type: str
    value: Any
    offset: int


class Scanner:
    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        # A leading '#' line (e.g. "#!/usr/bin/lua") is not part of the program.
        if source.startswith('#'):
            newline = source.find('\n')
            self.pos = newline if newline != -1 else len(source)
        self.token = self.next_token()

    @property
    def value(self) -> Any:
        return self.token.value

    def advance(self) -> Token:
        self.token = self.next_token()
        return self.token

    def __iter__(self) -> Iterator[Token]:
        """Yield the remaining tokens, consuming them, up to the end token."""
        while self.token.type != END:
            yield self.token
            self.advance()

    def peek_char(self, offset: int = 0) -> str:
        index = self.pos + offset
        if index < len(self.source):
            return self.source[index]
        return ''

    def next_token(self) -> Token:
        error = self.skip_whitespace_and_comments()
        if error is not None:
            return error
        start = self.pos
        if start >= len(self.source):
            return Token(END, None, start)
        c = self.source[start]
        if c in DIGITS:
            return self.scan_number()
        if c.isalpha() or c == '_':
            while self.peek_char().isalnum() or self.peek_char() == '_':
                self.pos += 1
            word = self.source[start:self.pos]
            return Token(word if word in KEYWORDS else 'Name', word, start)
        if c == '"' or c == "'":
            return self.scan_string(c)
        if c == '[':
            level = self.long_bracket_level()
            if level is not None:
                return self.scan_long_string(level)
        for punct in PUNCTUATION:
            if self.source.startswith(punct, start):
                self.pos += len(punct)
                return Token(punct, punct, start)
        self.pos += 1
        return Token('Error', f'unexpected character {c!r}', start)

    def skip_whitespace_and_comments(self) -> Optional[Token]:
        while self.pos < len(self.source):
            c = self.source[self.pos]
            if c.isspace():
                self.pos += 1
                continue
            if c == '-' and self.peek_char(1) == '-':
                start = self.pos
                self.pos += 2
                if self.peek_char() == '[':
                    level = self.long_bracket_level()
                    if level is not None:
                        if self.read_long_bracket(level) is None:
                            return Token('Error', 'unfinished long comment', start)
                        continue
                while self.pos < len(self.source) and self.source[self.pos] != '\n':
                    self.pos += 1
                continue
            break
        return None

    def scan_number(self) -> Token:
        start = self.pos
        while self.peek_char() != '' and self.peek_char() in DIGITS:
            self.pos += 1
        if self.peek_char() == '.' and self.peek_char(1) != '' and self.peek_char(1) in DIGITS:
            self.pos += 1
            while self.peek_char() != '' and self.peek_char() in DIGITS:
                self.pos += 1
        return Token('Number', float(self.source[start:self.pos]), start)

    def scan_string(self, quote: str) -> Token:
        start = self.pos
        self.pos += 1
        chars = []
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch == quote:
                self.pos += 1
                return Token('String', ''.join(chars), start)
            if ch == '\\':
                escaped = self.peek_char(1)
                if escaped == '':
                    break
                if escaped in ESCAPES:
                    chars.append(ESCAPES[escaped])
                    self.pos += 2
                elif escaped == 'u':
                    digits = self.source[self.pos + 2:self.pos + 6]
                    if len(digits) != 4 or any(d not in HEX_DIGITS for d in digits):
                        self.pos += 2
                        return Token('Error', 'invalid unicode escape', start)
                    chars.append(chr(int(digits, 16)))
                    self.pos += 6
                else:
                    chars.append(escaped)
                    self.pos += 2
                continue
            chars.append(ch)
            self.pos += 1
        self.pos = len(self.source)
        return Token('Error', 'unfinished string', start)

    def long_bracket_level(self) -> Optional[int]:
        """Level of a long bracket opening at pos ('[[' is 0, '[=[' is 1), or None."""
        index = self.pos + 1
        while index < len(self.source) and self.source[index] == '=':
            index += 1
        if index < len(self.source) and self.source[index] == '[':
            return index - self.pos - 1
        return None

    def read_long_bracket(self, level: int) -> Optional[str]:
        """Consume a long bracket starting at pos and return its contents."""
        opening = self.pos + level + 2
        closing = ']' + '=' * level + ']'
        end = self.source.find(closing, opening)
        if end == -1:
            self.pos = len(self.source)
            return None
        contents = self.source[opening:end]
        self.pos = end + len(closing)
        if contents.startswith('\r\n'):
            return contents[2:]
        if contents.startswith('\n'):
            return contents[1:]
        return contents

    def scan_long_string(self, level: int) -> Token:
        start = self.pos
        contents = self.read_long_bracket(level)
        if contents is None:
            return Token('Error', 'unfinished long string', start)
        return Token('String', contents, start)
