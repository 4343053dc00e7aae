"""
  Kestrel Lexer

- Cursor over the source; each token is one TOKEN_RE match at the cursor
- Two-character operators (`==`, `!=`) are tried before `=` and `!`
- One Token per `next_token()` call; `eof` forever once the input runs out
- Iterating a Lexer restarts it and stops at the first `eof` or `illegal`
- `lex()` is the streaming form used by the parser: illegal characters are
  yielded (as a terminal `illegal` token) so that the parser can reject them

Tokens are (kind, value) tuples:

    - fixed punctuation/operators -> ("plus", "+"), ("eq", "=="), ...
    - keywords -> ("let", "let"), ("fn", "fn"), ...
    - identifiers -> ("ident", name)
    - integers -> ("int", int)  (32-bit signed range)
    - strings -> ("string", text)  (double quoted, no escapes)
    - end of input -> ("eof", None)
    - anything else -> ("illegal", char)
"""

from __future__ import annotations

import re
from typing import Iterator, NamedTuple

from kestrel.errors import KestrelOverflowError

I32_MAX = 2**31 - 1


class Token(NamedTuple):
    kind: str
    value: object = None

    def __str__(self) -> str:
        if self.kind == "eof":
            return "end of input"
        return f"{self.kind} {self.value!r}"


EOF = Token("eof", None)

KEYWORDS: dict[str, Token] = {
    "let": Token("let", "let"),
    "fn": Token("fn", "fn"),
    "true": Token("true", "true"),
    "false": Token("false", "false"),
    "if": Token("if", "if"),
    "else": Token("else", "else"),
    "return": Token("return", "return"),
}

# Group names are the token kinds, except word/int/string/unterminated
TOKEN_RE = re.compile(
    r"(?P<eq>==)"
    r"|(?P<ne>!=)"
    r"|(?P<assign>=)"
    r"|(?P<plus>\+)"
    r"|(?P<minus>-)"
    r"|(?P<asterisk>\*)"
    r"|(?P<slash>/)"
    r"|(?P<comma>,)"
    r"|(?P<semicolon>;)"
    r"|(?P<colon>:)"
    r"|(?P<lparen>\()"
    r"|(?P<rparen>\))"
    r"|(?P<lbrace>\{)"
    r"|(?P<rbrace>\})"
    r"|(?P<lbracket>\[)"
    r"|(?P<rbracket>\])"
    r"|(?P<bang>!)"
    r"|(?P<lt><)"
    r"|(?P<gt>>)"
    r'|(?P<string>"[^"]*")'  # no escapes
    r'|(?P<unterminated>")'
    r"|(?P<word>[^\W\d]+)"  # letters and underscores
    r"|(?P<int>\d+)"
)


class Lexer:
    """Scans a source string left to right, one token per call."""

    __slots__ = ("source", "pos")

    def __init__(self, source: str):
        self.source: str = source
        self.pos: int = 0

    def _skip_whitespace(self) -> None:
        n = len(self.source)
        while self.pos < n and self.source[self.pos].isspace():
            self.pos += 1

    def next_token(self) -> Token:
        self._skip_whitespace()
        if self.pos >= len(self.source):
            return EOF

        m = TOKEN_RE.match(self.source, self.pos)
        if m is None:
            c = self.source[self.pos]
            self.pos += 1
            return Token("illegal", c)

        kind, text = m.lastgroup, m.group()
        self.pos = m.end()
        match kind:
            case "string":
                return Token("string", text[1:-1])
            case "unterminated":
                # Nothing after it can be read
                self.pos = len(self.source)
                return Token("illegal", text)
            case "word":
                return KEYWORDS.get(text, Token("ident", text))
            case "int":
                value = int(text)
                if value > I32_MAX:
                    raise KestrelOverflowError(f"Integer literal out of range: {text}")
                return Token("int", value)
        return Token(kind, text)

    def __iter__(self) -> Iterator[Token]:
        """Restart from the beginning and yield tokens up to eof/illegal."""
        self.pos = 0
        while True:
            tok = self.next_token()
            if tok.kind in ("eof", "illegal"):
                return
            yield tok


def lex(source: str) -> Iterator[Token]:
    """Token generator: yields every token, ending after eof (excluded) or illegal."""
    lexer = Lexer(source)
    while True:
        tok = lexer.next_token()
        if tok.kind == "eof":
            return
        yield tok
        if tok.kind == "illegal":
            return
