"""Template rendering for the Kestrel page server.

A template is text with code regions delimited by lines holding only `<%`
and `%>`. Code lines are lexed as they are; every other line becomes the
tokens of `println("<line>")`. All tokens are joined into one stream, parsed
once, and evaluated against a fresh session in which `get` and `post` hold
the query and form parameters. The page is whatever the program printed.
"""

from __future__ import annotations

import logging
import re
from io import StringIO
from typing import Iterator, Mapping
from urllib.parse import unquote_plus

from kestrel import KestrelValue
from kestrel.reader.lexer import Token, lex
from kestrel.reader.parser import Parser
from kestrel.evaluation.evaluator import evaluate_program
from kestrel.interpreter import new_session_state

logger = logging.getLogger(__name__)

CODE_OPEN = "<%"
CODE_CLOSE = "%>"

_INT_RE = re.compile(r"[+-]?[0-9]+")


def template_tokens(source: str) -> Iterator[Token]:
    """Rewrite a template into a single token stream."""
    in_code = False
    for line in source.splitlines():
        if in_code:
            if line == CODE_CLOSE:
                in_code = False
            else:
                yield from lex(line)
        elif line == CODE_OPEN:
            in_code = True
        else:
            yield Token("ident", "println")
            yield Token("lparen", "(")
            yield Token("string", line)
            yield Token("rparen", ")")


def parse_value(text: str) -> KestrelValue:
    """Coerce a request parameter: booleans, then integers, else the text itself."""
    if text == "true":
        return True
    if text == "false":
        return False
    stripped = text.strip()
    if _INT_RE.fullmatch(stripped):
        value = int(stripped)
        if -(2**31) <= value < 2**31:
            return value
    return text


def parse_params(query: str) -> dict[str, KestrelValue]:
    """Parse `a=1&b=x` into a hash; a name without `=` maps to the empty string."""
    params: dict[str, KestrelValue] = {}
    for arg in query.strip().split("&"):
        if not arg:
            continue
        name, _, value = arg.partition("=")
        params[unquote_plus(name)] = parse_value(unquote_plus(value))
    return params


def render(
    source: str,
    query: Mapping[str, KestrelValue] | None = None,
    form: Mapping[str, KestrelValue] | None = None,
) -> str:
    """Render a template and return the text it printed.

    Raises KestrelError (or KestrelDivisionByZero) when the template is broken.
    """
    program = Parser(template_tokens(source)).parse_program()
    state = new_session_state(bindings={"get": dict(query or {}), "post": dict(form or {})})
    with StringIO() as out:
        evaluate_program(program, state, out)
        page = out.getvalue()
    logger.debug("Rendered template: %d statements, %d bytes", len(program.statements), len(page))
    return page
