"""
  Kestrel Parser

Recursive descent for statements, precedence climbing (Pratt) for
expressions. The parser keeps a two-token window (`cur`, `peek`) refilled one
token at a time from any iterable of Tokens; running out of tokens reads as
end of input.

Statement parsers leave `cur` on the last token of the statement they parsed;
`parse_program` and `parse_block` advance past it. Trailing semicolons are
optional everywhere, so the last expression of a block doubles as its value.

Any structural error raises KestrelSyntaxError immediately. There is no
recovery and no partial program.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, Iterable, Iterator

from kestrel import ast
from kestrel.errors import KestrelSyntaxError, KestrelIllegalCharacter
from kestrel.reader.lexer import EOF, Token, lex


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2  # == !=
    LESSGREATER = 3  # < >
    SUM = 4  # + -
    PRODUCT = 5  # * /
    PREFIX = 6  # -x !x
    CALL = 7  # f(x) a[i]


PRECEDENCES: dict[str, Precedence] = {
    "eq": Precedence.EQUALS,
    "ne": Precedence.EQUALS,
    "lt": Precedence.LESSGREATER,
    "gt": Precedence.LESSGREATER,
    "plus": Precedence.SUM,
    "minus": Precedence.SUM,
    "asterisk": Precedence.PRODUCT,
    "slash": Precedence.PRODUCT,
    "lparen": Precedence.CALL,
    "lbracket": Precedence.CALL,
}


class Parser:
    def __init__(self, tokens: Iterable[Token]):
        self._tokens: Iterator[Token] = iter(tokens)
        self.cur: Token = self._pull()
        self.peek: Token = self._pull()
        self._prefix_parsers: dict[str, Callable[[], ast.Expression]] = {
            "int": self.parse_integer,
            "string": self.parse_string,
            "true": self.parse_boolean,
            "false": self.parse_boolean,
            "ident": self.parse_identifier,
            "minus": self.parse_prefix,
            "bang": self.parse_prefix,
            "lparen": self.parse_grouped,
            "if": self.parse_if,
            "fn": self.parse_function,
            "lbracket": self.parse_array,
            "lbrace": self.parse_hash,
        }

    @classmethod
    def from_source(cls, source: str) -> Parser:
        return cls(lex(source))

    # ----------------------
    # Token window
    # ----------------------
    def _pull(self) -> Token:
        return next(self._tokens, EOF)

    def next_token(self) -> Token:
        self.cur, self.peek = self.peek, self._pull()
        return self.cur

    def _fail(self, message: str, tok: Token) -> KestrelSyntaxError:
        if tok.kind == "illegal":
            return KestrelIllegalCharacter(f"Illegal character {tok.value!r}")
        return KestrelSyntaxError(message)

    def expect_peek(self, kind: str) -> Token:
        """Advance if the next token is `kind`, otherwise abort the parse."""
        if self.peek.kind != kind:
            raise self._fail(f"Expected {kind}, got {self.peek}", self.peek)
        return self.next_token()

    def _skip_semicolon(self) -> None:
        if self.peek.kind == "semicolon":
            self.next_token()

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek.kind, Precedence.LOWEST)

    # ----------------------
    # Statements
    # ----------------------
    def parse_program(self) -> ast.Program:
        statements: list[ast.Statement] = []
        while self.cur.kind != "eof":
            statements.append(self.parse_statement())
            self.next_token()
        return ast.Program(tuple(statements))

    def parse_statement(self) -> ast.Statement:
        match self.cur.kind:
            case "let":
                return self.parse_let()
            case "return":
                return self.parse_return()
            case "lbrace":
                return self.parse_block()
            case "illegal":
                raise self._fail("", self.cur)
            case _:
                return self.parse_expression_statement()

    def parse_let(self) -> ast.LetStatement:
        name = self.expect_peek("ident").value
        self.expect_peek("assign")
        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        self._skip_semicolon()
        return ast.LetStatement(name, value)

    def parse_return(self) -> ast.ReturnStatement:
        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        self._skip_semicolon()
        return ast.ReturnStatement(value)

    def parse_block(self) -> ast.BlockStatement:
        statements: list[ast.Statement] = []
        self.next_token()  # consume {
        while self.cur.kind != "rbrace":
            if self.cur.kind == "eof":
                raise KestrelSyntaxError("Unexpected end of input inside block")
            statements.append(self.parse_statement())
            self.next_token()
        return ast.BlockStatement(tuple(statements))

    def parse_expression_statement(self) -> ast.ExpressionStatement:
        expr = self.parse_expression(Precedence.LOWEST)
        self._skip_semicolon()
        return ast.ExpressionStatement(expr)

    # ----------------------
    # Expressions
    # ----------------------
    def parse_expression(self, precedence: Precedence) -> ast.Expression:
        prefix = self._prefix_parsers.get(self.cur.kind)
        if prefix is None:
            raise self._fail(f"Unexpected {self.cur} at start of expression", self.cur)
        left = prefix()

        while self.peek.kind != "semicolon" and precedence < self.peek_precedence():
            kind = self.next_token().kind
            if kind == "lparen":
                left = ast.CallExpression(left, tuple(self.parse_expression_list("rparen")))
            elif kind == "lbracket":
                left = self.parse_index(left)
            else:
                left = self.parse_infix(left)
        return left

    def parse_integer(self) -> ast.IntegerLiteral:
        return ast.IntegerLiteral(self.cur.value)

    def parse_string(self) -> ast.StringLiteral:
        return ast.StringLiteral(self.cur.value)

    def parse_boolean(self) -> ast.BooleanLiteral:
        return ast.BooleanLiteral(self.cur.kind == "true")

    def parse_identifier(self) -> ast.Identifier:
        return ast.Identifier(self.cur.value)

    def parse_prefix(self) -> ast.PrefixExpression:
        operator = self.cur.value
        self.next_token()
        return ast.PrefixExpression(operator, self.parse_expression(Precedence.PREFIX))

    def parse_infix(self, left: ast.Expression) -> ast.InfixExpression:
        operator = self.cur.value
        precedence = PRECEDENCES[self.cur.kind]
        self.next_token()
        return ast.InfixExpression(operator, left, self.parse_expression(precedence))

    def parse_grouped(self) -> ast.Expression:
        self.next_token()
        expr = self.parse_expression(Precedence.LOWEST)
        self.expect_peek("rparen")
        return expr

    def parse_if(self) -> ast.IfExpression:
        self.expect_peek("lparen")
        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        self.expect_peek("rparen")
        self.next_token()
        consequence = self.parse_statement()
        if self.peek.kind == "else":
            self.next_token()
            self.next_token()
            alternative = self.parse_statement()
        else:
            alternative = ast.BlockStatement()
        return ast.IfExpression(condition, consequence, alternative)

    def parse_function(self) -> ast.FunctionLiteral:
        self.expect_peek("lparen")
        parameters: list[str] = []
        if self.peek.kind == "rparen":
            self.next_token()
        else:
            parameters.append(self.expect_peek("ident").value)
            while self.peek.kind == "comma":
                self.next_token()
                parameters.append(self.expect_peek("ident").value)
            self.expect_peek("rparen")
        self.next_token()
        return ast.FunctionLiteral(tuple(parameters), self.parse_statement())

    def parse_expression_list(self, end: str) -> list[ast.Expression]:
        """Parse `a, b, c` up to the closing `end` token; `cur` is the opener."""
        items: list[ast.Expression] = []
        if self.peek.kind == end:
            self.next_token()
            return items
        self.next_token()
        items.append(self.parse_expression(Precedence.LOWEST))
        while self.peek.kind == "comma":
            self.next_token()
            self.next_token()
            items.append(self.parse_expression(Precedence.LOWEST))
        self.expect_peek(end)
        return items

    def parse_array(self) -> ast.ArrayLiteral:
        return ast.ArrayLiteral(tuple(self.parse_expression_list("rbracket")))

    def parse_hash(self) -> ast.HashLiteral:
        pairs: list[tuple[ast.Expression, ast.Expression]] = []
        while self.peek.kind != "rbrace":
            self.next_token()
            key = self.parse_expression(Precedence.LOWEST)
            self.expect_peek("colon")
            self.next_token()
            pairs.append((key, self.parse_expression(Precedence.LOWEST)))
            if self.peek.kind == "rbrace":
                break
            self.expect_peek("comma")
            if self.peek.kind == "rbrace":
                raise KestrelSyntaxError("Trailing comma in hash literal")
        self.next_token()
        return ast.HashLiteral(tuple(pairs))

    def parse_index(self, left: ast.Expression) -> ast.IndexExpression:
        self.next_token()
        index = self.parse_expression(Precedence.LOWEST)
        self.expect_peek("rbracket")
        return ast.IndexExpression(left, index)


def parse(source: str) -> ast.Program:
    """Parse a complete program from source text."""
    return Parser.from_source(source).parse_program()
