"""Abstract syntax tree for Kestrel programs.

Nodes are frozen dataclasses holding their children in tuples, so a tree is
immutable once the parser has built it. `str()` renders a node back to
source-like text with every infix expression parenthesised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


# -------------------------------
# Expressions
# -------------------------------
@dataclass(frozen=True)
class IntegerLiteral:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StringLiteral:
    value: str

    def __str__(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class BooleanLiteral:
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Identifier:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class PrefixExpression:
    operator: str  # "-" or "!"
    right: Expression

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


@dataclass(frozen=True)
class InfixExpression:
    operator: str
    left: Expression
    right: Expression

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class IfExpression:
    condition: Expression
    consequence: Statement
    alternative: Statement

    def __str__(self) -> str:
        return f"if {self.condition} {self.consequence} else {self.alternative}"


@dataclass(frozen=True)
class FunctionLiteral:
    parameters: tuple[str, ...]
    body: Statement

    def __str__(self) -> str:
        return f"fn({', '.join(self.parameters)}) {self.body}"


@dataclass(frozen=True)
class CallExpression:
    function: Expression
    arguments: tuple[Expression, ...]

    def __str__(self) -> str:
        return f"{self.function}({', '.join(str(a) for a in self.arguments)})"


@dataclass(frozen=True)
class ArrayLiteral:
    elements: tuple[Expression, ...]

    def __str__(self) -> str:
        return f"[{', '.join(str(e) for e in self.elements)}]"


@dataclass(frozen=True)
class HashLiteral:
    pairs: tuple[tuple[Expression, Expression], ...]

    def __str__(self) -> str:
        return "{" + ", ".join(f"{k}: {v}" for k, v in self.pairs) + "}"


@dataclass(frozen=True)
class IndexExpression:
    left: Expression
    index: Expression

    def __str__(self) -> str:
        return f"({self.left}[{self.index}])"


Expression = Union[
    IntegerLiteral,
    StringLiteral,
    BooleanLiteral,
    Identifier,
    PrefixExpression,
    InfixExpression,
    IfExpression,
    FunctionLiteral,
    CallExpression,
    ArrayLiteral,
    HashLiteral,
    IndexExpression,
]


# -------------------------------
# Statements
# -------------------------------
@dataclass(frozen=True)
class LetStatement:
    name: str
    value: Expression

    def __str__(self) -> str:
        return f"let {self.name} = {self.value};"


@dataclass(frozen=True)
class ReturnStatement:
    value: Expression

    def __str__(self) -> str:
        return f"return {self.value};"


@dataclass(frozen=True)
class BlockStatement:
    statements: tuple[Statement, ...] = ()

    def __str__(self) -> str:
        return "{ " + " ".join(str(s) for s in self.statements) + " }"


@dataclass(frozen=True)
class ExpressionStatement:
    expression: Expression

    def __str__(self) -> str:
        return str(self.expression)


Statement = Union[LetStatement, ReturnStatement, BlockStatement, ExpressionStatement]


@dataclass(frozen=True)
class Program:
    statements: tuple[Statement, ...] = ()

    def __str__(self) -> str:
        return "".join(str(s) for s in self.statements)
