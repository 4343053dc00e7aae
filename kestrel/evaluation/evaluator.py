"""Tree-walking evaluator for Kestrel.

Statements evaluate to a value or to None (no value). Expressions always
evaluate to a value. Type errors, unbound names and bad indexes evaluate to
Null; only a failing integer division (by zero, or MIN / -1) raises.

An early `return` travels as a ReturnValue through blocks, which stop as soon
as one appears. Only a call boundary (see apply.py) or the top of the program
strips it.
"""

from __future__ import annotations

from typing import TextIO

from kestrel import KestrelValue
from kestrel import ast
from kestrel.errors import KestrelArithmeticOverflow, KestrelDivisionByZero
from kestrel.printer import to_string
from kestrel.types import Function, Null, ReturnValue, State, unwrap

I32_MIN = -(2**31)


def wrap_i32(n: int) -> int:
    """Reduce a Python int to 32-bit two's complement."""
    return (n - I32_MIN) % 2**32 + I32_MIN


def is_int(value: KestrelValue) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def evaluate_program(program: ast.Program, state: State, out: TextIO) -> KestrelValue | None:
    """Run every top-level statement, returning the last value produced."""
    result = None
    for statement in program.statements:
        result = evaluate_statement(statement, state, out)
        if isinstance(result, ReturnValue):
            return result.value
    return result


def evaluate_block(block: ast.BlockStatement, state: State, out: TextIO) -> KestrelValue | None:
    """Run a block; a pending return stops it and is passed up still wrapped."""
    result = None
    for statement in block.statements:
        result = evaluate_statement(statement, state, out)
        if isinstance(result, ReturnValue):
            return result
    return result


def evaluate_statement(statement: ast.Statement, state: State, out: TextIO) -> KestrelValue | None:
    match statement:
        case ast.LetStatement(name, value):
            state.define(name, unwrap(evaluate_expression(value, state, out)))
            return None
        case ast.ReturnStatement(value):
            return ReturnValue(unwrap(evaluate_expression(value, state, out)))
        case ast.BlockStatement():
            return evaluate_block(statement, state, out)
        case ast.ExpressionStatement(expression):
            return evaluate_expression(expression, state, out)
    raise TypeError(f"Unknown statement: {statement!r}")


def evaluate_expression(expr: ast.Expression, state: State, out: TextIO) -> KestrelValue:
    match expr:
        case ast.IntegerLiteral(value) | ast.StringLiteral(value) | ast.BooleanLiteral(value):
            return value
        case ast.Identifier(name):
            return state.lookup(name)
        case ast.PrefixExpression(operator, right):
            return evaluate_prefix(operator, evaluate_expression(right, state, out))
        case ast.InfixExpression(operator, left, right):
            lhs = evaluate_expression(left, state, out)
            rhs = evaluate_expression(right, state, out)
            return evaluate_infix(operator, lhs, rhs)
        case ast.IfExpression(condition, consequence, alternative):
            cond = evaluate_expression(condition, state, out)
            if cond is True:
                result = evaluate_statement(consequence, state, out)
            elif cond is False:
                result = evaluate_statement(alternative, state, out)
            else:
                return Null
            return Null if result is None else result
        case ast.FunctionLiteral(parameters, body):
            return Function(parameters, body)
        case ast.CallExpression(function, arguments):
            from kestrel.evaluation.apply import apply
            return apply(evaluate_expression(function, state, out), arguments, state, out)
        case ast.ArrayLiteral(elements):
            return [unwrap(evaluate_expression(e, state, out)) for e in elements]
        case ast.HashLiteral(pairs):
            hash_value: dict[str, KestrelValue] = {}
            for key, value in pairs:
                k = to_string(unwrap(evaluate_expression(key, state, out)))
                hash_value[k] = unwrap(evaluate_expression(value, state, out))
            return hash_value
        case ast.IndexExpression(left, index):
            target = evaluate_expression(left, state, out)
            return evaluate_index(target, evaluate_expression(index, state, out))
    raise TypeError(f"Unknown expression: {expr!r}")


# -------------------------------
# Operators
# -------------------------------
def evaluate_prefix(operator: str, right: KestrelValue) -> KestrelValue:
    if operator == "-":
        return wrap_i32(-right) if is_int(right) else Null
    if operator == "!":
        return (not right) if isinstance(right, bool) else Null
    return Null


def evaluate_infix(operator: str, left: KestrelValue, right: KestrelValue) -> KestrelValue:
    if operator == "+" and (isinstance(left, str) or isinstance(right, str)):
        return to_string(left) + to_string(right)
    if not (is_int(left) and is_int(right)):
        return Null
    match operator:
        case "+":
            return wrap_i32(left + right)
        case "-":
            return wrap_i32(left - right)
        case "*":
            return wrap_i32(left * right)
        case "/":
            if right == 0:
                raise KestrelDivisionByZero(f"Division by zero: {left} / {right}")
            if left == I32_MIN and right == -1:
                raise KestrelArithmeticOverflow(f"Division overflow: {left} / {right}")
            # Truncate toward zero
            quotient = abs(left) // abs(right)
            return quotient if (left < 0) == (right < 0) else -quotient
        case "==":
            return left == right
        case "!=":
            return left != right
        case "<":
            return left < right
        case ">":
            return left > right
    return Null


def evaluate_index(target: KestrelValue, index: KestrelValue) -> KestrelValue:
    if isinstance(target, list):
        if is_int(index) and 0 <= index < len(target):
            return target[index]
        return Null
    if isinstance(target, dict):
        return target.get(to_string(unwrap(index)), Null)
    return Null
