"""
Sandboxed evaluator for custom edge expressions.

Edge expressions are authored in the form editor with JavaScript-style
spelling (``age > 18 && country === "NL"``). They are translated to a small
Python expression subset and walked node by node; nothing is ever passed to
``eval``. Supported:

  - Boolean ops: ``&&`` / ``and``, ``||`` / ``or``, ``!`` / ``not``
  - Comparisons: == != === !== < <= > >= in, not in
  - Arithmetic: + - * / % and unary +/-
  - Names: keys of the answer set only
  - Constants: strings, numbers, true/false, null/undefined, list literals

JavaScript ``!`` binds tighter than any binary operator, so it is translated
to Python's unary ``~`` (which has the same precedence) and evaluated as a
logical negation. ``===`` and ``!==`` become ``is`` / ``is not`` and compare
strictly; ``==``, ``!=`` and the ordering operators coerce numeric strings
the way JavaScript does.

Everything else (calls, attribute access, subscripts, lambdas, ...) is
rejected with ``ExpressionError``.
"""

from __future__ import annotations

import ast
import math
import operator as op
import re
from collections.abc import Callable, Mapping
from datetime import date, datetime
from typing import Any

from formflow.graph.values import is_number, is_truthy, strict_equals, to_number


class ExpressionError(ValueError):
    """Raised when a custom expression is invalid or fails to evaluate."""


MAX_EXPRESSION_LENGTH = 500

TOKEN_RE = re.compile(
    r"""
    (?P<string>"(?:\\.|[^"\\])*"|'(?:\\.|[^'\\])*')
    |(?P<strict>===|!==)
    |(?P<logic>&&|\|\|)
    |(?P<bang>!(?!=))
    |(?P<tilde>~)
    |(?P<word>[A-Za-z_$][A-Za-z0-9_$]*)
    """,
    re.VERBOSE,
)
WORD_TRANSLATIONS = {
    "true": "True",
    "false": "False",
    "null": "None",
    "undefined": "None",
}
SYMBOL_TRANSLATIONS = {
    "===": " is ",
    "!==": " is not ",
    "&&": " and ",
    "||": " or ",
    "!": "~",
}


def _negate(value: object) -> bool:
    return not is_truthy(value)


def _kind(value: object) -> str:
    if isinstance(value, bool):
        return "bool"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "str"
    return "other"


def loose_equals(left: object, right: object) -> bool:
    """JavaScript ``==``: null only equals null, mixed scalars compare as numbers."""
    if left is None or right is None:
        return left is None and right is None
    kinds = {_kind(left), _kind(right)}
    if len(kinds) == 2 and "other" not in kinds:
        return to_number(left) == to_number(right)
    return strict_equals(left, right)


def _ordered(compare: Callable[[Any, Any], bool]) -> Callable[[object, object], bool]:
    def _compare(left: object, right: object) -> bool:
        if isinstance(left, str) and isinstance(right, str):
            return compare(left, right)
        left_number, right_number = to_number(left), to_number(right)
        if math.isnan(left_number) or math.isnan(right_number):
            return False
        return compare(left_number, right_number)

    return _compare


BOOL_OPS = (ast.And, ast.Or)
UNARY_OPS = {
    ast.Not: _negate,
    ast.Invert: _negate,
    ast.USub: op.neg,
    ast.UAdd: op.pos,
}
BIN_OPS = {
    ast.Add: op.add,
    ast.Sub: op.sub,
    ast.Mult: op.mul,
    ast.Div: op.truediv,
    ast.Mod: op.mod,
}
CMP_OPS: dict[type[ast.cmpop], Callable[[Any, Any], bool]] = {
    ast.Eq: loose_equals,
    ast.NotEq: lambda left, right: not loose_equals(left, right),
    ast.Is: strict_equals,
    ast.IsNot: lambda left, right: not strict_equals(left, right),
    ast.Lt: _ordered(op.lt),
    ast.LtE: _ordered(op.le),
    ast.Gt: _ordered(op.gt),
    ast.GtE: _ordered(op.ge),
    ast.In: lambda left, right: left in right,
    ast.NotIn: lambda left, right: left not in right,
}
SAFE_VALUE_TYPES = (str, int, float, bool, type(None), datetime, date)


def translate_expression(text: str) -> str:
    """Rewrite JavaScript-style operators and literals to Python spelling."""

    def _replace(match: re.Match[str]) -> str:
        kind = match.lastgroup
        token = match.group(0)
        if kind == "string":
            return token
        if kind == "word":
            return WORD_TRANSLATIONS.get(token, token)
        if kind == "tilde":
            raise ExpressionError("Bitwise operator '~' is not allowed")
        return SYMBOL_TRANSLATIONS[token]

    return TOKEN_RE.sub(_replace, text).strip()


def parse_expression(text: str) -> ast.Expression:
    if not isinstance(text, str) or not text.strip():
        raise ExpressionError("Expression is empty.")
    if len(text) > MAX_EXPRESSION_LENGTH:
        raise ExpressionError(f"Expression exceeds {MAX_EXPRESSION_LENGTH} characters.")

    try:
        tree = ast.parse(translate_expression(text), mode="eval")
    except SyntaxError as exc:
        raise ExpressionError(f"Invalid syntax: {exc.msg}") from exc

    _ExpressionValidator().visit(tree)
    return tree


def validate_expression(text: str) -> None:
    parse_expression(text)


def evaluate_expression(text: str, answers: Mapping[str, object]) -> bool:
    tree = parse_expression(text)
    scope = {str(key): value for key, value in answers.items()}
    try:
        result = _eval_node(tree.body, scope)
    except ExpressionError:
        raise
    except (TypeError, ValueError, ArithmeticError) as exc:
        raise ExpressionError(f"Evaluation failed: {exc}") from exc
    return is_truthy(result)


def referenced_names(text: str) -> set[str]:
    tree = parse_expression(text)
    return {node.id for node in ast.walk(tree) if isinstance(node, ast.Name)}


class _ExpressionValidator(ast.NodeVisitor):
    ALLOWED = (
        ast.Expression,
        ast.BoolOp,
        ast.UnaryOp,
        ast.BinOp,
        ast.Compare,
        ast.Name,
        ast.Constant,
        ast.List,
        ast.Tuple,
        ast.Load,
        *BOOL_OPS,
        *UNARY_OPS,
        *BIN_OPS,
        *CMP_OPS,
    )

    def generic_visit(self, node: ast.AST) -> Any:
        if not isinstance(node, self.ALLOWED):
            raise ExpressionError(f"Disallowed syntax: {type(node).__name__}")
        return super().generic_visit(node)

    def visit_BoolOp(self, node: ast.BoolOp) -> Any:
        if not isinstance(node.op, BOOL_OPS):
            raise ExpressionError("Disallowed boolean operator")
        return self.generic_visit(node)

    def visit_UnaryOp(self, node: ast.UnaryOp) -> Any:
        if type(node.op) not in UNARY_OPS:
            raise ExpressionError("Disallowed unary operator")
        return self.generic_visit(node)

    def visit_BinOp(self, node: ast.BinOp) -> Any:
        if type(node.op) not in BIN_OPS:
            raise ExpressionError("Disallowed binary operator")
        return self.generic_visit(node)

    def visit_Compare(self, node: ast.Compare) -> Any:
        for item in node.ops:
            if type(item) not in CMP_OPS:
                raise ExpressionError("Disallowed comparison operator")
        return self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> Any:
        if node.id.startswith("_"):
            raise ExpressionError(f"Private names are not allowed: {node.id}")
        return self.generic_visit(node)

    def visit_Constant(self, node: ast.Constant) -> Any:
        if not isinstance(node.value, (str, int, float, bool, type(None))):
            raise ExpressionError(f"Disallowed constant: {type(node.value).__name__}")
        return None


def _eval_node(node: ast.AST, scope: dict[str, object]) -> object:
    if isinstance(node, ast.Constant):
        return node.value

    if isinstance(node, ast.Name):
        if node.id not in scope:
            raise ExpressionError(f"{node.id} is not defined")
        value = scope[node.id]
        if isinstance(value, (list, tuple)):
            return tuple(value)
        if not isinstance(value, SAFE_VALUE_TYPES):
            raise ExpressionError(f"Unsupported value type for {node.id}")
        return value

    if isinstance(node, (ast.List, ast.Tuple)):
        return tuple(_eval_node(item, scope) for item in node.elts)

    if isinstance(node, ast.BoolOp):
        # Short-circuit like JavaScript: return the deciding operand.
        result: object = None
        for value_node in node.values:
            result = _eval_node(value_node, scope)
            if isinstance(node.op, ast.And) and not is_truthy(result):
                return result
            if isinstance(node.op, ast.Or) and is_truthy(result):
                return result
        return result

    if isinstance(node, ast.UnaryOp):
        return UNARY_OPS[type(node.op)](_eval_node(node.operand, scope))

    if isinstance(node, ast.BinOp):
        left = _eval_node(node.left, scope)
        right = _eval_node(node.right, scope)
        if isinstance(left, str) and isinstance(right, str) and isinstance(node.op, ast.Add):
            return left + right
        if not is_number(left) or not is_number(right):
            raise ExpressionError("Arithmetic is only allowed on numbers")
        return BIN_OPS[type(node.op)](left, right)

    if isinstance(node, ast.Compare):
        left = _eval_node(node.left, scope)
        for cmp_op, right_node in zip(node.ops, node.comparators):
            right = _eval_node(right_node, scope)
            if not CMP_OPS[type(cmp_op)](left, right):
                return False
            left = right
        return True

    raise ExpressionError(f"Unhandled syntax: {type(node).__name__}")

