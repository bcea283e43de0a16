"""
Restricted evaluation of user-supplied parametric formulas.

Hosts let users type the four coordinate expressions of a parametric
hypersurface, e.g. ``["cos(u)", "sin(u)", "cos(v)", "sin(v)"]``. The text is
parsed with ``ast.parse`` and checked against a whitelist before it is turned
into a closure; nothing ever reaches ``eval`` or ``exec``.

Allowed:
- numeric literals
- the declared parameter names and the constants pi, e, tau
- binary + - * / // % **, unary + and -
- calls to whitelisted ``math`` functions with the number of positional
  arguments each one takes
"""

import ast
import math
import operator
from typing import Callable, Dict, Optional, Sequence, Tuple

from ..errors import FormulaError

CONSTANTS: Dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
    "tau": math.tau,
}

FUNCTIONS: Dict[str, Callable[..., float]] = {
    name: getattr(math, name)
    for name in (
        "sin", "cos", "tan", "asin", "acos", "atan", "atan2",
        "sinh", "cosh", "tanh", "asinh", "acosh", "atanh",
        "exp", "log", "log10", "sqrt", "hypot", "fabs", "floor", "ceil",
    )
}
FUNCTIONS["abs"] = abs
FUNCTIONS["min"] = min
FUNCTIONS["max"] = max

# (fewest, most) positional arguments per function; None is unbounded
ARITY: Dict[str, Tuple[int, Optional[int]]] = {name: (1, 1) for name in FUNCTIONS}
ARITY.update({
    "atan2": (2, 2),
    "log": (1, 2),
    "hypot": (1, None),
    "min": (2, None),
    "max": (2, None),
})

_BINARY = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def _compile_node(node: ast.AST, params: Tuple[str, ...]) -> Callable[[Dict[str, float]], float]:
    """Turn a checked AST node into a closure over a parameter dict."""
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise FormulaError(f"Only numeric literals are allowed, got {node.value!r}")
        value = float(node.value)
        return lambda env: value

    if isinstance(node, ast.Name):
        name = node.id
        if name in params:
            return lambda env: env[name]
        if name in CONSTANTS:
            value = CONSTANTS[name]
            return lambda env: value
        raise FormulaError(f"Unknown name '{name}' (parameters: {', '.join(params)})")

    if isinstance(node, ast.BinOp):
        op = _BINARY.get(type(node.op))
        if op is None:
            raise FormulaError(f"Operator {type(node.op).__name__} is not allowed")
        left = _compile_node(node.left, params)
        right = _compile_node(node.right, params)
        return lambda env: op(left(env), right(env))

    if isinstance(node, ast.UnaryOp):
        op = _UNARY.get(type(node.op))
        if op is None:
            raise FormulaError(f"Operator {type(node.op).__name__} is not allowed")
        operand = _compile_node(node.operand, params)
        return lambda env: op(operand(env))

    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name) or node.func.id not in FUNCTIONS:
            raise FormulaError(f"Call to '{ast.unparse(node.func)}' is not allowed")
        if node.keywords:
            raise FormulaError("Keyword arguments are not allowed")
        fewest, most = ARITY[node.func.id]
        if len(node.args) < fewest or (most is not None and len(node.args) > most):
            raise FormulaError(
                f"'{node.func.id}' called with {len(node.args)} argument(s), "
                f"expected {fewest} to {most if most is not None else 'any number'}"
            )
        func = FUNCTIONS[node.func.id]
        args = [_compile_node(arg, params) for arg in node.args]
        return lambda env: func(*(arg(env) for arg in args))

    raise FormulaError(f"Syntax '{type(node).__name__}' is not allowed in formulas")


def compile_expression(source: str, params: Sequence[str] = ("u", "v", "w")) -> Callable[..., float]:
    """Compile one expression into a function of the parameters.

    Args:
        source: Expression text
        params: Parameter names, in positional order

    Returns:
        Function taking one float per parameter

    Raises:
        FormulaError: on syntax errors or disallowed constructs
    """
    params = tuple(params)
    try:
        tree = ast.parse(source.strip(), mode="eval")
    except SyntaxError as e:
        raise FormulaError(f"Cannot parse formula {source!r}: {e.msg}") from None
    body = _compile_node(tree.body, params)

    def evaluate(*values: float) -> float:
        if len(values) != len(params):
            raise FormulaError(f"Expected {len(params)} arguments, got {len(values)}")
        try:
            result = body(dict(zip(params, values)))
        except (ArithmeticError, ValueError, TypeError) as e:
            raise FormulaError(f"Cannot evaluate {source!r} at {values}: {e}") from e
        if isinstance(result, complex):
            raise FormulaError(f"{source!r} is complex at {values}: {result}")
        return float(result)

    return evaluate


def compile_formula(expressions: Sequence[str],
                    params: Sequence[str] = ("u", "v", "w")) -> Callable[..., Tuple[float, float, float, float]]:
    """Compile the four coordinate expressions of a parametric shape.

    Args:
        expressions: x, y, z and w expressions
        params: Parameter names shared by the four expressions

    Returns:
        Function mapping parameter values to a 4D point
    """
    if len(expressions) != 4:
        raise FormulaError(f"Need 4 coordinate expressions, got {len(expressions)}")
    coords = [compile_expression(source, params) for source in expressions]

    def point(*values: float) -> Tuple[float, float, float, float]:
        return tuple(c(*values) for c in coords)

    return point
