import sympy as sp
import numpy as np
from typing import Optional, Sequence, Union
from ..core.node import (
  Node, ConstantNode, VariableNode, UnaryOpNode, BinaryOpNode, Equation,
  negate, binary
)
from .tree_utils import get_variables
from ...errors import AlgebraError, UnsupportedOperationError

_RELATIONS = {
  sp.Equality: '=', sp.Unequality: '≠',
  sp.StrictGreaterThan: '>', sp.StrictLessThan: '<',
  sp.GreaterThan: '≥', sp.LessThan: '≤',
}

DEFAULT_SAMPLES = (-3.7, -1.3, -0.4, 0.6, 1.9, 4.2)


def to_sympy(node: Node) -> sp.Basic:
  return node.to_sympy()


def from_sympy(expr: sp.Basic) -> Node:
  """Convert a SymPy expression built from + - * / ^ abs log exp into a tree"""
  for relation_type, relation in _RELATIONS.items():
    if isinstance(expr, relation_type):
      return Equation(from_sympy(expr.lhs), from_sympy(expr.rhs), relation)

  if expr.is_Symbol:
    return VariableNode(str(expr))

  if expr.is_number and not expr.free_symbols:
    try:
      return ConstantNode(float(expr))
    except TypeError:
      raise UnsupportedOperationError(f"Non-real constant: {expr}") from None

  if isinstance(expr, sp.Add):
    terms = [from_sympy(arg) for arg in expr.as_ordered_terms()]
    result = terms[0]
    for term in terms[1:]:
      if isinstance(term, UnaryOpNode) and term.operator == 'neg':
        result = binary('-', result, term.operand)
      else:
        result = binary('+', result, term)
    return result

  if isinstance(expr, sp.Mul):
    coefficient, rest = expr.as_coeff_Mul()
    if coefficient == -1:
      return negate(from_sympy(rest))
    numerator, denominator = sp.fraction(expr)
    if denominator != 1:
      return binary('/', from_sympy(numerator), from_sympy(denominator))
    factors = [from_sympy(arg) for arg in expr.args]
    result = factors[0]
    for factor in factors[1:]:
      result = binary('*', result, factor)
    return result

  if isinstance(expr, sp.Pow):
    base, exponent = expr.args
    if exponent == -1:
      return binary('/', ConstantNode(1), from_sympy(base))
    return binary('^', from_sympy(base), from_sympy(exponent))

  if isinstance(expr, sp.exp):
    return UnaryOpNode('exp', from_sympy(expr.args[0]))

  if isinstance(expr, sp.log):
    if len(expr.args) != 1:
      raise UnsupportedOperationError(f"Only natural logarithms are supported: {expr}")
    return UnaryOpNode('log', from_sympy(expr.args[0]))

  if isinstance(expr, sp.Abs):
    return UnaryOpNode('abs', from_sympy(expr.args[0]))

  raise UnsupportedOperationError(f"Cannot convert SymPy expression: {expr}")


def latex_representation(node: Node) -> str:
  return sp.latex(node.to_sympy())


def are_equivalent(a: Node, b: Node, samples: Sequence[float] = DEFAULT_SAMPLES,
                   tolerance: float = 1e-9) -> bool:
  """
  Check whether two expressions denote the same function.

  SymPy is asked first; when it cannot prove the difference is zero the
  expressions are compared numerically at the sample points of their single
  free variable, skipping points where either side is undefined.
  """
  difference = sp.simplify(a.to_sympy() - b.to_sympy())
  if difference == 0:
    return True

  variables = get_variables(a) | get_variables(b)
  if len(variables) > 1:
    return False
  variable = next(iter(variables), 'x')

  compared = 0
  for value in samples:
    try:
      left = a.evaluate(variable, value)
      right = b.evaluate(variable, value)
    except (AlgebraError, OverflowError):
      continue
    compared += 1
    if not np.isclose(left, right, rtol=tolerance, atol=tolerance):
      return False
  return compared > 0


def verify_solution(equation: Equation, variable: str, value: Union[Node, float],
                    tolerance: float = 1e-9) -> bool:
  """True if substituting `value` for `variable` balances the equation"""
  if isinstance(value, Node):
    replacement = value.to_sympy()
  else:
    replacement = sp.Float(value)
  symbol = sp.Symbol(variable)
  try:
    left = complex(sp.N(equation.left.to_sympy().subs(symbol, replacement)))
    right = complex(sp.N(equation.right.to_sympy().subs(symbol, replacement)))
  except TypeError:
    # zoo / nan after substitution: the value is outside the domain
    return False
  return abs(left - right) <= tolerance * max(1.0, abs(left), abs(right))


class SymPySimplifier:
  """Cross-checks the engine's simplifier against SymPy"""

  def __init__(self, samples: Sequence[float] = DEFAULT_SAMPLES):
    self.samples = tuple(samples)

  def check(self, original: Node, simplified: Optional[Node] = None) -> bool:
    if simplified is None:
      from .simplifier import simplify
      simplified = simplify(original)
    return are_equivalent(original, simplified, self.samples)
