import math
from typing import Optional
from ..core.node import Node, ConstantNode, BinaryOpNode, VariableNode


class _PolynomialState:
  __slots__ = ('variable', 'ok')

  def __init__(self):
    self.variable: Optional[str] = None
    self.ok = True


class ExpressionValidator:

  @staticmethod
  def polynomial_variable(node: Node) -> Optional[str]:
    """Name of the single variable if `node` has polynomial shape, else None.

    Leaves must be constants or one consistently named variable; operators
    must be + - * mod, or ^ with a variable base and a non-negative integer
    constant exponent. At least one variable has to occur.
    """
    state = _PolynomialState()
    ExpressionValidator._check_polynomial(node, state)
    if state.ok and state.variable is not None:
      return state.variable
    return None

  @staticmethod
  def is_polynomial(node: Node) -> bool:
    return ExpressionValidator.polynomial_variable(node) is not None

  @staticmethod
  def _check_polynomial(node: Node, state: _PolynomialState):
    if not state.ok:
      return

    if isinstance(node, ConstantNode):
      if not math.isfinite(node.value):
        state.ok = False
      return

    if isinstance(node, VariableNode):
      if state.variable is None:
        state.variable = node.name
      elif state.variable != node.name:
        state.ok = False
      return

    if isinstance(node, BinaryOpNode):
      if node.operator in ('+', '-', '*', 'mod'):
        ExpressionValidator._check_polynomial(node.left, state)
        ExpressionValidator._check_polynomial(node.right, state)
        return

      if node.operator == '^':
        exponent = node.right
        if (not isinstance(node.left, VariableNode) or
            not isinstance(exponent, ConstantNode) or
            not exponent.value.is_integer() or exponent.value < 0):
          state.ok = False
          return
        ExpressionValidator._check_polynomial(node.left, state)
        return

    # unary operators, division and anything else break the shape
    state.ok = False
