from typing import Callable, Dict, List, Optional, Tuple
from ..core.node import (
  Node, VariableNode, ConstantNode, BinaryOpNode, UnaryOpNode, NaryOpNode,
  Equation, Polynomial, negate, binary, is_unary, is_binary
)
from ..core.operators import apply_binary, apply_unary
from .tree_utils import ast_equal, const_value
from ...config import get_config
from ...errors import DivisionByZeroError, ModulusByZeroError, DomainError
from ...logging_system import log_debug, log_warning


def _is_zero(node: Node) -> bool:
  value = const_value(node)
  return value is not None and value == 0


def _is_one(node: Node) -> bool:
  value = const_value(node)
  return value is not None and value == 1


def _is_minus_one(node: Node) -> bool:
  value = const_value(node)
  return value is not None and value == -1


def _signed_variable(node: Node) -> Optional[Tuple[str, int]]:
  """(name, sign) for `x` or `-x`, else None"""
  if isinstance(node, VariableNode):
    return node.name, 1
  if is_unary(node, 'neg') and isinstance(node.operand, VariableNode):
    return node.operand.name, -1
  return None


def _scaled_variable(coefficient: float, name: str) -> Node:
  if coefficient == 0:
    return ConstantNode(0)
  if coefficient == 1:
    return VariableNode(name)
  if coefficient == -1:
    return negate(VariableNode(name))
  return binary('*', ConstantNode(coefficient), VariableNode(name))


def _offset(node: Node, amount: float) -> Node:
  # node + amount, written with a positive literal
  if amount == 0:
    return node
  if amount > 0:
    return binary('+', node, ConstantNode(amount))
  return binary('-', node, ConstantNode(-amount))


def _rebuild(node: BinaryOpNode, left: Node, right: Node) -> BinaryOpNode:
  if left is node.left and right is node.right:
    return node
  return BinaryOpNode(node.operator, left, right)


def _map_children(node: Node, rewrite: Callable[[Node], Node]) -> Node:
  """Apply `rewrite` to the children of a unary or binary node"""
  if isinstance(node, UnaryOpNode):
    operand = rewrite(node.operand)
    return node if operand is node.operand else UnaryOpNode(node.operator, operand)
  if isinstance(node, BinaryOpNode):
    return _rebuild(node, rewrite(node.left), rewrite(node.right))
  return node


def _chain(node: NaryOpNode) -> Node:
  if not node.operands:
    return ConstantNode(0 if node.operator == '+' else 1)
  result = node.operands[0]
  for operand in node.operands[1:]:
    result = binary(node.operator, result, operand)
  return result


class ExpressionSimplifier:
  """Rewrites expression trees into canonical form.

  A binary node is put through four passes repeatedly: constant folding,
  local re-association ("peak flatten"), identity elimination and like-term
  collection. The loop stops once an iteration leaves the tree structurally
  unchanged or the tree has collapsed to a constant.
  """

  @staticmethod
  def simplify(node: Node, max_iterations: Optional[int] = None) -> Node:
    if max_iterations is None:
      max_iterations = get_config().max_iterations
    return ExpressionSimplifier._simplify(node, max_iterations)

  @staticmethod
  def _simplify(node: Node, max_iterations: int) -> Node:
    if isinstance(node, Polynomial):
      return ExpressionSimplifier._simplify(node.expression, max_iterations)

    if isinstance(node, Equation):
      return Equation(ExpressionSimplifier._simplify(node.left, max_iterations),
                      ExpressionSimplifier._simplify(node.right, max_iterations),
                      node.relation)

    if isinstance(node, UnaryOpNode):
      operand = ExpressionSimplifier._simplify(node.operand, max_iterations)
      return ExpressionSimplifier._fold_unary(node.operator, operand)

    if isinstance(node, NaryOpNode):
      return ExpressionSimplifier._simplify(_chain(node), max_iterations)

    if not isinstance(node, BinaryOpNode):
      return node

    current = node
    for iteration in range(max_iterations):
      candidate = ExpressionSimplifier._fold_constants(current)
      if isinstance(candidate, ConstantNode):
        return candidate

      candidate = ExpressionSimplifier._peak_flatten(candidate)
      if isinstance(candidate, ConstantNode):
        return candidate

      candidate = ExpressionSimplifier._identity_fold(candidate)
      candidate = ExpressionSimplifier._collect_terms(candidate)

      if isinstance(candidate, ConstantNode) or ast_equal(candidate, current):
        log_debug(f"simplify reached a fixed point after {iteration + 1} iteration(s)")
        return candidate

      if not isinstance(candidate, BinaryOpNode):
        # collapsed to a leaf or unary node; finish on that shape
        return ExpressionSimplifier._simplify(candidate, max_iterations)

      current = candidate

    log_warning(f"simplify stopped after {max_iterations} iterations without reaching a fixed point")
    return current

  # Constant folding

  @staticmethod
  def _fold_unary(operator: str, operand: Node) -> Node:
    if operator in ('neg', 'abs'):
      value = const_value(operand)
      if value is not None:
        return ConstantNode(apply_unary(operator, value))
    # log/exp stay symbolic; their domain is checked at evaluation
    return UnaryOpNode(operator, operand)

  @staticmethod
  def _fold_constants(node: Node) -> Node:
    if isinstance(node, Polynomial):
      return ExpressionSimplifier._fold_constants(node.expression)

    if isinstance(node, UnaryOpNode):
      operand = ExpressionSimplifier._fold_constants(node.operand)
      if operand is node.operand and node.operator not in ('neg', 'abs'):
        return node
      return ExpressionSimplifier._fold_unary(node.operator, operand)

    if not isinstance(node, BinaryOpNode):
      return node

    left = ExpressionSimplifier._fold_constants(node.left)
    right = ExpressionSimplifier._fold_constants(node.right)
    lv = const_value(left)
    rv = const_value(right)

    if lv is not None and rv is not None:
      if node.operator in ('/', 'mod') and rv == 0:
        # left for identity elimination / evaluation to report
        return _rebuild(node, left, right)
      try:
        return ConstantNode(apply_binary(node.operator, lv, rv))
      except (DomainError, OverflowError):
        return _rebuild(node, left, right)

    return _rebuild(node, left, right)

  # Peak flatten

  @staticmethod
  def _peak_flatten(node: Node) -> Node:
    if not isinstance(node, BinaryOpNode):
      return _map_children(node, ExpressionSimplifier._peak_flatten)

    lv = const_value(node.left)
    rv = const_value(node.right)

    if lv is None and rv is None:
      if is_binary(node, '+') and is_binary(node.left, '/') and is_binary(node.right, '/'):
        a, b = node.left.left, node.left.right
        c, d = node.right.left, node.right.right
        # two constant denominators are left for term collection
        if const_value(b) is None or const_value(d) is None:
          if ast_equal(b, d):
            # (a / b) + (c / b) => (a + c) / b
            return binary('/', binary('+', a, c), b)
          # (a / b) + (c / d) => (ad + cb) / bd
          numerator = binary('+', binary('*', a, d), binary('*', c, b))
          return binary('/', numerator, binary('*', b, d))
      return _map_children(node, ExpressionSimplifier._peak_flatten)

    left = ConstantNode(lv) if lv is not None else ExpressionSimplifier._flattenable(node.left)
    right = ConstantNode(rv) if rv is not None else ExpressionSimplifier._flattenable(node.right)

    rewritten = None
    if left is not None and right is not None:
      rewritten = ExpressionSimplifier._reassociate(node.operator, left, right)

    if rewritten is None:
      return _map_children(node, ExpressionSimplifier._peak_flatten)
    return rewritten

  @staticmethod
  def _flattenable(node: Node) -> Optional[Node]:
    """Binary form of `node` the re-association rules can look into, or None.

    A negated sum, difference, product or quotient has the negation pushed
    onto its left operand first.
    """
    if is_unary(node, 'neg') and is_binary(node.operand, '+', '-', '*', '/'):
      inner = node.operand
      if isinstance(inner.left, ConstantNode):
        head = ConstantNode(-inner.left.value)
      else:
        head = negate(inner.left)
      if inner.operator == '+':
        return binary('-', head, inner.right)
      if inner.operator == '-':
        return binary('+', head, inner.right)
      return binary(inner.operator, head, inner.right)

    if is_binary(node, '+', '-', '*', '/'):
      return node
    return None

  @staticmethod
  def _reassociate(operator: str, left: Node, right: Node) -> Optional[Node]:
    if operator == '+':
      if is_binary(left, '+', '-') and isinstance(right, ConstantNode):
        return ExpressionSimplifier._add_into(left, right.value)
      if is_binary(right, '+', '-') and isinstance(left, ConstantNode):
        return ExpressionSimplifier._add_into(right, left.value)

    elif operator == '-':
      if is_binary(left, '+', '-') and isinstance(right, ConstantNode):
        return ExpressionSimplifier._subtract_from(left, right.value)
      if is_binary(right, '+', '-') and isinstance(left, ConstantNode):
        return ExpressionSimplifier._subtract_sum(left.value, right)

    elif operator == '*':
      if is_binary(left, '*', '/') and isinstance(right, ConstantNode):
        return ExpressionSimplifier._scale_product(left, right.value)
      if is_binary(right, '*', '/') and isinstance(left, ConstantNode):
        return ExpressionSimplifier._scale_product(right, left.value)
      if is_binary(left, '+', '-') and isinstance(right, ConstantNode):
        return ExpressionSimplifier._distribute(left, right.value, '*')
      if is_binary(right, '+', '-') and isinstance(left, ConstantNode):
        return ExpressionSimplifier._distribute(right, left.value, '*')

    elif operator == '/':
      if is_binary(left, '*', '/') and isinstance(right, ConstantNode):
        return ExpressionSimplifier._divide_product(left, right.value)
      if is_binary(right, '*', '/') and isinstance(left, ConstantNode):
        return ExpressionSimplifier._divide_by_product(left.value, right)
      if is_binary(left, '+', '-') and isinstance(right, ConstantNode):
        return ExpressionSimplifier._distribute(left, right.value, '/')

    return None

  @staticmethod
  def _add_into(inner: BinaryOpNode, k: float) -> Optional[Node]:
    # (c ± b) + k => (c + k) ± b
    if isinstance(inner.left, ConstantNode):
      value = inner.left.value + k
      if value == 0:
        return negate(inner.right) if inner.operator == '-' else inner.right
      return binary(inner.operator, ConstantNode(value), inner.right)
    # (a ± c) + k => a + (k ± c)
    if isinstance(inner.right, ConstantNode):
      if inner.operator == '-':
        value = k - inner.right.value
      else:
        value = inner.right.value + k
      return _offset(inner.left, value)
    return None

  @staticmethod
  def _subtract_from(inner: BinaryOpNode, k: float) -> Optional[Node]:
    # (c ± b) - k => (c - k) ± b
    if isinstance(inner.left, ConstantNode):
      value = inner.left.value - k
      rest = negate(inner.right) if inner.operator == '-' else inner.right
      if value == 0:
        return rest
      if value > 0:
        return binary('+', ConstantNode(value), rest)
      return binary('-', rest, ConstantNode(-value))
    # (a ± c) - k => a + (±c - k)
    if isinstance(inner.right, ConstantNode):
      if inner.operator == '-':
        value = -inner.right.value - k
      else:
        value = inner.right.value - k
      return _offset(inner.left, value)
    return None

  @staticmethod
  def _subtract_sum(k: float, inner: BinaryOpNode) -> Optional[Node]:
    # k - (c ± b) => (k - c) ∓ b
    if isinstance(inner.left, ConstantNode):
      value = k - inner.left.value
      if value == 0:
        return inner.right if inner.operator == '-' else negate(inner.right)
      return binary('+' if inner.operator == '-' else '-', ConstantNode(value), inner.right)
    # k - (a ± c) => (k ∓ c) - a
    if isinstance(inner.right, ConstantNode):
      if inner.operator == '-':
        value = k + inner.right.value
      else:
        value = k - inner.right.value
      if value == 0:
        return negate(inner.left)
      return binary('-', ConstantNode(value), inner.left)
    return None

  @staticmethod
  def _scale_product(inner: BinaryOpNode, k: float) -> Optional[Node]:
    # (c * b) * k => (ck) * b, (c / b) * k => (ck) / b
    if isinstance(inner.left, ConstantNode):
      value = inner.left.value * k
      if value == 0:
        return ConstantNode(0)
      if inner.operator == '*':
        return inner.right if value == 1 else binary('*', ConstantNode(value), inner.right)
      return binary('/', ConstantNode(value), inner.right)
    # (a * c) * k => (ck) * a, (a / c) * k => (k/c) * a
    if isinstance(inner.right, ConstantNode):
      if inner.operator == '*':
        value = inner.right.value * k
      else:
        if inner.right.value == 0:
          raise DivisionByZeroError("Division by zero")
        value = k / inner.right.value
      if value == 0:
        return ConstantNode(0)
      if value == 1:
        return inner.left
      return binary('*', ConstantNode(value), inner.left)
    return None

  @staticmethod
  def _divide_product(inner: BinaryOpNode, k: float) -> Optional[Node]:
    # (c * b) / k => (c/k) * b, (c / b) / k => (c/k) / b
    if isinstance(inner.left, ConstantNode):
      if k == 0:
        raise DivisionByZeroError("Division by zero")
      value = inner.left.value / k
      if value == 0:
        return ConstantNode(0)
      if inner.operator == '*':
        return inner.right if value == 1 else binary('*', ConstantNode(value), inner.right)
      return binary('/', ConstantNode(value), inner.right)
    if isinstance(inner.right, ConstantNode):
      if inner.operator == '*':
        # (a * c) / k => (c/k) * a
        if k == 0:
          raise DivisionByZeroError("Division by zero")
        value = inner.right.value / k
        if value == 0:
          return ConstantNode(0)
        if value == 1:
          return inner.left
        return binary('*', ConstantNode(value), inner.left)
      # (a / c) / k => a / (ck)
      value = inner.right.value * k
      if value == 0:
        raise DivisionByZeroError("Division by zero")
      if value == 1:
        return inner.left
      return binary('/', inner.left, ConstantNode(value))
    return None

  @staticmethod
  def _divide_by_product(k: float, inner: BinaryOpNode) -> Optional[Node]:
    if isinstance(inner.left, ConstantNode):
      # k / (c * b) => (k/c) / b, k / (c / b) => (k/c) * b
      if inner.left.value == 0:
        raise DivisionByZeroError("Division by zero")
      value = k / inner.left.value
      if value == 0:
        return ConstantNode(0)
      if inner.operator == '*':
        return binary('/', ConstantNode(value), inner.right)
      return inner.right if value == 1 else binary('*', ConstantNode(value), inner.right)
    if isinstance(inner.right, ConstantNode):
      if inner.right.value == 0:
        raise DivisionByZeroError("Division by zero")
      # k / (a * c) => (k/c) / a, k / (a / c) => (kc) / a
      if inner.operator == '*':
        value = k / inner.right.value
      else:
        value = k * inner.right.value
      if value == 0:
        return ConstantNode(0)
      return binary('/', ConstantNode(value), inner.left)
    return None

  @staticmethod
  def _distribute(inner: BinaryOpNode, k: float, operator: str) -> Node:
    # (a ± b) * k => ak ± bk, (a ± b) / k => a/k ± b/k
    if operator == '*' and k == 0:
      return ConstantNode(0)
    if operator == '/' and k == 0:
      raise DivisionByZeroError("Division by zero")

    def apply(term: Node) -> Node:
      if isinstance(term, ConstantNode):
        return ConstantNode(apply_binary(operator, term.value, k))
      if operator == '*':
        return binary('*', ConstantNode(k), term)
      return binary('/', term, ConstantNode(k))

    return binary(inner.operator, apply(inner.left), apply(inner.right))

  # Identity elimination

  @staticmethod
  def _identity_fold(node: Node) -> Node:
    node = _map_children(node, ExpressionSimplifier._identity_fold)
    if not isinstance(node, BinaryOpNode):
      return node

    left, right = node.left, node.right
    l_var = _signed_variable(left)
    r_var = _signed_variable(right)
    same_variable = l_var is not None and r_var is not None and l_var[0] == r_var[0]
    operator = node.operator

    if operator == '+':
      if _is_zero(left):
        return right
      if _is_zero(right):
        return left
      if same_variable:
        return _scaled_variable(l_var[1] + r_var[1], l_var[0])

    elif operator == '-':
      if _is_zero(left):
        return negate(right)
      if _is_zero(right):
        return left
      if same_variable:
        return _scaled_variable(l_var[1] - r_var[1], l_var[0])

    elif operator == '*':
      if _is_zero(left) or _is_zero(right):
        return ConstantNode(0)
      if _is_one(right):
        return left
      if _is_one(left):
        return right
      if _is_minus_one(right):
        return negate(left)
      if _is_minus_one(left):
        return negate(right)
      if same_variable:
        square = binary('^', VariableNode(l_var[0]), ConstantNode(2))
        return square if l_var[1] == r_var[1] else negate(square)

    elif operator == '/':
      if _is_zero(right):
        raise DivisionByZeroError("Division by zero")
      if _is_zero(left):
        return ConstantNode(0)
      if _is_one(right):
        return left
      if _is_minus_one(right):
        return negate(left)
      if same_variable:
        return ConstantNode(l_var[1] * r_var[1])
      if l_var is not None and const_value(right) is not None:
        # x / C => (1 / C) * x
        return binary('*', binary('/', ConstantNode(l_var[1]), right), VariableNode(l_var[0]))

    elif operator == '^':
      if _is_zero(right):
        return ConstantNode(1)
      if _is_one(right):
        return left
      if _is_zero(left):
        return ConstantNode(0)
      if _is_one(left):
        return ConstantNode(1)

    elif operator == 'mod':
      if _is_zero(right):
        raise ModulusByZeroError("Modulus by zero is undefined")
      if _is_one(right):
        return ConstantNode(0)
      if _is_zero(left):
        return ConstantNode(0)
      if same_variable:
        return ConstantNode(0)

    return node

  # Term flattening and collection

  @staticmethod
  def _collect_terms(node: Node) -> Node:
    if not is_binary(node, '+', '-'):
      return _map_children(node, ExpressionSimplifier._collect_terms)

    gathered: List[Tuple[Node, int]] = []
    ExpressionSimplifier._gather(node, 1, gathered)
    operands = []
    for term, sign in gathered:
      term = ExpressionSimplifier._collect_terms(term)
      operands.append(term if sign > 0 else negate(term))
    return ExpressionSimplifier._combine_terms(NaryOpNode('+', operands))

  @staticmethod
  def _gather(node: Node, sign: int, out: List[Tuple[Node, int]]):
    """Flatten an Add/Subtract chain into signed terms; A - B counts as A + (-1)B"""
    if is_binary(node, '+'):
      ExpressionSimplifier._gather(node.left, sign, out)
      ExpressionSimplifier._gather(node.right, sign, out)
    elif is_binary(node, '-'):
      ExpressionSimplifier._gather(node.left, sign, out)
      ExpressionSimplifier._gather(node.right, -sign, out)
    else:
      out.append((node, sign))

  @staticmethod
  def _split_coefficient(term: Node) -> Tuple[float, Node]:
    """Peel negations, constant factors and constant divisors off a term.

    3 * (x / 2) gives (1.5, x); -(2 * log(x)) gives (-2, log(x)).
    """
    coefficient = 1.0
    while True:
      if is_unary(term, 'neg'):
        coefficient, term = -coefficient, term.operand
        continue
      if is_binary(term, '*'):
        lv = const_value(term.left)
        if lv is not None:
          coefficient, term = coefficient * lv, term.right
          continue
        rv = const_value(term.right)
        if rv is not None:
          coefficient, term = coefficient * rv, term.left
          continue
      if is_binary(term, '/'):
        rv = const_value(term.right)
        if rv is not None and rv != 0:
          coefficient, term = coefficient / rv, term.left
          continue
      return coefficient, term

  @staticmethod
  def _combine_terms(terms: NaryOpNode) -> Node:
    linear: Dict[str, float] = {}
    powers: Dict[Tuple[str, str], List] = {}
    constant_sum = 0.0
    # any other body, keyed structurally, in order of first appearance
    others: Dict[Node, float] = {}

    for term in terms.operands:
      coefficient, body = ExpressionSimplifier._split_coefficient(term)

      value = const_value(body)
      if value is not None:
        constant_sum += coefficient * value
      elif isinstance(body, VariableNode):
        linear[body.name] = linear.get(body.name, 0.0) + coefficient
      elif is_binary(body, '^') and isinstance(body.left, VariableNode):
        key = (body.left.name, body.right.to_string())
        if key in powers:
          powers[key][0] += coefficient
        else:
          # keep the first exponent node seen for this key
          powers[key] = [coefficient, body.right]
      else:
        others[body] = others.get(body, 0.0) + coefficient

    out: List[Tuple[Node, bool]] = []
    for name in sorted(linear):
      ExpressionSimplifier._emit(out, linear[name], VariableNode(name))
    for key in sorted(powers):
      coefficient, exponent = powers[key]
      ExpressionSimplifier._emit(out, coefficient, binary('^', VariableNode(key[0]), exponent))
    if constant_sum != 0:
      out.append((ConstantNode(abs(constant_sum)), constant_sum < 0))
    for body, coefficient in others.items():
      ExpressionSimplifier._emit(out, coefficient, body)

    if not out:
      return ConstantNode(0)

    head, negative = out[0]
    if negative:
      result = ConstantNode(-head.value) if isinstance(head, ConstantNode) else negate(head)
    else:
      result = head
    for term, negative in out[1:]:
      result = binary('-' if negative else '+', result, term)
    return result

  @staticmethod
  def _emit(out: List[Tuple[Node, bool]], coefficient: float, body: Node):
    if coefficient == 0:
      return
    magnitude = abs(coefficient)
    term = body if magnitude == 1 else binary('*', ConstantNode(magnitude), body)
    out.append((term, coefficient < 0))


def simplify(node: Node, max_iterations: Optional[int] = None) -> Node:
  """Canonical simplified form of `node`.

  Raises DivisionByZeroError / ModulusByZeroError when a divisor is the
  constant 0 on a branch the passes reach.
  """
  return ExpressionSimplifier.simplify(node, max_iterations)
