import numpy as np
import sympy as sp
from abc import ABC, abstractmethod
from typing import Optional, Tuple, Sequence
from .operators import (
  NodeType, BINARY_OP_MAP, UNARY_OP_MAP, NARY_OP_MAP,
  apply_binary, apply_unary, compare, normalize_relation,
  evaluate_binary_op, evaluate_unary_op
)
from ...errors import UnboundVariableError

_set = object.__setattr__


def format_number(value: float) -> str:
  if value.is_integer() and abs(value) < 1e16:
    return str(int(value))
  return repr(value)


class Node(ABC):
  """Immutable expression tree node with structural equality and cached hash/size"""

  __slots__ = ('_hash_cache', '_size_cache')
  node_type: NodeType

  def __init__(self):
    _set(self, '_hash_cache', None)
    _set(self, '_size_cache', None)

  def __setattr__(self, name, value):
    raise AttributeError(f"{type(self).__name__} is immutable; build a new node instead")

  def __delattr__(self, name):
    raise AttributeError(f"{type(self).__name__} is immutable")

  @abstractmethod
  def evaluate(self, variable: str, value: float) -> float:
    pass

  @abstractmethod
  def evaluate_batch(self, variable: str, values: np.ndarray) -> np.ndarray:
    pass

  @abstractmethod
  def to_string(self) -> str:
    pass

  @abstractmethod
  def to_sympy(self) -> sp.Basic:
    pass

  @abstractmethod
  def children(self) -> Tuple['Node', ...]:
    pass

  @abstractmethod
  def _compute_hash(self) -> int:
    pass

  def size(self) -> int:
    """Node count"""
    if self._size_cache is None:
      _set(self, '_size_cache', 1 + sum(child.size() for child in self.children()))
    return self._size_cache

  def __hash__(self) -> int:
    if self._hash_cache is None:
      _set(self, '_hash_cache', self._compute_hash())
    return self._hash_cache

  def __eq__(self, other) -> bool:
    if not isinstance(other, Node):
      return NotImplemented
    from ..utils.tree_utils import ast_equal
    return ast_equal(self, other)

  def __str__(self) -> str:
    return self.to_string()

  def __repr__(self) -> str:
    return f"{type(self).__name__}({self.to_string()})"


class ConstantNode(Node):
  __slots__ = ('value',)
  node_type = NodeType.CONSTANT

  def __init__(self, value: float):
    super().__init__()
    # + 0.0 turns -0.0 into 0.0
    _set(self, 'value', float(value) + 0.0)

  def evaluate(self, variable: str, value: float) -> float:
    return self.value

  def evaluate_batch(self, variable: str, values: np.ndarray) -> np.ndarray:
    return np.full(np.shape(np.atleast_1d(values)), self.value, dtype=np.float64)

  def to_string(self) -> str:
    return format_number(self.value)

  def to_sympy(self) -> sp.Basic:
    if self.value.is_integer():
      return sp.Integer(int(self.value))
    return sp.Float(self.value)

  def children(self) -> Tuple[Node, ...]:
    return ()

  def _compute_hash(self) -> int:
    return hash((NodeType.CONSTANT, self.value))


class VariableNode(Node):
  __slots__ = ('name',)
  node_type = NodeType.VARIABLE

  def __init__(self, name: str):
    super().__init__()
    _set(self, 'name', name)

  def evaluate(self, variable: str, value: float) -> float:
    if variable != self.name:
      raise UnboundVariableError(f"No value bound for variable '{self.name}'")
    return float(value)

  def evaluate_batch(self, variable: str, values: np.ndarray) -> np.ndarray:
    if variable != self.name:
      raise UnboundVariableError(f"No value bound for variable '{self.name}'")
    return np.atleast_1d(np.asarray(values, dtype=np.float64))

  def to_string(self) -> str:
    return self.name

  def to_sympy(self) -> sp.Basic:
    return sp.Symbol(self.name)

  def children(self) -> Tuple[Node, ...]:
    return ()

  def _compute_hash(self) -> int:
    return hash((NodeType.VARIABLE, self.name))


class UnaryOpNode(Node):
  """Unary operation: 'neg', 'abs', 'log' or 'exp'.

  Construction collapses neg(neg(e)) to e and abs(neg(e)) to abs(e), so the
  constructor may hand back a node other than a fresh UnaryOpNode.
  """

  __slots__ = ('operator', 'operand')
  node_type = NodeType.UNARY_OP

  def __new__(cls, operator: str, operand: Node):
    if operator not in UNARY_OP_MAP:
      raise ValueError(f"Unknown unary operator: {operator}")
    if isinstance(operand, UnaryOpNode) and operand.operator == 'neg':
      if operator == 'neg':
        return operand.operand
      if operator == 'abs':
        return UnaryOpNode('abs', operand.operand)
    node = super().__new__(cls)
    Node.__init__(node)
    _set(node, 'operator', operator)
    _set(node, 'operand', operand)
    return node

  def __init__(self, operator: str, operand: Node):
    # fully built in __new__
    pass

  def __getnewargs__(self):
    return (self.operator, self.operand)

  def evaluate(self, variable: str, value: float) -> float:
    return apply_unary(self.operator, self.operand.evaluate(variable, value))

  def evaluate_batch(self, variable: str, values: np.ndarray) -> np.ndarray:
    return evaluate_unary_op(self.operand.evaluate_batch(variable, values), self.operator)

  def to_string(self) -> str:
    inner = self.operand.to_string()
    if self.operator == 'neg':
      return f"-{inner}"
    elif self.operator == 'abs':
      return f"|{inner}|"
    elif self.operator == 'log':
      return f"log({inner})"
    return f"e^({inner})"

  def to_sympy(self) -> sp.Basic:
    operand_sympy = self.operand.to_sympy()
    if self.operator == 'neg':
      return -operand_sympy
    elif self.operator == 'abs':
      return sp.Abs(operand_sympy)
    elif self.operator == 'log':
      return sp.log(operand_sympy)
    return sp.exp(operand_sympy)

  def children(self) -> Tuple[Node, ...]:
    return (self.operand,)

  def _compute_hash(self) -> int:
    return hash((NodeType.UNARY_OP, self.operator, hash(self.operand)))


class BinaryOpNode(Node):
  __slots__ = ('operator', 'left', 'right')
  node_type = NodeType.BINARY_OP

  def __init__(self, operator: str, left: Node, right: Node):
    if operator not in BINARY_OP_MAP:
      raise ValueError(f"Unknown binary operator: {operator}")
    super().__init__()
    _set(self, 'operator', operator)
    _set(self, 'left', left)
    _set(self, 'right', right)

  def evaluate(self, variable: str, value: float) -> float:
    left_val = self.left.evaluate(variable, value)
    right_val = self.right.evaluate(variable, value)
    return apply_binary(self.operator, left_val, right_val)

  def evaluate_batch(self, variable: str, values: np.ndarray) -> np.ndarray:
    left_val = self.left.evaluate_batch(variable, values)
    right_val = self.right.evaluate_batch(variable, values)
    return evaluate_binary_op(left_val, right_val, self.operator)

  def to_string(self) -> str:
    return f"({self.left.to_string()} {self.operator} {self.right.to_string()})"

  def to_sympy(self) -> sp.Basic:
    left = self.left.to_sympy()
    right = self.right.to_sympy()
    if self.operator == '+':
      return sp.Add(left, right)
    elif self.operator == '-':
      return sp.Add(left, sp.Mul(-1, right))
    elif self.operator == '*':
      return sp.Mul(left, right)
    elif self.operator == '/':
      return sp.Mul(left, sp.Pow(right, -1))
    elif self.operator == '^':
      return sp.Pow(left, right)
    # truncated remainder, matching evaluate()
    quotient = left / right
    return left - right * sp.sign(quotient) * sp.floor(sp.Abs(quotient))

  def children(self) -> Tuple[Node, ...]:
    return (self.left, self.right)

  def _compute_hash(self) -> int:
    return hash((NodeType.BINARY_OP, self.operator, hash(self.left), hash(self.right)))


class NaryOpNode(Node):
  """Flat '+' or '*' over an ordered operand list.

  Only used while the simplifier gathers an additive chain; it is folded back
  into a binary chain before simplification returns.
  """

  __slots__ = ('operator', 'operands')
  node_type = NodeType.NARY_OP

  def __init__(self, operator: str, operands: Sequence[Node]):
    if operator not in NARY_OP_MAP:
      raise ValueError(f"Unknown n-ary operator: {operator}")
    super().__init__()
    _set(self, 'operator', operator)
    _set(self, 'operands', tuple(operands))

  def evaluate(self, variable: str, value: float) -> float:
    result = 0.0 if self.operator == '+' else 1.0
    for operand in self.operands:
      result = apply_binary(self.operator, result, operand.evaluate(variable, value))
    return result

  def evaluate_batch(self, variable: str, values: np.ndarray) -> np.ndarray:
    result = np.full(np.shape(np.atleast_1d(values)), 0.0 if self.operator == '+' else 1.0, dtype=np.float64)
    for operand in self.operands:
      result = evaluate_binary_op(result, operand.evaluate_batch(variable, values), self.operator)
    return result

  def to_string(self) -> str:
    return "(" + f" {self.operator} ".join(op.to_string() for op in self.operands) + ")"

  def to_sympy(self) -> sp.Basic:
    args = [operand.to_sympy() for operand in self.operands]
    return sp.Add(*args) if self.operator == '+' else sp.Mul(*args)

  def children(self) -> Tuple[Node, ...]:
    return self.operands

  def _compute_hash(self) -> int:
    return hash((NodeType.NARY_OP, self.operator, tuple(hash(op) for op in self.operands)))


class Equation(Node):
  """Relation between two expressions; solve_for is defined for '=' only"""

  __slots__ = ('left', 'right', 'relation')
  node_type = NodeType.EQUATION

  def __init__(self, left: Node, right: Node, relation: str = '='):
    super().__init__()
    _set(self, 'left', left)
    _set(self, 'right', right)
    _set(self, 'relation', normalize_relation(relation))

  def evaluate(self, variable: str, value: float) -> bool:
    left_val = self.left.evaluate(variable, value)
    right_val = self.right.evaluate(variable, value)
    return compare(self.relation, left_val, right_val)

  def evaluate_batch(self, variable: str, values: np.ndarray) -> np.ndarray:
    left_val = self.left.evaluate_batch(variable, values)
    right_val = self.right.evaluate_batch(variable, values)
    return np.array([compare(self.relation, l, r) for l, r in zip(left_val, right_val)], dtype=bool)

  def simplify(self) -> 'Equation':
    from ..utils.simplifier import simplify
    return simplify(self)

  def solve_for(self, variable: str):
    from ...solver import solve_for
    return solve_for(self, variable)

  def to_string(self) -> str:
    return f"{self.left.to_string()} {self.relation} {self.right.to_string()}"

  def to_sympy(self) -> sp.Basic:
    left = self.left.to_sympy()
    right = self.right.to_sympy()
    relations = {'=': sp.Eq, '≠': sp.Ne, '>': sp.Gt, '<': sp.Lt, '≥': sp.Ge, '≤': sp.Le}
    return relations[self.relation](left, right, evaluate=False)

  def children(self) -> Tuple[Node, ...]:
    return (self.left, self.right)

  def _compute_hash(self) -> int:
    return hash((NodeType.EQUATION, self.relation, hash(self.left), hash(self.right)))


class Polynomial(Node):
  """Marks a single-variable expression as polynomial shaped.

  The wrapped expression is simplified on construction; evaluation and
  printing delegate to it.
  """

  __slots__ = ('expression', 'variable')
  node_type = NodeType.POLYNOMIAL

  def __init__(self, expression: Node, variable: str):
    from ..utils.simplifier import simplify
    super().__init__()
    _set(self, 'expression', simplify(expression))
    _set(self, 'variable', variable)

  def evaluate(self, variable: str, value: float) -> float:
    return self.expression.evaluate(variable, value)

  def evaluate_batch(self, variable: str, values: np.ndarray) -> np.ndarray:
    return self.expression.evaluate_batch(variable, values)

  def to_string(self) -> str:
    return self.expression.to_string()

  def to_sympy(self) -> sp.Basic:
    return self.expression.to_sympy()

  def children(self) -> Tuple[Node, ...]:
    return (self.expression,)

  def _compute_hash(self) -> int:
    return hash((NodeType.POLYNOMIAL, self.variable, hash(self.expression)))


def kind_of(node: Node) -> NodeType:
  return node.node_type


# Convenience constructors used throughout the simplifier and solver
def negate(node: Node) -> Node:
  return UnaryOpNode('neg', node)


def binary(operator: str, left: Node, right: Node) -> BinaryOpNode:
  return BinaryOpNode(operator, left, right)


def is_unary(node: Node, operator: Optional[str] = None) -> bool:
  return isinstance(node, UnaryOpNode) and (operator is None or node.operator == operator)


def is_binary(node: Node, *operators: str) -> bool:
  return isinstance(node, BinaryOpNode) and (not operators or node.operator in operators)
