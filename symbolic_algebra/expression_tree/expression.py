import numpy as np
import sympy as sp
from typing import Optional
from .core.node import Node, Equation


class Expression:
  """Expression wrapper with a cached string form"""

  __slots__ = ('root', '_string_cache')

  def __init__(self, root: Node):
    self.root = root
    self._string_cache: Optional[str] = None

  @classmethod
  def from_string(cls, source: str) -> 'Expression':
    from ..parser import parse
    return cls(parse(source))

  def evaluate(self, variable: str, value: float):
    return self.root.evaluate(variable, value)

  def evaluate_batch(self, variable: str, values) -> np.ndarray:
    return self.root.evaluate_batch(variable, np.atleast_1d(np.asarray(values, dtype=np.float64)))

  def to_string(self) -> str:
    if self._string_cache is None:
      self._string_cache = self.root.to_string()
    return self._string_cache

  def size(self) -> int:
    """Node count"""
    return self.root.size()

  def simplify(self) -> 'Expression':
    from .utils.simplifier import simplify
    return Expression(simplify(self.root))

  def solve_for(self, variable: str):
    if not isinstance(self.root, Equation):
      raise TypeError("solve_for needs an equation")
    return self.root.solve_for(variable)

  def to_sympy(self) -> sp.Basic:
    return self.root.to_sympy()

  def latex(self) -> str:
    return sp.latex(self.to_sympy())

  def __str__(self) -> str:
    return self.to_string()

  def __repr__(self) -> str:
    return f"Expression({self.to_string()})"

  def __hash__(self) -> int:
    return hash(self.root)

  def __eq__(self, other) -> bool:
    if not isinstance(other, Expression):
      return False
    return self.root == other.root
