"""Symbolic Algebra Package

Parses expressions and equations over one variable, simplifies them to a
canonical form and solves equations by isolating the variable.
"""

from .expression_tree import (
  Expression, Node, ConstantNode, VariableNode, UnaryOpNode, BinaryOpNode,
  NaryOpNode, Equation, Polynomial, NodeType, kind_of
)
from .expression_tree.utils.simplifier import ExpressionSimplifier, simplify
from .expression_tree.utils.tree_utils import ast_equal, contains_variable
from .expression_tree.utils.sympy_utils import (
  from_sympy, are_equivalent, latex_representation, verify_solution
)
from .parser import parse, parse_equation, tokenize
from .solver import (
  EquationSolver, SolveResult, SolutionKind, solve_for,
  TAUTOLOGY_MESSAGE, NOT_FOUND_MESSAGE
)
from .errors import (
  AlgebraError, DivisionByZeroError, ModulusByZeroError, DomainError,
  SolverNotImplementedError, UnsupportedOperationError, ExpressionSyntaxError,
  UnboundVariableError
)
from .config import EngineConfig, get_config, set_config, reset_config
from .logging_system import LogLevel, configure_logging, set_log_level

__version__ = "0.1.0"
__all__ = [
  "Expression", "Node", "ConstantNode", "VariableNode", "UnaryOpNode", "BinaryOpNode",
  "NaryOpNode", "Equation", "Polynomial", "NodeType", "kind_of",
  "ExpressionSimplifier", "simplify", "ast_equal", "contains_variable",
  "from_sympy", "are_equivalent", "latex_representation", "verify_solution",
  "parse", "parse_equation", "tokenize",
  "EquationSolver", "SolveResult", "SolutionKind", "solve_for",
  "TAUTOLOGY_MESSAGE", "NOT_FOUND_MESSAGE",
  "AlgebraError", "DivisionByZeroError", "ModulusByZeroError", "DomainError",
  "SolverNotImplementedError", "UnsupportedOperationError", "ExpressionSyntaxError",
  "UnboundVariableError",
  "EngineConfig", "get_config", "set_config", "reset_config",
  "LogLevel", "configure_logging", "set_log_level"
]
