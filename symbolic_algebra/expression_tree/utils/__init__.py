"""Utilities for expression trees."""

from .simplifier import ExpressionSimplifier, simplify
from .sympy_utils import (
    SymPySimplifier, to_sympy, from_sympy, are_equivalent,
    latex_representation, verify_solution
)
from .tree_utils import (
    ast_equal, const_value, contains_variable,
    get_all_nodes, calculate_tree_depth, get_variables, get_constants,
    find_nodes_by_operator
)
from .validator import ExpressionValidator

__all__ = [
    'ExpressionSimplifier', 'simplify',
    'SymPySimplifier', 'to_sympy', 'from_sympy', 'are_equivalent',
    'latex_representation', 'verify_solution',
    'ast_equal', 'const_value', 'contains_variable',
    'get_all_nodes', 'calculate_tree_depth', 'get_variables', 'get_constants',
    'find_nodes_by_operator',
    'ExpressionValidator'
]
