"""Core expression tree components."""

from .node import (
    Node, ConstantNode, VariableNode, UnaryOpNode, BinaryOpNode, NaryOpNode,
    Equation, Polynomial, kind_of
)
from .operators import (
    NodeType, OpType, BINARY_OP_MAP, UNARY_OP_MAP, NARY_OP_MAP, RELATIONS,
    apply_binary, apply_unary, compare,
    evaluate_binary_op, evaluate_unary_op,
    evaluate_binary_op_fast, evaluate_unary_op_fast
)

__all__ = [
    'Node', 'ConstantNode', 'VariableNode', 'UnaryOpNode', 'BinaryOpNode', 'NaryOpNode',
    'Equation', 'Polynomial', 'kind_of',
    'NodeType', 'OpType', 'BINARY_OP_MAP', 'UNARY_OP_MAP', 'NARY_OP_MAP', 'RELATIONS',
    'apply_binary', 'apply_unary', 'compare',
    'evaluate_binary_op', 'evaluate_unary_op',
    'evaluate_binary_op_fast', 'evaluate_unary_op_fast'
]
