"""Expression Tree Module

Expression model, simplifier and tree utilities of the algebra engine.
"""

from .expression import Expression
from .core.node import (
    Node,
    ConstantNode,
    VariableNode,
    UnaryOpNode,
    BinaryOpNode,
    NaryOpNode,
    Equation,
    Polynomial,
    kind_of
)
from .core.operators import (
    NodeType,
    OpType,
    BINARY_OP_MAP,
    UNARY_OP_MAP,
    evaluate_binary_op,
    evaluate_unary_op
)
from .utils import ExpressionSimplifier, ExpressionValidator, SymPySimplifier, simplify

__all__ = [
    "Expression",
    "Node", "ConstantNode", "VariableNode", "UnaryOpNode", "BinaryOpNode", "NaryOpNode",
    "Equation", "Polynomial", "kind_of",
    "NodeType", "OpType",
    "BINARY_OP_MAP", "UNARY_OP_MAP",
    "evaluate_binary_op", "evaluate_unary_op",
    "ExpressionSimplifier", "ExpressionValidator", "SymPySimplifier", "simplify"
]
