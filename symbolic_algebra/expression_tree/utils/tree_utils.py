"""
Tree Utility Functions

Structural helpers shared by the simplifier, the solver and the parser:
equality, constant detection, variable search and traversal.
"""

from typing import List, Optional, Set

from ..core.node import (
    Node, ConstantNode, VariableNode, UnaryOpNode, BinaryOpNode,
    NaryOpNode, Equation, Polynomial
)


def ast_equal(a: Node, b: Node) -> bool:
    """
    Structural equality of two trees.

    Constants compare by value, variables by name, operator nodes by operator
    and children in order, polynomials by bound variable and expression.
    Mismatched node classes are never equal.
    """
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    if hash(a) != hash(b):
        return False

    if isinstance(a, ConstantNode):
        return a.value == b.value
    elif isinstance(a, VariableNode):
        return a.name == b.name
    elif isinstance(a, UnaryOpNode):
        return a.operator == b.operator and ast_equal(a.operand, b.operand)
    elif isinstance(a, BinaryOpNode):
        return (a.operator == b.operator and
                ast_equal(a.left, b.left) and
                ast_equal(a.right, b.right))
    elif isinstance(a, NaryOpNode):
        if a.operator != b.operator or len(a.operands) != len(b.operands):
            return False
        return all(ast_equal(x, y) for x, y in zip(a.operands, b.operands))
    elif isinstance(a, Equation):
        return (a.relation == b.relation and
                ast_equal(a.left, b.left) and
                ast_equal(a.right, b.right))
    elif isinstance(a, Polynomial):
        return a.variable == b.variable and ast_equal(a.expression, b.expression)
    return False


def const_value(node: Node) -> Optional[float]:
    """
    Static value of a constant-valued subtree, or None.

    A subtree is constant-valued when it is a Constant or a negation/absolute
    value wrapping a constant-valued subtree.
    """
    if isinstance(node, ConstantNode):
        return node.value
    if isinstance(node, UnaryOpNode) and node.operator in ('neg', 'abs'):
        value = const_value(node.operand)
        if value is None:
            return None
        return -value if node.operator == 'neg' else abs(value)
    return None


def contains_variable(node: Node, name: str) -> bool:
    """True if the variable `name` occurs anywhere in the tree"""
    if isinstance(node, VariableNode):
        return node.name == name
    if isinstance(node, Polynomial):
        return node.variable == name
    return any(contains_variable(child, name) for child in node.children())


def get_all_nodes(node: Node, traversal_order: str = 'breadth_first') -> List[Node]:
    """
    Get all nodes in the tree using specified traversal order.

    Args:
        node: Root node of the tree
        traversal_order: 'breadth_first' (default) or 'depth_first'

    Returns:
        List of all nodes in the tree
    """
    if traversal_order == 'breadth_first':
        return _breadth_first_traversal(node)
    elif traversal_order == 'depth_first':
        return _depth_first_traversal(node)
    else:
        raise ValueError(f"Invalid traversal_order: {traversal_order}")


def _breadth_first_traversal(node: Node) -> List[Node]:
    """Breadth-first traversal (iterative, non-recursive)"""
    nodes_to_visit = [node]
    all_nodes = []

    while nodes_to_visit:
        current_node = nodes_to_visit.pop(0)  # FIFO for breadth-first
        all_nodes.append(current_node)
        nodes_to_visit.extend(current_node.children())

    return all_nodes


def _depth_first_traversal(node: Node) -> List[Node]:
    """Depth-first traversal (recursive)"""
    nodes = [node]
    for child in node.children():
        nodes.extend(_depth_first_traversal(child))
    return nodes


def calculate_tree_depth(node: Node) -> int:
    """Depth of the tree; a leaf has depth 1"""
    children = node.children()
    if not children:
        return 1
    return 1 + max(calculate_tree_depth(child) for child in children)


def get_variables(node: Node) -> Set[str]:
    """Names of all variables in the tree"""
    names = set()
    for current in get_all_nodes(node):
        if isinstance(current, VariableNode):
            names.add(current.name)
        elif isinstance(current, Polynomial):
            names.add(current.variable)
    return names


def get_constants(node: Node) -> List[float]:
    return [n.value for n in get_all_nodes(node) if isinstance(n, ConstantNode)]


def find_nodes_by_operator(node: Node, operator: str) -> List[Node]:
    """All operator nodes (unary, binary or n-ary) using `operator`"""
    return [n for n in get_all_nodes(node)
            if isinstance(n, (UnaryOpNode, BinaryOpNode, NaryOpNode)) and n.operator == operator]
