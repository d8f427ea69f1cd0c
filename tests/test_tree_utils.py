import pytest

from symbolic_algebra import ConstantNode, VariableNode, UnaryOpNode, BinaryOpNode, Polynomial, parse
from symbolic_algebra.expression_tree.utils import (
    ExpressionValidator, const_value, contains_variable, get_all_nodes, calculate_tree_depth,
    get_variables, get_constants, find_nodes_by_operator
)

x = VariableNode('x')
y = VariableNode('y')
two = ConstantNode(2)
product = BinaryOpNode('*', two, x)
logarithm = UnaryOpNode('log', y)
tree = BinaryOpNode('+', product, logarithm)


def test_breadth_first_order():
    assert get_all_nodes(tree) == [tree, product, logarithm, two, x, y]


def test_depth_first_order():
    assert get_all_nodes(tree, 'depth_first') == [tree, product, two, x, logarithm, y]


def test_invalid_traversal_order():
    with pytest.raises(ValueError):
        get_all_nodes(tree, 'sideways')


def test_depth():
    assert calculate_tree_depth(x) == 1
    assert calculate_tree_depth(tree) == 3


def test_variables_and_constants():
    assert get_variables(tree) == {'x', 'y'}
    assert get_constants(tree) == [2.0]


def test_find_nodes_by_operator():
    assert find_nodes_by_operator(tree, '*') == [product]
    assert find_nodes_by_operator(tree, 'log') == [logarithm]
    assert find_nodes_by_operator(tree, '/') == []


def test_contains_variable():
    assert contains_variable(tree, 'y')
    assert not contains_variable(tree, 'z')
    assert contains_variable(Polynomial(BinaryOpNode('+', x, two), 'x'), 'x')


def test_const_value():
    assert const_value(two) == 2.0
    assert const_value(UnaryOpNode('neg', UnaryOpNode('abs', UnaryOpNode('neg', two)))) == -2.0
    assert const_value(UnaryOpNode('log', two)) is None
    assert const_value(x) is None


@pytest.mark.parametrize("node, variable", [
    (BinaryOpNode('+', BinaryOpNode('*', ConstantNode(3), BinaryOpNode('^', x, two)), x), 'x'),
    (BinaryOpNode('*', BinaryOpNode('+', y, two), BinaryOpNode('-', y, two)), 'y'),
    (BinaryOpNode('mod', x, ConstantNode(4)), 'x'),
])
def test_polynomial_shape(node, variable):
    assert ExpressionValidator.polynomial_variable(node) == variable
    assert ExpressionValidator.is_polynomial(node)
    assert isinstance(parse(node.to_string()), Polynomial)


@pytest.mark.parametrize("node", [
    BinaryOpNode('/', x, two),
    BinaryOpNode('+', x, y),
    BinaryOpNode('^', two, x),
    BinaryOpNode('^', BinaryOpNode('+', x, two), two),
    two,
])
def test_not_polynomial_shape(node):
    assert ExpressionValidator.polynomial_variable(node) is None
    assert not ExpressionValidator.is_polynomial(node)
