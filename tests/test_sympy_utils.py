import pytest
import sympy as sp

from symbolic_algebra import (
    parse, parse_equation, from_sympy, are_equivalent, latex_representation, verify_solution,
    ConstantNode, Equation, UnaryOpNode, UnsupportedOperationError
)
from symbolic_algebra.expression_tree.utils.sympy_utils import SymPySimplifier

x, y = sp.symbols('x y')


@pytest.mark.parametrize("expr", [
    x + 2,
    x - y,
    3 * x ** 2 - x / 4,
    -x,
    1 / (x + 1),
    sp.exp(x) + sp.log(x + 3),
    sp.Abs(x - 1) * 2,
])
def test_from_sympy_preserves_meaning(expr):
    node = from_sympy(expr)
    assert sp.simplify(node.to_sympy() - expr) == 0


def test_from_sympy_numbers():
    assert from_sympy(sp.Rational(1, 2)) == ConstantNode(0.5)
    assert from_sympy(sp.Integer(-3)) == ConstantNode(-3)
    with pytest.raises(UnsupportedOperationError):
        from_sympy(sp.I)


def test_from_sympy_relation():
    node = from_sympy(sp.Ge(x, 2, evaluate=False))
    assert isinstance(node, Equation)
    assert node.relation == '≥'


def test_from_sympy_function_types():
    assert from_sympy(sp.exp(x)) == UnaryOpNode('exp', from_sympy(x))
    with pytest.raises(UnsupportedOperationError):
        from_sympy(sp.sin(x))


def test_tree_survives_sympy_round_trip():
    node = parse("|x - 1| + log(x + 2) * 3 - e ^ x / 2")
    back = from_sympy(node.to_sympy())
    for value in (0.5, 1.5, 4.0):
        assert back.evaluate('x', value) == pytest.approx(node.evaluate('x', value))


def test_are_equivalent():
    assert are_equivalent(parse("2 * (x + 1)"), parse("2 * x + 2"))
    assert are_equivalent(parse("x * y"), parse("y * x"))
    assert not are_equivalent(parse("x"), parse("x + 1"))
    assert not are_equivalent(parse("|x|"), parse("x"))


def test_latex():
    assert latex_representation(parse("x ^ 2")) == "x^{2}"
    assert "\\log" in latex_representation(parse("log(x)"))


def test_verify_solution():
    equation = parse_equation("x ^ 2 = 9")
    assert verify_solution(equation, "x", 3.0)
    assert verify_solution(equation, "x", ConstantNode(-3))
    assert not verify_solution(equation, "x", 2.0)


def test_verify_solution_outside_domain():
    assert not verify_solution(parse_equation("1 / x = 1"), "x", 0.0)
    assert not verify_solution(parse_equation("log(x) = 1"), "x", -1.0)


def test_sympy_cross_check():
    checker = SymPySimplifier()
    assert checker.check(parse("3 * (x + 5) - 2 * x"))
    assert checker.check(parse("(x + 1) / (x - 1) + 2 / x"))
    assert not checker.check(parse("x + 1"), parse("x"))
