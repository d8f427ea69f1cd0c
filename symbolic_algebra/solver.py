"""
Equation solver.

Isolates a variable by simplifying both sides of an equation and then
peeling operators off the side that contains the variable, applying the
inverse operation to the other side, until the variable stands alone.
Even integer powers split the search into a principal and a negated branch.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from .config import get_config
from .errors import SolverNotImplementedError, UnsupportedOperationError
from .expression_tree.core.node import (
    Node, ConstantNode, VariableNode, UnaryOpNode, BinaryOpNode, Equation, binary, negate
)
from .expression_tree.utils.simplifier import simplify
from .expression_tree.utils.tree_utils import ast_equal, contains_variable
from .logging_system import log_info, log_step

TAUTOLOGY_MESSAGE = "Any value satisfies the equation"
NOT_FOUND_MESSAGE = "Variable not found in equation"


class SolutionKind(Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"
    TAUTOLOGY = "tautology"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class SolveResult:
    kind: SolutionKind
    values: Tuple[Node, ...] = ()

    @classmethod
    def single(cls, value: Node) -> SolveResult:
        return cls(SolutionKind.SINGLE, (value,))

    @classmethod
    def tautology(cls) -> SolveResult:
        return cls(SolutionKind.TAUTOLOGY)

    @classmethod
    def not_found(cls) -> SolveResult:
        return cls(SolutionKind.NOT_FOUND)

    @classmethod
    def merge(cls, results: Iterable[SolveResult]) -> SolveResult:
        """Flatten the values of several branch results into one result.

        Branches that ended in a tautology or without the variable carry no
        values and are skipped; if no branch produced a value the first such
        result is returned.
        """
        results = list(results)
        values: List[Node] = []
        for result in results:
            values.extend(result.values)
        if not values:
            return results[0] if results else cls.not_found()
        if len(values) == 1:
            return cls.single(values[0])
        return cls(SolutionKind.MULTIPLE, tuple(values))

    @property
    def message(self) -> Optional[str]:
        if self.kind is SolutionKind.TAUTOLOGY:
            return TAUTOLOGY_MESSAGE
        if self.kind is SolutionKind.NOT_FOUND:
            return NOT_FOUND_MESSAGE
        return None

    @property
    def is_solved(self) -> bool:
        return self.kind in (SolutionKind.SINGLE, SolutionKind.MULTIPLE)

    def unwrap(self) -> Union[Node, List[Node], str]:
        """A single node, a flat list of nodes, or the diagnostic message"""
        if self.kind is SolutionKind.SINGLE:
            return self.values[0]
        if self.kind is SolutionKind.MULTIPLE:
            return list(self.values)
        return self.message

    def __str__(self) -> str:
        if self.kind is SolutionKind.SINGLE:
            return self.values[0].to_string()
        if self.kind is SolutionKind.MULTIPLE:
            return "[" + ", ".join(value.to_string() for value in self.values) + "]"
        return self.message


class EquationSolver:
    """Solves an '=' equation for one variable by operator inversion"""

    def __init__(self, variable: str, max_depth: Optional[int] = None):
        self.variable = variable
        self.max_depth = max_depth if max_depth is not None else get_config().max_solve_depth

    def solve(self, equation: Equation) -> SolveResult:
        if equation.relation != '=':
            raise UnsupportedOperationError(
                f"Only '=' equations can be solved, got '{equation.relation}'")
        result = self._solve(equation.left, equation.right, 0)
        log_info(f"solve {equation} for {self.variable}: {result}")
        return result

    def _contains(self, node: Node) -> bool:
        return contains_variable(node, self.variable)

    def _solve(self, left: Node, right: Node, depth: int) -> SolveResult:
        if depth > self.max_depth:
            raise UnsupportedOperationError(
                f"Could not isolate '{self.variable}' within {self.max_depth} steps")

        left = simplify(left)
        right = simplify(right)
        in_left = self._contains(left)
        in_right = self._contains(right)

        if not in_left and not in_right:
            if ast_equal(left, right):
                return SolveResult.tautology()
            return SolveResult.not_found()

        if in_left and in_right:
            log_step(f"{left} = {right}: variable on both sides, solving difference = 0")
            return self._solve(binary('-', left, right), ConstantNode(0), depth + 1)

        if in_left:
            return self._isolate(left, right, depth)
        return self._isolate(right, left, depth)

    def _step(self, main: Node, other: Node, new_main: Node, new_other: Node, depth: int) -> SolveResult:
        log_step(f"{main} = {other}  =>  {new_main} = {new_other}")
        return self._solve(new_main, new_other, depth + 1)

    def _isolate(self, main: Node, other: Node, depth: int) -> SolveResult:
        if isinstance(main, VariableNode):
            return SolveResult.single(other)

        if isinstance(main, UnaryOpNode):
            return self._invert_unary(main, other, depth)

        if isinstance(main, BinaryOpNode):
            return self._invert_binary(main, other, depth)

        raise UnsupportedOperationError(
            f"Cannot isolate '{self.variable}' through a {type(main).__name__}")

    def _invert_unary(self, main: UnaryOpNode, other: Node, depth: int) -> SolveResult:
        operator = main.operator
        if operator == 'neg':
            inverted = negate(other)
        elif operator == 'abs':
            # symbolic inversion only; the negative branch is not produced
            inverted = UnaryOpNode('abs', other)
        elif operator == 'log':
            inverted = UnaryOpNode('exp', other)
        elif operator == 'exp':
            inverted = UnaryOpNode('log', other)
        else:
            raise UnsupportedOperationError(f"Cannot invert unary operator '{operator}'")
        return self._step(main, other, main.operand, inverted, depth)

    def _invert_binary(self, main: BinaryOpNode, other: Node, depth: int) -> SolveResult:
        in_left = self._contains(main.left)
        in_right = self._contains(main.right)
        if in_left and in_right:
            raise UnsupportedOperationError(
                f"Cannot isolate '{self.variable}': it occurs in both operands of {main}")

        operator = main.operator
        var_branch, const_branch = (main.left, main.right) if in_left else (main.right, main.left)

        if operator == '+':
            return self._step(main, other, var_branch, binary('-', other, const_branch), depth)

        if operator == '-':
            if in_left:
                return self._step(main, other, main.left, binary('+', other, main.right), depth)
            return self._step(main, other, main.right, binary('-', main.left, other), depth)

        if operator == '*':
            return self._step(main, other, var_branch, binary('/', other, const_branch), depth)

        if operator == '/':
            if in_left:
                return self._step(main, other, main.left, binary('*', other, main.right), depth)
            return self._step(main, other, main.right, binary('/', main.left, other), depth)

        if operator == '^':
            if in_left:
                return self._invert_power(main, other, depth)
            # b ^ e = o  =>  e = log(o) / log(b)
            exponent = binary('/', UnaryOpNode('log', other), UnaryOpNode('log', main.left))
            return self._step(main, other, main.right, exponent, depth)

        if operator == 'mod':
            raise SolverNotImplementedError("Solving through 'mod' is not supported")

        raise UnsupportedOperationError(f"Cannot invert binary operator '{operator}'")

    def _invert_power(self, main: BinaryOpNode, other: Node, depth: int) -> SolveResult:
        exponent = main.right
        root = simplify(binary('^', other, binary('/', ConstantNode(1), exponent)))

        if (isinstance(exponent, ConstantNode) and exponent.value.is_integer()
                and exponent.value % 2 == 0):
            negated = simplify(binary('*', ConstantNode(-1), root))
            log_step(f"{main} = {other}  =>  {main.left} = ±{root}")
            return SolveResult.merge([
                self._solve(main.left, root, depth + 1),
                self._solve(main.left, negated, depth + 1),
            ])

        return self._step(main, other, main.left, root, depth)


def solve_for(equation: Equation, variable: str, max_depth: Optional[int] = None) -> SolveResult:
    """Solve `equation` for `variable`.

    Raises UnsupportedOperationError for relations other than '=' or when the
    variable cannot be isolated, and SolverNotImplementedError when isolation
    would have to invert 'mod'.
    """
    return EquationSolver(variable, max_depth).solve(equation)
