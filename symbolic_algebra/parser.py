"""
Expression parser.

Turns source text such as ``"3 * (x + 5) - 2 * x"`` or ``"x ^ 2 = 9"`` into an
expression tree. Precedence, low to high: relation, additive (+ -),
multiplicative (* / mod), unary (-), power (right-associative). Absolute value
is written ``|...|`` and functions as ``log(...)``, ``ln(...)``, ``exp(...)``
or ``abs(...)``; ``e ^ x`` is read as ``exp(x)``.

Each parsed expression (or each side of an equation) that qualifies is
wrapped in a Polynomial tag.
"""

import re
from typing import List, NamedTuple, Optional

from .expression_tree.core.node import (
  Node, ConstantNode, VariableNode, UnaryOpNode, BinaryOpNode, Equation, Polynomial
)
from .expression_tree.core.operators import RELATIONS, RELATION_ALIASES
from .expression_tree.utils.validator import ExpressionValidator
from .errors import ExpressionSyntaxError

_TOKEN_RE = re.compile(r"""
    (?P<number>\d+(?:\.\d*)?|\.\d+)
  | (?P<name>[A-Za-z_][A-Za-z_0-9]*)
  | (?P<op>!=|>=|<=|[≠≥≤=<>+\-*/%^()|])
""", re.VERBOSE)

FUNCTIONS = {'log': 'log', 'ln': 'log', 'exp': 'exp', 'abs': 'abs'}

_RELATION_TOKENS = set(RELATIONS) | set(RELATION_ALIASES)


class Token(NamedTuple):
  kind: str      # 'number', 'name', 'op' or 'end'
  text: str
  position: int


def tokenize(source: str) -> List[Token]:
  """Split `source` into tokens; the word mod (any case) becomes '%'"""
  tokens = []
  position = 0
  while position < len(source):
    if source[position].isspace():
      position += 1
      continue
    match = _TOKEN_RE.match(source, position)
    if match is None:
      raise ExpressionSyntaxError(f"Unexpected character '{source[position]}' at position {position}",
                                  position)
    kind = match.lastgroup
    text = match.group()
    if kind == 'name' and text.lower() == 'mod':
      kind, text = 'op', '%'
    tokens.append(Token(kind, text, position))
    position = match.end()
  tokens.append(Token('end', '', len(source)))
  return tokens


def _describe(token: Token) -> str:
  return 'end of input' if token.kind == 'end' else f"'{token.text}'"


def tag_polynomial(node: Node) -> Node:
  """Wrap `node` in a Polynomial tag when it has polynomial shape"""
  variable = ExpressionValidator.polynomial_variable(node)
  if variable is None:
    return node
  return Polynomial(node, variable)


class Parser:
  """Recursive-descent parser over a token list"""

  def __init__(self, source: str):
    self.source = source
    self.tokens = tokenize(source)
    self.pos = 0

  def parse(self) -> Node:
    left = self._additive()
    node = tag_polynomial(left)

    if self._peek().text in _RELATION_TOKENS:
      relation = self._consume().text
      if self._peek().kind == 'end':
        raise ExpressionSyntaxError(f"Missing right-hand side after '{relation}'", self._peek().position)
      right = self._additive()
      node = Equation(node, tag_polynomial(right), relation)

    token = self._peek()
    if token.kind != 'end':
      raise ExpressionSyntaxError(f"Unexpected trailing token {_describe(token)} at position {token.position}",
                                  token.position)
    return node

  def _peek(self) -> Token:
    return self.tokens[self.pos]

  def _consume(self, expected: Optional[str] = None) -> Token:
    token = self.tokens[self.pos]
    if expected is not None and token.text != expected:
      raise ExpressionSyntaxError(
        f"Expected '{expected}' at position {token.position}, got {_describe(token)}", token.position)
    self.pos += 1
    return token

  def _additive(self) -> Node:
    node = self._multiplicative()
    while self._peek().text in ('+', '-') and self._peek().kind == 'op':
      operator = self._consume().text
      node = BinaryOpNode(operator, node, self._multiplicative())
    return node

  def _multiplicative(self) -> Node:
    node = self._unary()
    while self._peek().text in ('*', '/', '%') and self._peek().kind == 'op':
      operator = self._consume().text
      node = BinaryOpNode('mod' if operator == '%' else operator, node, self._unary())
    return node

  def _unary(self) -> Node:
    if self._peek().text == '-' and self._peek().kind == 'op':
      self._consume()
      return UnaryOpNode('neg', self._unary())
    return self._exponent()

  def _exponent(self) -> Node:
    base = self._primary()
    if self._peek().text == '^' and self._peek().kind == 'op':
      self._consume()
      exponent = self._unary()
      if isinstance(base, VariableNode) and base.name == 'e':
        return UnaryOpNode('exp', exponent)
      return BinaryOpNode('^', base, exponent)
    return base

  def _primary(self) -> Node:
    token = self._peek()

    if token.kind == 'number':
      self._consume()
      return ConstantNode(float(token.text))

    if token.kind == 'name':
      self._consume()
      if self._peek().text == '(':
        function = FUNCTIONS.get(token.text.lower())
        if function is None:
          raise ExpressionSyntaxError(f"Unknown function '{token.text}' at position {token.position}",
                                      token.position)
        self._consume('(')
        argument = self._additive()
        self._consume(')')
        return UnaryOpNode(function, argument)
      return VariableNode(token.text)

    if token.text == '(':
      self._consume('(')
      node = self._additive()
      self._consume(')')
      return node

    if token.text == '|':
      self._consume('|')
      node = self._additive()
      self._consume('|')
      return UnaryOpNode('abs', node)

    raise ExpressionSyntaxError(f"Unexpected token {_describe(token)} at position {token.position}",
                                token.position)


def parse(source: str) -> Node:
  """Parse an expression or a single-relation equation"""
  return Parser(source).parse()


def parse_equation(source: str) -> Equation:
  node = parse(source)
  if not isinstance(node, Equation):
    raise ExpressionSyntaxError("Expected an equation with a relation operator")
  return node
