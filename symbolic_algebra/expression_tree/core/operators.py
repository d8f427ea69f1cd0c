import math
import numpy as np
import numba
from enum import IntEnum

from ...errors import DivisionByZeroError, ModulusByZeroError, DomainError

class NodeType(IntEnum):
  CONSTANT = 0
  VARIABLE = 1
  UNARY_OP = 2
  BINARY_OP = 3
  NARY_OP = 4
  EQUATION = 5
  POLYNOMIAL = 6

class OpType(IntEnum):
  # Binary ops
  ADD = 0
  SUB = 1
  MUL = 2
  DIV = 3
  POW = 4
  MOD = 5
  # Unary ops
  NEG = 6
  ABS = 7
  LOG = 8
  EXP = 9

# Mapping dictionaries
BINARY_OP_MAP = {'+': OpType.ADD, '-': OpType.SUB, '*': OpType.MUL, '/': OpType.DIV, '^': OpType.POW, 'mod': OpType.MOD}
UNARY_OP_MAP = {'neg': OpType.NEG, 'abs': OpType.ABS, 'log': OpType.LOG, 'exp': OpType.EXP}
NARY_OP_MAP = {'+': OpType.ADD, '*': OpType.MUL}

RELATIONS = ('=', '≠', '>', '<', '≥', '≤')
RELATION_ALIASES = {'!=': '≠', '>=': '≥', '<=': '≤'}

# Plain ints so the compiled kernels see compile-time constants
_ADD = int(OpType.ADD)
_SUB = int(OpType.SUB)
_MUL = int(OpType.MUL)
_DIV = int(OpType.DIV)
_POW = int(OpType.POW)
_MOD = int(OpType.MOD)
_NEG = int(OpType.NEG)
_ABS = int(OpType.ABS)
_LOG = int(OpType.LOG)
_EXP = int(OpType.EXP)


def normalize_relation(relation: str) -> str:
  relation = RELATION_ALIASES.get(relation, relation)
  if relation not in RELATIONS:
    raise ValueError(f"Unknown relation: {relation}")
  return relation


def apply_binary(operator: str, left: float, right: float) -> float:
  """Scalar semantics of a binary operator.

  Raises DivisionByZeroError / ModulusByZeroError for a zero right operand of
  '/' / 'mod' and DomainError when '^' has no real result.
  """
  if operator == '+':
    return left + right
  elif operator == '-':
    return left - right
  elif operator == '*':
    return left * right
  elif operator == '/':
    if right == 0:
      raise DivisionByZeroError("Division by zero")
    return left / right
  elif operator == '^':
    try:
      return math.pow(left, right)
    except ValueError:
      raise DomainError(f"No real value for {left} ^ {right}") from None
  elif operator == 'mod':
    if right == 0:
      raise ModulusByZeroError("Modulus by zero is undefined")
    # truncated remainder: the result takes the sign of the dividend
    return math.fmod(left, right)
  raise ValueError(f"Unknown binary operator: {operator}")


def apply_unary(operator: str, operand: float) -> float:
  if operator == 'neg':
    return -operand
  elif operator == 'abs':
    return abs(operand)
  elif operator == 'log':
    if operand <= 0:
      raise DomainError("Logarithm of non-positive number")
    return math.log(operand)
  elif operator == 'exp':
    return math.exp(operand)
  raise ValueError(f"Unknown unary operator: {operator}")


def compare(relation: str, left: float, right: float) -> bool:
  relation = normalize_relation(relation)
  if relation == '=':
    return left == right
  elif relation == '≠':
    return left != right
  elif relation == '>':
    return left > right
  elif relation == '<':
    return left < right
  elif relation == '≥':
    return left >= right
  return left <= right


@numba.njit(cache=True, fastmath=False)
def evaluate_binary_op_fast(left_val, right_val, op_code):
  if op_code == _ADD:
    return left_val + right_val
  elif op_code == _SUB:
    return left_val - right_val
  elif op_code == _MUL:
    return left_val * right_val
  elif op_code == _DIV:
    return left_val / right_val
  elif op_code == _POW:
    return np.power(left_val, right_val)
  elif op_code == _MOD:
    return np.fmod(left_val, right_val)
  # unreachable: callers only pass codes from BINARY_OP_MAP
  return np.zeros_like(left_val)

@numba.njit(cache=True, fastmath=False)
def evaluate_unary_op_fast(operand_val, op_code):
  if op_code == _NEG:
    return -operand_val
  elif op_code == _ABS:
    return np.abs(operand_val)
  elif op_code == _LOG:
    return np.log(operand_val)
  elif op_code == _EXP:
    return np.exp(operand_val)
  # unreachable: callers only pass codes from UNARY_OP_MAP
  return np.zeros_like(operand_val)


def evaluate_binary_op(left_val: np.ndarray, right_val: np.ndarray, operator: str) -> np.ndarray:
  """Vectorised counterpart of apply_binary with the same error behaviour."""
  left_val = np.asarray(left_val, dtype=np.float64)
  right_val = np.asarray(right_val, dtype=np.float64)
  if operator == '/' and np.any(right_val == 0):
    raise DivisionByZeroError("Division by zero")
  if operator == 'mod' and np.any(right_val == 0):
    raise ModulusByZeroError("Modulus by zero is undefined")
  if operator == '^':
    fractional = right_val != np.floor(right_val)
    if np.any((left_val < 0) & fractional) or np.any((left_val == 0) & (right_val < 0)):
      raise DomainError("No real value for power")
  return evaluate_binary_op_fast(left_val, right_val, int(BINARY_OP_MAP[operator]))


def evaluate_unary_op(operand_val: np.ndarray, operator: str) -> np.ndarray:
  operand_val = np.asarray(operand_val, dtype=np.float64)
  if operator == 'log' and np.any(operand_val <= 0):
    raise DomainError("Logarithm of non-positive number")
  return evaluate_unary_op_fast(operand_val, int(UNARY_OP_MAP[operator]))
