
class AlgebraError(Exception):
    """ Base class for all symbolic_algebra errors"""
    pass

class DivisionByZeroError(AlgebraError, ZeroDivisionError):
    """ Raised when a divisor is (or folds to) the constant 0"""
    pass

class ModulusByZeroError(AlgebraError, ZeroDivisionError):
    """ Raised when the right operand of 'mod' is (or folds to) the constant 0"""
    pass

class DomainError(AlgebraError, ValueError):
    """ Raised when an operator has no real value for its operands, e.g. log(0)"""

class SolverNotImplementedError(AlgebraError, NotImplementedError):
    """ Raised when solving would require inverting an operator with no inverse, e.g. mod"""

class UnsupportedOperationError(AlgebraError):
    """ Raised when the solver cannot isolate the variable through a node"""

class ExpressionSyntaxError(AlgebraError, SyntaxError):
    """ Raised when the parser meets an unexpected, missing or trailing token"""

    def __init__(self, message: str, position: int = None):
        super().__init__(message)
        self.message = message
        self.position = position

class UnboundVariableError(AlgebraError, NameError):
    """ Raised when evaluating a variable that was not bound to a value"""
