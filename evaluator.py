"""Evaluate prefix notation token streams.

>>> from lexer import OPS
>>> Evaluator().eval([OPS["sub"], Number(1), Number(5)])
4.0
"""
from lexer import CalcError, Number, Op
from parser import depth_limit


class EvalError(CalcError):
    message = "Unable to evaluate expression"


class UnexpectedToken(EvalError):
    message = "Unexpected token"

    @property
    def token(self):
        return self.args[0]


class UnexpectedEndOfInput(EvalError):
    message = "Input stream has ended unexpectedly"


class UnconsumedToken(EvalError):
    message = (
        "Expression was calculated, but the stream contains more elements"
        " that were ignored"
    )

    @property
    def token(self):
        return self.args[0]


class ExpressionTooDeep(EvalError):
    message = "Expression is nested deeper than {}"


class CalculationError(EvalError):
    message = "Calculation failed"


class ZeroDivision(CalculationError, ZeroDivisionError):
    message = "division by zero"


class Evaluator:
    """Reduces a prefix token stream to a float; holds no per-call state."""

    def __init__(self, max_depth=None):
        self.max_depth = depth_limit(max_depth)

    def eval(self, tokens) -> float:
        """Evaluate one expression, which must use up all of `tokens`."""
        tokens = iter(tokens)
        value = self._eval(tokens, 0)
        for tok in tokens:
            raise UnconsumedToken(tok)
        return value

    def _eval(self, tokens, depth):
        tok = next(tokens, None)
        if tok is None:
            raise UnexpectedEndOfInput()
        if isinstance(tok, Number):
            return float(tok)
        if not isinstance(tok, Op):
            raise UnexpectedToken(tok)
        if depth >= self.max_depth:
            raise ExpressionTooDeep(self.max_depth)

        # Operands come right first, then left.
        right = self._eval(tokens, depth + 1) if tok.arity > 0 else 0.0
        left = self._eval(tokens, depth + 1) if tok.arity > 1 else 0.0
        if tok.arity == 1:
            return tok(right)
        if tok.name == "div" and right == 0.0:
            raise ZeroDivision()
        return tok(left, right)
