"""Reorder a token stream into prefix (Polish) notation.

Operators wait on a per-group stack until an operator they do not outrank
arrives; each bracket group is parsed by one recursive call.

>>> list(to_prefix("2 a 2 c 3"))
[op(mul), Number(3), op(add), Number(2), Number(2)]
"""
import os
import sys
from enum import Enum

from lexer import CalcError, Group, Number, Op, Tokenizer, TokenizerError

# Bound on bracket nesting and operand tree depth; unset means as deep as the
# interpreter stack allows.
MAX_DEPTH = int(os.getenv("CALC_MAX_DEPTH", 0)) or None


def depth_limit(max_depth=None):
    """Return `max_depth` (default `MAX_DEPTH`) capped to half the recursion limit.

    Parsing and evaluation take one stack frame per level, so a capped limit is
    always reached before Python raises `RecursionError`.

    >>> depth_limit(10), depth_limit(10**6) == sys.getrecursionlimit() // 2
    (10, True)
    """
    ceiling = sys.getrecursionlimit() // 2
    if max_depth is None:
        max_depth = MAX_DEPTH or ceiling
    return min(max_depth, ceiling)


class ParserError(CalcError):
    message = "Unable to parse expression"


class InvalidToken(ParserError):
    """The tokenizer failed; the `TokenizerError` is `error` and `__cause__`."""

    def __str__(self):
        return str(self.error)

    @property
    def error(self):
        return self.args[0]


class EmptyExpr(ParserError):
    message = "Expression is empty"


class UnbalancedGroup(ParserError):
    message = "Unbalanced brackets"

    @property
    def token(self):
        return self.args[0]


class OperatorExpected(ParserError):
    message = "Expected operator"

    @property
    def token(self):
        return self.args[0]


class OperandExpected(ParserError):
    """An operand was due; `token` is what came instead (None at end of
    input) and `operator` is the pending operator left without it."""

    message = "Expected operand"

    def __init__(self, token, operator):
        super().__init__(token, operator)

    @property
    def token(self):
        return self.args[0]

    @property
    def operator(self):
        return self.args[1]


class NestingTooDeep(ParserError):
    message = "Brackets are nested deeper than {}"


class State(Enum):
    START = "start"
    OPERAND = "operand"
    OPERATOR_OR_END = "operator or end"


class ExprAst:
    """A parsed expression: prefix notation stored back to front.

    Iterating reads the stack from the top down, which yields the operator
    first, then its right operand, then its left operand.
    """

    def __init__(self):
        self.stack = []

    def __iter__(self):
        return reversed(self.stack)

    def __len__(self):
        return len(self.stack)

    def __repr__(self):
        return f"ExprAst({list(self)!r})"


def _pop(pending):
    return pending.pop() if pending else None


class _GroupParser:
    def __init__(self, tokens, max_depth):
        self.tokens = tokens
        self.max_depth = max_depth
        self.ast = ExprAst()
        self.state = State.START
        self.depth = 0
        self.last_open = None

    def parse(self):
        self.parse_group()
        if self.depth:
            raise UnbalancedGroup(self.last_open)
        if self.state is State.START:
            raise EmptyExpr()
        return self.ast

    def parse_group(self):
        stack = self.ast.stack
        pending = []
        for tok in self.tokens:
            if isinstance(tok, TokenizerError):
                raise InvalidToken(tok) from tok
            if self.state is not State.OPERATOR_OR_END:
                if isinstance(tok, Number):
                    stack.append(tok)
                    self.state = State.OPERATOR_OR_END
                elif isinstance(tok, Op):
                    # Binary operators cannot start an operand, and neither can
                    # a repeat of the operator still waiting for one.
                    if tok.arity > 1:
                        raise OperandExpected(tok, _pop(pending))
                    if pending and pending[-1] == tok:
                        raise OperandExpected(tok, _pop(pending))
                    pending.append(tok)
                    self.state = State.OPERAND
                elif tok is Group.OPEN:
                    if self.depth >= self.max_depth:
                        raise NestingTooDeep(self.max_depth)
                    self.depth += 1
                    self.state = State.START
                    self.last_open = tok
                    self.parse_group()
                elif pending:
                    raise OperandExpected(tok, _pop(pending))
                elif self.depth:
                    raise EmptyExpr()
                else:
                    raise UnbalancedGroup(tok)
            elif isinstance(tok, Op):
                while pending and pending[-1].reduces_before(tok):
                    stack.append(pending.pop())
                pending.append(tok)
                self.state = State.OPERAND
            elif tok is Group.CLOSE:
                if not self.depth:
                    raise UnbalancedGroup(tok)
                self.depth -= 1
                break
            else:
                raise OperatorExpected(tok)

        if self.state is State.OPERAND:
            raise OperandExpected(None, _pop(pending))
        while pending:
            stack.append(pending.pop())


class Parser:
    """Parses token streams into `ExprAst`s; holds no per-parse state."""

    def __init__(self, max_depth=None):
        self.max_depth = depth_limit(max_depth)

    def parse(self, tokens) -> ExprAst:
        return _GroupParser(iter(tokens), self.max_depth).parse()


def to_prefix(text, max_depth=None):
    return Parser(max_depth).parse(Tokenizer(text))
