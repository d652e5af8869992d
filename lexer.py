"""Tokens and the tokenizer for the letter-operator arithmetic dialect.

Every operator and bracket is a single letter:

    a  add        c  mul        e  open group
    b  neg / sub  d  div        f  close group

`b` is unary negation wherever an operand may start and subtraction otherwise.

>>> lex("2 a e3 b b1f")
[Number(2), op(add), Group.OPEN, Number(3), op(sub), op(neg), Number(1), Group.CLOSE]
"""
import operator
import re
from decimal import Decimal
from enum import Enum
from typing import Callable, Literal, NamedTuple, Union

INT_MIN, INT_MAX = -(2**31), 2**31 - 1


class CalcError(Exception):
    """Base class of every error raised while evaluating an expression.

    Errors compare equal when they have the same type and arguments, so tests
    can match them structurally.
    """

    message = "Calculation failed"

    def __str__(self):
        return self.message.format(*self.args)

    def __eq__(self, other):
        return type(other) is type(self) and other.args == self.args

    def __hash__(self):
        return hash((type(self), self.args))


class TokenizerError(CalcError):
    pass


class UnknownToken(TokenizerError):
    message = "Unknown token `{}` in the stream"

    @property
    def char(self):
        return self.args[0]


class NumberParseError(TokenizerError):
    """A malformed number lexeme; the `ValueError` behind it is the `__cause__`."""

    message = "Unable to parse number"

    def __init__(self, kind: Literal["int", "float"], text: str):
        super().__init__(kind, text)

    @property
    def kind(self):
        return self.args[0]

    @property
    def text(self):
        return self.args[1]


class Op(NamedTuple):
    name: str
    lexeme: str
    prec: int  # 0 binds tightest
    arity: int
    fun: Callable

    def __call__(self, *args):
        return self.fun(*args)

    def __repr__(self):
        return f"op({self.name})"

    def reduces_before(self, other):
        """Whether a pending `self` is reduced before `other` is pushed.

        Ties reduce, which makes chains of equal rank left-associative.
        """
        return self.prec <= other.prec


OP_TABLE = """
neg b 0 1 neg
add a 1 2 add
sub b 1 2 sub
mul c 1 2 mul
div d 1 2 truediv
""".strip()
OPS = {
    name: Op(name, lexeme, int(prec), int(arity), getattr(operator, fun))
    for name, lexeme, prec, arity, fun in map(str.split, OP_TABLE.split("\n"))
}
BINARY_LEXEMES = {o.lexeme: o for o in OPS.values() if o.name != "neg"}


class Group(Enum):
    OPEN = "e"
    CLOSE = "f"

    def __repr__(self):
        return f"Group.{self.name}"


class Number:
    """A numeric literal; `int` and `float` payloads never compare equal.

    >>> Number(1) == Number(1), Number(1) == Number(1.0)
    (True, False)
    """

    __slots__ = ("value",)

    def __init__(self, value: Union[int, float]):
        object.__setattr__(self, "value", value)

    def __setattr__(self, name, value):
        raise AttributeError("Number is immutable")

    def _key(self):
        return type(self.value), self.value

    def __eq__(self, other):
        return isinstance(other, Number) and self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return f"Number({self.value!r})"

    def __float__(self):
        return float(self.value)


Token = Union[Number, Op, Group]

NUMBER_START = frozenset("0123456789.")
NUMBER_BODY = re.compile(r"[0-9.]+")


def parse_number(text):
    """Parse a number lexeme; any `.` makes it a float.

    >>> parse_number("12"), parse_number(".5"), parse_number("5.")
    (Number(12), Number(0.5), Number(5.0))
    >>> parse_number("1.2.3")
    Traceback (most recent call last):
    ...
    lexer.NumberParseError: Unable to parse number
    """
    if "." in text:
        try:
            return Number(float(text))
        except ValueError as e:
            raise NumberParseError("float", text) from e
    try:
        value = int(text)
        if not INT_MIN <= value <= INT_MAX:
            raise ValueError(f"{text} does not fit in a 32 bit integer")
    except ValueError as e:
        raise NumberParseError("int", text) from e
    return Number(value)


def expects_unary(previous):
    """Whether a `b` lexed right after `previous` is negation.

    >>> [expects_unary(t) for t in (None, Group.OPEN, OPS["add"], OPS["neg"], Number(1))]
    [True, True, True, False, False]
    """
    if previous is None or previous is Group.OPEN:
        return True
    return isinstance(previous, Op) and previous is not OPS["neg"]


class Tokenizer:
    """Lazily lex `text`; each new iteration starts over from the beginning.

    Lexical errors are yielded in place of the offending lexeme, and lexing
    carries on after them.

    >>> list(Tokenizer("2 + a"))
    [Number(2), UnknownToken('+'), op(add)]
    """

    def __init__(self, text: str):
        self.text = text

    def __iter__(self):
        text = self.text
        pos = 0
        previous = None
        while pos < len(text):
            char = text[pos]
            if char == " ":
                pos += 1
                continue
            if char in NUMBER_START:
                body = NUMBER_BODY.match(text, pos).group()
                pos += len(body)
                try:
                    tok = parse_number(body)
                except NumberParseError as e:
                    yield e
                    continue
            else:
                pos += 1
                if char == "b":
                    tok = OPS["neg"] if expects_unary(previous) else OPS["sub"]
                elif char in BINARY_LEXEMES:
                    tok = BINARY_LEXEMES[char]
                elif char in ("e", "f"):
                    tok = Group(char)
                else:
                    yield UnknownToken(char)
                    continue
            yield tok
            previous = tok


def lex(text):
    return list(Tokenizer(text))


def format_number(value):
    """Spell a number the way the lexer reads it back (no exponents).

    >>> format_number(3), format_number(0.00001), format_number(1e16)
    ('3', '0.00001', '10000000000000000.')
    """
    if isinstance(value, int):
        return str(value)
    digits = format(Decimal(repr(value)), "f")
    return digits if "." in digits else digits + "."


def unlex(tokens):
    """Render tokens back into the dialect.

    >>> unlex(lex("2a e3 bb1f"))
    '2 a e 3 b b 1 f'
    """

    def lexeme(tok):
        if isinstance(tok, Number):
            return format_number(tok.value)
        if isinstance(tok, Group):
            return tok.value
        return tok.lexeme

    return " ".join(map(lexeme, tokens))
