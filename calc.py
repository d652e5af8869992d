"""Evaluate arithmetic written in the letter-operator dialect.

`evaluate` runs the whole pipeline: lex, reorder into prefix notation, reduce.

>>> evaluate("2 c e3 a 4f")
14.0
>>> evaluate("1 d e2 b 2f")
Traceback (most recent call last):
...
evaluator.ZeroDivision: division by zero

Run this module for an interactive prompt.
"""
import logging
import os
import sys

from evaluator import Evaluator
from lexer import CalcError, Tokenizer
from parser import Parser

logger = logging.getLogger(__name__)

PROMPT = "Please, enter the expression below (enter empty expression to exit):"


def evaluate(expression: str, max_depth=None) -> float:
    """Return the value of `expression`, or raise a `CalcError`.

    `max_depth` bounds both bracket nesting and operand tree depth; a chain
    like `1 a 1 a 1` is left-associative, so it is as deep as it is long.
    """
    logger.debug("evaluating %r", expression)
    try:
        ast = Parser(max_depth).parse(Tokenizer(expression))
        value = Evaluator(max_depth).eval(ast)
    except CalcError as e:
        logger.debug("%r failed: %r", expression, e)
        raise
    logger.debug("%r = %r", expression, value)
    return value


def repl(lines, out=print):
    """Evaluate `lines` one at a time until an empty one, reporting to `out`.

    >>> repl(iter(["1 a 1", "+", "", "3"]))
    Please, enter the expression below (enter empty expression to exit):
    Result: 2.0
    <BLANKLINE>
    Please, enter the expression below (enter empty expression to exit):
    Error: Unknown token `+` in the stream
    <BLANKLINE>
    Please, enter the expression below (enter empty expression to exit):
    Have a good day!
    """
    while True:
        out(PROMPT)
        line = next(lines, "").strip()
        if not line:
            break
        try:
            out(f"Result: {evaluate(line)}")
        except CalcError as e:
            out(f"Error: {e}")
        out("")
    out("Have a good day!")


def read_lines(stream):
    # EOF ends the session; other read failures propagate.
    while line := stream.readline():
        yield line


def main():
    logging.basicConfig(
        level=logging.DEBUG if os.getenv("DEBUG") else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    repl(read_lines(sys.stdin))


if __name__ == "__main__":
    main()
