import sys

import pytest

from lexer import Group, Number as N, OPS, NumberParseError, Tokenizer, UnknownToken
from parser import *

ADD, SUB, NEG, MUL, DIV = OPS["add"], OPS["sub"], OPS["neg"], OPS["mul"], OPS["div"]
OPEN, CLOSE = Group.OPEN, Group.CLOSE


def parse_error(expr, **kwargs):
    with pytest.raises(ParserError) as excinfo:
        to_prefix(expr, **kwargs)
    return excinfo.value


def test_unit_expr():
    assert list(to_prefix("2")) == [N(2)]
    assert list(to_prefix("3.7")) == [N(3.7)]


def test_simple_expr():
    assert list(to_prefix("2 a  3")) == [ADD, N(3), N(2)]


def test_priority():
    assert list(to_prefix("2 a 2 b 3")) == [SUB, N(3), ADD, N(2), N(2)]
    assert list(to_prefix("2 a 2 c 3")) == [MUL, N(3), ADD, N(2), N(2)]
    assert list(to_prefix("2 c 2 a 3")) == [ADD, N(3), MUL, N(2), N(2)]
    assert list(to_prefix("2 a 2 c 3 c b2")) == [
        MUL, NEG, N(2), MUL, N(3), ADD, N(2), N(2)
    ]


def test_neg_binds_tightest():
    assert list(to_prefix("b2 a 3")) == [ADD, N(3), NEG, N(2)]
    assert list(to_prefix("1 b b2 c 3")) == [MUL, N(3), SUB, NEG, N(2), N(1)]


def test_grouping():
    assert list(to_prefix("e1f")) == [N(1)]
    assert list(to_prefix("eee1fff")) == [N(1)]
    assert list(to_prefix("bebe1ff")) == [NEG, NEG, N(1)]
    # 2 * 3 + ( 2 + 3 ) * 5.1
    assert list(to_prefix("2 c 3 a e2 a 3 f c 5.1")) == [
        MUL, N(5.1), ADD, ADD, N(3), N(2), MUL, N(3), N(2)
    ]


def test_ast_reads_stack_backwards():
    ast = to_prefix("1 d 2")
    assert ast.stack == [N(1), N(2), DIV]
    assert list(ast) == [DIV, N(2), N(1)]
    assert len(ast) == 3


def test_parser_is_reusable():
    parser = Parser()
    assert list(parser.parse(Tokenizer("1 a 2"))) == [ADD, N(2), N(1)]
    assert list(parser.parse(Tokenizer("3"))) == [N(3)]


def test_unbalanced_brackets():
    assert parse_error("f") == UnbalancedGroup(CLOSE)
    assert parse_error("5f") == UnbalancedGroup(CLOSE)
    assert parse_error("e") == UnbalancedGroup(OPEN)
    assert parse_error("e 3") == UnbalancedGroup(OPEN)
    assert parse_error("1 a 2 c e3 b 2 f a f") == OperandExpected(CLOSE, ADD)
    assert parse_error("1 a 2 c e3 b 2 f c e") == UnbalancedGroup(OPEN)
    assert parse_error("e 3 a e2 a 2f") == UnbalancedGroup(OPEN)
    assert parse_error("e 3 a e2 a 2f f f") == UnbalancedGroup(CLOSE)
    assert str(UnbalancedGroup(OPEN)) == "Unbalanced brackets"


def test_empty():
    assert parse_error("") == EmptyExpr()
    assert parse_error("   ") == EmptyExpr()
    assert parse_error("ef") == EmptyExpr()
    assert parse_error("1 a eef f") == EmptyExpr()
    assert str(EmptyExpr()) == "Expression is empty"


def test_missing_operand():
    assert parse_error("a") == OperandExpected(ADD, None)
    assert parse_error("c 3 b 2") == OperandExpected(MUL, None)
    assert parse_error("2 b") == OperandExpected(None, SUB)
    assert parse_error("2 a e3 b 2f c") == OperandExpected(None, MUL)
    assert parse_error("2 c d 2") == OperandExpected(DIV, MUL)
    assert parse_error("b ") == OperandExpected(None, NEG)
    assert parse_error(" 2 a b") == OperandExpected(None, NEG)
    assert parse_error(" 2 a ebf") == OperandExpected(CLOSE, NEG)
    assert parse_error("b b 2") == OperandExpected(SUB, NEG)
    assert parse_error("2 c b b 2") == OperandExpected(SUB, NEG)
    err = parse_error("2 c d 2")
    assert (err.token, err.operator) == (DIV, MUL)
    assert str(err) == "Expected operand"


def test_repeated_unary_operator():
    # The lexer never emits two negations in a row, but token streams built
    # by hand still get the check.
    with pytest.raises(OperandExpected) as excinfo:
        Parser().parse([NEG, NEG, N(1)])
    assert excinfo.value == OperandExpected(NEG, NEG)
    assert list(Parser().parse([NEG, OPEN, NEG, N(1), CLOSE])) == [NEG, NEG, N(1)]


def test_missing_operator():
    assert parse_error("2 3") == OperatorExpected(N(3))
    assert parse_error("e2 a3 f e5c6f") == OperatorExpected(OPEN)
    assert parse_error("2 3").token == N(3)
    assert str(OperatorExpected(N(3))) == "Expected operator"


def test_tokenizer_errors_are_wrapped():
    err = parse_error("1 a :")
    assert isinstance(err, InvalidToken)
    assert err.error == UnknownToken(":") == err.__cause__
    assert str(err) == "Unknown token `:` in the stream"
    err = parse_error("1.2.3 a 1")
    assert err == InvalidToken(NumberParseError("float", "1.2.3"))


def test_first_error_wins():
    assert parse_error("2 3 :") == OperatorExpected(N(3))
    assert parse_error(": 2 3") == InvalidToken(UnknownToken(":"))


def test_nesting_limit():
    assert list(to_prefix("ee1ff", max_depth=2)) == [N(1)]
    assert parse_error("eee1fff", max_depth=2) == NestingTooDeep(2)
    assert str(NestingTooDeep(2)) == "Brackets are nested deeper than 2"
    assert list(to_prefix("e1f a e2f a e3f", max_depth=1)) == [
        ADD, N(3), ADD, N(2), N(1)
    ]


def test_default_nesting_limit():
    deep = "e" * 1000 + "1" + "f" * 1000
    assert isinstance(parse_error(deep), NestingTooDeep)


def test_nesting_limit_is_capped_by_the_stack():
    parser = Parser(max_depth=5000)
    assert parser.max_depth == sys.getrecursionlimit() // 2
    with pytest.raises(NestingTooDeep):
        parser.parse(Tokenizer("e" * 3000 + "1" + "f" * 3000))
