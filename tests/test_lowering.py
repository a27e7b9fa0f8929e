#!/usr/bin/env pytest

import pytest
import z3

from symsolver import MAX_ARITY, ExprConverter, LoweringFailure, QueryBatch, Z3Solver
from symstate import (
    Add,
    Ashr,
    AValue,
    BAnd,
    BaseTerm,
    BNot,
    BOr,
    BSymbol,
    BXor,
    Concat,
    CValue,
    Eq,
    Extract,
    ForAll,
    Function,
    Iff,
    Implies,
    Ite,
    Lshr,
    Mul,
    Neg,
    Not,
    RotateLeft,
    RotateRight,
    Sdiv,
    Select,
    Sge,
    Sgt,
    Shl,
    SignExtend,
    Sle,
    Slt,
    Srem,
    Store,
    Sub,
    Udiv,
    Uge,
    Ugt,
    Ule,
    Ult,
    Urem,
    Xor,
)

from .helpers import chain, concrete, lower, v8


table = AValue(v8(7), 8)

CONCRETE: list[tuple[BaseTerm, int | bool]] = [
    (Add(v8(200), v8(100)), 44),
    (Sub(v8(1), v8(2)), 0xFF),
    (Mul(v8(16), v8(17)), 16),
    (Udiv(v8(200), v8(7)), 28),
    (Urem(v8(200), v8(7)), 4),
    (Sdiv(v8(-7), v8(2)), 0xFD),
    (Srem(v8(-7), v8(2)), 0xFF),
    (Shl(v8(0x81), v8(1)), 0x02),
    (Lshr(v8(0x81), v8(1)), 0x40),
    (Ashr(v8(0x81), v8(1)), 0xC0),
    (RotateLeft(v8(0x81), v8(1)), 0x03),
    (RotateRight(v8(0x81), v8(1)), 0xC0),
    (BNot(v8(0x0F)), 0xF0),
    (Neg(v8(1)), 0xFF),
    (BAnd(v8(0xF0), v8(0x3C)), 0x30),
    (BOr(v8(0xF0), v8(0x3C)), 0xFC),
    (BXor(v8(0xF0), v8(0x3C)), 0xCC),
    (Extract(7, 4, v8(0xAB)), 0xA),
    (Concat(v8(0xAB), v8(0xCD)), 0xABCD),
    (SignExtend(16, v8(0x80)), 0xFF80),
    (SignExtend(16, v8(0x7F)), 0x007F),
    (Ite(CValue(True), v8(1), v8(2)), 1),
    (Ite(CValue(False), v8(1), v8(2)), 2),
    (Ult(v8(1), v8(2)), True),
    (Ule(v8(2), v8(2)), True),
    (Ugt(v8(0xFF), v8(0)), True),
    (Uge(v8(1), v8(2)), False),
    (Slt(v8(0xFF), v8(0)), True),
    (Sle(v8(0x80), v8(0x7F)), True),
    (Sgt(v8(0x80), v8(0x7F)), False),
    (Sge(v8(0), v8(0xFF)), True),
    (Implies(CValue(False), CValue(False)), True),
    (Xor(CValue(True), CValue(False)), True),
    (Iff(CValue(False), CValue(False)), True),
    (Not(Eq(v8(3), v8(3))), False),
    (Select(Store(table, v8(1), v8(9)), v8(1)), 9),
    (Select(Store(table, v8(1), v8(9)), v8(2)), 7),
]


@pytest.mark.parametrize("term,expected", CONCRETE)
def test_concrete(term: BaseTerm, expected: int | bool):
    assert concrete(term) == expected


def test_symbols():
    assert lower(BSymbol("x", 8)).eq(z3.BitVec("x", 8))
    assert lower(Eq(BSymbol("x", 8), v8(1))).eq(z3.BitVec("x", 8) == 1)


def test_shared_subterms():
    x, y = BSymbol("x", 8), BSymbol("y", 8)
    shared = Add(x, y)
    converter = ExprConverter(z3.main_ctx(), QueryBatch([]))
    result = converter(Mul(shared, shared))
    assert converter(shared) is converter(shared)
    assert result.arg(0).eq(result.arg(1))


def test_sdiv_derives_guard():
    x, y = BSymbol("x", 8), BSymbol("y", 8)
    quotient = Sdiv(x, y)
    batch = QueryBatch([])
    converter = ExprConverter(z3.main_ctx(), batch)
    converter(Add(quotient, quotient))
    converter(quotient)
    assert batch.derived == [Not(Eq(y, v8(0)))]

    batch.advance()
    assert batch.pending == [Not(Eq(y, v8(0)))]
    assert batch.derived == []


def test_function_declared_once():
    f = Function("f", (8, 8), 16)
    x, y = BSymbol("x", 8), BSymbol("y", 8)
    converter = ExprConverter(z3.main_ctx(), QueryBatch([]))
    a, b = converter(f(x, y)), converter(f(y, x))
    assert a.decl().eq(b.decl())
    assert a.decl().arity() == 2
    assert a.sort() == z3.BitVecSort(16)


@pytest.mark.parametrize("arity", range(1, MAX_ARITY + 1))
def test_function_arity(arity: int):
    f = Function("f", (8,) * arity, 8)
    args = [BSymbol(f"a{i}", 8) for i in range(arity)]
    assert lower(f(*args)).num_args() == arity


def test_function_without_arguments():
    f = Function("f", (), 8)
    with pytest.raises(LoweringFailure, match="Function f has no arguments"):
        lower(f())


def test_function_too_many_arguments():
    f = Function("g", (8, 8, 8, 8), 8)
    args = [BSymbol(f"a{i}", 8) for i in range(4)]
    with pytest.raises(LoweringFailure, match="Function g has too many arguments: 4"):
        lower(f(*args))


@pytest.mark.parametrize("count", range(1, MAX_ARITY + 1))
def test_quantifier(count: int):
    bound = tuple(BSymbol(f"q{i}", 8) for i in range(count))
    result = lower(ForAll(bound, Ule(bound[0], v8(0xFF))))
    assert z3.is_quantifier(result)
    assert result.num_vars() == count


@pytest.mark.parametrize("count", [0, MAX_ARITY + 1])
def test_quantifier_unsupported(count: int):
    bound = tuple(BSymbol(f"q{i}", 8) for i in range(count))
    with pytest.raises(LoweringFailure, match=f"Quantifier over {count} variables"):
        lower(ForAll(bound, CValue(True)))


def test_quantifier_through_solver():
    bound = tuple(BSymbol(f"q{i}", 8) for i in range(4))
    solver = Z3Solver()
    assert not solver.is_sat([ForAll(bound, CValue(True))])
    assert isinstance(solver.failure, LoweringFailure)


def test_z3_rejection():
    # Extract bounds are not checked before lowering
    with pytest.raises(LoweringFailure, match="Z3 rejected term"):
        lower(Extract(2, 3, BSymbol("x", 8)))


def test_deep_term():
    assert concrete(chain(v8(1), 5000)) == 5001 % 256
