#!/usr/bin/env pytest

import pytest

from symsolver import TypecheckFailure, Z3Solver
from symstate import (
    Add,
    And,
    ASymbol,
    AValue,
    BSymbol,
    BValue,
    CSymbol,
    CTerm,
    Eq,
    Extract,
    ForAll,
    Function,
    Ite,
    Not,
    Select,
    SignExtend,
    Store,
    TypeChecker,
    Ult,
)

from .helpers import chain, equals

x8, y8 = BSymbol("x", 8), BSymbol("y", 8)
x16 = BSymbol("x16", 16)
mem = ASymbol("mem", 64, 8)


@pytest.mark.parametrize(
    "constraint",
    [
        equals(Add(x8, y8), 7),
        Ult(Extract(15, 8, x16), x8),
        equals(SignExtend(16, x8), 0xFFFF),
        Eq(mem, Store(mem, BValue(1, 64), x8)),
        equals(Select(Store(mem, BValue(1, 64), x8), BValue(2, 64)), 0),
        Eq(AValue(BValue(0, 8), 64), mem),
        equals(Ite(CSymbol("c"), x8, y8), 3),
        ForAll((x8,), Not(equals(x8, 0))),
        equals(Function("f", (8, 16), 8)(x8, x16), 1),
        And(CSymbol("a"), CSymbol("b")),
    ],
)
def test_well_sorted(constraint: CTerm):
    tc = TypeChecker()
    assert tc.check(constraint), tc.error
    assert not tc.has_error()


@pytest.mark.parametrize(
    "constraint,message",
    [
        (equals(Add(x8, x16), 1), "operand widths differ (8 vs 16)"),
        (Ult(x8, x16), "operand widths differ"),
        (Eq(mem, x8), "cannot compare"),
        (Eq(CSymbol("a"), CSymbol("b")), "cannot compare Bool"),
        (Not(x8), "expected Bool"),  # pyright: ignore[reportArgumentType]
        (equals(Extract(8, 0, x8), 0), "out of range"),
        (equals(Extract(2, -1, x8), 0), "out of range"),
        (equals(SignExtend(4, x8), 0), "cannot sign-extend"),
        (equals(Select(mem, x8), 0), "key width 8 != 64"),
        (Eq(mem, Store(mem, BValue(0, 64), x16)), "value width 16 != 8"),
        (equals(Function("f", (8,), 8)(x16), 0), "argument 0 of f"),
        (equals(Function("f", (8, 8), 8)(x8), 0), "takes 2 arguments"),
        (equals(BSymbol("z", 0), 0), "width must be positive"),
        (ForAll((Add(x8, x8),), CSymbol("a")), "bound variables"),  # pyright: ignore[reportArgumentType]
    ],
)
def test_ill_sorted(constraint: CTerm, message: str):
    tc = TypeChecker()
    assert not tc.check(constraint)
    assert tc.error is not None
    assert message in tc.error


def test_not_boolean():
    tc = TypeChecker()
    assert not tc.check(x8)  # pyright: ignore[reportArgumentType]
    assert tc.error == "expected Bool, got (_ BitVec 8)"


def test_first_error_kept():
    tc = TypeChecker()
    assert not tc.check(Ult(x8, x16))
    first = tc.error
    assert not tc.check(Eq(mem, x8))
    assert tc.error == first


def test_deep_term():
    tc = TypeChecker()
    assert tc.check(equals(chain(x8, 20000), 0))


def test_query_fatal():
    solver = Z3Solver()
    bad = equals(Add(x8, x16), 1)
    assert not solver.is_sat([equals(x8, 1), bad, equals(y8, 2)])
    assert isinstance(solver.failure, TypecheckFailure)
    assert solver.error.startswith("Typechecking failed for constraint: (= (bvadd x x16)")
    assert "error: operand widths differ (8 vs 16)" in solver.error
    assert solver.model is None
