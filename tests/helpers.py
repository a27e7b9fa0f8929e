"""Test helpers, mostly related to building and solving constraints."""

import z3

from symsolver import ExprConverter, QueryBatch, SolverConfig, Z3Solver
from symstate import Add, BaseTerm, BTerm, BValue, CTerm, Eq

X8 = z3.BitVecSort(8)


def solve(*constraints: CTerm, config: SolverConfig | None = None) -> Z3Solver:
    """Check the constraints, which must be satisfiable, and return the solver."""
    solver = Z3Solver(config)
    assert solver.is_sat(constraints), solver.error
    return solver


def lower(term: BaseTerm) -> z3.ExprRef:
    """Lower a single term into Z3's main context, discarding derived constraints."""
    return ExprConverter(z3.main_ctx(), QueryBatch([]))(term)


def concrete(term: BaseTerm) -> int | bool:
    """Lower and simplify a closed term to its concrete value."""
    result = z3.simplify(lower(term))
    if z3.is_bool(result):
        assert z3.is_true(result) or z3.is_false(result), result
        return z3.is_true(result)
    assert z3.is_bv_value(result), result
    return result.as_long()


def chain(term: BTerm, depth: int) -> BTerm:
    """Build (+ term (+ term (+ term ...))), `depth` levels deep."""
    result = term
    for _ in range(depth):
        result = Add(term, result)
    return result


def equals(term: BTerm, value: int) -> CTerm:
    return Eq(term, BValue(value, term.width))


def v8(value: int) -> BValue:
    return BValue(value, 8)
