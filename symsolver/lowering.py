"""Translation of symstate terms into Z3 expressions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import z3
from line_profiler import profile

from symstate import (
    Add,
    And,
    Apply,
    Ashr,
    ASymbol,
    AValue,
    BAnd,
    BaseTerm,
    BNot,
    BOr,
    BSymbol,
    BValue,
    BXor,
    Concat,
    CSymbol,
    CTerm,
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
    Or,
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
    split_constraints,
)

from .errors import LoweringFailure

logger = logging.getLogger(__name__)

# Uninterpreted functions and quantifiers are supported up to this many
# arguments / bound variables. Beyond it the translation is undefined and
# lowering fails instead.
MAX_ARITY = 3


@dataclass
class QueryBatch:
    """The mutable state of one query; discarded when the query ends."""

    pending: list[CTerm]
    lowered: list[z3.BoolRef] = field(default_factory=list[z3.BoolRef])
    derived: list[CTerm] = field(default_factory=list[CTerm])

    def derive(self, constraint: CTerm) -> None:
        """Queue a side-constraint discovered during lowering."""
        self.derived.append(constraint)

    def advance(self) -> None:
        """Make the derived constraints the next round of pending work."""
        self.pending = split_constraints(self.derived)
        self.derived = []


class ExprConverter:
    """
    Lowers terms into a Z3 context.

    Sub-terms are translated once per converter, memoized by term identity, so
    shared nodes in a DAG are never re-translated. Lowering a signed division
    derives a divisor-is-nonzero constraint into the batch; the caller must
    typecheck, lower and assert it like any other constraint.
    """

    def __init__(self, ctx: z3.Context, batch: QueryBatch) -> None:
        """Create a new ExprConverter."""
        self.ctx = ctx
        self.batch = batch
        self._memo: dict[int, tuple[BaseTerm, Any]] = {}
        self._functions: dict[tuple[str, tuple[int, ...], int], z3.FuncDeclRef] = {}

    @profile
    def __call__(self, term: BaseTerm) -> Any:
        """Translate a well-sorted term, children first."""
        stack = [term]
        while stack:
            top = stack[-1]
            if id(top) in self._memo:
                stack.pop()
                continue
            pending = [c for c in top.children() if id(c) not in self._memo]
            if pending:
                stack.extend(pending)
                continue
            stack.pop()
            args = [self._memo[id(c)][1] for c in top.children()]
            try:
                result = self._lower(top, args)
            except z3.Z3Exception as e:
                raise LoweringFailure(f"Z3 rejected term {top!r}: {e}") from e
            self._memo[id(top)] = (top, result)
        return self._memo[id(term)][1]

    def declare(self, function: Function) -> z3.FuncDeclRef:
        """Declare an uninterpreted function, once per name and signature."""
        key = (function.name, function.args, function.ret)
        if key not in self._functions:
            n = len(function.args)
            if n == 0:
                raise LoweringFailure(f"Function {function.name} has no arguments")
            elif n > MAX_ARITY:
                raise LoweringFailure(
                    f"Function {function.name} has too many arguments: {n}"
                )
            sorts = [z3.BitVecSort(w, self.ctx) for w in (*function.args, function.ret)]
            self._functions[key] = z3.Function(function.name, *sorts)
            logger.debug("declared function %s%s -> %d", *key)
        return self._functions[key]

    @profile
    def _lower(self, term: BaseTerm, args: list[Any]) -> Any:
        ctx = self.ctx
        match term:
            # Core
            case CValue(value):
                return z3.BoolVal(value, ctx)
            case CSymbol(name):
                return z3.Bool(name, ctx)
            case Not():
                return z3.Not(args[0], ctx)
            case And():
                return z3.And(args[0], args[1])
            case Or():
                return z3.Or(args[0], args[1])
            case Xor():
                return z3.Xor(args[0], args[1], ctx)
            case Implies():
                return z3.Implies(args[0], args[1], ctx)
            case Iff() | Eq():
                return args[0] == args[1]
            case ForAll(bound):
                n = len(bound)
                if n == 0 or n > MAX_ARITY:
                    raise LoweringFailure(
                        f"Quantifier over {n} variables is not supported: {term!r}"
                    )
                return z3.ForAll(args[:-1], args[-1])

            # Comparisons
            case Ult():
                return z3.ULT(args[0], args[1])
            case Ule():
                return z3.ULE(args[0], args[1])
            case Ugt():
                return z3.UGT(args[0], args[1])
            case Uge():
                return z3.UGE(args[0], args[1])
            case Slt():
                return args[0] < args[1]
            case Sle():
                return args[0] <= args[1]
            case Sgt():
                return args[0] > args[1]
            case Sge():
                return args[0] >= args[1]

            # Bitvectors
            case BValue(value):
                return z3.BitVecVal(value, term.width, ctx)
            case BSymbol(name):
                return z3.BitVec(name, term.width, ctx)
            case BNot():
                return ~args[0]
            case Neg():
                return -args[0]
            case BAnd():
                return args[0] & args[1]
            case BOr():
                return args[0] | args[1]
            case BXor():
                return args[0] ^ args[1]
            case Add():
                return args[0] + args[1]
            case Sub():
                return args[0] - args[1]
            case Mul():
                return args[0] * args[1]
            case Udiv():
                return z3.UDiv(args[0], args[1])
            case Urem():
                return z3.URem(args[0], args[1])
            case Sdiv(_, divisor):
                # The formula may not guard against a zero divisor; assert it
                # through the same pipeline as the caller's constraints.
                self.batch.derive(Not(Eq(divisor, BValue(0, divisor.width))))
                return args[0] / args[1]
            case Srem():
                return z3.SRem(args[0], args[1])
            case Shl():
                return args[0] << args[1]
            case Lshr():
                return z3.LShR(args[0], args[1])
            case Ashr():
                return args[0] >> args[1]
            case RotateLeft():
                return z3.RotateLeft(args[0], args[1])
            case RotateRight():
                return z3.RotateRight(args[0], args[1])
            case Extract(i, j):
                return z3.Extract(i, j, args[0])
            case Concat():
                return z3.Concat(args[0], args[1])
            case SignExtend(size, child):
                return z3.SignExt(size - child.width, args[0])
            case Ite():
                return z3.If(args[0], args[1], args[2], ctx)
            case Apply(function):
                return self.declare(function)(*args)

            # Arrays
            case Select():
                return z3.Select(args[0], args[1])
            case Store():
                return z3.Store(args[0], args[1], args[2])
            case ASymbol(name, key, value):
                return z3.Array(
                    name, z3.BitVecSort(key, ctx), z3.BitVecSort(value, ctx)
                )
            case AValue(_, key):
                return z3.K(z3.BitVecSort(key, ctx), args[0])

            case _:
                raise LoweringFailure(f"unsupported term: {term.__class__.__name__}")
