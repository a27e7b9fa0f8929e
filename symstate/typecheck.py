"""Sort and width checking for constraints."""

from __future__ import annotations

from line_profiler import profile

from .theory_array import ASymbol, AValue, Select, Store
from .theory_bitvec import (
    BinaryOp,
    BSymbol,
    BValue,
    CompareOp,
    Concat,
    Extract,
    ForAll,
    Ite,
    SignExtend,
    UnaryOp,
)
from .theory_core import (
    And,
    BaseTerm,
    CSymbol,
    CTerm,
    CValue,
    DumpContext,
    Eq,
    Iff,
    Implies,
    Not,
    Or,
    SortWidth,
    Xor,
)
from .theory_uf import Apply


class Mismatch(Exception):
    """A term is not well-sorted."""

    pass


class TypeChecker:
    """
    Computes the sort of every sub-term of a constraint.

    Sorts are memoized by term identity for the lifetime of the checker, so a
    single checker should be reused across all the constraints of a query.
    Only the first error is recorded.
    """

    def __init__(self) -> None:
        self.error: str | None = None
        self._sorts: dict[int, tuple[BaseTerm, SortWidth]] = {}

    def has_error(self) -> bool:
        return self.error is not None

    @profile
    def check(self, constraint: CTerm) -> bool:
        """Return True iff the constraint is a well-sorted boolean term."""
        try:
            if (sort := self.sort_of(constraint)) is not None:
                raise Mismatch(f"expected Bool, got {_describe(sort)}")
        except Mismatch as e:
            if self.error is None:
                self.error = str(e)
            return False
        return True

    def sort_of(self, term: BaseTerm) -> SortWidth:
        """Compute the sort of a term, raising Mismatch if it is ill-sorted."""
        stack: list[BaseTerm] = [term]
        while stack:
            top = stack[-1]
            if id(top) in self._sorts:
                stack.pop()
                continue
            pending = [c for c in top.children() if id(c) not in self._sorts]
            if pending:
                stack.extend(pending)
                continue
            stack.pop()
            self._sorts[id(top)] = (top, self._rule(top))
        return self._sorts[id(term)][1]

    def _get(self, term: BaseTerm) -> SortWidth:
        return self._sorts[id(term)][1]

    def _bool(self, term: BaseTerm) -> None:
        if (sort := self._get(term)) is not None:
            raise Mismatch(f"expected Bool, got {_describe(sort)}: {_text(term)}")

    def _bv(self, term: BaseTerm) -> int:
        sort = self._get(term)
        if not isinstance(sort, int):
            raise Mismatch(f"expected a bitvector, got {_describe(sort)}: {_text(term)}")
        return sort

    def _array(self, term: BaseTerm) -> tuple[int, int]:
        sort = self._get(term)
        if not isinstance(sort, tuple):
            raise Mismatch(f"expected an array, got {_describe(sort)}: {_text(term)}")
        return sort

    def _same(self, term: BaseTerm, left: BaseTerm, right: BaseTerm) -> int:
        a, b = self._bv(left), self._bv(right)
        if a != b:
            raise Mismatch(f"operand widths differ ({a} vs {b}): {_text(term)}")
        return a

    def _rule(self, term: BaseTerm) -> SortWidth:
        match term:
            case CValue() | CSymbol():
                return None
            case Not(t):
                self._bool(t)
                return None
            case And(l, r) | Or(l, r) | Xor(l, r) | Implies(l, r) | Iff(l, r):
                self._bool(l)
                self._bool(r)
                return None
            case Eq(l, r):
                a, b = self._get(l), self._get(r)
                if a is None or a != b:
                    raise Mismatch(
                        f"cannot compare {_describe(a)} with {_describe(b)}: {_text(term)}"
                    )
                return None
            case CompareOp(l, r):
                self._same(term, l, r)
                return None
            case ForAll(bound, body):
                if not all(isinstance(v, BSymbol) for v in bound):
                    raise Mismatch(f"bound variables must be bitvector symbols: {_text(term)}")
                self._bool(body)
                return None
            case BSymbol():
                return _positive(term.width, term)
            case BValue(value):
                width = _positive(term.width, term)
                if not 0 <= value < (1 << width):
                    raise Mismatch(f"value {value} does not fit in {width} bits")
                return width
            case UnaryOp(t):
                return self._bv(t)
            case BinaryOp(l, r):
                return self._same(term, l, r)
            case Extract(i, j, t):
                width = self._bv(t)
                if not width > i >= j >= 0:
                    raise Mismatch(f"extract [{i}:{j}] out of range for {width} bits")
                return i - j + 1
            case Concat(l, r):
                return self._bv(l) + self._bv(r)
            case SignExtend(size, t):
                width = self._bv(t)
                if size < width:
                    raise Mismatch(f"cannot sign-extend {width} bits to {size} bits")
                return size
            case Apply(function, args):
                if len(args) != len(function.args):
                    raise Mismatch(
                        f"function {function.name} takes {len(function.args)} "
                        f"arguments, got {len(args)}"
                    )
                for n, (arg, width) in enumerate(zip(args, function.args)):
                    if self._bv(arg) != width:
                        raise Mismatch(
                            f"argument {n} of {function.name} has width "
                            f"{self._bv(arg)}, expected {width}"
                        )
                return _positive(function.ret, term)
            case Ite(cond, l, r):
                self._bool(cond)
                return self._same(term, l, r)
            case Select(array, key):
                k, v = self._array(array)
                if self._bv(key) != k:
                    raise Mismatch(f"key width {self._bv(key)} != {k}: {_text(term)}")
                return v
            case ASymbol(_, k, v):
                return (_positive(k, term), _positive(v, term))
            case AValue(default, k):
                return (_positive(k, term), self._bv(default))
            case Store(array, key, value):
                k, v = self._array(array)
                if self._bv(key) != k:
                    raise Mismatch(f"key width {self._bv(key)} != {k}: {_text(term)}")
                if self._bv(value) != v:
                    raise Mismatch(f"value width {self._bv(value)} != {v}: {_text(term)}")
                return (k, v)
            case _:
                raise Mismatch(f"unknown term: {term.__class__.__name__}")


def _positive(width: int, term: BaseTerm) -> int:
    if width <= 0:
        raise Mismatch(f"width must be positive: {_text(term)}")
    return width


def _describe(sort: SortWidth) -> str:
    match sort:
        case None:
            return "Bool"
        case int():
            return f"(_ BitVec {sort})"
        case (k, v):
            return f"(Array (_ BitVec {k}) (_ BitVec {v}))"


def _text(term: BaseTerm) -> str:
    ctx = DumpContext()
    ctx.dump(term)
    return ctx.out.decode()
