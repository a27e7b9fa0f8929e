"""
Definitions for the theory of bitvectors.

Constructors do not validate widths; ill-sorted terms can be built and are
rejected later by the typechecker. Operand widths are only used here to
derive the width of the result.

See: https://smt-lib.org/logics-all.shtml#QF_BV
"""
# ruff: noqa: D101, D102, D103

from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from typing import ClassVar, Iterable, override

from .theory_core import BaseTerm, CTerm


@dataclass(repr=False, slots=True, eq=False)
class BTerm(BaseTerm):
    width: int = field(init=False)

    def sort(self) -> bytes:
        return b"(_ BitVec %d)" % self.width


@dataclass(repr=False, slots=True, eq=False)
class BSymbol(BTerm):
    name: str
    w: InitVar[int]

    @override
    def __post_init__(self, w: int) -> None:
        self.width = w
        super(BSymbol, self).__post_init__()

    @override
    def children(self) -> Iterable[BaseTerm]:
        return ()

    @override
    def parts(self) -> list[bytes | BaseTerm]:
        return [self.name.encode()]


@dataclass(repr=False, slots=True, eq=False)
class BValue(BTerm):
    value: int
    w: InitVar[int]

    @override
    def __post_init__(self, w: int) -> None:
        if self.value < 0 and w > 0:  # convert to two's complement
            self.value = self.value + (1 << w)
        self.width = w
        super(BValue, self).__post_init__()

    @property
    def sgnd(self) -> int:
        if self.value & (1 << (self.width - 1)):
            return self.value - (1 << self.width)
        return self.value

    @override
    def children(self) -> Iterable[BaseTerm]:
        return ()

    @override
    def parts(self) -> list[bytes | BaseTerm]:
        if self.width > 0 and self.width % 8 == 0 and 0 <= self.value < (1 << self.width):
            return [b"#x" + self.value.to_bytes(self.width // 8).hex().encode()]
        return [b"(_ bv%d %d)" % (self.value, self.width)]


@dataclass(repr=False, slots=True, eq=False)
class UnaryOp(BTerm):
    term: BTerm

    @override
    def __post_init__(self) -> None:
        self.width = self.term.width
        super(UnaryOp, self).__post_init__()

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.term,)


@dataclass(repr=False, slots=True, eq=False)
class BinaryOp(BTerm):
    left: BTerm
    right: BTerm

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.left, self.right)

    @override
    def __post_init__(self) -> None:
        self.width = self.left.width
        super(BinaryOp, self).__post_init__()


@dataclass(repr=False, slots=True, eq=False)
class CompareOp(CTerm):
    left: BTerm
    right: BTerm

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.left, self.right)


@dataclass(repr=False, slots=True, eq=False)
class BNot(UnaryOp):
    op: ClassVar[bytes] = b"bvnot"


@dataclass(repr=False, slots=True, eq=False)
class Neg(UnaryOp):
    op: ClassVar[bytes] = b"bvneg"


@dataclass(repr=False, slots=True, eq=False)
class BAnd(BinaryOp):
    op: ClassVar[bytes] = b"bvand"


@dataclass(repr=False, slots=True, eq=False)
class BOr(BinaryOp):
    op: ClassVar[bytes] = b"bvor"


@dataclass(repr=False, slots=True, eq=False)
class BXor(BinaryOp):
    op: ClassVar[bytes] = b"bvxor"


@dataclass(repr=False, slots=True, eq=False)
class Add(BinaryOp):
    op: ClassVar[bytes] = b"bvadd"


@dataclass(repr=False, slots=True, eq=False)
class Sub(BinaryOp):
    op: ClassVar[bytes] = b"bvsub"


@dataclass(repr=False, slots=True, eq=False)
class Mul(BinaryOp):
    op: ClassVar[bytes] = b"bvmul"


@dataclass(repr=False, slots=True, eq=False)
class Udiv(BinaryOp):
    op: ClassVar[bytes] = b"bvudiv"


@dataclass(repr=False, slots=True, eq=False)
class Urem(BinaryOp):
    op: ClassVar[bytes] = b"bvurem"


@dataclass(repr=False, slots=True, eq=False)
class Sdiv(BinaryOp):
    op: ClassVar[bytes] = b"bvsdiv"


@dataclass(repr=False, slots=True, eq=False)
class Srem(BinaryOp):
    op: ClassVar[bytes] = b"bvsrem"


@dataclass(repr=False, slots=True, eq=False)
class Shl(BinaryOp):
    op: ClassVar[bytes] = b"bvshl"


@dataclass(repr=False, slots=True, eq=False)
class Lshr(BinaryOp):
    op: ClassVar[bytes] = b"bvlshr"


@dataclass(repr=False, slots=True, eq=False)
class Ashr(BinaryOp):
    op: ClassVar[bytes] = b"bvashr"


@dataclass(repr=False, slots=True, eq=False)
class RotateLeft(BinaryOp):
    """Rotate left by a symbolic amount (taken modulo the width)."""

    op: ClassVar[bytes] = b"ext_rotate_left"


@dataclass(repr=False, slots=True, eq=False)
class RotateRight(BinaryOp):
    """Rotate right by a symbolic amount (taken modulo the width)."""

    op: ClassVar[bytes] = b"ext_rotate_right"


@dataclass(repr=False, slots=True, eq=False)
class Ult(CompareOp):
    op: ClassVar[bytes] = b"bvult"


@dataclass(repr=False, slots=True, eq=False)
class Ule(CompareOp):
    op: ClassVar[bytes] = b"bvule"


@dataclass(repr=False, slots=True, eq=False)
class Ugt(CompareOp):
    op: ClassVar[bytes] = b"bvugt"


@dataclass(repr=False, slots=True, eq=False)
class Uge(CompareOp):
    op: ClassVar[bytes] = b"bvuge"


@dataclass(repr=False, slots=True, eq=False)
class Slt(CompareOp):
    op: ClassVar[bytes] = b"bvslt"


@dataclass(repr=False, slots=True, eq=False)
class Sle(CompareOp):
    op: ClassVar[bytes] = b"bvsle"


@dataclass(repr=False, slots=True, eq=False)
class Sgt(CompareOp):
    op: ClassVar[bytes] = b"bvsgt"


@dataclass(repr=False, slots=True, eq=False)
class Sge(CompareOp):
    op: ClassVar[bytes] = b"bvsge"


@dataclass(repr=False, slots=True, eq=False)
class Extract(BTerm):
    op: ClassVar[bytes] = b"extract"
    i: int
    j: int
    term: BTerm

    @override
    def __post_init__(self) -> None:
        self.width = self.i - self.j + 1
        super(Extract, self).__post_init__()

    @override
    def params(self) -> Iterable[int]:
        return (self.i, self.j)

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.term,)


@dataclass(repr=False, slots=True, eq=False)
class Concat(BTerm):
    op: ClassVar[bytes] = b"concat"
    left: BTerm
    right: BTerm

    @override
    def __post_init__(self) -> None:
        self.width = self.left.width + self.right.width
        super(Concat, self).__post_init__()

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.left, self.right)


@dataclass(repr=False, slots=True, eq=False)
class SignExtend(BTerm):
    """Sign-extend `term` to a total width of `size` bits."""

    op: ClassVar[bytes] = b"sign_extend"
    size: int
    term: BTerm

    @override
    def __post_init__(self) -> None:
        self.width = self.size
        super(SignExtend, self).__post_init__()

    @override
    def params(self) -> Iterable[int]:
        # SMT-LIB counts the number of added bits
        return (self.size - self.term.width,)

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.term,)


@dataclass(repr=False, slots=True, eq=False)
class Ite(BTerm):
    op: ClassVar[bytes] = b"ite"
    cond: CTerm
    left: BTerm
    right: BTerm

    @override
    def __post_init__(self) -> None:
        self.width = self.left.width
        super(Ite, self).__post_init__()

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.cond, self.left, self.right)


@dataclass(repr=False, slots=True, eq=False)
class ForAll(CTerm):
    """Universal quantification over bitvector variables."""

    bound: tuple[BSymbol, ...]
    body: CTerm

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (*self.bound, self.body)

    @override
    def parts(self) -> list[bytes | BaseTerm]:
        result: list[bytes | BaseTerm] = [b"(forall ("]
        for var in self.bound:
            result.extend((b"(", var, b" %b)" % var.sort()))
        result.append(b") ")
        result.append(self.body)
        result.append(b")")
        return result
