"""Uninterpreted functions over bitvectors."""
# ruff: noqa: D102

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterable, override

from .theory_bitvec import BTerm
from .theory_core import BaseTerm, CTerm


@dataclass(slots=True, unsafe_hash=True)
class Function:
    """
    An uninterpreted function signature.

    Functions are identified by name and signature. Background axioms (for
    example, a ForAll describing a known identity of the function) may be
    attached after construction, since they usually mention the function
    itself; they are collected whenever the function is applied.
    """

    name: str
    args: tuple[int, ...]
    ret: int
    axioms: list[CTerm] = field(default_factory=list[CTerm], compare=False)

    def __call__(self, *args: BTerm) -> Apply:
        return Apply(self, args)


@dataclass(repr=False, slots=True, eq=False)
class Apply(BTerm):
    op: ClassVar[bytes] = b"apply"
    function: Function
    args: tuple[BTerm, ...]

    @override
    def __post_init__(self) -> None:
        self.width = self.function.ret
        super(Apply, self).__post_init__()

    @override
    def children(self) -> Iterable[BaseTerm]:
        return self.args

    @override
    def parts(self) -> list[bytes | BaseTerm]:
        result: list[bytes | BaseTerm] = [b"(%b" % self.function.name.encode()]
        for arg in self.args:
            result.append(b" ")
            result.append(arg)
        result.append(b")")
        return result
