"""
Definitions for the theory of arrays.

Arrays map bitvector keys to bitvector values, as in the QF_ABV logic.

See: https://smt-lib.org/theories-ArraysEx.shtml
"""
# ruff: noqa: D101, D102, D103

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import ClassVar, Iterable, override

from .theory_bitvec import BTerm
from .theory_core import BaseTerm


@dataclass(repr=False, slots=True, eq=False)
class ATerm(BaseTerm):
    def sort(self) -> bytes:
        return b"(Array (_ BitVec %d) (_ BitVec %d))" % self.width()

    @abc.abstractmethod
    def width(self) -> tuple[int, int]: ...


@dataclass(repr=False, slots=True, eq=False)
class ASymbol(ATerm):
    name: str
    key: int
    value: int

    def width(self) -> tuple[int, int]:
        return (self.key, self.value)

    @override
    def children(self) -> Iterable[BaseTerm]:
        return ()

    @override
    def parts(self) -> list[bytes | BaseTerm]:
        return [self.name.encode()]


@dataclass(repr=False, slots=True, eq=False)
class AValue(ATerm):
    """A constant array: every key maps to `default`."""

    default: BTerm
    key: int

    def width(self) -> tuple[int, int]:
        return (self.key, self.default.width)

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.default,)

    @override
    def parts(self) -> list[bytes | BaseTerm]:
        return [b"((as const %b) " % self.sort(), self.default, b")"]


@dataclass(repr=False, slots=True, eq=False)
class Store(ATerm):
    op: ClassVar[bytes] = b"store"
    array: ATerm
    key: BTerm
    value: BTerm
    _width: tuple[int, int] = field(init=False, compare=False)

    @override
    def __post_init__(self) -> None:
        self._width = self.array.width()
        super(Store, self).__post_init__()

    def width(self) -> tuple[int, int]:
        return self._width

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.array, self.key, self.value)


@dataclass(repr=False, slots=True, eq=False)
class Select(BTerm):
    op: ClassVar[bytes] = b"select"
    array: ATerm
    key: BTerm

    @override
    def __post_init__(self) -> None:
        _, self.width = self.array.width()
        super(Select, self).__post_init__()

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.array, self.key)
