"""
Definitions for the core theory.

Terms are immutable, slotted dataclasses. Equality is structural, but hashes
are computed once at construction from the (already hashed) children, so deep
terms never hash recursively.

See: https://smt-lib.org/theories-Core.shtml
"""
# ruff: noqa: D101, D102, D103, D107

from __future__ import annotations

import abc
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Iterable, Self, override

from line_profiler import profile

type SortWidth = None | int | tuple[int, int]


@dataclass(repr=False, slots=True, eq=False)
class BaseTerm(abc.ABC):
    op: ClassVar[bytes]
    count: int = field(init=False, compare=False)
    _hash: int = field(init=False, compare=False)

    # Instances of BaseTerm are expected to be immutable:
    def __copy__(self) -> Self:
        return self

    def __deepcopy__(self, memo: Any, /) -> Self:
        return self

    def __post_init__(self) -> None:
        self.count = sum(c.count for c in self.children()) + 1
        self._hash = hash((self.__class__.__name__, *self._key()))

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other: object) -> bool:
        # Compares pairwise from a work-list; tuple and term fields are
        # expanded here rather than through their own __eq__.
        stack: list[tuple[Any, Any]] = [(self, other)]
        while stack:
            a, b = stack.pop()
            if a is b:
                continue
            if type(a) is not type(b):
                return False
            if isinstance(a, BaseTerm):
                if a._hash != b._hash:
                    return False
                stack.extend(zip(a._key(), b._key()))
            elif isinstance(a, tuple):
                if len(a) != len(b):
                    return False
                stack.extend(zip(a, b))
            elif a != b:
                return False
        return True

    def __repr__(self) -> str:
        ctx = DumpContext()
        ctx.dump(self)
        return ctx.out.decode()

    def _key(self) -> tuple[Any, ...]:
        return tuple(getattr(self, f.name) for f in fields(self) if f.compare)

    @abc.abstractmethod
    def sort(self) -> bytes: ...

    @abc.abstractmethod
    def children(self) -> Iterable[BaseTerm]: ...

    def params(self) -> Iterable[int]:
        return ()

    def parts(self) -> list[bytes | BaseTerm]:
        """Break the term into SMT-LIB tokens and child terms, in order."""
        params = tuple(self.params())
        if params:
            head = b"((_ %b %b)" % (self.op, b" ".join(str(p).encode() for p in params))
        else:
            head = b"(%b" % self.op
        result: list[bytes | BaseTerm] = [head]
        for term in self.children():
            result.append(b" ")
            result.append(term)
        result.append(b")")
        return result


@dataclass
class DumpContext:
    """Renders terms as SMT-LIB text without recursing on term depth."""

    out: bytearray = field(default_factory=bytearray)

    @profile
    def dump(self, term: BaseTerm) -> None:
        stack: list[bytes | BaseTerm] = [term]
        while stack:
            item = stack.pop()
            if isinstance(item, bytes):
                self.write(item)
            else:
                stack.extend(reversed(item.parts()))

    def write(self, b: bytes) -> None:
        self.out.extend(b)


@dataclass(repr=False, slots=True, eq=False)
class CTerm(BaseTerm):
    def sort(self) -> bytes:
        return b"Bool"


@dataclass(repr=False, slots=True, eq=False)
class CSymbol(CTerm):
    name: str

    @override
    def children(self) -> Iterable[BaseTerm]:
        return ()

    @override
    def parts(self) -> list[bytes | BaseTerm]:
        return [self.name.encode()]


@dataclass(repr=False, slots=True, eq=False)
class CValue(CTerm):
    value: bool

    @override
    def children(self) -> Iterable[BaseTerm]:
        return ()

    @override
    def parts(self) -> list[bytes | BaseTerm]:
        return [b"true" if self.value else b"false"]


@dataclass(repr=False, slots=True, eq=False)
class Not(CTerm):
    op: ClassVar[bytes] = b"not"
    term: CTerm

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.term,)


@dataclass(repr=False, slots=True, eq=False)
class Implies(CTerm):
    op: ClassVar[bytes] = b"=>"
    left: CTerm
    right: CTerm

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.left, self.right)


@dataclass(repr=False, slots=True, eq=False)
class And(CTerm):
    op: ClassVar[bytes] = b"and"
    left: CTerm
    right: CTerm

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.left, self.right)


@dataclass(repr=False, slots=True, eq=False)
class Or(CTerm):
    op: ClassVar[bytes] = b"or"
    left: CTerm
    right: CTerm

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.left, self.right)


@dataclass(repr=False, slots=True, eq=False)
class Xor(CTerm):
    op: ClassVar[bytes] = b"xor"
    left: CTerm
    right: CTerm

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.left, self.right)


@dataclass(repr=False, slots=True, eq=False)
class Iff(CTerm):
    op: ClassVar[bytes] = b"="
    left: CTerm
    right: CTerm

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.left, self.right)


@dataclass(repr=False, slots=True, eq=False)
class Eq[S: BaseTerm](CTerm):
    """Equality of two bitvectors or two arrays."""

    op: ClassVar[bytes] = b"="
    left: S
    right: S

    @override
    def children(self) -> Iterable[BaseTerm]:
        return (self.left, self.right)


def conjunction(*constraints: CTerm) -> CTerm:
    """Return the AND of all given constraints."""
    if len(constraints) == 0:
        return CValue(True)
    result = constraints[0]
    for constraint in constraints[1:]:
        result = And(result, constraint)
    return result
