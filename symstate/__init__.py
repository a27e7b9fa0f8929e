"""A symbolic expression algebra over booleans, bitvectors and arrays."""

from .axioms import close_axioms, collect_axioms
from .flatten import split_constraints
from .theory_array import ASymbol, ATerm, AValue, Select, Store
from .theory_bitvec import (
    Add,
    Ashr,
    BAnd,
    BinaryOp,
    BNot,
    BOr,
    BSymbol,
    BTerm,
    BValue,
    BXor,
    CompareOp,
    Concat,
    Extract,
    ForAll,
    Ite,
    Lshr,
    Mul,
    Neg,
    RotateLeft,
    RotateRight,
    Sdiv,
    Sge,
    Sgt,
    Shl,
    SignExtend,
    Sle,
    Slt,
    Srem,
    Sub,
    Udiv,
    Uge,
    Ugt,
    Ule,
    Ult,
    UnaryOp,
    Urem,
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
    conjunction,
)
from .theory_uf import Apply, Function
from .typecheck import TypeChecker

__all__ = [
    "ASymbol",
    "ATerm",
    "AValue",
    "Add",
    "And",
    "Apply",
    "Ashr",
    "BAnd",
    "BNot",
    "BOr",
    "BSymbol",
    "BTerm",
    "BValue",
    "BXor",
    "BaseTerm",
    "BinaryOp",
    "CSymbol",
    "CTerm",
    "CValue",
    "CompareOp",
    "Concat",
    "DumpContext",
    "Eq",
    "Extract",
    "ForAll",
    "Function",
    "Iff",
    "Implies",
    "Ite",
    "Lshr",
    "Mul",
    "Neg",
    "Not",
    "Or",
    "RotateLeft",
    "RotateRight",
    "Sdiv",
    "Select",
    "Sge",
    "Sgt",
    "Shl",
    "SignExtend",
    "Sle",
    "Slt",
    "SortWidth",
    "Srem",
    "Store",
    "Sub",
    "TypeChecker",
    "Udiv",
    "Uge",
    "Ugt",
    "Ule",
    "Ult",
    "UnaryOp",
    "Urem",
    "Xor",
    "close_axioms",
    "collect_axioms",
    "conjunction",
    "split_constraints",
]
