"""Lowering of symstate constraints to Z3, and decoding of Z3 models."""

from .config import SolverConfig
from .errors import (
    ExternalInterrupt,
    LoweringFailure,
    ModelQueryError,
    SolverError,
    SolverFault,
    SolverIndeterminate,
    TypecheckFailure,
)
from .interrupt import Interrupt
from .lowering import MAX_ARITY, ExprConverter, QueryBatch
from .model import ArrayShape, ArrayValue, classify, decode_array
from .z3solver import QueryStats, Z3Solver

__all__ = [
    "MAX_ARITY",
    "ArrayShape",
    "ArrayValue",
    "ExprConverter",
    "ExternalInterrupt",
    "Interrupt",
    "LoweringFailure",
    "ModelQueryError",
    "QueryBatch",
    "QueryStats",
    "SolverConfig",
    "SolverError",
    "SolverFault",
    "SolverIndeterminate",
    "TypecheckFailure",
    "Z3Solver",
    "classify",
    "decode_array",
]
