"""
Decoding of array values from Z3 models.

Z3 represents the value of an array in one of several shapes. The top-level
operator of the model expression selects a variant of ArrayShape, and each
variant has its own decoder. Store chains are peeled first, then the base
is decoded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

import z3

from .errors import ModelQueryError

logger = logging.getLogger(__name__)


@dataclass
class ArrayValue:
    """
    A concrete byte array: explicit entries over a uniform background.

    Every key absent from `mapping` holds `default`. All values are bytes.
    """

    mapping: dict[int, int] = field(default_factory=dict[int, int])
    default: int = 0

    def __getitem__(self, key: int) -> int:
        return self.mapping.get(key, self.default)


class ArrayShape(Enum):
    """The representation Z3 chose for an array value."""

    STORE = 1  # (store base key value)
    CONST = 2  # ((as const ...) value)
    AS_ARRAY = 3  # (_ as-array f), backed by a function interpretation
    MAP = 4  # ((_ map f) ...)
    UNPARSEABLE = 5


def classify(expr: z3.ExprRef) -> ArrayShape:
    """Determine the shape of an array expression from its top-level operator."""
    if z3.is_store(expr):
        return ArrayShape.STORE
    elif z3.is_K(expr):
        return ArrayShape.CONST
    elif z3.is_as_array(expr):
        return ArrayShape.AS_ARRAY
    elif z3.is_app(expr) and expr.decl().kind() == z3.Z3_OP_ARRAY_MAP:
        return ArrayShape.MAP
    else:
        return ArrayShape.UNPARSEABLE


def decode_array(model: z3.ModelRef, expr: z3.ExprRef) -> ArrayValue:
    """
    Decode an array expression taken from the given model.

    Raises ModelQueryError if an entry is not a byte. Shapes that can't be
    decoded produce an empty, zero-default array and a warning; the caller
    may then be working with a spurious model and should re-check it.
    """
    mapping: dict[int, int] = {}
    while (shape := classify(expr)) == ArrayShape.STORE:
        expr = _peel_store(expr, mapping)
    return DECODERS[shape](model, expr, mapping)


def _peel_store(expr: z3.ExprRef, mapping: dict[int, int]) -> z3.ExprRef:
    key, value = _numeral(expr.arg(1)), _byte(expr.arg(2))
    # The outermost write to a key wins.
    mapping.setdefault(key, value)
    logger.debug("adding %#x -> %#x", key, value)
    return expr.arg(0)


def _decode_const(
    model: z3.ModelRef, expr: z3.ExprRef, mapping: dict[int, int]
) -> ArrayValue:
    return ArrayValue(mapping, _byte(expr.arg(0)))


def _decode_as_array(
    model: z3.ModelRef, expr: z3.ExprRef, mapping: dict[int, int]
) -> ArrayValue:
    interp = model.get_interp(z3.get_as_array_func(expr))
    if not isinstance(interp, z3.FuncInterp):
        raise ModelQueryError(f"no interpretation for array function in {expr}")
    for i in range(interp.num_entries()):
        entry = interp.entry(i)
        key, value = _numeral(entry.arg_value(0)), _byte(entry.value())
        mapping.setdefault(key, value)
        logger.debug("adding %#x -> %#x", key, value)
    default = interp.else_value()
    return ArrayValue(mapping, 0 if default is None else _byte(default))


def _decode_map(
    model: z3.ModelRef, expr: z3.ExprRef, mapping: dict[int, int]
) -> ArrayValue:
    logger.warning("don't know how to handle array map in model: %s", expr)
    return _decode_unparseable(model, expr, mapping)


def _decode_unparseable(
    model: z3.ModelRef, expr: z3.ExprRef, mapping: dict[int, int]
) -> ArrayValue:
    # There might be no memory at all, or the memory might not matter. If it
    # does, the model is spurious and the caller has to find that out.
    logger.warning(
        "couldn't parse array model; the result may be spurious: %s", expr
    )
    return ArrayValue({}, 0)


DECODERS: dict[
    ArrayShape, Callable[[z3.ModelRef, z3.ExprRef, dict[int, int]], ArrayValue]
] = {
    ArrayShape.CONST: _decode_const,
    ArrayShape.AS_ARRAY: _decode_as_array,
    ArrayShape.MAP: _decode_map,
    ArrayShape.UNPARSEABLE: _decode_unparseable,
}


def _numeral(expr: Any) -> int:
    if not z3.is_bv_value(expr):
        raise ModelQueryError(f"expected a bitvector value in array model, got {expr}")
    return expr.as_long()


def _byte(expr: Any) -> int:
    value = _numeral(expr)
    if value > 0xFF:
        raise ModelQueryError(f"array value {value:#x} does not fit in a byte")
    return value
