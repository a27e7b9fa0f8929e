"""Splitting of top-level conjunctions into atomic constraints."""

from __future__ import annotations

from typing import Iterable

from .theory_core import And, CTerm


def split_constraints(constraints: Iterable[CTerm]) -> list[CTerm]:
    """
    Split top-level ANDs into a flat list of constraints.

    No element of the result is an And. Nested conjunctions are expanded in
    place, left operand first, so the output order is deterministic.
    """
    split: list[CTerm] = []
    stack = list(constraints)
    stack.reverse()
    while stack:
        constraint = stack.pop()
        match constraint:
            case And(left, right):
                stack.append(right)
                stack.append(left)
            case _:
                split.append(constraint)
    return split
