"""Collection of the background axioms implied by a set of constraints."""

from __future__ import annotations

from typing import Iterable

from .theory_core import BaseTerm, CTerm
from .theory_uf import Apply


def collect_axioms(constraints: Iterable[CTerm]) -> list[CTerm]:
    """
    Gather the axioms of every function applied anywhere in the constraints.

    Axioms are walked too, so the result is closed under functions that only
    appear inside other axioms. Each axiom is returned once, in discovery
    order. Functions are told apart by identity, so two same-signature
    functions with different axioms both contribute theirs.
    """
    axioms: list[CTerm] = []
    seen: set[CTerm] = set()
    functions: set[int] = set()
    visited: set[int] = set()

    queue: list[BaseTerm] = list(constraints)
    queue.reverse()
    while queue:
        term = queue.pop()
        if id(term) in visited:
            continue
        visited.add(id(term))

        if isinstance(term, Apply) and id(term.function) not in functions:
            functions.add(id(term.function))
            for axiom in term.function.axioms:
                if axiom not in seen:
                    seen.add(axiom)
                    axioms.append(axiom)
                    queue.append(axiom)

        queue.extend(term.children())
    return axioms


def close_axioms(constraints: Iterable[CTerm]) -> list[CTerm]:
    """Return the constraints followed by any axioms they don't already include."""
    result = list(constraints)
    present = set(result)
    for axiom in collect_axioms(result):
        if axiom not in present:
            present.add(axiom)
            result.append(axiom)
    return result
