"""Interface to the Z3 SMT solver."""

from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable

import z3
from Crypto.Hash import keccak

from symstate import CTerm, TypeChecker, close_axioms, split_constraints

from .config import SolverConfig
from .errors import (
    ModelQueryError,
    SolverError,
    SolverFault,
    SolverIndeterminate,
    TypecheckFailure,
)
from .interrupt import Interrupt
from .lowering import ExprConverter, QueryBatch
from .model import ArrayValue, decode_array

logger = logging.getLogger(__name__)


@dataclass
class QueryStats:
    """Counters accumulated across all queries on one solver."""

    queries: int = 0
    constraints: int = 0
    typecheck_time: float = 0.0
    convert_time: float = 0.0
    solver_time: float = 0.0


class Z3Solver:
    """
    Decides symstate constraints with Z3 and decodes the resulting model.

    Each instance owns a Z3 context and must not be used from more than one
    thread at a time; only the interrupt may be set concurrently. Failures are
    not raised: `is_sat` returns False and the decode methods return None,
    leaving the reason in `failure` (and its message in `error`) until the
    next failure or the next call to `is_sat`.

    NOTE: the decode methods can't tell whether the variable they are asked
    about was ever asserted, or with which width. Passing the wrong name or
    width gives an undefined result.
    """

    _dumps = itertools.count()

    def __init__(
        self, config: SolverConfig | None = None, interrupt: Interrupt | None = None
    ) -> None:
        """Create a new Z3Solver."""
        self.config = config or SolverConfig()
        self.stop = interrupt or Interrupt()
        self.ctx = z3.Context()
        self.model: z3.ModelRef | None = None
        self.failure: SolverError | None = None
        self.stats = QueryStats()
        self.last_text: str | None = None
        self.last_hash: str | None = None

    @property
    def error(self) -> str:
        """Describe the most recent failure, if any."""
        return "" if self.failure is None else str(self.failure)

    def has_error(self) -> bool:
        """Check whether a failure has been recorded since the last query."""
        return self.failure is not None

    def interrupt(self) -> None:
        """Ask in-progress and future queries to stop at the next opportunity."""
        self.stop.set()

    def is_sat(self, constraints: Iterable[CTerm]) -> bool:
        """
        Check whether the conjunction of the constraints is satisfiable.

        Returns True and retains the model if sat. Returns False if unsat, or
        if the query failed (see `failure`).
        """
        self.failure = None
        self.model = None
        self.stats.queries += 1

        try:
            session = self._assert_all(list(constraints))
            return self._solve(session)
        except SolverError as e:
            logger.debug("query failed: %s", e)
            self.failure = e
            return False

    def _assert_all(self, constraints: list[CTerm]) -> z3.Solver:
        session = z3.Solver(ctx=self.ctx)
        if self.config.timeout_ms is not None:
            session.set("timeout", self.config.timeout_ms)

        batch = QueryBatch(split_constraints(close_axioms(constraints)))
        tc = TypeChecker()
        converter = ExprConverter(self.ctx, batch)

        while batch.pending:
            self.stop.check()
            for constraint in batch.pending:
                self.stop.check()
                self.stats.constraints += 1

                start = time.perf_counter()
                if not tc.check(constraint):
                    raise TypecheckFailure(
                        f"Typechecking failed for constraint: {constraint!r}\n"
                        f"error: {tc.error or '(no typechecking error message given)'}"
                    )
                checked = time.perf_counter()
                self.stats.typecheck_time += checked - start

                lowered = converter(constraint)
                self.stats.convert_time += time.perf_counter() - checked

                logger.debug("lowered %r to %s", constraint, lowered)
                batch.lowered.append(lowered)
                try:
                    session.add(lowered)
                except z3.Z3Exception as e:
                    raise SolverFault(f"Z3 encountered error: {e}") from e
            batch.advance()

        return session

    def _solve(self, session: z3.Solver) -> bool:
        self.stop.check()
        if self.config.dump_smtlib or self.config.track_last_query:
            self._record(session)

        start = time.perf_counter()
        try:
            result = session.check()
        except z3.Z3Exception as e:
            raise SolverFault(f"Z3 encountered error: {e}") from e
        finally:
            self.stats.solver_time += time.perf_counter() - start

        match result:
            case z3.unsat:
                return False
            case z3.sat:
                try:
                    self.model = session.model()
                except z3.Z3Exception as e:
                    raise SolverFault(f"Z3 encountered error: {e}") from e
                logger.debug("model: %s", self.model)
                return True
            case z3.unknown:
                raise SolverIndeterminate(f"z3 gave up: {session.reason_unknown()}")
            case _:
                raise AssertionError(f"unexpected result from z3: {result}")

    def _record(self, session: z3.Solver) -> None:
        # Diagnostics only: failures here are logged and never fail the query.
        try:
            text = session.to_smt2()
        except z3.Z3Exception as e:
            logger.warning("couldn't render query as SMT-LIB: %s", e)
            return
        digest = keccak.new(data=text.encode(), digest_bits=256).hexdigest()
        if self.config.track_last_query:
            self.last_text, self.last_hash = text, digest
        if self.config.dump_smtlib:
            path = self.config.dump_dir / f"z3-smtlib-{next(self._dumps)}-{digest[:8]}.smt2"
            try:
                self.config.dump_dir.mkdir(parents=True, exist_ok=True)
                path.write_text(text + "\n")
            except OSError as e:
                logger.warning("couldn't write query to %s: %s", path, e)
                return
            logger.info("wrote query to %s", path)

    def _eval(self, expr: Any) -> Any:
        assert self.model is not None, "solver is not ready for model evaluation"
        return self.model.eval(expr, model_completion=self.config.model_completion)

    def get_model_bv(self, name: str, bits: int) -> int | None:
        """
        Read the value of a bitvector variable from the model.

        The width must be a positive multiple of 8. The value is read in
        windows of at most 64 bits and packed little-endian.
        """
        assert self.model is not None, "solver is not ready for model evaluation"
        try:
            if bits <= 0 or bits % 8 != 0:
                raise ModelQueryError(
                    f"can't read {bits}-bit variable {name}: "
                    "width must be a positive multiple of 8"
                )
            var = z3.BitVec(name, bits, self.ctx)
            result = bytearray(bits // 8)
            for i in range((bits + 63) // 64):
                high = min(i * 64 + 63, bits - 1)
                window = self._eval(z3.Extract(high, i * 64, var))
                if not z3.is_bv_value(window):
                    raise ModelQueryError(f"Z3 returned invalid value {window} for {name}")
                octet = window.as_long()
                for k, j in enumerate(range(i * 8, (high + 1) // 8)):
                    result[j] = (octet >> (k * 8)) & 0xFF
            return int.from_bytes(result, "little")
        except ModelQueryError as e:
            self.failure = e
            return None

    def get_model_bool(self, name: str) -> bool | None:
        """Read the value of a boolean variable from the model."""
        assert self.model is not None, "solver is not ready for model evaluation"
        value = self._eval(z3.Bool(name, self.ctx))
        if z3.is_true(value):
            return True
        elif z3.is_false(value):
            return False
        self.failure = ModelQueryError(
            f"Z3 returned invalid value {value} for boolean {name}."
        )
        return None

    def get_model_array(
        self, name: str, key_bits: int, value_bits: int
    ) -> ArrayValue | None:
        """
        Read the value of an array variable from the model.

        If Z3's representation of the array can't be parsed, returns an empty
        array with a zero default and logs a warning.
        """
        assert self.model is not None, "solver is not ready for model evaluation"
        sort = z3.ArraySort(
            z3.BitVecSort(key_bits, self.ctx), z3.BitVecSort(value_bits, self.ctx)
        )
        expr = self._eval(z3.Const(name, sort))
        logger.debug("expression for array model: %s", expr)
        try:
            return decode_array(self.model, expr)
        except ModelQueryError as e:
            self.failure = e
            return None
