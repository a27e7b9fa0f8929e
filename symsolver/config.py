"""Solver configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Self


@dataclass(frozen=True)
class SolverConfig:
    """Options for a Z3Solver. Diagnostic options have no effect on results."""

    # Passed to Z3 as the `timeout` parameter; a timeout yields unknown.
    timeout_ms: int | None = None

    # Evaluate decoded variables with model completion, so that variables Z3
    # left unconstrained still receive a value.
    model_completion: bool = True

    # Write every query to `dump_dir` as an SMT-LIB file.
    dump_smtlib: bool = False
    dump_dir: Path = field(default_factory=lambda: Path.cwd() / ".smtlib")

    # Keep the text and digest of the most recent query on the solver.
    track_last_query: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Self:
        """Build a config from SYMSOLVE_* environment variables."""
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}
        if timeout := env.get("SYMSOLVE_TIMEOUT_MS"):
            kwargs["timeout_ms"] = int(timeout)
        if env.get("SYMSOLVE_DUMP"):
            kwargs["dump_smtlib"] = _flag(env["SYMSOLVE_DUMP"])
        if dump_dir := env.get("SYMSOLVE_DUMP_DIR"):
            kwargs["dump_dir"] = Path(dump_dir)
        if env.get("SYMSOLVE_TRACK_LAST"):
            kwargs["track_last_query"] = _flag(env["SYMSOLVE_TRACK_LAST"])
        return cls(**kwargs)  # pyright: ignore[reportArgumentType]


def _flag(value: str) -> bool:
    match value.strip().lower():
        case "1" | "true" | "yes" | "on":
            return True
        case "0" | "false" | "no" | "off" | "":
            return False
        case other:
            raise ValueError(f"invalid boolean setting: {other}")
