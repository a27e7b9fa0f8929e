"""Failures reported through the solver's error slot."""


class SolverError(Exception):
    """A query or model lookup failed."""

    pass


class TypecheckFailure(SolverError):
    """A constraint is not well-sorted."""

    pass


class LoweringFailure(SolverError):
    """A term has no translation into Z3 (unsupported construct or arity)."""

    pass


class ExternalInterrupt(SolverError):
    """The query was cancelled through the interrupt flag."""

    def __init__(self) -> None:
        """Create a new ExternalInterrupt."""
        super().__init__("External interrupt.")


class SolverIndeterminate(SolverError):
    """Z3 returned unknown."""

    pass


class SolverFault(SolverError):
    """Z3 raised an exception while solving."""

    pass


class ModelQueryError(SolverError):
    """The model holds no usable value for the requested variable."""

    pass
