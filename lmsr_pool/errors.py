"""Kernel error classes.

Every failure the pricing kernel can report is a subclass of KernelError, so
callers can catch the whole family or a single condition.
"""


class KernelError(Exception):
    """Base error for pricing kernel operations."""

    pass


class DomainError(KernelError):
    """Argument outside the representable range of exp/ln."""

    pass


class NonPositiveDomain(KernelError):
    """A guarded term that must be strictly positive before ln() was <= 0."""

    pass


class ZeroLiquidity(KernelError):
    """Pool size S(q) (and therefore b) is zero."""

    pass


class InfeasibleOutput(KernelError):
    """Exact-out target is at or beyond the reachable asymptote or balance."""

    pass


class LimitNotAboveCurrent(KernelError):
    """Limit ratio must be strictly above the current pair ratio."""

    pass


class SolverDidNotConverge(KernelError):
    """Bracket-and-bisection ran out of iterations."""

    pass


class NegativeBalance(KernelError):
    """A state transition would leave a negative balance."""

    pass


class SlippageExceeded(KernelError):
    """Settlement is worse than the caller's minimum bound."""

    pass


class InvalidPoolConfig(KernelError):
    """Pool parameters are inconsistent or out of range."""

    pass


class InvalidFeeError(InvalidPoolConfig):
    """Swap fee and protocol share must be in range [0, 1)."""

    pass


class InvalidScalingFactorError(InvalidPoolConfig):
    """Scaling factor must be positive."""

    pass
