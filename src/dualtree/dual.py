"""
##################################
Dual values (:mod:`dualtree.dual`)
##################################

.. currentmodule:: dualtree.dual

This module provides the value/derivative pair propagated through expression trees
and the context selecting its differentiation rules.

Dual value
==========

.. autosummary::
    :toctree: generated/

    Dual

Context
=======

.. autosummary::
    :toctree: generated/

    Context
    getcontext
    localcontext
    setcontext

"""

import contextlib
import contextvars
import dataclasses
import logging
from collections.abc import Iterator
from typing import Literal, Self, TypeAlias

import numpy as np

_logger = logging.getLogger(__name__)

Rules: TypeAlias = Literal["LEGACY", "STANDARD"]


class Context:
    r"""Create a new context.

    Parameters
    ----------
    rules : Literal["LEGACY", "STANDARD"], default="LEGACY"
        Differentiation rules. If `rules` is ``"LEGACY"``, division of duals follows
        the product rule and a power with a constant base :math:`k` omits the factor
        :math:`\ln k`. If `rules` is ``"STANDARD"``, the quotient rule and the
        complete exponential rule are applied.

    Warnings
    --------
    The ``"LEGACY"`` rules are not mathematically correct derivatives for division
    and constant-base powers. They are kept as the default so that existing results
    are reproduced exactly.
    """

    __slots__ = ("_rules",)
    _rules: Rules

    def __init__(self, rules: Rules = "LEGACY"):
        if rules not in ("LEGACY", "STANDARD"):
            raise ValueError(f"unknown rules: {rules!r}")

        self._rules = rules

    @property
    def rules(self) -> Rules:
        return self._rules

    def copy(self) -> Self:
        return self.__class__(self._rules)

    def __str__(self):
        return f"{type(self).__name__}({self._rules!r})"

    def __copy__(self) -> Self:
        return self.copy()


_var: contextvars.ContextVar[Context] = contextvars.ContextVar("dualtree")


def getcontext() -> Context:
    """Return the current context for the active thread."""
    if context := _var.get(None):
        return context

    context = Context()
    _var.set(context)
    return context


def setcontext(ctx: Context) -> None:
    """Set the current context for the active thread to `ctx`."""
    if not isinstance(ctx, Context):
        raise TypeError

    _logger.debug("switching to %s", ctx)
    _var.set(ctx)


@contextlib.contextmanager
def localcontext(ctx: Context | None = None, *, rules: Rules | None = None):
    """Return a context manager that will set the current context for the active thread
    to a copy of `ctx` on entry to the with-statement and restore the previous context
    when exiting the with-statement.

    Examples
    --------
    >>> a = Dual(6.0, 1.0)
    >>> b = Dual(2.0, 0.0)
    >>> with localcontext(rules="STANDARD"):
    ...     print(a / b)
    3.0 0.5
    """
    if ctx is None:
        ctx = getcontext()

    if rules is None:
        rules = ctx._rules

    ctx = Context(rules)
    _logger.debug("entering %s", ctx)
    token = _var.set(ctx)

    try:
        yield ctx
    finally:
        _var.reset(token)


def _divide(x: float, y: float) -> float:
    with np.errstate(all="ignore"):
        return float(np.divide(np.float64(x), y))


def _power(x: float, y: float) -> float:
    with np.errstate(all="ignore"):
        return float(np.power(np.float64(x), y))


def _log(x: float) -> float:
    with np.errstate(all="ignore"):
        return float(np.log(np.float64(x)))


@dataclasses.dataclass(frozen=True, slots=True)
class Dual:
    r"""First-order Taylor expansion of a scalar function at a point.

    Parameters
    ----------
    value : float
        Value :math:`f(p)`.
    derivative : float, default=0.0
        Derivative :math:`f'(p)`.

    Notes
    -----
    Every operation returns a new instance. Domain violations never raise; they
    yield ``nan`` or ``inf`` according to IEEE 754.

    Examples
    --------
    >>> a = Dual(2.0, 1.0)
    >>> print(a * a)
    4.0 4.0
    >>> value, derivative = a**3
    >>> value, derivative
    (8.0, 12.0)
    """

    value: float
    derivative: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.value
        yield self.derivative

    def __str__(self) -> str:
        return f"{self.value} {self.derivative}"

    def __format__(self, format_spec: str) -> str:
        if not format_spec:
            return str(self)

        return f"{self.value:{format_spec}} {self.derivative:{format_spec}}"

    def __neg__(self) -> Self:
        return self.__class__(-self.value, -self.derivative)

    def __pos__(self) -> Self:
        return self

    def __add__(self, rhs: Self | float | int) -> Self:
        if isinstance(rhs, int | float):
            rhs = self.__class__(rhs)

        if not isinstance(rhs, Dual):
            return NotImplemented

        return self.__class__(self.value + rhs.value, self.derivative + rhs.derivative)

    def __sub__(self, rhs: Self | float | int) -> Self:
        if isinstance(rhs, int | float):
            rhs = self.__class__(rhs)

        if not isinstance(rhs, Dual):
            return NotImplemented

        return self.__class__(self.value - rhs.value, self.derivative - rhs.derivative)

    def __mul__(self, rhs: Self | float | int) -> Self:
        if isinstance(rhs, int | float):
            rhs = self.__class__(rhs)

        if not isinstance(rhs, Dual):
            return NotImplemented

        derivative = self.derivative * rhs.value + rhs.derivative * self.value
        return self.__class__(self.value * rhs.value, derivative)

    def __truediv__(self, rhs: Self | float | int) -> Self:
        if isinstance(rhs, int | float):
            rhs = self.__class__(rhs)

        if not isinstance(rhs, Dual):
            return NotImplemented

        if getcontext().rules == "LEGACY":
            derivative = self.derivative * rhs.value + rhs.derivative * self.value
            return self.__class__(self.value * rhs.value, derivative)

        s = rhs.value * rhs.value
        numerator = self.derivative * rhs.value - self.value * rhs.derivative
        return self.__class__(_divide(self.value, rhs.value), _divide(numerator, s))

    def __pow__(self, rhs: Self | float | int) -> Self:
        if isinstance(rhs, Dual):
            result = _power(self.value, rhs.value)
            tmp = rhs.derivative * _log(self.value)
            tmp += _divide(self.derivative * rhs.value, self.value)
            return self.__class__(result, result * tmp)

        if not isinstance(rhs, int | float):
            return NotImplemented

        result = _power(self.value, rhs - 1.0)
        return self.__class__(result * self.value, rhs * result * self.derivative)

    def __radd__(self, lhs: float | int) -> Self:
        if not isinstance(lhs, int | float):
            return NotImplemented

        return self.__class__(lhs).__add__(self)

    def __rsub__(self, lhs: float | int) -> Self:
        if not isinstance(lhs, int | float):
            return NotImplemented

        return self.__class__(lhs).__sub__(self)

    def __rmul__(self, lhs: float | int) -> Self:
        if not isinstance(lhs, int | float):
            return NotImplemented

        return self.__class__(lhs).__mul__(self)

    def __rtruediv__(self, lhs: float | int) -> Self:
        if not isinstance(lhs, int | float):
            return NotImplemented

        return self.__class__(lhs).__truediv__(self)

    def __rpow__(self, lhs: float | int) -> Self:
        if not isinstance(lhs, int | float):
            return NotImplemented

        return self.__class__(lhs).__pow__(self)
