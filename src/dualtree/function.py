"""
###############################################
Elementary functions (:mod:`dualtree.function`)
###############################################

.. currentmodule:: dualtree.function

This module provides expressions of elementary functions.

Elementary functions
====================

.. autosummary::
    :toctree: generated/

    exp
    log
    sin
    cos
    tan

User-defined functions
======================

.. autosummary::
    :toctree: generated/

    custom

"""

from collections.abc import Callable
from typing import final

import numpy as np

from dualtree.dual import Dual
from dualtree.expr import Expr
from dualtree.term import Cached, Compose, Term


@final
class Exp(Cached):
    __slots__ = ()

    def _miss(self, point: float) -> Dual:
        with np.errstate(all="ignore"):
            result = float(np.exp(point))

        return Dual(result, result)


@final
class Log(Cached):
    __slots__ = ()

    def _miss(self, point: float) -> Dual:
        with np.errstate(all="ignore"):
            return Dual(float(np.log(point)), float(np.divide(1.0, point)))


@final
class Sin(Cached):
    __slots__ = ()

    def _miss(self, point: float) -> Dual:
        with np.errstate(all="ignore"):
            return Dual(float(np.sin(point)), float(np.cos(point)))


@final
class Cos(Cached):
    __slots__ = ()

    def _miss(self, point: float) -> Dual:
        with np.errstate(all="ignore"):
            return Dual(float(np.cos(point)), -float(np.sin(point)))


@final
class Tan(Cached):
    __slots__ = ()

    def _miss(self, point: float) -> Dual:
        with np.errstate(all="ignore"):
            result = float(np.tan(point))

        return Dual(result, 1.0 + result * result)


@final
class Custom(Cached):
    """Node of a user-defined function and its derivative."""

    __slots__ = ("fun", "deriv")
    fun: Callable[[float], float]
    deriv: Callable[[float], float]

    def __init__(self, fun: Callable[[float], float], deriv: Callable[[float], float]):
        super().__init__()
        self.fun = fun
        self.deriv = deriv

    def _miss(self, point: float) -> Dual:
        return Dual(self.fun(point), self.deriv(point))


def _apply(term: Term, arg: Expr | float | int | None) -> Expr:
    match arg:
        case None:
            return Expr(term)

        case Expr():
            return Expr(Compose(term, arg.term))

        case float() | int():
            return Expr(Compose(term, Expr(arg).term))

        case _:
            raise TypeError


def exp(arg: Expr | float | int | None = None, /) -> Expr:
    """Exponential.

    Parameters
    ----------
    arg : Expr | float | int, optional
        Argument. If omitted, the free variable is used.

    Examples
    --------
    >>> print(exp()(0.0))
    1.0 1.0
    >>> from dualtree import Expr
    >>> x = Expr()
    >>> print(exp(2 * x)(0.0))
    1.0 2.0
    """
    return _apply(Exp(), arg)


def log(arg: Expr | float | int | None = None, /) -> Expr:
    """Natural logarithm.

    The value is ``nan`` for negative arguments and ``-inf`` at zero.

    Examples
    --------
    >>> print(log()(1.0))
    0.0 1.0
    """
    return _apply(Log(), arg)


def sin(arg: Expr | float | int | None = None, /) -> Expr:
    """Sine.

    Examples
    --------
    >>> print(sin()(0.0))
    0.0 1.0
    """
    return _apply(Sin(), arg)


def cos(arg: Expr | float | int | None = None, /) -> Expr:
    """Cosine."""
    return _apply(Cos(), arg)


def tan(arg: Expr | float | int | None = None, /) -> Expr:
    """Tangent."""
    return _apply(Tan(), arg)


def custom(fun: Callable[[float], float], deriv: Callable[[float], float]) -> Expr:
    """Return the expression of the function `fun` whose derivative is `deriv`.

    Parameters
    ----------
    fun : Callable[[float], float]
        Function.
    deriv : Callable[[float], float]
        Derivative of `fun`.

    Warnings
    --------
    Consistency between `fun` and `deriv` is not verified.

    Examples
    --------
    >>> import math
    >>> f = custom(math.sin, math.cos)
    >>> print(format(f(math.pi), ".6f"))
    0.000000 -1.000000
    """
    if not callable(fun) or not callable(deriv):
        raise TypeError("fun and deriv must be callable")

    return Expr(Custom(fun, deriv))
