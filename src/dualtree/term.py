"""
#######################################
Expression nodes (:mod:`dualtree.term`)
#######################################

.. currentmodule:: dualtree.term

This module provides the nodes of expression trees. Users usually build trees through
:class:`dualtree.Expr` rather than instantiating nodes directly.

Base classes
============

.. autosummary::
    :toctree: generated/

    Term
    Cached

Terminal nodes
==============

.. autosummary::
    :toctree: generated/

    Constant
    Variable

Combinators
===========

.. autosummary::
    :toctree: generated/

    Negate
    Add
    Subtract
    Multiply
    Divide
    Compose
    Power
    PowerConstant
    ConstantPower

"""

import logging
import math
from abc import ABC, abstractmethod
from typing import ClassVar, Self, final

import numpy as np

from dualtree.dual import Dual, Rules, getcontext

_logger = logging.getLogger(__name__)


class Term(ABC):
    """Abstract base class for nodes of expression trees."""

    __slots__ = ()

    @abstractmethod
    def evaluate(self, point: float) -> Dual:
        """Return the value and the derivative at `point`."""
        raise NotImplementedError


class Cached(Term):
    """Abstract base class for nodes remembering their most recent evaluation.

    Subclasses implement :meth:`_miss`, which is only called when `point` (or the
    rules of the current context) differs from the previous call.

    Warnings
    --------
    The cache is not synchronized. Evaluating a node shared between trees from
    several threads at the same time is undefined behaviour.

    Notes
    -----
    Points are compared with ``!=``. Since the initial point is ``nan``, the first
    call always misses, and so does every call at ``nan``.
    """

    __slots__ = ("_point", "_rules", "_cache")
    _point: float
    _rules: Rules | None
    _cache: Dual

    def __init__(self):
        self._point = math.nan
        self._rules = None
        self._cache = Dual(math.nan, math.nan)

    @abstractmethod
    def _miss(self, point: float) -> Dual:
        raise NotImplementedError

    @final
    def evaluate(self, point: float) -> Dual:
        rules = getcontext().rules

        if point != self._point or rules != self._rules:
            _logger.debug("%s: cache miss at %r", type(self).__name__, point)
            self._cache = self._miss(point)
            self._point = point
            self._rules = rules

        return self._cache


@final
class Constant(Term):
    """Node evaluating to `value` with zero derivative everywhere."""

    __slots__ = ("value",)
    value: float

    def __init__(self, value: float):
        self.value = value

    def evaluate(self, point: float) -> Dual:
        return Dual(self.value, 0.0)


@final
class Variable(Term):
    """The free variable.

    There is exactly one instance per process, so ``Variable() is Variable()``.
    """

    __slots__ = ()
    _instance: ClassVar["Variable | None"] = None

    def __new__(cls) -> Self:
        if cls._instance is None:
            _logger.debug("creating the free variable")
            cls._instance = super().__new__(cls)

        return cls._instance

    def evaluate(self, point: float) -> Dual:
        return Dual(point, 1.0)


class Unary(Cached):
    __slots__ = ("operand",)
    operand: Term

    def __init__(self, operand: Term):
        super().__init__()
        self.operand = operand


class Binary(Cached):
    __slots__ = ("lhs", "rhs")
    lhs: Term
    rhs: Term

    def __init__(self, lhs: Term, rhs: Term):
        super().__init__()
        self.lhs = lhs
        self.rhs = rhs


@final
class Negate(Unary):
    __slots__ = ()

    def _miss(self, point: float) -> Dual:
        return -self.operand.evaluate(point)


@final
class Add(Binary):
    __slots__ = ()

    def _miss(self, point: float) -> Dual:
        return self.lhs.evaluate(point) + self.rhs.evaluate(point)


@final
class Subtract(Binary):
    __slots__ = ()

    def _miss(self, point: float) -> Dual:
        return self.lhs.evaluate(point) - self.rhs.evaluate(point)


@final
class Multiply(Binary):
    __slots__ = ()

    def _miss(self, point: float) -> Dual:
        return self.lhs.evaluate(point) * self.rhs.evaluate(point)


@final
class Divide(Binary):
    """Quotient of two nodes.

    See Also
    --------
    dualtree.dual.Context
    """

    __slots__ = ()

    def _miss(self, point: float) -> Dual:
        return self.lhs.evaluate(point) / self.rhs.evaluate(point)


@final
class Compose(Cached):
    r"""Composition :math:`f(g(x))` of `outer` :math:`f` and `inner` :math:`g`.

    The derivative follows the chain rule :math:`f'(g(x))g'(x)`.
    """

    __slots__ = ("outer", "inner")
    outer: Term
    inner: Term

    def __init__(self, outer: Term, inner: Term):
        super().__init__()
        self.outer = outer
        self.inner = inner

    def _miss(self, point: float) -> Dual:
        inner = self.inner.evaluate(point)
        outer = self.outer.evaluate(inner.value)
        return Dual(outer.value, outer.derivative * inner.derivative)


@final
class Power(Cached):
    r""":math:`f(x)^{g(x)}` where both `base` and `exponent` are nodes."""

    __slots__ = ("base", "exponent")
    base: Term
    exponent: Term

    def __init__(self, base: Term, exponent: Term):
        super().__init__()
        self.base = base
        self.exponent = exponent

    def _miss(self, point: float) -> Dual:
        return self.base.evaluate(point) ** self.exponent.evaluate(point)


@final
class PowerConstant(Cached):
    r""":math:`f(x)^k` for a real constant :math:`k`."""

    __slots__ = ("base", "exponent")
    base: Term
    exponent: float

    def __init__(self, base: Term, exponent: float):
        super().__init__()
        self.base = base
        self.exponent = exponent

    def _miss(self, point: float) -> Dual:
        return self.base.evaluate(point) ** self.exponent


@final
class ConstantPower(Cached):
    r""":math:`k^{g(x)}` for a real constant :math:`k`.

    Under the ``"LEGACY"`` rules, the derivative is :math:`k^{g(x)}g'(x)`. Under the
    ``"STANDARD"`` rules, it is :math:`k^{g(x)}g'(x)\ln k`.
    """

    __slots__ = ("base", "exponent")
    base: float
    exponent: Term

    def __init__(self, base: float, exponent: Term):
        super().__init__()
        self.base = base
        self.exponent = exponent

    def _miss(self, point: float) -> Dual:
        exponent = self.exponent.evaluate(point)

        with np.errstate(all="ignore"):
            result = float(np.power(np.float64(self.base), exponent.value))
            derivative = result * exponent.derivative

            if getcontext().rules == "STANDARD":
                derivative *= float(np.log(self.base))

        return Dual(result, derivative)
