"""
#########################################
Expression builder (:mod:`dualtree.expr`)
#########################################

.. currentmodule:: dualtree.expr

.. autoclass:: Expr
    :show-inheritance:
    :members:
    :special-members: __call__
    :member-order: groupwise

"""

from typing import Self, overload

import numpy as np
import numpy.typing as npt

from dualtree.dual import Dual
from dualtree.term import (
    Add,
    Compose,
    Constant,
    ConstantPower,
    Divide,
    Multiply,
    Negate,
    Power,
    PowerConstant,
    Subtract,
    Term,
    Variable,
)


class Expr:
    """Handle on an expression tree in one free variable.

    Parameters
    ----------
    arg : float | int | Term, optional
        If `arg` is omitted, the expression is the free variable. If `arg` is a real
        number, the expression is that constant. If `arg` is a :class:`Term`, the
        expression refers to it.

    Attributes
    ----------
    term : Term
        Root node of the tree.

    Notes
    -----
    Operators never evaluate anything nor modify their operands; they create a new
    node referring to the operands' nodes. Hence, subtrees are shared between
    expressions.

    Examples
    --------
    >>> from dualtree import exp
    >>> x = Expr()
    >>> f = x * exp(x)
    >>> value, derivative = f(1.0)
    >>> print(f"{value:.6f} {derivative:.6f}")
    2.718282 5.436564

    Calling an expression with another expression composes them.

    >>> g = Expr()**2
    >>> h = g(x + 1)
    >>> print(h(2.0))
    9.0 6.0
    """

    __slots__ = ("_term",)
    _term: Term

    def __init__(self, arg: float | int | Term | None = None):
        match arg:
            case None:
                self._term = Variable()

            case Term():
                self._term = arg

            case float() | int():
                self._term = Constant(float(arg))

            case _:
                raise TypeError(f"cannot build an expression from {type(arg).__name__}")

    @classmethod
    def variable(cls) -> Self:
        """Return the free variable."""
        return cls()

    @classmethod
    def constant(cls, value: float | int) -> Self:
        """Return the constant expression `value`."""
        if not isinstance(value, float | int):
            raise TypeError

        return cls(value)

    @property
    def term(self) -> Term:
        return self._term

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._term!r})"

    def evaluate(self, point: float | int) -> Dual:
        """Return the value and the derivative at `point`.

        See Also
        --------
        __call__
        """
        if not isinstance(point, float | int):
            raise TypeError

        return self._term.evaluate(float(point))

    def compose(self, arg: Self) -> Self:
        """Return the expression `self` of `arg`.

        See Also
        --------
        __call__
        """
        if not isinstance(arg, Expr):
            raise TypeError

        return self.__class__(Compose(self._term, arg._term))

    def tabulate(
        self, points: npt.ArrayLike
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Evaluate the expression at each of `points`.

        Parameters
        ----------
        points : ArrayLike
            Evaluation points.

        Returns
        -------
        values : ndarray
            Values, with the same shape as `points`.
        derivatives : ndarray
            Derivatives, with the same shape as `points`.

        Examples
        --------
        >>> x = Expr()
        >>> values, derivatives = (x**2).tabulate([1.0, 2.0, 3.0])
        >>> values
        array([1., 4., 9.])
        >>> derivatives
        array([2., 4., 6.])
        """
        points = np.asarray(points, dtype=np.float64)
        values = np.empty_like(points)
        derivatives = np.empty_like(points)

        for index, point in np.ndenumerate(points):
            result = self._term.evaluate(float(point))
            values[index] = result.value
            derivatives[index] = result.derivative

        return values, derivatives

    @overload
    def __call__(self, arg: float | int) -> Dual: ...

    @overload
    def __call__(self, arg: Self) -> Self: ...

    def __call__(self, arg):
        """Evaluate at `arg` if it is a number, or compose with `arg` if it is an
        expression."""
        if isinstance(arg, Expr):
            return self.compose(arg)

        return self.evaluate(arg)

    def __pos__(self) -> Self:
        return self

    def __neg__(self) -> Self:
        return self.__class__(Negate(self._term))

    def __add__(self, rhs: Self | float | int) -> Self:
        if (rhs := self._lift(rhs)) is NotImplemented:
            return NotImplemented

        return self.__class__(Add(self._term, rhs._term))

    def __sub__(self, rhs: Self | float | int) -> Self:
        if (rhs := self._lift(rhs)) is NotImplemented:
            return NotImplemented

        return self.__class__(Subtract(self._term, rhs._term))

    def __mul__(self, rhs: Self | float | int) -> Self:
        if (rhs := self._lift(rhs)) is NotImplemented:
            return NotImplemented

        return self.__class__(Multiply(self._term, rhs._term))

    def __truediv__(self, rhs: Self | float | int) -> Self:
        if (rhs := self._lift(rhs)) is NotImplemented:
            return NotImplemented

        return self.__class__(Divide(self._term, rhs._term))

    def __pow__(self, rhs: Self | float | int) -> Self:
        if isinstance(rhs, Expr):
            return self.__class__(Power(self._term, rhs._term))

        if not isinstance(rhs, float | int):
            return NotImplemented

        return self.__class__(PowerConstant(self._term, float(rhs)))

    def __radd__(self, lhs: float | int) -> Self:
        if (lhs := self._lift(lhs)) is NotImplemented:
            return NotImplemented

        return lhs.__add__(self)

    def __rsub__(self, lhs: float | int) -> Self:
        if (lhs := self._lift(lhs)) is NotImplemented:
            return NotImplemented

        return lhs.__sub__(self)

    def __rmul__(self, lhs: float | int) -> Self:
        if (lhs := self._lift(lhs)) is NotImplemented:
            return NotImplemented

        return lhs.__mul__(self)

    def __rtruediv__(self, lhs: float | int) -> Self:
        if (lhs := self._lift(lhs)) is NotImplemented:
            return NotImplemented

        return lhs.__truediv__(self)

    def __rpow__(self, lhs: float | int) -> Self:
        if not isinstance(lhs, float | int):
            return NotImplemented

        return self.__class__(ConstantPower(float(lhs), self._term))

    def _lift(self, value):
        if isinstance(value, Expr):
            return value

        if isinstance(value, float | int):
            return self.__class__(value)

        return NotImplemented
