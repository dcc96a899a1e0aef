import math

import pytest

from dualtree import Dual, Expr, localcontext
from dualtree import function as dtf
from dualtree.term import (
    Add,
    Compose,
    Constant,
    ConstantPower,
    Negate,
    Power,
    PowerConstant,
    Variable,
)


def test_construction():
    x = Expr()
    assert x.term is Variable()
    assert Expr.variable().term is x.term
    assert isinstance(Expr(2.5).term, Constant)
    assert Expr(2.5)(7.0) == Dual(2.5, 0.0)
    assert Expr.constant(3)(1.0) == Dual(3.0, 0.0)

    with pytest.raises(TypeError):
        Expr("x")  # type: ignore

    with pytest.raises(TypeError):
        Expr.constant(None)  # type: ignore


def test_operator_nodes():
    x = Expr()
    assert +x is x
    assert isinstance((-x).term, Negate)

    y = x + 1
    assert isinstance(y.term, Add)
    assert y.term.lhs is x.term

    z = x**x
    assert isinstance(z.term, Power)
    assert z.term.base is z.term.exponent is Variable()

    assert isinstance((x**2).term, PowerConstant)
    assert isinstance((2**x).term, ConstantPower)
    assert isinstance(x(y).term, Compose)
    assert x.compose(y).term.inner is y.term


def test_invalid_operands():
    x = Expr()

    with pytest.raises(TypeError):
        x + "1"  # type: ignore

    with pytest.raises(TypeError):
        x ** [2]  # type: ignore

    with pytest.raises(TypeError):
        x("1")  # type: ignore

    with pytest.raises(TypeError):
        x.compose(1.0)  # type: ignore


def test_reflected():
    x = Expr()
    assert (3 + x)(1.0) == Dual(4.0, 1.0)
    assert (1 - x)(3.0) == Dual(-2.0, -1.0)
    assert (2 * x)(3.0) == Dual(6.0, 2.0)
    assert (x - 1.5)(3.0) == Dual(1.5, 1.0)


def test_product_rule():
    x = Expr()
    r = (x * dtf.exp(x))(1.0)
    assert pytest.approx(r.value, 1e-9) == math.e
    assert pytest.approx(r.derivative, 1e-9) == 2 * math.e


def test_power_rule():
    x = Expr()
    r = (x**x)(2.0)
    assert r.value == 4.0
    assert pytest.approx(r.derivative, 1e-9) == 4.0 * (math.log(2.0) + 1.0)
    assert pytest.approx(r.derivative, 1e-4) == 6.7726


def test_constant_base_with_exponential():
    x = Expr()
    c = Expr(5.0)
    b = (2 * c) ** dtf.exp(x)
    e = math.exp(-0.5)
    r = 10.0**e
    value, derivative = b(-0.5)
    assert pytest.approx(value, 1e-12) == r
    assert pytest.approx(derivative, 1e-12) == r * (e * math.log(10.0))


def test_rebinding():
    y = Expr()
    exp_y = dtf.exp(y)
    assert pytest.approx(tuple(exp_y(1.0)), 1e-12) == (math.e, math.e)

    y = -(y**2)
    assert y(1.0) == Dual(-1.0, -2.0)


def test_sharing():
    x = Expr()

    f = x * x + x
    assert f(3.0) == Dual(12.0, 7.0)

    g = (x + 1) * (x - 1)
    assert g(2.0) == Dual(3.0, 4.0)

    h = dtf.sin(x * x)
    r = h(1.5)
    assert pytest.approx(r.value, 1e-12) == math.sin(2.25)
    assert pytest.approx(r.derivative, 1e-12) == math.cos(2.25) * 3.0

    p = 2.0
    s = dtf.sin(x) ** dtf.cos(x)
    r = s(p)
    expected = math.sin(p) ** math.cos(p)
    assert pytest.approx(r.value, 1e-12) == expected
    tmp = -math.sin(p) * math.log(math.sin(p)) + math.cos(p) ** 2 / math.sin(p)
    assert pytest.approx(r.derivative, 1e-12) == expected * tmp


def test_exponential_product():
    x = Expr()
    d = x * dtf.exp(x)
    r = d(3.5)
    assert pytest.approx(r.value, 1e-12) == 3.5 * math.exp(3.5)
    assert pytest.approx(r.derivative, 1e-12) == 4.5 * math.exp(3.5)


def test_division_rules():
    x = Expr()
    assert (x / 2)(1.0) == Dual(2.0, 2.0)

    with localcontext(rules="STANDARD"):
        assert (x / (x + 1))(1.0) == Dual(0.5, 0.25)
        r = (2**x)(3.0)
        assert pytest.approx(r.derivative, 1e-12) == 8.0 * math.log(2.0)

    assert (2**x)(3.0) == Dual(8.0, 8.0)


def test_integer_point():
    x = Expr()
    assert (2**x)(-1) == Dual(0.5, 0.5)
    assert (x**-1)(2) == Dual(0.5, -0.25)


def test_ieee():
    x = Expr()

    r = dtf.log(x)(-1.0)
    assert math.isnan(r.value)

    r = dtf.log(x)(0.0)
    assert r.value == -math.inf
    assert r.derivative == math.inf

    r = dtf.exp(x)(1000.0)
    assert r == Dual(math.inf, math.inf)

    assert math.isnan((x**0.5)(-1.0).value)


def test_memoization():
    calls = []

    def fun(point):
        calls.append(point)
        return point * point

    x = Expr()
    f = dtf.custom(fun, lambda point: 2.0 * point)
    g = f + f * x
    assert g(2.0) == Dual(12.0, 16.0)
    assert g(2.0) == Dual(12.0, 16.0)
    assert calls == [2.0]

    g(3.0)
    assert calls == [2.0, 3.0]


def test_tabulate():
    x = Expr()
    values, derivatives = (x**2).tabulate([[1.0, 2.0], [3.0, 4.0]])
    assert values.shape == (2, 2)
    assert values.tolist() == [[1.0, 4.0], [9.0, 16.0]]
    assert derivatives.tolist() == [[2.0, 4.0], [6.0, 8.0]]
