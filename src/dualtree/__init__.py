from .dual import Context, Dual, getcontext, localcontext, setcontext
from .expr import Expr
from .function import cos, custom, exp, log, sin, tan

__all__ = [
    "Context",
    "Dual",
    "Expr",
    "cos",
    "custom",
    "exp",
    "getcontext",
    "localcontext",
    "log",
    "setcontext",
    "sin",
    "tan",
]
