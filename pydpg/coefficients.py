"""pydpg.coefficients
Scalar coefficient functions of position, real or complex valued.

Coefficients are immutable once built and may be shared by any number of
integrators.
"""
import numbers

import numpy as np
import sympy as sp

from pydpg.errors import ConfigurationError


class CoefficientFunction:
    """Base class: a scalar function a(x, y)."""
    is_complex: bool = False
    is_constant: bool = False

    def evaluate(self, x):
        """Value at the physical point ``x`` (length-2 array)."""
        raise NotImplementedError

    def evaluate_const(self):
        """Value of a constant coefficient, independent of position."""
        if not self.is_constant:
            raise ValueError(f"{self!r} is not a constant coefficient.")
        return self.evaluate(np.zeros(2))

    def __setattr__(self, name, value):
        if getattr(self, "_frozen", False):
            raise AttributeError(f"{type(self).__name__} is immutable.")
        object.__setattr__(self, name, value)


class Constant(CoefficientFunction):
    is_constant = True

    def __init__(self, value):
        if isinstance(value, CoefficientFunction):
            value = value.evaluate_const()
        if np.iscomplexobj(value):
            self.value = complex(value)
            self.is_complex = True
        else:
            self.value = float(value)
            self.is_complex = False
        self._frozen = True

    def evaluate(self, x):
        return self.value

    def evaluate_const(self):
        return self.value

    def __repr__(self):
        return f"Constant({self.value})"


class Analytic(CoefficientFunction):
    """
    Wraps a SymPy expression in ``x, y`` or a callable ``f(x, y)``.
    """
    _x, _y = sp.symbols("x y")
    _coord_syms = (_x, _y)

    def __init__(self, sympy_expr, is_complex=None):
        self.sympy_expr = sympy_expr
        if callable(sympy_expr) and not isinstance(sympy_expr, sp.Basic):
            self._func = sympy_expr
            self.is_constant = False
        else:
            expr = sp.sympify(sympy_expr)
            extra = expr.free_symbols - set(self._coord_syms)
            if extra:
                raise ValueError(f"Analytic expression depends on unknown symbols {sorted(map(str, extra))}.")
            self.sympy_expr = expr
            self._func = sp.lambdify(self._coord_syms, expr, "numpy")
            self.is_constant = not expr.free_symbols
        if is_complex is None:
            if isinstance(self.sympy_expr, sp.Basic):
                is_complex = bool(self.sympy_expr.has(sp.I))
            else:
                is_complex = bool(np.iscomplexobj(self._func(0.0, 0.0)))
        self.is_complex = bool(is_complex)
        self._frozen = True

    def evaluate(self, x):
        val = self._func(float(x[0]), float(x[1]))
        return complex(val) if self.is_complex else float(np.real(val))

    def __repr__(self):
        return f"Analytic({self.sympy_expr})"


# helper to avoid typing Analytic._x all the time
x, y = Analytic._coord_syms


def as_coefficient(obj) -> CoefficientFunction:
    if isinstance(obj, CoefficientFunction):
        return obj
    if isinstance(obj, numbers.Number) or isinstance(obj, np.number):
        return Constant(obj)
    if isinstance(obj, sp.Basic):
        expr = sp.sympify(obj)
        if not expr.free_symbols:
            return Constant(complex(expr) if expr.has(sp.I) else float(expr))
        return Analytic(expr)
    if callable(obj):
        return Analytic(obj)
    raise TypeError(f"Cannot interpret {obj!r} as a coefficient function.")


def parse_coefficient(token: str, namespace=None) -> CoefficientFunction:
    """
    Turn one token of a form line into a coefficient: a name from
    ``namespace``, a numeric literal (``2``, ``-0.5``, ``1+2j``) or an
    expression in ``x, y`` (``1 + x*y``, ``sin(pi*x)``, ``2*I``).
    """
    namespace = namespace or {}
    if token in namespace:
        return as_coefficient(namespace[token])
    for conv in (float, complex):
        try:
            return Constant(conv(token))
        except ValueError:
            pass
    try:
        expr = sp.sympify(token, locals={"x": x, "y": y, "I": sp.I, "j": sp.I})
    except (sp.SympifyError, SyntaxError, TypeError) as exc:
        raise ConfigurationError(f"Cannot parse coefficient '{token}'.") from exc
    if expr.free_symbols - {x, y}:
        raise ConfigurationError(f"Coefficient '{token}' depends on undefined names "
                                 f"{sorted(str(s) for s in expr.free_symbols - {x, y})}.")
    return as_coefficient(expr)
