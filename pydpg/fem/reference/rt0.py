"""pydpg.fem.reference.rt0
Lowest-order Raviart–Thomas shapes on the reference elements.

Basis function k belongs to local edge k and carries unit outward flux
through that edge and zero normal component on every other edge.
Local edges follow the mesh edge table:

* tri  (0,0)-(1,0)-(0,1):  0 bottom, 1 hypotenuse, 2 left
* quad [-1,1]^2:           0 bottom, 1 right, 2 top, 3 left
"""
from functools import lru_cache
import sympy as sp

xi, eta = sp.symbols('xi eta')

_SHAPES = {
    # psi_k = x - (vertex opposite edge k); the reference triangle has area 1/2
    'tri': sp.Matrix([[xi, eta - 1],
                      [xi, eta],
                      [xi - 1, eta]]),
    'quad': sp.Matrix([[0, (eta - 1) / 4],
                       [(xi + 1) / 4, 0],
                       [0, (eta + 1) / 4],
                       [(xi - 1) / 4, 0]]),
}


@lru_cache(maxsize=None)
def rt0(element_type: str):
    """Return ``(shape, div)`` callables; ``shape(xi, eta) -> (n, 2)``, ``div(xi, eta) -> (n,)``."""
    try:
        N_sym = _SHAPES[element_type]
    except KeyError:
        raise KeyError(element_type) from None
    div_sym = sp.Matrix([sp.diff(N_sym[k, 0], xi) + sp.diff(N_sym[k, 1], eta)
                         for k in range(N_sym.rows)])
    shape = sp.lambdify((xi, eta), N_sym, 'numpy')
    div = sp.lambdify((xi, eta), div_sym, 'numpy')
    return shape, div
