# pydpg.fem.reference
"""
Order-agnostic reference-element factory.
"""
from functools import lru_cache
from importlib import import_module
import numpy as np


class Ref:
    """Scalar Lagrange basis on a reference element."""
    def __init__(self, nodes, shape_lambda, deriv_lambdas):
        self.nodes = np.asarray(nodes, dtype=float)
        self.shape_lambda = shape_lambda
        self.deriv_lambdas = deriv_lambdas

    @property
    def n_basis(self) -> int:
        return len(self.nodes)

    @lru_cache(maxsize=None)
    def shape(self, xi, eta):
        return np.asarray(self.shape_lambda(xi, eta), dtype=float).ravel()

    @lru_cache(maxsize=None)
    def derivative(self, xi, eta, order_xi, order_eta):
        alpha = (order_xi, order_eta)
        if alpha not in self.deriv_lambdas:
            raise ValueError(f"Derivative order {alpha} not computed. "
                             f"Adjust max_deriv_order >= {order_xi + order_eta}.")
        return np.asarray(self.deriv_lambdas[alpha](xi, eta), dtype=float).ravel()

    @lru_cache(maxsize=None)
    def grad(self, xi, eta):
        """Reference gradients, shape (n_basis, 2) with columns (d/dξ, d/dη)."""
        return np.column_stack((self.derivative(xi, eta, 1, 0),
                                self.derivative(xi, eta, 0, 1)))

    def nodes_on_edge(self, vertices, tol=1e-12):
        """Indices of the nodes lying on the segment between two reference vertices."""
        a, b = (np.asarray(v, dtype=float) for v in vertices)
        d = b - a
        r = self.nodes - a
        cross = r[:, 0] * d[1] - r[:, 1] * d[0]
        t = r @ d / (d @ d)
        return np.flatnonzero((np.abs(cross) < tol) & (t > -tol) & (t < 1 + tol))


class RTRef:
    """Lowest-order Raviart–Thomas basis on a reference element."""
    def __init__(self, element_type):
        self.element_type = element_type
        self.shape_lambda, self.div_lambda = import_module("pydpg.fem.reference.rt0").rt0(element_type)
        self.n_basis = REFERENCE_VERTICES[element_type].shape[0]

    @lru_cache(maxsize=None)
    def shape(self, xi, eta):
        """Reference vector shapes, shape (n_basis, 2)."""
        return np.asarray(self.shape_lambda(xi, eta), dtype=float).reshape(self.n_basis, 2)

    @lru_cache(maxsize=None)
    def div(self, xi, eta):
        return np.asarray(self.div_lambda(xi, eta), dtype=float).ravel()


REFERENCE_VERTICES = {
    'tri': np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]]),
    'quad': np.array([[-1.0, -1.0], [1.0, -1.0], [1.0, 1.0], [-1.0, 1.0]]),
}


@lru_cache(maxsize=None)
def get_reference(element_type: str, poly_order: int = 1, max_deriv_order: int = 1):
    if element_type == "quad":
        nodes, shape_l, deriv_lambdas = import_module("pydpg.fem.reference.quad_qn").quad_qn(poly_order, max_deriv_order)
    elif element_type == "tri":
        nodes, shape_l, deriv_lambdas = import_module("pydpg.fem.reference.tri_pn").tri_pn(poly_order, max_deriv_order)
    else:
        raise KeyError(element_type)
    return Ref(nodes, shape_l, deriv_lambdas)


@lru_cache(maxsize=None)
def get_rt_reference(element_type: str):
    if element_type not in REFERENCE_VERTICES:
        raise KeyError(element_type)
    return RTRef(element_type)
