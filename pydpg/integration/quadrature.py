"""pydpg.integration.quadrature
Gauss rules on the reference segment, triangle and square.

``order`` is always the number of Gauss–Legendre points per direction, so a
rule of order n is exact for polynomials of degree 2n-1 in each direction.
"""
from functools import lru_cache

import numpy as np
from numpy.polynomial.legendre import leggauss


def gauss_legendre(order: int):
    """Points and weights on [-1, 1]."""
    if order < 1:
        raise ValueError(f"Quadrature order must be >= 1, got {order}.")
    return leggauss(int(order))


def _gauss_unit(order: int):
    t, w = gauss_legendre(order)
    return (t + 1.0) / 2.0, w / 2.0


@lru_cache(maxsize=None)
def quad_rule(order: int):
    """Tensor rule on [-1,1]^2, points stacked eta outer, xi inner."""
    t, w = gauss_legendre(order)
    XI, ETA = np.meshgrid(t, t)
    return np.column_stack([XI.ravel(), ETA.ravel()]), np.outer(w, w).ravel()


@lru_cache(maxsize=None)
def tri_rule(order: int):
    """Collapsed (Duffy) rule on the triangle (0,0)-(1,0)-(0,1)."""
    s, w = _gauss_unit(order)
    S, T = np.meshgrid(s, s, indexing="ij")
    W = np.outer(w, w) * (1.0 - S)
    pts = np.column_stack([S.ravel(), (T * (1.0 - S)).ravel()])
    return pts, W.ravel()


_VOLUME_RULES = {'tri': tri_rule, 'quad': quad_rule}


def volume(element_type: str, order: int = 2):
    try:
        rule = _VOLUME_RULES[element_type]
    except KeyError:
        raise KeyError(element_type) from None
    return rule(order)


# Local edge k runs counter-clockwise from reference vertex k to vertex k+1 and
# is parametrised as  (xi, eta)(t) = origin + t * tangent.
_EDGE_PARAM = {
    'tri': (((0.0, 0.0), (1.0, 0.0)),
            ((1.0, 0.0), (-1.0, 1.0)),
            ((0.0, 1.0), (0.0, -1.0))),
    'quad': (((0.0, -1.0), (1.0, 0.0)),     # bottom, t in [-1,1]
             ((1.0, 0.0), (0.0, 1.0)),      # right
             ((0.0, 1.0), (-1.0, 0.0)),     # top
             ((-1.0, 0.0), (0.0, -1.0))),   # left
}


def n_edges(element_type: str) -> int:
    return len(_EDGE_PARAM[element_type])


def edge_tangent(element_type: str, edge_index: int) -> np.ndarray:
    """dxi/dt of a local edge."""
    return np.array(_EDGE_PARAM[element_type][edge_index][1], dtype=float)


@lru_cache(maxsize=None)
def edge(element_type: str, edge_index: int, order: int = 2):
    """
    Reference points on a local edge and weights in the edge parameter t
    (t in [0,1] on triangles, [-1,1] on quads).  Physical arc length is
    ``|F @ edge_tangent| dt`` with F the element Jacobian.
    """
    if element_type not in _EDGE_PARAM:
        raise KeyError(element_type)
    if not 0 <= edge_index < n_edges(element_type):
        raise IndexError(edge_index)
    t, w = _gauss_unit(order) if element_type == 'tri' else gauss_legendre(order)
    origin, tangent = (np.asarray(v) for v in _EDGE_PARAM[element_type][edge_index])
    return origin + np.outer(t, tangent), w


def line_quadrature(p0, p1, order: int = 2):
    """Gauss rule on the physical segment p0-p1; weights carry its length."""
    p0 = np.asarray(p0, dtype=float)
    p1 = np.asarray(p1, dtype=float)
    s, w = _gauss_unit(order)
    return p0 + np.outer(s, p1 - p0), w * np.linalg.norm(p1 - p0)
