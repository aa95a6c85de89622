from .quadrature import (gauss_legendre, volume, edge, edge_tangent, n_edges,
                         line_quadrature)

__all__ = ["gauss_legendre", "volume", "edge", "edge_tangent", "n_edges", "line_quadrature"]
