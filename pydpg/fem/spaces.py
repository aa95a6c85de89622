"""pydpg.fem.spaces
Component finite element spaces of a compound field.

* :class:`H1`   continuous Lagrange, dofs on the geometry nodes
* :class:`L2`   discontinuous Lagrange, dofs owned by each element
* :class:`HDiv` lowest-order Raviart–Thomas, one normal-flux dof per edge

Every space evaluates its basis at a :class:`~pydpg.fem.transform.MappedPoint`
in *physical* coordinates. Only H1 and HDiv have surface elements (a trace
representation on boundary facets); L2 is a pure volume space.
"""
from functools import lru_cache

import numpy as np

from pydpg.errors import UnsupportedSpaceError
from pydpg.fem.reference import get_reference, get_rt_reference, REFERENCE_VERTICES


# local-corner pairs of each local facet, same table as the mesh
_FACET_CORNERS = {
    'tri':  ((0, 1), (1, 2), (2, 0)),
    'quad': ((0, 1), (1, 2), (2, 3), (3, 0)),
}


class _ConstantRef:
    """Piecewise-constant basis: one function, identically 1."""
    n_basis = 1

    def shape(self, xi, eta):
        return np.array([1.0], dtype=float)

    def grad(self, xi, eta):
        return np.array([[0.0, 0.0]], dtype=float)


class _ScalarSpace:
    """Shared machinery of the nodal scalar spaces."""
    is_vector = False
    has_surface_elements = True

    def __init__(self, mesh, order: int):
        if order < 0:
            raise ValueError(f"Polynomial order must be non-negative, got {order}.")
        self.mesh = mesh
        self.order = int(order)
        if self.order == 0:
            self.ref = _ConstantRef()
        else:
            self.ref = get_reference(mesh.element_type, self.order)

    @property
    def local_ndof(self) -> int:
        return self.ref.n_basis

    def shape(self, trafo, mip) -> np.ndarray:
        """Basis values at ``mip``, shape (n,)."""
        # Ref.shape is lru-cached; hand out a private copy
        return self.ref.shape(float(mip.ref[0]), float(mip.ref[1])).copy()

    def dshape(self, trafo, mip) -> np.ndarray:
        """Physical gradients at ``mip``, shape (n, 2)."""
        return self.ref.grad(float(mip.ref[0]), float(mip.ref[1])) @ mip.inv

    def facet_dofs(self, local_facet: int) -> np.ndarray:
        return _facet_dofs(self, self.mesh.element_type, local_facet)

    def surface_dofs(self, edge_id: int) -> np.ndarray:
        """Global (component) dofs of the surface element on boundary edge ``edge_id``."""
        edge = self.mesh.edge(edge_id)
        return self.element_dofs(edge.left)[self.facet_dofs(edge.lid)]

    def __repr__(self):
        return f"{type(self).__name__}(order={self.order}, ndof={self.ndof})"


def _facet_dofs(space, element_type, local_facet):
    return _facet_dofs_cached(space.ref, element_type, int(local_facet))


@lru_cache(maxsize=None)
def _facet_dofs_cached(ref, element_type, local_facet):
    c1, c2 = _FACET_CORNERS[element_type][local_facet]
    verts = REFERENCE_VERTICES[element_type]
    return ref.nodes_on_edge((verts[c1], verts[c2]))


class H1(_ScalarSpace):
    """Continuous Lagrange space sharing the geometry nodes of the mesh."""

    def __init__(self, mesh, order: int = 1):
        if order != mesh.poly_order:
            raise NotImplementedError(
                f"H1 of order {order} on a mesh of geometry order {mesh.poly_order}: "
                "only node-based numbering (field order == geometry order) is implemented.")
        super().__init__(mesh, order)

    @property
    def ndof(self) -> int:
        return len(self.mesh.nodes_list)

    def element_dofs(self, eid: int) -> np.ndarray:
        return self.mesh.elements_connectivity[eid]


class L2(_ScalarSpace):
    """Discontinuous Lagrange space; no surface elements."""
    has_surface_elements = False

    @property
    def ndof(self) -> int:
        return self.mesh.n_elements * self.local_ndof

    def element_dofs(self, eid: int) -> np.ndarray:
        n = self.local_ndof
        return np.arange(eid * n, (eid + 1) * n)

    def facet_dofs(self, local_facet: int) -> np.ndarray:
        raise UnsupportedSpaceError("L2 spaces have no surface elements (no boundary trace).")

    def surface_dofs(self, edge_id: int) -> np.ndarray:
        raise UnsupportedSpaceError("L2 spaces have no surface elements (no boundary trace).")


class HDiv:
    """
    Lowest-order Raviart–Thomas space.  Dof ``k`` of an element is the flux
    through its local edge ``k``, measured along the edge normal of the mesh
    (outward from the edge's left element).
    """
    is_vector = True
    has_surface_elements = True
    order = 0

    def __init__(self, mesh):
        self.mesh = mesh
        self.ref = get_rt_reference(mesh.element_type)

    @property
    def local_ndof(self) -> int:
        return self.ref.n_basis

    @property
    def ndof(self) -> int:
        return len(self.mesh.edges_list)

    def _signs(self, trafo) -> np.ndarray:
        return np.array([trafo.orientation(k) for k in range(self.local_ndof)])

    def shape(self, trafo, mip) -> np.ndarray:
        """Contravariant Piola-mapped shapes, shape (n, 2)."""
        psi = self.ref.shape(float(mip.ref[0]), float(mip.ref[1]))
        return self._signs(trafo)[:, None] * (psi @ mip.jacobian.T) / mip.det

    def dshape(self, trafo, mip):
        raise UnsupportedSpaceError("Gradients of HDiv shape functions are not available.")

    def facet_dofs(self, local_facet: int) -> np.ndarray:
        if not 0 <= local_facet < self.local_ndof:
            raise IndexError(local_facet)
        return np.array([local_facet])

    def element_dofs(self, eid: int) -> np.ndarray:
        return np.asarray(self.mesh.elements_list[eid].edges, dtype=int)

    def surface_dofs(self, edge_id: int) -> np.ndarray:
        return np.array([int(edge_id)])

    def __repr__(self):
        return f"HDiv(RT0, ndof={self.ndof})"

