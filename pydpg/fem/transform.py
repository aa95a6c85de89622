"""pydpg.fem.transform
Reference → physical mapping for isoparametric elements.

Convention: ``jacobian`` returns F with F[b, a] = ∂x_b/∂ξ_a, so physical
gradients of scalar shapes are ``dN_ref @ inv(F)`` and Piola-mapped vector
shapes are ``psi_ref @ F.T / det(F)``.
"""
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from pydpg.fem.reference import get_reference
from pydpg.integration import quadrature


def _geometry(mesh, elem_id):
    ref = get_reference(mesh.element_type, mesh.poly_order)
    X = mesh.nodes_x_y_pos[mesh.elements_connectivity[elem_id]]
    return ref, X

def x_mapping(mesh, elem_id, xi_eta):
    ref, X = _geometry(mesh, elem_id)
    xi, eta = (float(v) for v in xi_eta)
    return ref.shape(xi, eta) @ X                       # (2,)

def jacobian(mesh, elem_id, xi_eta):
    ref, X = _geometry(mesh, elem_id)
    xi, eta = (float(v) for v in xi_eta)
    return X.T @ ref.grad(xi, eta)                      # (2,2)

def det_jacobian(mesh, elem_id, xi_eta):
    return np.linalg.det(jacobian(mesh, elem_id, xi_eta))

def inv_jac_T(mesh, elem_id, xi_eta):
    return np.linalg.inv(jacobian(mesh, elem_id, xi_eta)).T

def jacobian_1d(mesh, elem_id: int, ref_coords, local_edge_idx: int) -> float:
    """
    Ratio of physical arc length to the edge parameter dt at ``ref_coords``.
    """
    F = jacobian(mesh, elem_id, ref_coords)
    return float(np.linalg.norm(F @ quadrature.edge_tangent(mesh.element_type, local_edge_idx)))


@dataclass(slots=True)
class MappedPoint:
    """A quadrature point mapped to physical space."""
    ref: np.ndarray                    # (ξ, η)
    x: np.ndarray                      # physical coordinates
    jacobian: np.ndarray               # F = ∂x/∂ξ
    det: float
    inv: np.ndarray                    # F^{-1}
    weight: float = 1.0                # quadrature weight × measure (area or arc length)
    normal: Optional[np.ndarray] = None   # outward unit normal (facet points only)
    facet: Optional[int] = None           # local facet index (facet points only)


class ElementTransformation:
    """Geometric transformation of one volume element."""
    dim_element = 2
    dim_space = 2

    def __init__(self, mesh, elem_id: int):
        if not 0 <= int(elem_id) < len(mesh.elements_list):
            raise IndexError(f"Element ID {elem_id} out of range.")
        self.mesh = mesh
        self.elem_id = int(elem_id)
        self.element = mesh.elements_list[self.elem_id]
        self.element_type = mesh.element_type
        self._geo, self.coords = _geometry(mesh, self.elem_id)

    @property
    def n_facets(self) -> int:
        return quadrature.n_edges(self.element_type)

    def map(self, xi_eta, *, weight: float = 1.0, normal=None, facet=None) -> MappedPoint:
        xi, eta = (float(v) for v in xi_eta)
        F = self.coords.T @ self._geo.grad(xi, eta)
        det = float(np.linalg.det(F))
        if det <= 0.0:
            raise ValueError(f"Non-positive Jacobian determinant {det} in element {self.elem_id}; "
                             "elements must be oriented counter-clockwise.")
        return MappedPoint(ref=np.array([xi, eta]), x=self._geo.shape(xi, eta) @ self.coords,
                           jacobian=F, det=det, inv=np.linalg.inv(F),
                           weight=weight, normal=normal, facet=facet)

    def volume_points(self, order: int) -> List[MappedPoint]:
        pts, wts = quadrature.volume(self.element_type, order)
        out = []
        for xi_eta, w in zip(pts, wts):
            mip = self.map(xi_eta)
            mip.weight = w * mip.det
            out.append(mip)
        return out

    def facet_points(self, local_facet: int, order: int) -> List[MappedPoint]:
        """Points on a local facet; weights carry the arc length, normals point outward."""
        pts, wts = quadrature.edge(self.element_type, local_facet, order)
        t_ref = quadrature.edge_tangent(self.element_type, local_facet)
        out = []
        for xi_eta, w in zip(pts, wts):
            mip = self.map(xi_eta, facet=local_facet)
            t = mip.jacobian @ t_ref
            ds = float(np.linalg.norm(t))
            mip.weight = w * ds
            mip.normal = np.array([t[1], -t[0]]) / ds
            out.append(mip)
        return out

    def boundary_facets(self) -> List[int]:
        """Local indices of the facets lying on the global boundary."""
        return [k for k, gid in enumerate(self.element.edges) if self.mesh.is_boundary_edge(gid)]

    def orientation(self, local_facet: int) -> float:
        return self.mesh.edge_orientation(self.elem_id, local_facet)

    def __repr__(self):
        return f"<ElementTransformation elem={self.elem_id} type='{self.element_type}'>"


class FacetTransformation:
    """
    A surface element on the global boundary, represented through the volume
    element it bounds and its local facet index there.
    """
    dim_element = 1
    dim_space = 2

    def __init__(self, mesh, edge_id: int):
        edge = mesh.edge(edge_id)
        if edge.right is not None:
            raise ValueError(f"Edge {edge_id} is an interior edge, not a boundary facet.")
        self.mesh = mesh
        self.edge_id = int(edge_id)
        self.edge = edge
        self.volume = ElementTransformation(mesh, edge.left)
        self.local_facet = edge.lid
        self.element_type = mesh.element_type

    def facet_points(self, order: int) -> List[MappedPoint]:
        return self.volume.facet_points(self.local_facet, order)

    def __repr__(self):
        return f"<FacetTransformation edge={self.edge_id} elem={self.volume.elem_id} facet={self.local_facet}>"
