"""pydpg.integrators.source
Boundary source integrator for compound spaces.

``NeumannVolume`` integrates ``(G·n + g) e ds`` over the global boundary,
where ``e`` belongs to one component of the compound space.  It works on
*volume* elements, evaluating the component's volume basis at the quadrature
points of the element facets that lie on the global boundary, so the space
needs no surface elements (L2 is fine).

``g`` and ``G`` are volume coefficients evaluated at the physical facet
points.  Only constant coefficients are guaranteed to give the intended
boundary data; non-constant ones are accepted with a warning unless
``strict_boundary_coefficients`` is set.
"""
import logging
from typing import Optional

import numpy as np

from pydpg.coefficients import as_coefficient
from pydpg.errors import ConfigurationError, UnsupportedCoefficientError, UnsupportedSpaceError
from pydpg.fem.transform import ElementTransformation
from pydpg.integrators.base import IntegratorEvent, emit, resolve_component
from pydpg.integrators.pairing import resolve_dtype

logger = logging.getLogger(__name__)


class NeumannVolume:
    name = "NeumannVolume"
    boundary_form = False
    vb = "vol"
    dim_space = 2
    dim_element = 2

    def __init__(self, index, g, Gx, Gy, Gz=None, *, quad_order: Optional[int] = None,
                 strict_boundary_coefficients: bool = False):
        self.indx = resolve_component(index)
        self.g = as_coefficient(g)
        self.G = tuple(as_coefficient(c) for c in (Gx, Gy, Gz) if c is not None)
        if len(self.G) != self.dim_space:
            raise ConfigurationError(f"{self.name} got {len(self.G)} flux components in "
                                     f"{self.dim_space} space dimensions.")
        self.quad_order = quad_order
        self.strict_boundary_coefficients = strict_boundary_coefficients
        coeffs = (self.g,) + self.G
        varying = [c for c in coeffs if not c.is_constant]
        if varying:
            if strict_boundary_coefficients:
                raise UnsupportedCoefficientError(
                    f"{self.name} needs constant coefficients, got {varying!r}.")
            logger.warning("%s evaluates volume coefficients %r at boundary facet points; "
                           "only constant coefficients are guaranteed.", self.name, varying)
        self.is_complex = any(c.is_complex for c in coeffs)
        self.event = emit(IntegratorEvent(self.name, (self.indx + 1,), form="linear",
                                          is_complex=self.is_complex,
                                          details={"n_flux_components": len(self.G)}))

    def get_index(self) -> int:
        return self.indx

    def __repr__(self):
        return f"NeumannVolume({self.indx + 1}, {self.g!r}, {', '.join(map(repr, self.G))})"

    def calc_element_vector(self, space, trafo, *, dtype=None, out=None) -> np.ndarray:
        """Compound local load vector of one volume element."""
        if not isinstance(trafo, ElementTransformation):
            raise TypeError(f"{self.name} integrates over volume elements; got {type(trafo).__name__}.")
        if out is not None and dtype is None:
            dtype = out.dtype
        dtype = resolve_dtype(dtype, self.is_complex)
        if out is None:
            out = np.zeros(space.ndof, dtype=dtype)
        else:
            if out.shape != (space.ndof,):
                raise ValueError(f"Element vector buffer has shape {out.shape}, expected {(space.ndof,)}.")
            resolve_dtype(out.dtype, self.is_complex)
            out[...] = 0

        e_space = space.component(self.indx)
        if e_space.is_vector:
            raise UnsupportedSpaceError(f"{self.name} needs a scalar component, got {type(e_space).__name__}.")
        order = self.quad_order or e_space.order + 2
        rows = space.ranges[self.indx]
        for k in trafo.boundary_facets():
            for mip in trafo.facet_points(k, order):
                flux = sum(Gi.evaluate(mip.x) * ni for Gi, ni in zip(self.G, mip.normal))
                val = flux + self.g.evaluate(mip.x)
                out[rows] += (mip.weight * val) * e_space.shape(trafo, mip)
        return out

    def calc_element_vector_real(self, space, trafo, out=None):
        return self.calc_element_vector(space, trafo, dtype=np.float64, out=out)

    def calc_element_vector_complex(self, space, trafo, out=None):
        return self.calc_element_vector(space, trafo, dtype=np.complex128, out=out)
