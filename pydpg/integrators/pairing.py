"""pydpg.integrators.pairing
Operator-pairing integrators on compound spaces.

Every integrator assembles

    b(u, v) = ∫ a(x) C(u) · D(v)   (+ Hermitian transpose)

with ``u`` from component ``ind1`` (trial) and ``v`` from component ``ind2``
(test) of a compound space. The pair (C, D) and the integration domain are
fixed by a :class:`Variant`; all variants share one assembly routine.

Element matrix layout
---------------------
The returned matrix is the full compound local matrix (or the compound
surface-element matrix for global-boundary variants).  The block
``B[i, j] = Σ_q w_q a(x_q) D(v_i)(x_q) · C(u_j)(x_q)`` is added at rows of
``ind2`` and columns of ``ind1``; when ``ind1 != ind2`` its conjugate
transpose is added at rows of ``ind1`` and columns of ``ind2``.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict

import numpy as np

from pydpg.coefficients import as_coefficient
from pydpg.errors import ConfigurationError, UnsupportedCoefficientError, UnsupportedSpaceError
from pydpg.fem.transform import ElementTransformation, FacetTransformation
from pydpg.integrators.base import CompoundIndexResolver, IntegratorEvent, emit

logger = logging.getLogger(__name__)


class Operator(Enum):
    EYE = "eye"        # value
    GRAD = "grad"      # physical gradient
    FLUX = "flux"      # normal component of a flux-type (HDiv) field
    TRACE = "trace"    # value restricted to a facet


class Domain(Enum):
    VOLUME = "volume"                      # element interior
    ELEMENT_BOUNDARY = "element_boundary"  # all facets of every element
    GLOBAL_BOUNDARY = "global_boundary"    # surface elements on the mesh boundary
    BOUNDARY_FACETS = "boundary_facets"    # boundary facets of a volume element


@dataclass(frozen=True)
class Variant:
    name: str
    trial: Operator     # C, applied to u
    test: Operator      # D, applied to v
    domain: Domain
    doc: str = ""

    @property
    def boundary_form(self) -> bool:
        return self.domain is Domain.GLOBAL_BOUNDARY


VARIANTS: Dict[str, Variant] = {v.name: v for v in (
    Variant("GradGrad", Operator.GRAD, Operator.GRAD, Domain.VOLUME,
            "a(x) grad u . grad v over each element"),
    Variant("EyeEye", Operator.EYE, Operator.EYE, Domain.VOLUME,
            "a(x) u . v over each element"),
    Variant("FluxTrace", Operator.FLUX, Operator.TRACE, Domain.ELEMENT_BOUNDARY,
            "d(x) q.n v on all element boundaries"),
    Variant("TraceTrace", Operator.TRACE, Operator.TRACE, Domain.ELEMENT_BOUNDARY,
            "c(x) u v on all element boundaries"),
    Variant("FluxFluxBoundary", Operator.FLUX, Operator.FLUX, Domain.GLOBAL_BOUNDARY,
            "c(x) q.n r.n over the global boundary"),
    Variant("TraceTraceBoundary", Operator.TRACE, Operator.TRACE, Domain.GLOBAL_BOUNDARY,
            "c(x) u v over the global boundary"),
    Variant("FluxTraceBoundary", Operator.FLUX, Operator.TRACE, Domain.GLOBAL_BOUNDARY,
            "c(x) q.n w over the global boundary"),
    Variant("RobinVolume", Operator.TRACE, Operator.TRACE, Domain.BOUNDARY_FACETS,
            "c(x) u v over the global boundary, volume basis evaluated on boundary facets"),
)}


def _pair(d, c):
    """Pairwise products D(v_i) · C(u_j) -> (n_v, n_u)."""
    if d.ndim == 1 and c.ndim == 1:
        return np.outer(d, c)
    if d.ndim == 2 and c.ndim == 2 and d.shape[1] == c.shape[1]:
        return d @ c.T
    raise ValueError(f"Cannot pair operator values of shapes {d.shape} and {c.shape}.")


def _degree(space) -> int:
    return space.order + (1 if space.is_vector else 0)


def resolve_dtype(dtype, is_complex: bool):
    if dtype is None:
        return np.dtype(np.complex128 if is_complex else np.float64)
    dtype = np.dtype(dtype)
    if is_complex and dtype.kind != "c":
        raise TypeError(f"A complex coefficient cannot be assembled into a {dtype} matrix.")
    return dtype


class PairingIntegrator(CompoundIndexResolver):
    """
    One operator-pairing integrator.

    Parameters
    ----------
    variant
        A :class:`Variant` or its registered name (``'GradGrad'``, ...).
    comp1, comp2
        1-based component numbers of trial and test space (constants).
    coeff
        Scalar coefficient, real or complex.
    quad_order
        Gauss points per direction; defaults to ``(p_u + p_v) // 2 + 2``.
    strict_boundary_coefficients
        ``RobinVolume`` only: reject non-constant coefficients instead of
        evaluating them at the boundary facet points.
    """
    dim_space = 2

    def __init__(self, variant, comp1, comp2, coeff, *, quad_order=None,
                 strict_boundary_coefficients: bool = False):
        if not isinstance(variant, Variant):
            try:
                variant = VARIANTS[variant]
            except KeyError:
                raise ConfigurationError(f"Unknown DPG integrator '{variant}'.") from None
        super().__init__(comp1, comp2)
        self.variant = variant
        self.coeff = as_coefficient(coeff)
        self.quad_order = quad_order
        self.strict_boundary_coefficients = strict_boundary_coefficients
        if variant.domain is Domain.BOUNDARY_FACETS and not self.coeff.is_constant:
            if strict_boundary_coefficients:
                raise UnsupportedCoefficientError(
                    f"{variant.name} needs a constant coefficient, got {self.coeff!r}.")
            logger.warning("%s evaluates the volume coefficient %r at boundary facet points; "
                           "only constant coefficients are guaranteed.", variant.name, self.coeff)
        self.event = emit(IntegratorEvent(variant.name, (self.ind1 + 1, self.ind2 + 1),
                                          is_complex=self.coeff.is_complex,
                                          details={"domain": variant.domain.value}))

    # ..................................................................
    @property
    def name(self) -> str:
        return self.variant.name

    @property
    def is_symmetric(self) -> bool:
        return not self.coeff.is_complex

    @property
    def boundary_form(self) -> bool:
        return self.variant.boundary_form

    @property
    def vb(self) -> str:
        return "bnd" if self.boundary_form else "vol"

    @property
    def dim_element(self) -> int:
        return self.dim_space - 1 if self.boundary_form else self.dim_space

    def __repr__(self):
        return f"{self.name}({self.ind1 + 1}, {self.ind2 + 1}, {self.coeff!r})"

    # ..................................................................
    def _check_trafo(self, trafo):
        if self.boundary_form:
            if not isinstance(trafo, FacetTransformation):
                raise TypeError(f"{self.name} integrates over surface elements; "
                                f"got {type(trafo).__name__}.")
        elif not isinstance(trafo, ElementTransformation):
            raise TypeError(f"{self.name} integrates over volume elements; "
                            f"got {type(trafo).__name__}.")

    def _points(self, trafo, order):
        domain = self.variant.domain
        if domain is Domain.GLOBAL_BOUNDARY:
            return trafo.facet_points(order)
        if domain is Domain.VOLUME:
            return trafo.volume_points(order)
        if domain is Domain.ELEMENT_BOUNDARY:
            facets = range(trafo.n_facets)
        else:
            facets = trafo.boundary_facets()
        return [mip for k in facets for mip in trafo.facet_points(k, order)]

    @staticmethod
    def _apply(op, space, trafo, mip):
        if op is Operator.GRAD:
            return space.dshape(trafo, mip)
        if op is Operator.FLUX:
            if not space.is_vector:
                raise UnsupportedSpaceError(
                    f"Normal flux needs a flux-type space, got {type(space).__name__}.")
            return space.shape(trafo, mip) @ mip.normal
        return space.shape(trafo, mip)

    def calc_sub_block(self, space, trafo, dtype=None) -> np.ndarray:
        """The (n_ind2 × n_ind1) block of the pairing, without symmetrization."""
        self._check_trafo(trafo)
        dtype = resolve_dtype(dtype, self.coeff.is_complex)
        u_space = space.component(self.ind1)
        v_space = space.component(self.ind2)
        order = self.quad_order or (_degree(u_space) + _degree(v_space)) // 2 + 2
        points = self._points(trafo, order)

        sel_u = sel_v = slice(None)
        vol = trafo
        if self.boundary_form:
            for s in (u_space, v_space):
                if not s.has_surface_elements:
                    raise UnsupportedSpaceError(
                        f"{self.name} needs surface elements, {type(s).__name__} has none.")
            sel_u = u_space.facet_dofs(trafo.local_facet)
            sel_v = v_space.facet_dofs(trafo.local_facet)
            vol = trafo.volume

        C, D = self.variant.trial, self.variant.test
        block = None
        for mip in points:
            cu = self._apply(C, u_space, vol, mip)[sel_u]
            dv = self._apply(D, v_space, vol, mip)[sel_v]
            contrib = (mip.weight * self.coeff.evaluate(mip.x)) * _pair(dv, cu)
            if block is None:
                block = np.zeros(contrib.shape, dtype=dtype)
            block += contrib
        if block is None:
            n_u = len(np.arange(u_space.local_ndof)[sel_u])
            n_v = len(np.arange(v_space.local_ndof)[sel_v])
            block = np.zeros((n_v, n_u), dtype=dtype)
        return block

    def calc_element_matrix(self, space, trafo, *, dtype=None, out=None) -> np.ndarray:
        """Compound local matrix of this integrator on one (surface) element."""
        if out is not None and dtype is None:
            dtype = out.dtype
        self._check_trafo(trafo)
        dtype = resolve_dtype(dtype, self.coeff.is_complex)
        if self.boundary_form:
            ranges = space.surface_ranges(trafo.local_facet)
            n = space.surface_ndof(trafo.local_facet)
        else:
            ranges, n = space.ranges, space.ndof
        if out is None:
            out = np.zeros((n, n), dtype=dtype)
        else:
            if out.shape != (n, n):
                raise ValueError(f"Element matrix buffer has shape {out.shape}, expected {(n, n)}.")
            resolve_dtype(out.dtype, self.coeff.is_complex)
            out[...] = 0

        block = self.calc_sub_block(space, trafo, dtype)
        r1, r2 = ranges[self.ind1], ranges[self.ind2]
        out[r2, r1] += block
        if self.ind1 != self.ind2:
            out[r1, r2] += block.conj().T
        return out

    def calc_element_matrix_real(self, space, trafo, out=None):
        return self.calc_element_matrix(space, trafo, dtype=np.float64, out=out)

    def calc_element_matrix_complex(self, space, trafo, out=None):
        return self.calc_element_matrix(space, trafo, dtype=np.complex128, out=out)
