"""pydpg.assembly.global_matrix"""
import logging

import numpy as np
import scipy.sparse as sp

from pydpg.fem.transform import ElementTransformation, FacetTransformation
from pydpg.integrators.pairing import resolve_dtype

logger = logging.getLogger(__name__)


def _elements(dh, integ):
    """(transformation, global dofs) pairs an integrator is evaluated on."""
    mesh = dh.mesh
    if integ.vb == "bnd":
        for gid in mesh.boundary_edges():
            yield FacetTransformation(mesh, gid), dh.surface_dofs(gid)
    else:
        for eid in range(mesh.n_elements):
            yield ElementTransformation(mesh, eid), dh.element_dofs(eid)


def assemble_matrix(dh, integrators, *, dtype=None):
    """Sum the element matrices of ``integrators`` into a CSR matrix."""
    integrators = list(integrators)
    dtype = resolve_dtype(dtype, any(i.coeff.is_complex for i in integrators))
    n = dh.total_dofs
    rows, cols, data = [], [], []
    for integ in integrators:
        logger.debug("Assembling %r on %s elements", integ, integ.vb)
        for trafo, dofs in _elements(dh, integ):
            Ke = integ.calc_element_matrix(dh.space, trafo, dtype=dtype)
            rows.append(np.repeat(dofs, len(dofs)))
            cols.append(np.tile(dofs, len(dofs)))
            data.append(Ke.ravel())
    if not data:
        return sp.csr_matrix((n, n), dtype=dtype)
    # duplicate (row, col) entries are summed by the COO -> CSR conversion
    K = sp.coo_matrix((np.concatenate(data), (np.concatenate(rows), np.concatenate(cols))),
                      shape=(n, n), dtype=dtype)
    return K.tocsr()


def assemble_vector(dh, sources, *, dtype=None):
    """Sum the element vectors of linear-form integrators."""
    sources = list(sources)
    dtype = resolve_dtype(dtype, any(s.is_complex for s in sources))
    F = np.zeros(dh.total_dofs, dtype=dtype)
    for src in sources:
        logger.debug("Assembling %r on %s elements", src, src.vb)
        for trafo, dofs in _elements(dh, src):
            np.add.at(F, dofs, src.calc_element_vector(dh.space, trafo, dtype=dtype))
    return F
