# dofhandler.py
"""
Global dof numbering of a compound space.

Component blocks are laid out consecutively in the global vector:

    [ comp 0 dofs | comp 1 dofs | ... ]
"""
import logging
from typing import List

import numpy as np

from pydpg.fem.compound import CompoundSpace

logger = logging.getLogger(__name__)


class DofHandler:
    def __init__(self, space: CompoundSpace):
        if not isinstance(space, CompoundSpace):
            raise TypeError("'space' must be a CompoundSpace.")
        self.space = space
        self.mesh = space.mesh
        self.offsets: List[int] = []
        start = 0
        for comp in space.components:
            self.offsets.append(start)
            start += comp.ndof
        self.total_dofs: int = start
        logger.debug("DofHandler: %d global dofs in %d components (%s)",
                     self.total_dofs, len(space), ", ".join(str(c.ndof) for c in space.components))

    def component_range(self, comp: int) -> slice:
        space = self.space.component(comp)
        return slice(self.offsets[comp], self.offsets[comp] + space.ndof)

    def element_dofs(self, eid: int) -> np.ndarray:
        """Global dofs of volume element ``eid``, in compound local order."""
        return np.concatenate([off + comp.element_dofs(eid)
                               for off, comp in zip(self.offsets, self.space.components)]).astype(int)

    def surface_dofs(self, edge_id: int) -> np.ndarray:
        """Global dofs of the surface element on boundary edge ``edge_id``, in
        compound surface-local order; components without surface elements
        contribute nothing."""
        parts = [off + comp.surface_dofs(edge_id)
                 for off, comp in zip(self.offsets, self.space.components)
                 if comp.has_surface_elements]
        if not parts:
            return np.zeros(0, dtype=int)
        return np.concatenate(parts).astype(int)

    def get_component(self, vector, comp: int, part=None) -> np.ndarray:
        """
        Copy component ``comp`` (0-based) out of a compound solution vector.

        ``part='re'`` / ``'im'`` return only the real / imaginary part.
        """
        vector = np.asarray(vector)
        if vector.shape != (self.total_dofs,):
            raise ValueError(f"Expected a vector of length {self.total_dofs}, got shape {vector.shape}.")
        values = vector[self.component_range(comp)]
        logger.debug("get_component %d (%s), part=%s",
                     comp + 1, type(self.space.component(comp)).__name__, part)
        if part is None:
            return values.copy()
        if part == "re":
            return np.real(values).copy()
        if part == "im":
            return np.imag(values).copy()
        raise ValueError(f"part must be None, 're' or 'im', got {part!r}.")

    def __repr__(self):
        return f"<DofHandler ndofs={self.total_dofs}, components={len(self.space)}>"
