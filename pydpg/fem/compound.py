"""pydpg.fem.compound
Compound (product) space of several component spaces on one mesh.

The local dofs of an element are the concatenation of the component blocks,
in component order:

    | comp 0 | comp 1 | ... |

Surface elements follow the same layout, restricted to each component's
facet dofs; components without a surface element contribute an empty block.
"""
from typing import Dict, List, Optional, Sequence

import numpy as np

from pydpg.errors import UnsupportedSpaceError


class CompoundSpace:
    """Compound field built from component spaces sharing one mesh.

    Parameters
    ----------
    components
        Sequence of component spaces (:class:`~pydpg.fem.spaces.H1`,
        :class:`~pydpg.fem.spaces.L2`, :class:`~pydpg.fem.spaces.HDiv`).
    names
        Optional component names, e.g. ``('u', 'sigma', 'uhat')``.
    """

    def __init__(self, components: Sequence, names: Optional[Sequence[str]] = None):
        self.components: List = list(components)
        if not self.components:
            raise ValueError("A compound space needs at least one component.")
        mesh = self.components[0].mesh
        if any(c.mesh is not mesh for c in self.components):
            raise ValueError("All components of a compound space must share one mesh.")
        self.mesh = mesh
        if names is None:
            names = [f"c{i}" for i in range(len(self.components))]
        if len(names) != len(self.components):
            raise ValueError("'names' must have one entry per component.")
        self.names = tuple(names)

        self.ranges: List[slice] = []
        start = 0
        for comp in self.components:
            self.ranges.append(slice(start, start + comp.local_ndof))
            start += comp.local_ndof
        self.ndof: int = start          # local dofs per element
        self._surface_cache: Dict[int, List[slice]] = {}

    def __len__(self):
        return len(self.components)

    def component(self, i: int):
        if not 0 <= i < len(self.components):
            raise IndexError(f"Component {i} out of range for a compound space "
                             f"with {len(self.components)} components.")
        return self.components[i]

    def index(self, name: str) -> int:
        return self.names.index(name)

    def surface_ranges(self, local_facet: int) -> List[slice]:
        """Slices of each component in the surface element on ``local_facet``."""
        try:
            return self._surface_cache[local_facet]
        except KeyError:
            pass
        out, start = [], 0
        for comp in self.components:
            n = len(comp.facet_dofs(local_facet)) if comp.has_surface_elements else 0
            out.append(slice(start, start + n))
            start += n
        self._surface_cache[local_facet] = out
        return out

    def surface_ndof(self, local_facet: int) -> int:
        return self.surface_ranges(local_facet)[-1].stop

    def facet_dofs(self, comp: int, local_facet: int) -> np.ndarray:
        space = self.component(comp)
        if not space.has_surface_elements:
            raise UnsupportedSpaceError(
                f"Component {comp} ({type(space).__name__}) has no surface elements.")
        return space.facet_dofs(local_facet)

    def __repr__(self):
        parts = ", ".join(f"{n}={c!r}" for n, c in zip(self.names, self.components))
        return f"CompoundSpace({parts})"
