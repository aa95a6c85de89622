"""pydpg.integrators.base
Component-index resolution shared by all DPG integrators.

Form lines address components with 1-based numbers; integrators store the
0-based index of each operand's component in the compound space.
"""
import logging
from dataclasses import dataclass, field
from typing import Tuple

from pydpg.coefficients import as_coefficient
from pydpg.errors import ConfigurationError

logger = logging.getLogger(__name__)


def resolve_component(cf) -> int:
    """Evaluate a component-number coefficient and return the 0-based index."""
    cf = as_coefficient(cf)
    if not cf.is_constant:
        raise ConfigurationError(f"Component number {cf!r} is not a constant.")
    value = cf.evaluate_const()
    if cf.is_complex:
        value = complex(value).real
    index = int(round(value)) - 1
    if index < 0:
        raise ConfigurationError(
            f"Component number {value} resolves to index {index}; components are numbered from 1.")
    return index


class CompoundIndexResolver:
    """Holds the trial (``ind1``) and test (``ind2``) component indices."""

    def __init__(self, comp1, comp2):
        self._ind1 = resolve_component(comp1)
        self._ind2 = resolve_component(comp2)

    def get_ind1(self) -> int:
        return self._ind1

    def get_ind2(self) -> int:
        return self._ind2

    @property
    def ind1(self) -> int:
        return self._ind1

    @property
    def ind2(self) -> int:
        return self._ind2


@dataclass(frozen=True)
class IntegratorEvent:
    """Construction record of an integrator, for the host's own logging."""
    name: str
    components: Tuple[int, ...]         # 1-based, as written in the form line
    form: str = "bilinear"
    is_complex: bool = False
    details: dict = field(default_factory=dict)


def emit(event: IntegratorEvent) -> IntegratorEvent:
    """Log a construction event at INFO and hand it back."""
    if event.form == "linear":
        logger.info("Using DPG source integrator %s on component %d",
                    event.name, event.components[0], extra={"dpg_event": event})
    else:
        logger.info("Using DPG integrator %s with components %d and %d",
                    event.name, event.components[0], event.components[1],
                    extra={"dpg_event": event})
    return event
