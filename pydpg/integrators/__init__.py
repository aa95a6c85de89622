from pydpg.integrators.base import CompoundIndexResolver, IntegratorEvent, resolve_component
from pydpg.integrators.pairing import Domain, Operator, PairingIntegrator, Variant, VARIANTS
from pydpg.integrators.source import NeumannVolume
from pydpg.integrators.registry import (INTEGRATORS, SOURCE_INTEGRATORS,
                                        make_integrator, parse_form_line)
