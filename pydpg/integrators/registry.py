"""pydpg.integrators.registry
Registered integrator names and form-line parsing.

A form line reads::

    <name> <ind1> <ind2> <coeff>            bilinear integrators
    NeumannVolume <ind> <g> <Gx> <Gy> [<Gz>]

The names are a stable public contract.
"""
import logging
import shlex
from typing import Dict, Tuple

from pydpg.coefficients import parse_coefficient
from pydpg.errors import ConfigurationError
from pydpg.integrators.pairing import VARIANTS, PairingIntegrator
from pydpg.integrators.source import NeumannVolume

logger = logging.getLogger(__name__)

INTEGRATORS: Tuple[str, ...] = tuple(VARIANTS)
SOURCE_INTEGRATORS: Dict[str, type] = {"NeumannVolume": NeumannVolume}


def make_integrator(name: str, *coeffs, **kwargs):
    """Build a registered integrator from its positional coefficients."""
    if name in VARIANTS:
        if len(coeffs) != 3:
            raise ConfigurationError(
                f"{name} takes <ind1> <ind2> <coeff>, got {len(coeffs)} arguments.")
        return PairingIntegrator(VARIANTS[name], *coeffs, **kwargs)
    if name in SOURCE_INTEGRATORS:
        if len(coeffs) not in (4, 5):
            raise ConfigurationError(
                f"{name} takes <ind> <g> <Gx> <Gy> [<Gz>], got {len(coeffs)} arguments.")
        return SOURCE_INTEGRATORS[name](*coeffs, **kwargs)
    raise ConfigurationError(f"Unknown DPG integrator '{name}'. "
                             f"Known: {', '.join(INTEGRATORS + tuple(SOURCE_INTEGRATORS))}.")


def parse_form_line(line: str, namespace=None, **kwargs):
    """Parse one form-definition line into an integrator."""
    tokens = shlex.split(line, comments=True)
    if not tokens:
        raise ConfigurationError("Empty form line.")
    name, args = tokens[0], tokens[1:]
    logger.debug("Parsing form line %r", line)
    coeffs = [parse_coefficient(tok, namespace) for tok in args]
    return make_integrator(name, *coeffs, **kwargs)
