"""pydpg: DPG operator-pairing integrators on compound finite element spaces."""
import logging

from pydpg.errors import (DPGError, ConfigurationError, UnsupportedSpaceError,
                          UnsupportedCoefficientError)
from pydpg.coefficients import Constant, Analytic, CoefficientFunction

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
