"""pydpg.errors
Exception types raised while building or evaluating DPG integrators.
"""


class DPGError(Exception):
    """Base class for all pydpg errors."""


class ConfigurationError(DPGError, ValueError):
    """A form definition cannot be turned into an integrator.

    Raised at construction time, e.g. when a component-number expression is
    not a constant or resolves to a negative component index.
    """


class UnsupportedSpaceError(DPGError, NotImplementedError):
    """An integrator needs a space feature the component space lacks
    (typically a boundary-trace / surface-element representation)."""


class UnsupportedCoefficientError(DPGError, ValueError):
    """A coefficient cannot be evaluated the way the integrator requires."""
