class PricingError(Exception):
    """Base class for errors raised by the pricing engine."""


class ConfigError(PricingError, ValueError):
    """
    Invalid simulation parameters.
    Raised while building a SimulationConfig, before any path is generated.
    """


class DomainError(PricingError, ValueError):
    """
    Analytic formula evaluated at a singular point (sigma = 0 or T = 0).
    """


class NumericalWarning(RuntimeWarning):
    """Degenerate payoff statistics, e.g. every path identical."""
