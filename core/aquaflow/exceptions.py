"""
AquaFlow Custom Exceptions

Simple exception hierarchy for error handling.
"""


class AquaFlowError(Exception):
    """Base exception for AquaFlow."""

    pass


class ConfigError(AquaFlowError):
    """Configuration is invalid (inverted bounds, bad threshold table, ...)."""

    pass


class RangeError(AquaFlowError):
    """Command value lies outside its legal bounds."""

    def __init__(self, name: str, value: float, lo: float, hi: float):
        self.name = name
        self.value = value
        self.lo = lo
        self.hi = hi
        super().__init__(f"{name}={value} outside [{lo}, {hi}]")
