"""
iterstats.core.errors
=====================

Error taxonomy for estimator queries and configuration.

All errors derive from `StatsError`, itself a `ValueError`, so callers may
catch the whole family at once. Errors are raised only at query or
construction time; `update` never raises for finite input.

Examples
--------
>>> from iterstats.core.errors import InsufficientData, StatsError
>>> err = InsufficientData("variance", required=2, count=1)
>>> isinstance(err, StatsError), err.required
(True, 2)
"""

from __future__ import annotations
from typing import Optional


class StatsError(ValueError):
    """Base class for all iterstats errors."""


class InsufficientData(StatsError):
    """A statistic was requested before enough samples were seen.

    Live consumers usually treat this as "not yet available"; batch
    consumers expecting a minimum sample size treat it as a hard error.
    """

    def __init__(self, statistic: str, *, required: int, count: int) -> None:
        super().__init__(
            f"{statistic} requires at least {required} sample(s), got {count}"
        )
        self.statistic = statistic
        self.required = required
        self.count = count


class InvalidConfiguration(StatsError):
    """An estimator or reducer was configured with an invalid parameter."""


class EnvVarError(InvalidConfiguration):
    """Raised when an environment variable cannot be parsed."""

    def __init__(self, var_name: str, message: str, value: Optional[str] = None) -> None:
        super().__init__(f"{var_name}: {message}")
        self.var_name = var_name
        self.message = message
        self.value = value


class DegenerateInput(StatsError):
    """A shape statistic is undefined because all samples are identical."""

    def __init__(self, statistic: str) -> None:
        super().__init__(f"{statistic} is undefined for zero variance")
        self.statistic = statistic
