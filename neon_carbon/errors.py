"""
Exceptions raised by the carbon budget computations.
"""


class CarbonBudgetError(Exception):
    """Base class for errors raised by neon_carbon."""


class UndefinedRatioError(CarbonBudgetError, ArithmeticError):
    """The live/dead partition of the reference year has no carbon to divide by."""


class MissingTableError(CarbonBudgetError, KeyError):
    """A required source table is absent or empty."""

    def __str__(self):
        # KeyError quotes its message; keep it readable
        return str(self.args[0]) if self.args else ''
