"""
Error taxonomy for order fetching.

Run-level errors abort the whole run before aggregation; unit-level errors
(OrderFetchError subclasses) are captured per unit by the scheduler.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from order_harvest.domain.models.entities import FetchUnit, UnitFailure


class OrderHarvestError(Exception):
    """Base class for all order harvesting errors"""


class InvalidRangeError(OrderHarvestError, ValueError):
    """Missing bounds, unparseable dates or end before start"""


class CredentialError(OrderHarvestError):
    """Token acquisition failed; fatal for the run"""


class OrderFetchError(OrderHarvestError):
    """A single fetch unit failed"""

    def __init__(self, unit: "FetchUnit", message: str):
        super().__init__(message)
        self.unit = unit


class TransientFetchError(OrderFetchError):
    """Rate limited / unavailable / network failure after the retry budget"""

    def __init__(
        self,
        unit: "FetchUnit",
        attempts: int,
        status_code: Optional[int] = None,
        detail: str = "",
    ):
        cause = f"status {status_code}" if status_code is not None else "network error"
        message = f"Failed to fetch orders for {unit.label} after {attempts} attempts: {cause}"
        if detail:
            message = f"{message} - {detail}"
        super().__init__(unit, message)
        self.attempts = attempts
        self.status_code = status_code


class FatalUnitError(OrderFetchError):
    """Non-retryable response for one unit"""

    def __init__(self, unit: "FetchUnit", status_code: Optional[int], detail: str = ""):
        message = f"Non-retryable error fetching orders for {unit.label}: {status_code}"
        if detail:
            message = f"{message} - {detail}"
        super().__init__(unit, message)
        self.status_code = status_code


class AllUnitsFailedError(OrderHarvestError):
    """Every fetch unit of the run failed"""

    def __init__(self, failures: Sequence["UnitFailure"]):
        super().__init__(f"All {len(failures)} fetch units failed")
        self.failures = tuple(failures)


class FetchCancelledError(OrderHarvestError):
    """The caller stopped the run between chunks"""

    def __init__(self, completed_units: int, total_units: int):
        super().__init__(f"Fetch cancelled after {completed_units} of {total_units} units")
        self.completed_units = completed_units
        self.total_units = total_units
