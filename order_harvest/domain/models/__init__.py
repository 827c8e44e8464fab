"""
Domain Models Package
Export all domain entities
"""

from .errors import (
    AllUnitsFailedError,
    CredentialError,
    FatalUnitError,
    FetchCancelledError,
    InvalidRangeError,
    OrderFetchError,
    OrderHarvestError,
    TransientFetchError,
)
from .entities import (
    # Enums
    EmptyReason,

    # Entities
    AggregatedOrder,
    AggregatedResult,
    Credential,
    DateRange,
    EmptyResult,
    FetchUnit,
    NormalizedOrder,
    UnitFailure,
    UnitOutcome,
)

__all__ = [
    # Errors
    "AllUnitsFailedError",
    "CredentialError",
    "FatalUnitError",
    "FetchCancelledError",
    "InvalidRangeError",
    "OrderFetchError",
    "OrderHarvestError",
    "TransientFetchError",

    # Enums
    "EmptyReason",

    # Entities
    "AggregatedOrder",
    "AggregatedResult",
    "Credential",
    "DateRange",
    "EmptyResult",
    "FetchUnit",
    "NormalizedOrder",
    "UnitFailure",
    "UnitOutcome",
]
