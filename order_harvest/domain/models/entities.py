"""
DOMAIN MODELS - ORDER FETCHING

Pure, immutable data structures for one orchestration run.
No I/O here: the segmenter, fetcher and aggregator pass these around.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple, Union

from order_harvest.domain.models.errors import InvalidRangeError, OrderFetchError
from order_harvest.utils.dates import parse_iso_date


class EmptyReason(str, Enum):
    """Why a run produced nothing to show"""
    NO_FETCHABLE_DAYS = "no_fetchable_days"
    NO_QUALIFYING_ORDERS = "no_qualifying_orders"


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive calendar date range requested by the caller.
    """
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidRangeError("Start Date cannot be after End Date.")

    @staticmethod
    def parse(
        start: Union[str, date, None],
        end: Union[str, date, None],
    ) -> "DateRange":
        try:
            start_date = parse_iso_date(start)
            end_date = parse_iso_date(end)
        except ValueError as exc:
            raise InvalidRangeError(f"Dates must be YYYY-MM-DD: {exc}") from exc

        if start_date is None or end_date is None:
            raise InvalidRangeError("Please provide both Start Date and End Date.")

        return DateRange(start=start_date, end=end_date)

    @property
    def day_count(self) -> int:
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class FetchUnit:
    """One remote query window, a single day or a Monday–Saturday slice."""
    date_from: date
    date_to: date

    def __post_init__(self) -> None:
        if self.date_from > self.date_to:
            raise ValueError(f"FetchUnit {self.date_from} > {self.date_to}")

    @property
    def is_single_day(self) -> bool:
        return self.date_from == self.date_to

    @property
    def day_span(self) -> int:
        return (self.date_to - self.date_from).days + 1

    @property
    def label(self) -> str:
        if self.is_single_day:
            return self.date_from.isoformat()
        return f"{self.date_from.isoformat()}..{self.date_to.isoformat()}"

    def window(self) -> Tuple[str, str]:
        """Inclusive date-time bounds as sent to the order service."""
        return (
            f"{self.date_from.isoformat()}T00:00:00.000Z",
            f"{self.date_to.isoformat()}T23:59:59.000Z",
        )

    def days(self) -> Tuple[date, ...]:
        return tuple(self.date_from + timedelta(days=i) for i in range(self.day_span))


@dataclass(frozen=True)
class Credential:
    """Opaque id token shared read-only by every fetch in one run."""
    token: str

    def __repr__(self) -> str:
        return "Credential(token=***)"


@dataclass(frozen=True)
class NormalizedOrder:
    order_number: str
    customer_name: str
    delivery_date: str
    base_amount: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class AggregatedOrder:
    serial_number: int
    order_number: str
    customer_name: str
    delivery_date: str
    base_amount: Decimal
    total_amount: Decimal

    @staticmethod
    def from_normalized(serial_number: int, order: NormalizedOrder) -> "AggregatedOrder":
        return AggregatedOrder(
            serial_number=serial_number,
            order_number=order.order_number,
            customer_name=order.customer_name,
            delivery_date=order.delivery_date,
            base_amount=order.base_amount,
            total_amount=order.total_amount,
        )


@dataclass(frozen=True)
class UnitOutcome:
    """
    Result of one fetch unit, tagged with its segmentation index.
    """
    index: int
    unit: FetchUnit
    orders: Tuple[NormalizedOrder, ...] = ()
    error: Optional[OrderFetchError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class UnitFailure:
    unit: FetchUnit
    error_type: str
    message: str

    @staticmethod
    def from_error(unit: FetchUnit, error: OrderFetchError) -> "UnitFailure":
        return UnitFailure(unit=unit, error_type=type(error).__name__, message=str(error))


@dataclass(frozen=True)
class AggregatedResult:
    """
    Ordered, numbered and totalled orders of one run.
    """
    orders: Tuple[AggregatedOrder, ...]
    grand_base_total: Decimal
    grand_total_amount: Decimal
    failed_units: Tuple[UnitFailure, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.orders:
            raise ValueError("AggregatedResult requires at least one order; use EmptyResult")

    @property
    def count(self) -> int:
        return len(self.orders)

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_units)


@dataclass(frozen=True)
class EmptyResult:
    """Ran successfully, nothing to show."""
    reason: EmptyReason
    failed_units: Tuple[UnitFailure, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return 0
