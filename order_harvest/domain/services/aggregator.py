"""
AGGREGATOR
Number and total the orders of all completed fetch units.

Serial numbers follow segmentation order, then response order within a
unit. Completion order of the concurrent fetches never matters.
"""

from decimal import Decimal
from typing import Iterable, List, Union

from order_harvest.domain.models import (
    AggregatedOrder,
    AggregatedResult,
    EmptyReason,
    EmptyResult,
    UnitFailure,
    UnitOutcome,
)


def aggregate(outcomes: Iterable[UnitOutcome]) -> Union[AggregatedResult, EmptyResult]:
    ordered = sorted(outcomes, key=lambda outcome: outcome.index)

    orders: List[AggregatedOrder] = []
    failures: List[UnitFailure] = []
    grand_base_total = Decimal("0")
    grand_total_amount = Decimal("0")
    serial = 1

    for outcome in ordered:
        if not outcome.succeeded:
            failures.append(UnitFailure.from_error(outcome.unit, outcome.error))
            continue
        for order in outcome.orders:
            orders.append(AggregatedOrder.from_normalized(serial, order))
            grand_base_total += order.base_amount
            grand_total_amount += order.total_amount
            serial += 1

    if not orders:
        return EmptyResult(
            reason=EmptyReason.NO_QUALIFYING_ORDERS,
            failed_units=tuple(failures),
        )

    return AggregatedResult(
        orders=tuple(orders),
        grand_base_total=grand_base_total,
        grand_total_amount=grand_total_amount,
        failed_units=tuple(failures),
    )
