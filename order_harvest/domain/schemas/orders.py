from decimal import Decimal
from typing import List, Literal, Optional, Union

from pydantic import BaseModel

from order_harvest.domain.models import AggregatedResult, EmptyResult, UnitFailure


class OrderRow(BaseModel):
    serial_number: int
    order_number: str
    delivery_date: str
    customer_name: str
    base_amount: Decimal
    total_amount: Decimal


class FailedUnit(BaseModel):
    date_from: str
    date_to: str
    error_type: str
    message: str

    @staticmethod
    def from_failure(failure: UnitFailure) -> "FailedUnit":
        return FailedUnit(
            date_from=failure.unit.date_from.isoformat(),
            date_to=failure.unit.date_to.isoformat(),
            error_type=failure.error_type,
            message=failure.message,
        )


class OrdersResponse(BaseModel):
    status: Literal["ok", "empty"]
    start: str
    end: str
    count: int
    grand_base_total: Decimal
    grand_total_amount: Decimal
    orders: List[OrderRow]
    failed_units: List[FailedUnit]
    empty_reason: Optional[str] = None
    message: str

    @staticmethod
    def from_result(
        result: Union[AggregatedResult, EmptyResult],
        start: str,
        end: str,
        message: str,
    ) -> "OrdersResponse":
        failed = [FailedUnit.from_failure(f) for f in result.failed_units]
        if isinstance(result, EmptyResult):
            return OrdersResponse(
                status="empty",
                start=start,
                end=end,
                count=0,
                grand_base_total=Decimal("0"),
                grand_total_amount=Decimal("0"),
                orders=[],
                failed_units=failed,
                empty_reason=result.reason.value,
                message=message,
            )
        return OrdersResponse(
            status="ok",
            start=start,
            end=end,
            count=result.count,
            grand_base_total=result.grand_base_total,
            grand_total_amount=result.grand_total_amount,
            orders=[
                OrderRow(
                    serial_number=o.serial_number,
                    order_number=o.order_number,
                    delivery_date=o.delivery_date,
                    customer_name=o.customer_name,
                    base_amount=o.base_amount,
                    total_amount=o.total_amount,
                )
                for o in result.orders
            ],
            failed_units=failed,
            message=message,
        )
