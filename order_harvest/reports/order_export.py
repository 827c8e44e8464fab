"""
REPORTING - ORDER EXPORT

Tab-separated export and the one-line summary shown after a run.
Grand totals come first so the sheet opens with them in Excel.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Union

from order_harvest.domain.models import AggregatedResult, EmptyReason, EmptyResult

TSV_MEDIA_TYPE = "text/tab-separated-values; charset=utf-8"
TSV_HEADER = ("S.No.", "Order Number", "Date", "Customer Name", "Amount", "Total Amount")

_CENT = Decimal("0.01")


def format_amount(value: Decimal) -> str:
    return str(Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP))


def _quoted(value: str) -> str:
    return '"' + str(value).replace('"', '""') + '"'


def render_tsv(result: AggregatedResult) -> str:
    lines: List[str] = [
        f"Grand Total (Amount - without fees):\t{format_amount(result.grand_base_total)}",
        f"Grand Total (Total Amount):\t{format_amount(result.grand_total_amount)}",
        "",
        "\t".join(TSV_HEADER),
    ]
    for order in result.orders:
        lines.append(
            "\t".join(
                [
                    str(order.serial_number),
                    _quoted(order.order_number),
                    _quoted(order.delivery_date),
                    _quoted(order.customer_name),
                    _quoted(format_amount(order.base_amount)),
                    _quoted(format_amount(order.total_amount)),
                ]
            )
        )
    return "\n".join(lines) + "\n"


def summary_message(result: Union[AggregatedResult, EmptyResult], currency: str = "€") -> str:
    if isinstance(result, EmptyResult):
        if result.reason is EmptyReason.NO_FETCHABLE_DAYS:
            message = "No valid days found in the selected date range to fetch orders."
        else:
            message = (
                "No valid orders found for the selected date range after filtering. "
                f"Total count: 0. Grand Total (Amount - without fees): {currency}0.00. "
                f"Grand Total (Total Amount): {currency}0.00."
            )
    else:
        message = (
            f"Successfully fetched and processed {result.count} valid orders for the period. "
            f"Total count: {result.count}. "
            f"Grand Total (Amount - without fees): {currency}{format_amount(result.grand_base_total)}. "
            f"Grand Total (Total Amount): {currency}{format_amount(result.grand_total_amount)}."
        )

    if result.failed_units:
        labels = ", ".join(failure.unit.label for failure in result.failed_units)
        message += f" Warning: {len(result.failed_units)} date windows could not be fetched ({labels})."
    return message
