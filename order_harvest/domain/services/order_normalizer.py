"""
ORDER NORMALIZER
Filter raw service orders by status and shape them for display/export.
"""

import logging
from datetime import tzinfo
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from order_harvest.domain.models import NormalizedOrder
from order_harvest.utils.dates import NOT_AVAILABLE, format_delivery_date

logger = logging.getLogger(__name__)

EXCLUDED_STATUSES = frozenset({"cancelled", "paymentfailed"})


def capitalize(name: Optional[str]) -> str:
    """First letter upper, the rest lower."""
    if not name:
        return ""
    text = str(name)
    return text[:1].upper() + text[1:].lower()


def normalize_status(raw_status: Any) -> str:
    if raw_status is None:
        return ""
    return str(raw_status).strip().lower()


def is_included(raw_order: Dict[str, Any]) -> bool:
    # Orders without a status are dropped, not defaulted to included
    status = normalize_status(raw_order.get("orderStatus"))
    return bool(status) and status not in EXCLUDED_STATUSES


def _to_decimal(value: Any, field_name: str, order_number: str) -> Decimal:
    if not value:
        return Decimal("0")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        amount = None
    if amount is None or not amount.is_finite():
        logger.warning(f"Order {order_number}: non-numeric {field_name}={value!r}, using 0")
        return Decimal("0")
    return amount


def normalize_order(raw_order: Dict[str, Any], tz: Optional[tzinfo] = None) -> NormalizedOrder:
    user = raw_order.get("userDetail")
    if not isinstance(user, dict):
        user = {}
    first_name = user.get("firstName") or ""
    last_name = user.get("lastName") or ""

    raw_number = raw_order.get("orderNumber")
    order_number = str(raw_number) if raw_number else NOT_AVAILABLE

    return NormalizedOrder(
        order_number=order_number,
        customer_name=f"{capitalize(first_name)} {capitalize(last_name)}".strip(),
        delivery_date=format_delivery_date(raw_order.get("deliverySlotDate"), tz),
        base_amount=_to_decimal(raw_order.get("amount"), "amount", order_number),
        total_amount=_to_decimal(raw_order.get("totalAmount"), "totalAmount", order_number),
    )


def normalize_orders(
    raw_orders: Iterable[Dict[str, Any]],
    tz: Optional[tzinfo] = None,
) -> List[NormalizedOrder]:
    """
    Keep qualifying orders in response order and normalize them.

    Args:
        raw_orders: Order dicts as returned under ``data.orders``
        tz: Optional display zone for delivery dates

    Returns:
        Normalized orders, cancelled/payment-failed/status-less ones removed
    """
    normalized: List[NormalizedOrder] = []
    for raw_order in raw_orders:
        if not isinstance(raw_order, dict):
            logger.debug(f"Skipping non-object order entry: {raw_order!r}")
            continue
        if not is_included(raw_order):
            continue
        normalized.append(normalize_order(raw_order, tz))
    return normalized
