"""
Order routes - fetch a date range and export it.
"""

import logging
from datetime import date
from typing import Awaitable, Callable, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from order_harvest.config import settings
from order_harvest.domain.models import (
    AggregatedResult,
    AllUnitsFailedError,
    CredentialError,
    DateRange,
    EmptyResult,
    FetchCancelledError,
    InvalidRangeError,
)
from order_harvest.domain.schemas.orders import OrdersResponse
from order_harvest.domain.services.fetch_orchestrator import run_orchestration
from order_harvest.reports.order_export import TSV_MEDIA_TYPE, render_tsv, summary_message

logger = logging.getLogger(__name__)

router = APIRouter()

OrderRunner = Callable[[DateRange], Awaitable[Union[AggregatedResult, EmptyResult]]]


def get_order_runner() -> OrderRunner:
    """Dependency hook; tests override it with a fake runner."""
    return run_orchestration


async def _run(
    start: Optional[str],
    end: Optional[str],
    runner: OrderRunner,
) -> tuple[DateRange, Union[AggregatedResult, EmptyResult]]:
    try:
        date_range = DateRange.parse(
            date.today() if start is None else start,
            date.today() if end is None else end,
        )
    except InvalidRangeError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        result = await runner(date_range)
    except CredentialError as exc:
        logger.error(f"Order run aborted: {exc}")
        raise HTTPException(
            status_code=502,
            detail=f"Error: {exc}. Please ensure the tokens are valid and try again.",
        )
    except AllUnitsFailedError as exc:
        logger.error(f"Order run aborted: {exc}")
        raise HTTPException(status_code=502, detail=str(exc))
    except FetchCancelledError as exc:
        raise HTTPException(status_code=503, detail=str(exc))

    return date_range, result


@router.get("", response_model=OrdersResponse)
async def get_orders(
    start: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to today"),
    end: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to today"),
    runner: OrderRunner = Depends(get_order_runner),
):
    """Fetch, filter, number and total orders for a date range."""
    date_range, result = await _run(start, end, runner)
    return OrdersResponse.from_result(
        result,
        start=date_range.start.isoformat(),
        end=date_range.end.isoformat(),
        message=summary_message(result),
    )


@router.get("/export.tsv")
async def export_orders(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    runner: OrderRunner = Depends(get_order_runner),
):
    """Same run as GET /orders, delivered as a TSV download."""
    _, result = await _run(start, end, runner)
    if isinstance(result, EmptyResult):
        raise HTTPException(status_code=404, detail="No data to download. " + summary_message(result))

    return Response(
        content=render_tsv(result),
        media_type=TSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{settings.EXPORT_FILENAME}"'},
    )
