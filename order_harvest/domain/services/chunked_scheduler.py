"""
Chunked concurrency scheduler.

Runs fetch units in consecutive batches of ``limit``; a batch fully drains
before the next one starts, so at most ``limit`` units are ever in flight.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from order_harvest.domain.models import (
    FatalUnitError,
    FetchCancelledError,
    FetchUnit,
    NormalizedOrder,
    OrderFetchError,
    UnitOutcome,
)

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5

UnitWorker = Callable[[FetchUnit], Awaitable[Sequence[NormalizedOrder]]]


async def _run_one(index: int, unit: FetchUnit, worker: UnitWorker) -> UnitOutcome:
    try:
        orders = await worker(unit)
    except OrderFetchError as exc:
        logger.error(f"Unit {unit.label} contributed no orders: {exc}")
        return UnitOutcome(index=index, unit=unit, error=exc)
    except Exception as exc:
        logger.exception(f"Unit {unit.label} failed unexpectedly")
        error = FatalUnitError(unit, None, f"{type(exc).__name__}: {exc}")
        return UnitOutcome(index=index, unit=unit, error=error)
    return UnitOutcome(index=index, unit=unit, orders=tuple(orders))


async def run_chunked(
    units: Sequence[FetchUnit],
    worker: UnitWorker,
    limit: int = DEFAULT_CONCURRENCY,
    should_stop: Optional[Callable[[], bool]] = None,
) -> List[UnitOutcome]:
    """
    Run ``worker`` over ``units`` in batches.

    Args:
        units: Fetch units in segmentation order
        worker: Coroutine function fetching one unit
        limit: Batch size / peak concurrency
        should_stop: Checked before each batch; True stops scheduling

    Returns:
        One outcome per unit, in input order

    Raises:
        FetchCancelledError: should_stop reported True before a batch
    """
    if limit <= 0:
        raise ValueError("Concurrency limit must be > 0")

    total = len(units)
    total_batches = (total + limit - 1) // limit
    outcomes: List[UnitOutcome] = []

    logger.info(
        f"Starting fetch with concurrency limit of {limit} requests in parallel "
        f"({total_batches} batches total)..."
    )

    for batch_no, offset in enumerate(range(0, total, limit), start=1):
        if should_stop is not None and should_stop():
            logger.warning(f"Fetch cancelled before batch {batch_no} of {total_batches}")
            raise FetchCancelledError(completed_units=len(outcomes), total_units=total)

        batch = units[offset:offset + limit]
        logger.info(f"Processing batch {batch_no} of {total_batches} ({len(batch)} requests)...")

        results = await asyncio.gather(
            *(_run_one(offset + i, unit, worker) for i, unit in enumerate(batch))
        )
        outcomes.extend(results)

    return outcomes
