"""
FETCH ORCHESTRATOR
Date range in, one ordered and totalled order list out.

FLOW:
1. Validate the range
2. Segment into fetch units (no units -> EmptyResult, no remote calls)
3. Acquire the credential once
4. Fetch units in bounded batches, retrying per unit
5. Aggregate in segmentation order

Only range, credential, all-units-failed and cancellation errors abort a
run, and always before aggregation.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from order_harvest.config import Settings, settings as default_settings
from order_harvest.domain.models import (
    AggregatedResult,
    AllUnitsFailedError,
    CredentialError,
    DateRange,
    EmptyReason,
    EmptyResult,
    FetchUnit,
    UnitFailure,
)
from order_harvest.domain.services.aggregator import aggregate
from order_harvest.domain.services.chunked_scheduler import DEFAULT_CONCURRENCY, run_chunked
from order_harvest.domain.services.range_segmenter import RangeSegmenter
from order_harvest.domain.services.retry_policy import RetryPolicy
from order_harvest.infrastructure.auth import CredentialProvider, build_credential_provider
from order_harvest.infrastructure.order_api.client import OrderApiClient
from order_harvest.infrastructure.order_api.unit_fetcher import RetryingUnitFetcher
from order_harvest.utils.dates import resolve_timezone

logger = logging.getLogger(__name__)

RunResult = Union[AggregatedResult, EmptyResult]


class FetchOrchestrator:
    """
    One instance per configured service; holds no state between runs.
    """

    def __init__(
        self,
        credential_provider: CredentialProvider,
        fetcher: RetryingUnitFetcher,
        segmenter: Optional[RangeSegmenter] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ):
        if concurrency <= 0:
            raise ValueError("concurrency must be > 0")
        self.credential_provider = credential_provider
        self.fetcher = fetcher
        self.segmenter = segmenter or RangeSegmenter()
        self.concurrency = concurrency

    async def run(
        self,
        date_range: DateRange,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> RunResult:
        units = self.segmenter.segment(date_range)
        if not units:
            logger.info(
                f"No valid days found between {date_range.start} and {date_range.end} to fetch orders."
            )
            return EmptyResult(reason=EmptyReason.NO_FETCHABLE_DAYS)

        try:
            credential = await self.credential_provider.acquire_token()
        except CredentialError:
            raise
        except Exception as exc:
            raise CredentialError(f"Token acquisition failed: {exc}") from exc

        logger.info(
            f"Preparing {len(units)} fetch requests for {date_range.day_count} days "
            f"({date_range.start} to {date_range.end})..."
        )

        async def fetch(unit: FetchUnit):
            return await self.fetcher.fetch_unit(unit, credential)

        outcomes = await run_chunked(units, fetch, limit=self.concurrency, should_stop=should_stop)

        if all(not outcome.succeeded for outcome in outcomes):
            raise AllUnitsFailedError(
                [UnitFailure.from_error(outcome.unit, outcome.error) for outcome in outcomes]
            )

        result = aggregate(outcomes)
        _log_summary(result)
        return result


def _log_summary(result: RunResult) -> None:
    if isinstance(result, EmptyResult):
        logger.info(
            "No valid orders found for the selected date range after filtering. "
            "Total count: 0. Grand Total (Amount - without fees): 0.00. Grand Total (Total Amount): 0.00."
        )
    else:
        logger.info(
            f"Successfully fetched and processed {result.count} valid orders for the period. "
            f"Grand Total (Amount - without fees): {result.grand_base_total:.2f}. "
            f"Grand Total (Total Amount): {result.grand_total_amount:.2f}."
        )
    if result.failed_units:
        logger.warning(
            f"{len(result.failed_units)} fetch units failed and are missing from the totals: "
            + ", ".join(failure.unit.label for failure in result.failed_units)
        )


def build_fetcher(client: OrderApiClient, config: Settings) -> RetryingUnitFetcher:
    return RetryingUnitFetcher(
        client=client,
        policy=RetryPolicy.from_milliseconds(config.FETCH_RETRIES, config.FETCH_INITIAL_DELAY_MS),
        tz=resolve_timezone(config.DISPLAY_TIMEZONE),
    )


async def run_orchestration(
    date_range: DateRange,
    config: Optional[Settings] = None,
    credential_provider: Optional[CredentialProvider] = None,
    should_stop: Optional[Callable[[], bool]] = None,
) -> RunResult:
    """
    Run one orchestration with collaborators built from settings.

    Raises:
        InvalidRangeError, CredentialError, AllUnitsFailedError, FetchCancelledError
    """
    config = config or default_settings
    provider = credential_provider or build_credential_provider(config)

    async with OrderApiClient(
        api_base_url=config.ORDER_API_BASE_URL,
        page_size=config.ORDER_PAGE_SIZE,
        timeout_seconds=config.FETCH_TIMEOUT_SECONDS,
    ) as client:
        orchestrator = FetchOrchestrator(
            credential_provider=provider,
            fetcher=build_fetcher(client, config),
            segmenter=RangeSegmenter(config.DAILY_SEGMENT_MAX_DAYS),
            concurrency=config.FETCH_CONCURRENCY,
        )
        return await orchestrator.run(date_range, should_stop=should_stop)
