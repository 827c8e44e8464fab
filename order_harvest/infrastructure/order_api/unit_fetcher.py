"""
Retrying unit fetcher.

Drives RetryPolicy around OrderApiClient.request_orders: 2xx is parsed and
normalized, 429/502/503/504 and transport failures back off and retry,
anything else fails the unit at once.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import tzinfo
from typing import Awaitable, Callable, List, Optional

import httpx

from order_harvest.domain.models import (
    Credential,
    FatalUnitError,
    FetchUnit,
    NormalizedOrder,
    TransientFetchError,
)
from order_harvest.domain.services.order_normalizer import normalize_orders
from order_harvest.domain.services.retry_policy import (
    AttemptOutcome,
    RetryAction,
    RetryPolicy,
    classify_status,
)
from order_harvest.infrastructure.order_api.client import OrderApiClient

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

_BODY_EXCERPT = 200


def _excerpt(response: httpx.Response) -> str:
    return response.text[:_BODY_EXCERPT]


class RetryingUnitFetcher:
    def __init__(
        self,
        client: OrderApiClient,
        policy: Optional[RetryPolicy] = None,
        sleep: Sleep = asyncio.sleep,
        tz: Optional[tzinfo] = None,
    ):
        self.client = client
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self.tz = tz

    async def fetch_unit(self, unit: FetchUnit, credential: Credential) -> List[NormalizedOrder]:
        state = self.policy.start()
        while True:
            status_code: Optional[int] = None
            detail = ""
            try:
                response = await self.client.request_orders(unit, credential)
            except httpx.TransportError as exc:
                outcome = AttemptOutcome.TRANSIENT
                detail = f"{type(exc).__name__}: {exc}"
            else:
                status_code = response.status_code
                outcome = classify_status(status_code)
                if outcome is not AttemptOutcome.SUCCESS:
                    detail = _excerpt(response)

            decision = self.policy.advance(state, outcome)

            if decision.action is RetryAction.SUCCEED:
                return self._parse(unit, response)

            if decision.action is RetryAction.FAIL:
                raise FatalUnitError(unit, status_code, detail)

            if decision.action is RetryAction.EXHAUSTED:
                raise TransientFetchError(unit, state.attempt, status_code, detail)

            cause = f"status {status_code}" if status_code is not None else "network error"
            logger.warning(
                f"Attempt {state.attempt}: Failed to fetch orders for {unit.label} with {cause}. "
                f"Retrying in {decision.wait_seconds * 1000:.0f}ms. Error: {detail}"
            )
            await self._sleep(decision.wait_seconds)
            state = decision.next_state

    def _parse(self, unit: FetchUnit, response: httpx.Response) -> List[NormalizedOrder]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise FatalUnitError(unit, response.status_code, "response body is not JSON") from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        raw_orders = data.get("orders") if isinstance(data, dict) else None
        if raw_orders is None:
            raw_orders = []
        if not isinstance(raw_orders, list):
            raise FatalUnitError(unit, response.status_code, "data.orders is not a list")

        try:
            orders = normalize_orders(raw_orders, self.tz)
        except Exception as exc:
            raise FatalUnitError(
                unit, response.status_code, f"malformed order record: {type(exc).__name__}: {exc}"
            ) from exc
        logger.debug(f"Unit {unit.label}: {len(raw_orders)} raw orders, {len(orders)} kept")
        return orders
