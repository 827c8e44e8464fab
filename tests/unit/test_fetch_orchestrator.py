import asyncio
from datetime import date
from decimal import Decimal
from typing import Dict, List

import httpx
import pytest

from order_harvest.domain.models import (
    AggregatedResult,
    AllUnitsFailedError,
    CredentialError,
    DateRange,
    EmptyReason,
    EmptyResult,
    FatalUnitError,
    FetchCancelledError,
    FetchUnit,
    NormalizedOrder,
)
from order_harvest.domain.services.fetch_orchestrator import FetchOrchestrator
from order_harvest.domain.services.retry_policy import RetryPolicy
from order_harvest.infrastructure.order_api.client import OrderApiClient
from order_harvest.infrastructure.order_api.unit_fetcher import RetryingUnitFetcher
from tests.fakes import BASE_URL, FakeCredentialProvider, ScriptedTransport, orders_payload, raw_order

MON, TUE, WED = date(2024, 3, 4), date(2024, 3, 5), date(2024, 3, 6)


def _order(number: str, base: str = "1", total: str = "1") -> NormalizedOrder:
    return NormalizedOrder(number, "Anna Smith", "04.03.2024", Decimal(base), Decimal(total))


class ScriptedFetcher:
    """
    Returns fixed orders per unit start date; units in ``completion_order``
    finish in exactly that order.
    """

    def __init__(self, orders_by_day: Dict[date, List[NormalizedOrder]], completion_order=None, fail=()):
        self.orders_by_day = orders_by_day
        self.completion_order = list(completion_order or [])
        self.fail = set(fail)
        self.calls: List[FetchUnit] = []
        self.finished: List[date] = []
        self.tokens = set()
        self._done: Dict[date, asyncio.Event] = {}

    def _event(self, day: date) -> asyncio.Event:
        return self._done.setdefault(day, asyncio.Event())

    async def fetch_unit(self, unit, credential):
        self.calls.append(unit)
        self.tokens.add(credential.token)
        day = unit.date_from
        if day in self.completion_order:
            position = self.completion_order.index(day)
            if position > 0:
                await self._event(self.completion_order[position - 1]).wait()
        self.finished.append(day)
        self._event(day).set()
        if day in self.fail:
            raise FatalUnitError(unit, 404, "not found")
        return list(self.orders_by_day.get(day, []))


def _orchestrator(fetcher, provider=None, concurrency=5):
    return FetchOrchestrator(
        credential_provider=provider or FakeCredentialProvider(),
        fetcher=fetcher,
        concurrency=concurrency,
    )


@pytest.mark.parametrize(
    "completion_order",
    [[MON, TUE, WED], [WED, TUE, MON], [TUE, MON, WED]],
)
@pytest.mark.asyncio
async def test_aggregation_order_ignores_completion_order(completion_order):
    orders = {
        MON: [_order("A1"), _order("A2")],
        TUE: [_order("B1")],
        WED: [_order("C1"), _order("C2")],
    }
    fetcher = ScriptedFetcher(orders, completion_order=completion_order)

    result = await _orchestrator(fetcher).run(DateRange(MON, WED))

    assert fetcher.finished == completion_order
    assert [(o.serial_number, o.order_number) for o in result.orders] == [
        (1, "A1"), (2, "A2"), (3, "B1"), (4, "C1"), (5, "C2"),
    ]


@pytest.mark.asyncio
async def test_token_acquired_once_and_shared(credential_provider):
    fetcher = ScriptedFetcher({MON: [_order("A1")]})

    await _orchestrator(fetcher, credential_provider).run(DateRange(MON, date(2024, 3, 9)))

    assert credential_provider.calls == 1
    assert len(fetcher.calls) == 6
    assert fetcher.tokens == {"id-token"}


@pytest.mark.asyncio
async def test_sunday_only_range_makes_no_calls(credential_provider):
    fetcher = ScriptedFetcher({})
    sunday = date(2024, 3, 10)

    result = await _orchestrator(fetcher, credential_provider).run(DateRange(sunday, sunday))

    assert result == EmptyResult(reason=EmptyReason.NO_FETCHABLE_DAYS)
    assert credential_provider.calls == 0
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_credential_failure_aborts_before_fetching(failing_credential_provider):
    fetcher = ScriptedFetcher({MON: [_order("A1")]})

    with pytest.raises(CredentialError):
        await _orchestrator(fetcher, failing_credential_provider).run(DateRange(MON, MON))
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_unexpected_provider_error_becomes_credential_error():
    provider = FakeCredentialProvider(error=RuntimeError("keychain locked"))

    with pytest.raises(CredentialError, match="keychain locked"):
        await _orchestrator(ScriptedFetcher({}), provider).run(DateRange(MON, MON))


@pytest.mark.asyncio
async def test_failed_unit_is_excluded_and_reported():
    fetcher = ScriptedFetcher({MON: [_order("A1", "2")], WED: [_order("C1", "3")]}, fail={TUE})

    result = await _orchestrator(fetcher).run(DateRange(MON, WED))

    assert isinstance(result, AggregatedResult)
    assert [o.order_number for o in result.orders] == ["A1", "C1"]
    assert result.grand_base_total == Decimal("5")
    assert [f.unit.date_from for f in result.failed_units] == [TUE]


@pytest.mark.asyncio
async def test_every_unit_failing_fails_the_run():
    fetcher = ScriptedFetcher({}, fail={MON, TUE})

    with pytest.raises(AllUnitsFailedError) as exc_info:
        await _orchestrator(fetcher).run(DateRange(MON, TUE))
    assert len(exc_info.value.failures) == 2


@pytest.mark.asyncio
async def test_no_qualifying_orders_is_empty_result():
    result = await _orchestrator(ScriptedFetcher({})).run(DateRange(MON, TUE))
    assert result == EmptyResult(reason=EmptyReason.NO_QUALIFYING_ORDERS)


@pytest.mark.asyncio
async def test_cancellation_stops_scheduling_new_chunks():
    fetcher = ScriptedFetcher({MON: [_order("A1")]})
    orchestrator = _orchestrator(fetcher, concurrency=2)

    with pytest.raises(FetchCancelledError):
        await orchestrator.run(DateRange(MON, date(2024, 3, 9)), should_stop=lambda: len(fetcher.calls) >= 2)
    assert len(fetcher.calls) == 2


def test_concurrency_must_be_positive():
    with pytest.raises(ValueError):
        _orchestrator(ScriptedFetcher({}), concurrency=0)


async def _run_http(date_range: DateRange, replies):
    script = ScriptedTransport(replies)
    async with OrderApiClient(BASE_URL, transport=script.transport()) as client:
        async def no_sleep(_):
            return None

        fetcher = RetryingUnitFetcher(client, policy=RetryPolicy(), sleep=no_sleep)
        result = await _orchestrator(fetcher).run(date_range)
    return result, script


@pytest.mark.asyncio
async def test_single_monday_end_to_end():
    replies = [
        httpx.Response(
            200,
            json=orders_payload([
                raw_order("X-1", amount=42.5, total=47.9),
                raw_order("X-2", status="cancelled", amount=99, total=99),
            ]),
        )
    ]

    result, script = await _run_http(DateRange.parse("2024-03-04", "2024-03-04"), replies)

    assert len(script.requests) == 1
    assert script.requests[0].url.params["deliveryDateTimeFrom"] == "2024-03-04T00:00:00.000Z"
    assert result.count == 1
    assert result.orders[0].serial_number == 1
    assert result.orders[0].order_number == "X-1"
    assert result.grand_base_total == Decimal("42.5")
    assert result.grand_total_amount == Decimal("47.9")


@pytest.mark.asyncio
async def test_ten_day_range_end_to_end_uses_two_weekly_calls():
    replies = [
        httpx.Response(200, json=orders_payload([raw_order("W1")])),
        httpx.Response(200, json=orders_payload([raw_order("W2")])),
    ]

    result, script = await _run_http(DateRange.parse("2024-03-04", "2024-03-13"), replies)

    windows = [
        (r.url.params["deliveryDateTimeFrom"][:10], r.url.params["deliveryDateTimeTo"][:10])
        for r in script.requests
    ]
    assert sorted(windows) == [("2024-03-04", "2024-03-09"), ("2024-03-11", "2024-03-13")]
    assert result.count == 2


def _reply_by_day(payloads):
    def reply(request: httpx.Request) -> httpx.Response:
        day = request.url.params["deliveryDateTimeFrom"][:10]
        return httpx.Response(200, json=orders_payload(payloads[day]))

    return reply


@pytest.mark.asyncio
async def test_malformed_record_in_one_day_keeps_the_other_days():
    guest = raw_order("B1")
    guest["userDetail"] = "guest"
    reply = _reply_by_day({"2024-03-04": [raw_order("A1")], "2024-03-05": [guest]})

    result, script = await _run_http(DateRange(MON, TUE), [reply, reply])

    assert len(script.requests) == 2
    assert [(o.order_number, o.customer_name) for o in result.orders] == [("A1", "Anna Smith"), ("B1", "")]
    assert result.failed_units == ()


@pytest.mark.asyncio
async def test_unexpected_fetcher_error_fails_only_its_unit():
    class ExplodingFetcher(ScriptedFetcher):
        async def fetch_unit(self, unit, credential):
            if unit.date_from == TUE:
                raise AttributeError("'str' object has no attribute 'get'")
            return await super().fetch_unit(unit, credential)

    fetcher = ExplodingFetcher({MON: [_order("A1")], WED: [_order("C1")]})

    result = await _orchestrator(fetcher).run(DateRange(MON, WED))

    assert [o.order_number for o in result.orders] == ["A1", "C1"]
    assert [(f.unit.date_from, f.error_type) for f in result.failed_units] == [(TUE, "FatalUnitError")]
