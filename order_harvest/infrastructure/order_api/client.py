"""
Order management API client.
One GET per fetch unit; response classification lives in the unit fetcher.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from order_harvest.domain.models import Credential, FetchUnit

logger = logging.getLogger(__name__)

ORDERS_PATH = "/order-management/api/v1/orders"
DEFAULT_PAGE_SIZE = 75


class OrderApiClient:
    def __init__(
        self,
        api_base_url: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base_url = api_base_url.rstrip("/")
        self.page_size = page_size
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "OrderApiClient":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.close()
        return False

    async def open(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.api_base_url,
                timeout=self.timeout_seconds,
                transport=self._transport,
            )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def build_params(self, unit: FetchUnit) -> dict:
        date_from, date_to = unit.window()
        return {
            "deliveryDateTimeFrom": date_from,
            "deliveryDateTimeTo": date_to,
            "pageSize": self.page_size,
        }

    async def request_orders(self, unit: FetchUnit, credential: Credential) -> httpx.Response:
        """
        Issue the orders query for one unit.

        Raises httpx.TransportError (timeouts included) when no status was received.
        """
        await self.open()
        headers = {
            "Idtoken": credential.token,
            "Content-Type": "application/json",
        }
        response = await self._client.get(ORDERS_PATH, params=self.build_params(unit), headers=headers)
        logger.debug(f"Orders {unit.label}: HTTP {response.status_code}")
        return response
