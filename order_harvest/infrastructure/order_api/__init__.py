from .client import OrderApiClient
from .unit_fetcher import RetryingUnitFetcher

__all__ = ["OrderApiClient", "RetryingUnitFetcher"]
