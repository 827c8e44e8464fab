"""Order Harvest - fetch, filter and total orders for a delivery date range."""

__version__ = "1.0.0"
