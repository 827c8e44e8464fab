"""
Fetch orders for a delivery date range and write them as TSV.

Usage:
    python scripts/export_orders.py --start 2024-03-04 --end 2024-03-15 --output orders_data.tsv
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from order_harvest.config import settings
from order_harvest.core.logging import setup_logging
from order_harvest.domain.models import DateRange, EmptyResult, OrderHarvestError
from order_harvest.domain.services.fetch_orchestrator import run_orchestration
from order_harvest.reports.order_export import render_tsv, summary_message

logger = logging.getLogger("export_orders")


async def export_orders(start: str, end: str, output: Path) -> int:
    try:
        date_range = DateRange.parse(start, end)
        result = await run_orchestration(date_range)
    except OrderHarvestError as exc:
        logger.error(f"Error: {exc}")
        return 1

    print(summary_message(result))
    if isinstance(result, EmptyResult):
        return 0

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_tsv(result), encoding="utf-8")
    logger.info(f"Orders data written to {output} (opens with Excel)")
    return 0


def main() -> int:
    today = date.today().isoformat()
    parser = argparse.ArgumentParser(description="Export orders for a delivery date range as TSV.")
    parser.add_argument("--start", default=today, help="Start date YYYY-MM-DD (default: today)")
    parser.add_argument("--end", default=today, help="End date YYYY-MM-DD (default: today)")
    parser.add_argument("--output", type=Path, default=Path(settings.EXPORT_FILENAME), help="TSV output path")
    args = parser.parse_args()

    setup_logging(settings.LOG_LEVEL)
    return asyncio.run(export_orders(args.start, args.end, args.output))


if __name__ == "__main__":
    sys.exit(main())
