"""Run the monthly bill instance generator once.

Usage:
    python src/generate_bills.py                  # last month, like the scheduler
    python src/generate_bills.py --period 2024-03 # backfill a specific month
"""

import argparse
import asyncio
import sys

from api.v1.dependencies import get_uow_factory
from core.logging import setup_logging
from domain.entities.billing_period import BillingPeriod
from domain.services.bill_generation_service import BillGenerationService, GenerationReport
from infrastructure.database.session import engine


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate monthly bill instances.")
    parser.add_argument(
        "--period",
        type=BillingPeriod.parse,
        default=None,
        help="Billing period to generate (YYYY-MM). Defaults to last month.",
    )
    return parser.parse_args(argv)


async def generate(period: BillingPeriod | None) -> GenerationReport:
    service = BillGenerationService(get_uow_factory())
    try:
        if period is None:
            return await service.run()
        return await service.generate_for_period(period)
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = parse_args(argv)
    report = asyncio.run(generate(args.period))
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
