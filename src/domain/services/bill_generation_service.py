"""Monthly bill instance generation.

Once per billing cycle every bill in the system gets an instance for the
month that has just ended. The amount is carried forward from the bill's
most recent earlier instance, or starts at zero for a bill with no usable
history. Each bill is an independent unit of work: one failing bill is
logged and the run moves on.
"""

from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

import structlog

from core.exceptions import DuplicateBillInstanceError
from domain.entities.bill import Bill
from domain.entities.bill_instance import BillInstance
from domain.entities.billing_period import BillingPeriod
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

DEFAULT_DUE_DAY = 1
ZERO_AMOUNT = Decimal("0.00")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class GenerationReport:
    """Outcome counts of one generator run."""

    period: BillingPeriod
    created: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def processed(self) -> int:
        return self.created + self.skipped + self.failed


def carry_forward_amount(instances: Iterable[BillInstance], period: BillingPeriod) -> Decimal:
    """Amount of the latest instance strictly before ``period``.

    Instances whose period label does not parse are ignored. Returns zero
    when nothing usable precedes the period.
    """
    latest: tuple[BillingPeriod, Decimal] | None = None
    for instance in instances:
        parsed = instance.billing_period
        if parsed is None or parsed >= period:
            continue
        if latest is None or parsed > latest[0]:
            latest = (parsed, instance.amount)
    return latest[1] if latest else ZERO_AMOUNT


def instance_description(bill: Bill, period: BillingPeriod) -> str:
    return f"{bill.name}'s monthly instance for {period.display}"


class BillGenerationService:
    """Creates the next bill instance for every bill, at most once per period."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    async def run(self, now: datetime | None = None) -> GenerationReport:
        """Scheduled entry point.

        Targets the month before ``now``; due dates fall in the month of
        ``now``. Only that single period is generated, earlier missed months
        are not backfilled.
        """
        current = BillingPeriod.containing(now or self._clock())
        return await self.generate_for_period(current.previous(), due_in=current)

    async def generate_for_period(
        self, period: BillingPeriod, due_in: BillingPeriod | None = None
    ) -> GenerationReport:
        """Ensure every bill has an instance for ``period``.

        Args:
            period: The billing period to generate.
            due_in: Month the due dates fall in; defaults to ``period``
                itself. The scheduled run passes the month after it.

        Returns:
            Counts of created, skipped (already present) and failed bills.
        """
        due_in = due_in or period
        report = GenerationReport(period=period)

        async with self._uow_factory() as uow:
            bills = await uow.bills.get_all()

        bills_by_user: dict[UUID, list[Bill]] = defaultdict(list)
        for bill in bills:
            bills_by_user[bill.user_id].append(bill)

        logger.info(
            "bill_generation_started",
            period=period.label,
            bill_count=len(bills),
            user_count=len(bills_by_user),
        )

        for user_id, user_bills in bills_by_user.items():
            for bill in user_bills:
                try:
                    created = await self._generate_for_bill(bill, period, due_in)
                except Exception:
                    report.failed += 1
                    logger.exception(
                        "bill_generation_failed",
                        bill_id=str(bill.id),
                        user_id=str(user_id),
                        period=period.label,
                    )
                    continue

                if created:
                    report.created += 1
                else:
                    report.skipped += 1

        logger.info(
            "bill_generation_completed",
            period=period.label,
            created=report.created,
            skipped=report.skipped,
            failed=report.failed,
        )
        return report

    async def _generate_for_bill(
        self, bill: Bill, period: BillingPeriod, due_in: BillingPeriod
    ) -> bool:
        """Create the period's instance for one bill; False if it already exists."""
        try:
            async with self._uow_factory() as uow:
                instances = await uow.bill_instances.get_for_bill(bill.id)
                if any(instance.billing_period == period for instance in instances):
                    return False

                instance = BillInstance(
                    user_id=bill.user_id,
                    bill_id=bill.id,
                    period=period.label,
                    amount=carry_forward_amount(instances, period),
                    due_date=due_in.day(bill.due_day or DEFAULT_DUE_DAY),
                    description=instance_description(bill, period),
                    is_paid=False,
                )
                await uow.bill_instances.create(instance)
                await uow.commit()
                return True
        except DuplicateBillInstanceError:
            # A concurrent run inserted the same (bill, period) first
            logger.info(
                "bill_generation_race_lost",
                bill_id=str(bill.id),
                period=period.label,
            )
            return False
