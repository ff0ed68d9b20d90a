"""Unit tests for BillGenerationService."""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from core.exceptions import DuplicateBillInstanceError
from domain.entities.bill import Bill
from domain.entities.bill_instance import BillInstance
from domain.entities.billing_period import BillingPeriod
from domain.services.bill_generation_service import (
    BillGenerationService,
    carry_forward_amount,
    instance_description,
)
from tests.unit.conftest import FakeUnitOfWork

NOV_2024 = BillingPeriod(2024, 11)
DEC_2024 = BillingPeriod(2024, 12)


def _bill(user_id: UUID, name: str = "Electricity", due_day: int | None = None) -> Bill:
    return Bill(user_id=user_id, profile_id=uuid4(), name=name, due_day=due_day)


def _instance(bill: Bill, period: str, amount: str, is_paid: bool = False) -> BillInstance:
    return BillInstance(
        user_id=bill.user_id,
        bill_id=bill.id,
        period=period,
        amount=Decimal(amount),
        due_date=date(2024, 1, 1),
        is_paid=is_paid,
    )


class InstanceStore:
    """Wires the fake repositories to an in-memory list of instances."""

    def __init__(self, uow: FakeUnitOfWork, bills: list[Bill]) -> None:
        self.instances: list[BillInstance] = []
        uow.bills.get_all.return_value = bills
        uow.bill_instances.get_for_bill.side_effect = self.get_for_bill
        uow.bill_instances.create.side_effect = self.create

    async def get_for_bill(self, bill_id: UUID) -> list[BillInstance]:
        return [i for i in self.instances if i.bill_id == bill_id]

    async def create(self, instance: BillInstance) -> BillInstance:
        self.instances.append(instance)
        return instance

    def created_for(self, bill: Bill, period: BillingPeriod) -> BillInstance:
        matches = [
            i for i in self.instances if i.bill_id == bill.id and i.period == period.label
        ]
        assert len(matches) == 1
        return matches[0]


@pytest.fixture
def service(uow: FakeUnitOfWork) -> BillGenerationService:
    return BillGenerationService(lambda: uow)


# --- carry_forward_amount ---


class TestCarryForwardAmount:
    def test_takes_latest_earlier_period_regardless_of_order(self, user_id: UUID):
        bill = _bill(user_id)
        instances = [
            _instance(bill, "2024-10", "55.00"),
            _instance(bill, "2024-08", "40.00"),
            _instance(bill, "2024-09", "48.00"),
        ]

        assert carry_forward_amount(instances, NOV_2024) == Decimal("55.00")
        assert carry_forward_amount(list(reversed(instances)), NOV_2024) == Decimal("55.00")

    def test_ignores_target_and_later_periods(self, user_id: UUID):
        bill = _bill(user_id)
        instances = [
            _instance(bill, "2024-09", "30.00"),
            _instance(bill, "2024-11", "99.00"),
            _instance(bill, "2025-01", "77.00"),
        ]

        assert carry_forward_amount(instances, NOV_2024) == Decimal("30.00")

    def test_ignores_unparsable_periods(self, user_id: UUID):
        bill = _bill(user_id)
        instances = [
            _instance(bill, "garbage", "500.00"),
            _instance(bill, "2024-07", "20.00"),
        ]

        assert carry_forward_amount(instances, NOV_2024) == Decimal("20.00")

    def test_accepts_month_name_labels(self, user_id: UUID):
        bill = _bill(user_id)
        instances = [_instance(bill, "October 2024", "61.50")]

        assert carry_forward_amount(instances, NOV_2024) == Decimal("61.50")

    def test_zero_without_history(self):
        assert carry_forward_amount([], NOV_2024) == Decimal("0.00")


def test_instance_description_uses_readable_month(user_id: UUID):
    bill = _bill(user_id, name="Water")

    assert instance_description(bill, NOV_2024) == "Water's monthly instance for November 2024"


# --- run ---


class TestRun:
    @pytest.mark.asyncio
    async def test_targets_previous_month_with_due_date_in_current(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        bill = _bill(user_id)
        store = InstanceStore(uow, [bill])
        store.instances.append(_instance(bill, "2024-10", "50.00", is_paid=True))

        report = await service.run(datetime(2024, 12, 1, 0, 1, tzinfo=timezone.utc))

        assert report.period == NOV_2024
        assert report.created == 1
        created = store.created_for(bill, NOV_2024)
        assert created.amount == Decimal("50.00")
        assert created.due_date == date(2024, 12, 1)
        assert created.is_paid is False
        assert created.user_id == user_id
        assert created.description == "Electricity's monthly instance for November 2024"

    @pytest.mark.asyncio
    async def test_january_run_targets_december_of_previous_year(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        bill = _bill(user_id)
        store = InstanceStore(uow, [bill])

        report = await service.run(datetime(2025, 1, 1, tzinfo=timezone.utc))

        assert report.period == DEC_2024
        assert store.created_for(bill, DEC_2024).due_date == date(2025, 1, 1)

    @pytest.mark.asyncio
    async def test_uses_injected_clock(self, uow: FakeUnitOfWork, user_id: UUID):
        bill = _bill(user_id)
        InstanceStore(uow, [bill])
        service = BillGenerationService(
            lambda: uow, clock=lambda: datetime(2024, 3, 15, tzinfo=timezone.utc)
        )

        report = await service.run()

        assert report.period == BillingPeriod(2024, 2)


# --- generate_for_period ---


class TestGenerateForPeriod:
    @pytest.mark.asyncio
    async def test_cold_start_creates_zero_amount_instance(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        bill = _bill(user_id, name="Water")
        store = InstanceStore(uow, [bill])

        report = await service.generate_for_period(NOV_2024)

        created = store.created_for(bill, NOV_2024)
        assert created.amount == Decimal("0.00")
        assert created.due_date == date(2024, 11, 1)
        assert report.created == 1
        assert uow.committed

    @pytest.mark.asyncio
    async def test_skips_bill_that_already_has_the_period(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        bill = _bill(user_id)
        store = InstanceStore(uow, [bill])
        store.instances.append(_instance(bill, "2024-11", "70.00"))

        report = await service.generate_for_period(NOV_2024)

        assert report.created == 0
        assert report.skipped == 1
        uow.bill_instances.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_existing_month_name_label_counts_as_same_period(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        bill = _bill(user_id)
        store = InstanceStore(uow, [bill])
        store.instances.append(_instance(bill, "November 2024", "70.00"))

        report = await service.generate_for_period(NOV_2024)

        assert report.skipped == 1
        uow.bill_instances.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_second_run_creates_nothing(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        bills = [_bill(user_id, "Electricity"), _bill(user_id, "Water")]
        store = InstanceStore(uow, bills)

        first = await service.generate_for_period(NOV_2024)
        second = await service.generate_for_period(NOV_2024)

        assert first.created == 2
        assert second.created == 0
        assert second.skipped == 2
        assert len(store.instances) == 2

    @pytest.mark.asyncio
    async def test_instances_belong_to_each_bills_owner(
        self,
        service: BillGenerationService,
        uow: FakeUnitOfWork,
        user_id: UUID,
        other_user_id: UUID,
    ):
        mine, theirs = _bill(user_id), _bill(other_user_id)
        store = InstanceStore(uow, [mine, theirs])

        await service.generate_for_period(NOV_2024)

        assert store.created_for(mine, NOV_2024).user_id == user_id
        assert store.created_for(theirs, NOV_2024).user_id == other_user_id

    @pytest.mark.asyncio
    async def test_due_day_is_clamped_to_month_length(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        bill = _bill(user_id, due_day=31)
        store = InstanceStore(uow, [bill])

        await service.generate_for_period(BillingPeriod(2024, 2))

        assert store.created_for(bill, BillingPeriod(2024, 2)).due_date == date(2024, 2, 29)

    @pytest.mark.asyncio
    async def test_explicit_due_month(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        bill = _bill(user_id, due_day=15)
        store = InstanceStore(uow, [bill])

        await service.generate_for_period(NOV_2024, due_in=DEC_2024)

        assert store.created_for(bill, NOV_2024).due_date == date(2024, 12, 15)

    @pytest.mark.asyncio
    async def test_failure_on_one_bill_does_not_stop_the_run(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        broken, healthy = _bill(user_id, "Broken"), _bill(user_id, "Healthy")
        store = InstanceStore(uow, [broken, healthy])

        async def get_for_bill(bill_id: UUID) -> list[BillInstance]:
            if bill_id == broken.id:
                raise RuntimeError("database hiccup")
            return await store.get_for_bill(bill_id)

        uow.bill_instances.get_for_bill.side_effect = get_for_bill

        report = await service.generate_for_period(NOV_2024)

        assert report.failed == 1
        assert report.created == 1
        assert report.processed == 2
        assert store.created_for(healthy, NOV_2024).bill_id == healthy.id

    @pytest.mark.asyncio
    async def test_lost_race_counts_as_skipped(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        bill = _bill(user_id)
        InstanceStore(uow, [bill])
        uow.bill_instances.create.side_effect = DuplicateBillInstanceError(
            str(bill.id), NOV_2024.label
        )

        report = await service.generate_for_period(NOV_2024)

        assert report.skipped == 1
        assert report.failed == 0

    @pytest.mark.asyncio
    async def test_no_bills_is_an_empty_run(
        self, service: BillGenerationService, uow: FakeUnitOfWork
    ):
        InstanceStore(uow, [])

        report = await service.generate_for_period(NOV_2024)

        assert report.processed == 0


# --- reference scenarios ---


class TestDecember2024Scenarios:
    @pytest.mark.asyncio
    async def test_electricity_carries_november_amount_into_december(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        electricity = _bill(user_id, "Electricity")
        store = InstanceStore(uow, [electricity])
        store.instances.append(_instance(electricity, "2024-11", "50.00"))

        report = await service.generate_for_period(DEC_2024)

        assert report.created == 1
        created = store.created_for(electricity, DEC_2024)
        assert created.amount == Decimal("50.00")
        assert created.is_paid is False
        assert created.due_date.year == 2024
        assert created.due_date.month == 12

    @pytest.mark.asyncio
    async def test_water_without_history_starts_at_zero(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        water = _bill(user_id, "Water")
        store = InstanceStore(uow, [water])

        await service.generate_for_period(DEC_2024)

        created = store.created_for(water, DEC_2024)
        assert created.amount == Decimal("0.00")
        assert created.is_paid is False

    @pytest.mark.asyncio
    async def test_double_run_keeps_a_single_instance(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        bill = _bill(user_id)
        store = InstanceStore(uow, [bill])

        await service.generate_for_period(DEC_2024)
        await service.generate_for_period(DEC_2024)

        store.created_for(bill, DEC_2024)

    @pytest.mark.asyncio
    async def test_only_unparsable_history_starts_at_zero(
        self, service: BillGenerationService, uow: FakeUnitOfWork, user_id: UUID
    ):
        bill = _bill(user_id)
        store = InstanceStore(uow, [bill])
        store.instances.append(_instance(bill, "not a month", "80.00"))

        await service.generate_for_period(DEC_2024)

        assert store.created_for(bill, DEC_2024).amount == Decimal("0.00")
