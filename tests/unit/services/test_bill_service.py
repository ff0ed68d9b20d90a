"""Unit tests for BillService."""

from uuid import UUID, uuid4

import pytest

from core.exceptions import AuthorizationError, BillNotFoundError, ProfileNotFoundError
from domain.entities.bill import Bill, EBill
from domain.entities.profile import Address, Profile
from domain.services.bill_service import BillService
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def service(uow: FakeUnitOfWork) -> BillService:
    return BillService(lambda: uow)


def _profile(user_id: UUID) -> Profile:
    return Profile(user_id=user_id, name="Home", address=Address("1 Main St", "Oslo", "NO"))


def _bill(user_id: UUID, **kwargs) -> Bill:
    return Bill(user_id=user_id, profile_id=uuid4(), name="Electricity", **kwargs)


# --- get_for_profile ---


class TestGetForProfile:
    @pytest.mark.asyncio
    async def test_returns_bills_with_instance_counts(
        self, service: BillService, uow: FakeUnitOfWork, user_id: UUID
    ):
        profile = _profile(user_id)
        bill = _bill(user_id)
        uow.profiles.get.return_value = profile
        uow.bills.get_for_profile.return_value = [bill]
        uow.bill_instances.get_counts_for_bills.return_value = {bill.id: 4}

        result = await service.get_for_profile(profile.id, user_id)

        assert result[0].bill is bill
        assert result[0].instance_count == 4

    @pytest.mark.asyncio
    async def test_rejects_foreign_profile(
        self, service: BillService, uow: FakeUnitOfWork, user_id: UUID, other_user_id: UUID
    ):
        uow.profiles.get.return_value = _profile(other_user_id)

        with pytest.raises(AuthorizationError):
            await service.get_for_profile(uuid4(), user_id)

        uow.bills.get_for_profile.assert_not_called()


# --- create ---


class TestCreate:
    @pytest.mark.asyncio
    async def test_creates_bill_under_owned_profile(
        self, service: BillService, uow: FakeUnitOfWork, user_id: UUID
    ):
        profile = _profile(user_id)
        uow.profiles.get.return_value = profile
        uow.bills.create.side_effect = lambda bill: bill
        e_bill = EBill(link="https://power.example.com", username="me", password="pw")

        result = await service.create(user_id, profile.id, "Electricity", e_bill, due_day=15)

        assert result.profile_id == profile.id
        assert result.user_id == user_id
        assert result.e_bill == e_bill
        assert result.due_day == 15
        assert uow.committed

    @pytest.mark.asyncio
    async def test_raises_when_profile_missing(self, service: BillService, uow: FakeUnitOfWork):
        uow.profiles.get.return_value = None

        with pytest.raises(ProfileNotFoundError):
            await service.create(uuid4(), uuid4(), "Water")

    @pytest.mark.asyncio
    async def test_rejects_foreign_profile(
        self, service: BillService, uow: FakeUnitOfWork, user_id: UUID, other_user_id: UUID
    ):
        uow.profiles.get.return_value = _profile(other_user_id)

        with pytest.raises(AuthorizationError) as exc_info:
            await service.create(user_id, uuid4(), "Water")

        assert exc_info.value.message == "Unauthorized to add bills to this profile"
        uow.bills.create.assert_not_called()


# --- update ---


class TestUpdate:
    @pytest.mark.asyncio
    async def test_keeps_omitted_fields(
        self, service: BillService, uow: FakeUnitOfWork, user_id: UUID
    ):
        e_bill = EBill(link="https://water.example.com", username="u", password="p")
        bill = _bill(user_id, e_bill=e_bill, due_day=10)
        uow.bills.get.return_value = bill
        uow.bills.update.side_effect = lambda b: b

        result = await service.update(bill.id, user_id, name="Power")

        assert result.name == "Power"
        assert result.e_bill == e_bill
        assert result.due_day == 10

    @pytest.mark.asyncio
    async def test_explicit_none_clears_fields(
        self, service: BillService, uow: FakeUnitOfWork, user_id: UUID
    ):
        bill = _bill(user_id, e_bill=EBill("https://x.example.com", "u", "p"), due_day=10)
        uow.bills.get.return_value = bill
        uow.bills.update.side_effect = lambda b: b

        result = await service.update(bill.id, user_id, e_bill=None, due_day=None)

        assert result.e_bill is None
        assert result.due_day is None

    @pytest.mark.asyncio
    async def test_rejects_other_owner(
        self, service: BillService, uow: FakeUnitOfWork, user_id: UUID, other_user_id: UUID
    ):
        uow.bills.get.return_value = _bill(other_user_id)

        with pytest.raises(AuthorizationError) as exc_info:
            await service.update(uuid4(), user_id, name="Stolen")

        assert exc_info.value.message == "Unauthorized to update this bill"


# --- delete ---


class TestDelete:
    @pytest.mark.asyncio
    async def test_deletes_instances_with_bill(
        self, service: BillService, uow: FakeUnitOfWork, user_id: UUID
    ):
        bill = _bill(user_id)
        uow.bills.get.return_value = bill
        uow.bill_instances.delete_for_bills.return_value = 3
        uow.bills.delete.return_value = True

        assert await service.delete(bill.id, user_id) is True

        uow.bill_instances.delete_for_bills.assert_called_once_with([bill.id])
        uow.bills.delete.assert_called_once_with(bill.id)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_raises_not_found(self, service: BillService, uow: FakeUnitOfWork):
        uow.bills.get.return_value = None

        with pytest.raises(BillNotFoundError):
            await service.delete(uuid4(), uuid4())

        uow.bill_instances.delete_for_bills.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejects_other_owner_without_deleting(
        self, service: BillService, uow: FakeUnitOfWork, user_id: UUID, other_user_id: UUID
    ):
        uow.bills.get.return_value = _bill(other_user_id)

        with pytest.raises(AuthorizationError) as exc_info:
            await service.delete(uuid4(), user_id)

        assert exc_info.value.message == "Unauthorized to delete this bill"
        uow.bill_instances.delete_for_bills.assert_not_called()
        uow.bills.delete.assert_not_called()
        assert not uow.committed
