"""Bill instance service layer with business logic."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal
from uuid import UUID

from core.exceptions import BillInstanceNotFoundError, BillNotFoundError, ProfileNotFoundError
from domain.entities.bill import Bill
from domain.entities.bill_instance import BillInstance, BillInstanceView
from domain.entities.billing_period import BillingPeriod
from domain.entities.profile import DEFAULT_PROFILE_COLOR, Profile
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.ownership import require_owner

UNKNOWN_BILL = "Unknown Bill"
UNKNOWN_PROFILE = "Unknown Profile"


class BillInstanceService:
    """Service layer for BillInstance business logic."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get_for_bill(self, bill_id: UUID, user_id: UUID) -> list[BillInstance]:
        """Get all instances of an owned bill, oldest period first."""
        async with self._uow_factory() as uow:
            bill = await uow.bills.get(bill_id)
            if not bill:
                raise BillNotFoundError(str(bill_id))
            require_owner(bill.user_id, user_id, "access", "bill")
            return await uow.bill_instances.get_for_bill(bill_id)  # type: ignore[no-any-return]

    async def get_by_id(self, instance_id: UUID, user_id: UUID) -> BillInstance:
        """Get a single owned instance."""
        async with self._uow_factory() as uow:
            return await self._get_owned(uow, instance_id, user_id, "access")

    async def create(
        self,
        user_id: UUID,
        bill_id: UUID,
        period: BillingPeriod,
        amount: Decimal,
        due_date: date,
        description: str | None = None,
    ) -> BillInstance:
        """Record an unpaid instance of an owned bill.

        Raises:
            DuplicateBillInstanceError: The bill already has this period.
        """
        async with self._uow_factory() as uow:
            bill = await uow.bills.get(bill_id)
            if not bill:
                raise BillNotFoundError(str(bill_id))
            require_owner(bill.user_id, user_id, "add instances to", "bill")

            instance = BillInstance(
                user_id=user_id,
                bill_id=bill_id,
                period=period.label,
                amount=amount,
                due_date=due_date,
                description=description,
                is_paid=False,
            )
            created = await uow.bill_instances.create(instance)
            await uow.commit()
            return created  # type: ignore[no-any-return]

    async def update(
        self,
        instance_id: UUID,
        user_id: UUID,
        period: BillingPeriod | None = None,
        amount: Decimal | None = None,
        due_date: date | None = None,
        description: str | None = None,
        is_paid: bool | None = None,
    ) -> BillInstance:
        """Patch an owned instance; fields left as None keep their value."""
        async with self._uow_factory() as uow:
            instance = await self._get_owned(uow, instance_id, user_id, "update")

            if period is not None:
                instance.period = period.label
            if amount is not None:
                instance.amount = amount
            if due_date is not None:
                instance.due_date = due_date
            if description is not None:
                instance.description = description
            if is_paid is not None:
                instance.is_paid = is_paid

            updated = await uow.bill_instances.update(instance)
            await uow.commit()
            return updated  # type: ignore[no-any-return]

    async def toggle_paid(self, instance_id: UUID, user_id: UUID) -> BillInstance:
        """Flip the paid flag of an owned instance."""
        async with self._uow_factory() as uow:
            instance = await self._get_owned(uow, instance_id, user_id, "update")
            instance.toggle_paid()
            updated = await uow.bill_instances.update(instance)
            await uow.commit()
            return updated  # type: ignore[no-any-return]

    async def delete(self, instance_id: UUID, user_id: UUID) -> bool:
        """Delete an owned instance."""
        async with self._uow_factory() as uow:
            await self._get_owned(uow, instance_id, user_id, "delete")
            deleted = await uow.bill_instances.delete(instance_id)
            await uow.commit()
            return deleted  # type: ignore[no-any-return]

    async def get_all_for_user(
        self, user_id: UUID, period: BillingPeriod | None = None
    ) -> list[BillInstanceView]:
        """Get the caller's instances labelled with bill and profile names.

        Feeds the calendar and dashboard views; restrict to one month with
        ``period``.
        """
        async with self._uow_factory() as uow:
            instances = await uow.bill_instances.get_all_for_user(
                user_id, period.label if period else None
            )
            bills = {bill.id: bill for bill in await uow.bills.get_all_for_user(user_id)}
            profiles = {p.id: p for p in await uow.profiles.get_all_for_user(user_id)}
            return [_to_view(instance, bills, profiles) for instance in instances]

    async def get_for_profile(
        self, profile_id: UUID, user_id: UUID
    ) -> list[BillInstanceView]:
        """Get the labelled instances of every bill of an owned profile."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(profile_id)
            if not profile:
                raise ProfileNotFoundError(str(profile_id))
            require_owner(profile.user_id, user_id, "access", "profile")

            bills = {bill.id: bill for bill in await uow.bills.get_for_profile(profile_id)}
            instances = await uow.bill_instances.get_for_bills(list(bills))
            profiles = {profile.id: profile}
            return [
                _to_view(instance, bills, profiles)
                for instance in instances
                if instance.user_id == user_id
            ]

    async def _get_owned(
        self, uow: IUnitOfWork, instance_id: UUID, user_id: UUID, action: str
    ) -> BillInstance:
        instance = await uow.bill_instances.get(instance_id)
        if not instance:
            raise BillInstanceNotFoundError(str(instance_id))
        require_owner(instance.user_id, user_id, action, "bill instance")
        return instance  # type: ignore[no-any-return]


def _to_view(
    instance: BillInstance,
    bills: dict[UUID, Bill],
    profiles: dict[UUID, Profile],
) -> BillInstanceView:
    bill = bills.get(instance.bill_id)
    profile = profiles.get(bill.profile_id) if bill else None
    return BillInstanceView(
        instance=instance,
        bill_name=bill.name if bill else UNKNOWN_BILL,
        profile_id=bill.profile_id if bill else None,
        profile_name=profile.name if profile else UNKNOWN_PROFILE,
        profile_color=profile.color if profile else DEFAULT_PROFILE_COLOR,
    )
