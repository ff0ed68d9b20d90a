"""Bill service layer with business logic."""

from collections.abc import Callable
from typing import cast
from uuid import UUID

import structlog

from core.exceptions import BillNotFoundError, ProfileNotFoundError
from domain.entities.bill import Bill, BillWithCount, EBill
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.ownership import require_owner

logger = structlog.get_logger()


class BillService:
    """Service layer for Bill business logic."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get_for_profile(self, profile_id: UUID, user_id: UUID) -> list[BillWithCount]:
        """Get the bills of an owned profile with their live instance counts."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(profile_id)
            if not profile:
                raise ProfileNotFoundError(str(profile_id))
            require_owner(profile.user_id, user_id, "access", "profile")

            bills = await uow.bills.get_for_profile(profile_id)
            counts = await uow.bill_instances.get_counts_for_bills([b.id for b in bills])
            return [
                BillWithCount(bill=bill, instance_count=counts.get(bill.id, 0))
                for bill in bills
            ]

    async def get_by_id(self, bill_id: UUID, user_id: UUID) -> BillWithCount:
        """Get an owned bill with its live instance count."""
        async with self._uow_factory() as uow:
            bill = await self._get_owned(uow, bill_id, user_id, "access")
            counts = await uow.bill_instances.get_counts_for_bills([bill.id])
            return BillWithCount(bill=bill, instance_count=counts.get(bill.id, 0))

    async def create(
        self,
        user_id: UUID,
        profile_id: UUID,
        name: str,
        e_bill: EBill | None = None,
        due_day: int | None = None,
    ) -> Bill:
        """Create a bill under a profile the caller owns."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(profile_id)
            if not profile:
                raise ProfileNotFoundError(str(profile_id))
            require_owner(profile.user_id, user_id, "add bills to", "profile")

            bill = Bill(
                user_id=user_id,
                profile_id=profile_id,
                name=name,
                e_bill=e_bill,
                due_day=due_day,
            )
            created = await uow.bills.create(bill)
            await uow.commit()
            return created

    async def update(
        self,
        bill_id: UUID,
        user_id: UUID,
        name: str | None = None,
        e_bill: object = ...,  # Sentinel to detect explicit None
        due_day: object = ...,
    ) -> Bill:
        """Patch an owned bill. Passing None for e_bill or due_day clears it."""
        async with self._uow_factory() as uow:
            bill = await self._get_owned(uow, bill_id, user_id, "update")

            if name is not None:
                bill.name = name
            if e_bill is not ...:
                bill.e_bill = cast(EBill | None, e_bill)
            if due_day is not ...:
                bill.due_day = cast(int | None, due_day)

            updated = await uow.bills.update(bill)
            await uow.commit()
            return updated

    async def delete(self, bill_id: UUID, user_id: UUID) -> bool:
        """Delete a bill and all of its instances in one transaction."""
        async with self._uow_factory() as uow:
            await self._get_owned(uow, bill_id, user_id, "delete")

            instances_deleted = await uow.bill_instances.delete_for_bills([bill_id])
            deleted = await uow.bills.delete(bill_id)
            await uow.commit()

            logger.info(
                "bill_deleted",
                bill_id=str(bill_id),
                instances_deleted=instances_deleted,
            )
            return deleted  # type: ignore[no-any-return]

    async def _get_owned(
        self, uow: IUnitOfWork, bill_id: UUID, user_id: UUID, action: str
    ) -> Bill:
        bill = await uow.bills.get(bill_id)
        if not bill:
            raise BillNotFoundError(str(bill_id))
        require_owner(bill.user_id, user_id, action, "bill")
        return bill
