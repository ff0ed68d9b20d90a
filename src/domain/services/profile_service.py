"""Profile service layer with business logic."""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import ProfileNotFoundError
from domain.entities.profile import DEFAULT_PROFILE_COLOR, Address, Profile, ProfileWithCount
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.ownership import require_owner

logger = structlog.get_logger()


class ProfileService:
    """Service layer for Profile business logic."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get_all_for_user(self, user_id: UUID) -> list[ProfileWithCount]:
        """Get all profiles of a user with their live bill counts."""
        async with self._uow_factory() as uow:
            profiles = await uow.profiles.get_all_for_user(user_id)
            counts = await uow.bills.get_counts_for_profiles([p.id for p in profiles])
            return [
                ProfileWithCount(profile=profile, bill_count=counts.get(profile.id, 0))
                for profile in profiles
            ]

    async def get_by_id(self, profile_id: UUID, user_id: UUID) -> ProfileWithCount:
        """Get a single owned profile with its live bill count."""
        async with self._uow_factory() as uow:
            profile = await self._get_owned(uow, profile_id, user_id, "access")
            counts = await uow.bills.get_counts_for_profiles([profile.id])
            return ProfileWithCount(profile=profile, bill_count=counts.get(profile.id, 0))

    async def create(
        self,
        user_id: UUID,
        name: str,
        address: Address,
        color: str = DEFAULT_PROFILE_COLOR,
    ) -> Profile:
        """Create a new profile owned by the caller."""
        async with self._uow_factory() as uow:
            profile = Profile(user_id=user_id, name=name, address=address, color=color)
            created = await uow.profiles.create(profile)
            await uow.commit()
            return created

    async def update(
        self,
        profile_id: UUID,
        user_id: UUID,
        name: str | None = None,
        address: Address | None = None,
        color: str | None = None,
    ) -> Profile:
        """Patch the name, address or color of an owned profile."""
        async with self._uow_factory() as uow:
            profile = await self._get_owned(uow, profile_id, user_id, "update")

            if name is not None:
                profile.name = name
            if address is not None:
                profile.address = address
            if color is not None:
                profile.color = color.upper()

            updated = await uow.profiles.update(profile)
            await uow.commit()
            return updated

    async def delete(self, profile_id: UUID, user_id: UUID) -> bool:
        """Delete a profile together with its bills and their instances.

        Children go first and everything commits in one transaction, so a
        failure part-way leaves nothing orphaned.
        """
        async with self._uow_factory() as uow:
            await self._get_owned(uow, profile_id, user_id, "delete")

            bills = await uow.bills.get_for_profile(profile_id)
            bill_ids = [bill.id for bill in bills]
            instances_deleted = await uow.bill_instances.delete_for_bills(bill_ids)
            bills_deleted = await uow.bills.delete_for_profile(profile_id)
            deleted = await uow.profiles.delete(profile_id)
            await uow.commit()

            logger.info(
                "profile_deleted",
                profile_id=str(profile_id),
                bills_deleted=bills_deleted,
                instances_deleted=instances_deleted,
            )
            return deleted  # type: ignore[no-any-return]

    async def _get_owned(
        self, uow: IUnitOfWork, profile_id: UUID, user_id: UUID, action: str
    ) -> Profile:
        profile = await uow.profiles.get(profile_id)
        if not profile:
            raise ProfileNotFoundError(str(profile_id))
        require_owner(profile.user_id, user_id, action, "profile")
        return profile
