"""Bill instance repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.bill_instance import BillInstance


class IBillInstanceRepository(Protocol):
    """Repository interface for BillInstance entities."""

    async def get(self, id: UUID) -> BillInstance | None:
        """Get a bill instance by ID."""
        ...

    async def get_for_bill(self, bill_id: UUID) -> list[BillInstance]:
        """Get all instances of a bill."""
        ...

    async def get_for_bills(self, bill_ids: list[UUID]) -> list[BillInstance]:
        """Get all instances of several bills in a single query."""
        ...

    async def get_all_for_user(
        self, user_id: UUID, period: str | None = None
    ) -> list[BillInstance]:
        """Get a user's instances, optionally restricted to one period label."""
        ...

    async def create(self, instance: BillInstance) -> BillInstance:
        """Create a new instance.

        Raises:
            DuplicateBillInstanceError: the bill already has this period.
        """
        ...

    async def update(self, instance: BillInstance) -> BillInstance:
        """Update an existing instance."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete an instance and return success status."""
        ...

    async def delete_for_bills(self, bill_ids: list[UUID]) -> int:
        """Delete every instance of the given bills and return the count."""
        ...

    async def get_counts_for_bills(self, bill_ids: list[UUID]) -> dict[UUID, int]:
        """Count instances per bill in a single query."""
        ...
