"""Bill repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.bill import Bill


class IBillRepository(Protocol):
    """Repository interface for Bill entities."""

    async def get(self, id: UUID) -> Bill | None:
        """Get a bill by ID."""
        ...

    async def get_all(self) -> list[Bill]:
        """Get every bill in the system, across all owners."""
        ...

    async def get_all_for_user(self, user_id: UUID) -> list[Bill]:
        """Get all bills owned by a user."""
        ...

    async def get_for_profile(self, profile_id: UUID) -> list[Bill]:
        """Get all bills attached to a profile."""
        ...

    async def create(self, bill: Bill) -> Bill:
        """Create a new bill."""
        ...

    async def update(self, bill: Bill) -> Bill:
        """Update an existing bill."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a bill and return success status."""
        ...

    async def delete_for_profile(self, profile_id: UUID) -> int:
        """Delete every bill of a profile and return how many were removed."""
        ...

    async def get_counts_for_profiles(self, profile_ids: list[UUID]) -> dict[UUID, int]:
        """Count bills per profile in a single query."""
        ...
