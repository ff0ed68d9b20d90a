"""SQLAlchemy implementation of Bill repository."""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.bill import Bill, EBill
from infrastructure.database.models import BillModel


class SQLAlchemyBillRepository:
    """SQLAlchemy implementation of IBillRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Bill | None:
        """Get a bill by ID."""
        model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def get_all(self) -> list[Bill]:
        """Get every bill, grouped by owner for stable batch processing."""
        stmt = select(BillModel).order_by(BillModel.user_id, BillModel.created_at)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_all_for_user(self, user_id: UUID) -> list[Bill]:
        """Get all bills owned by a user."""
        stmt = (
            select(BillModel)
            .where(BillModel.user_id == user_id)
            .order_by(BillModel.name)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_for_profile(self, profile_id: UUID) -> list[Bill]:
        """Get all bills of a profile."""
        stmt = (
            select(BillModel)
            .where(BillModel.profile_id == profile_id)
            .order_by(BillModel.name)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, bill: Bill) -> Bill:
        """Create a new bill."""
        model = self._to_model(bill)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, bill: Bill) -> Bill:
        """Update an existing bill."""
        model = await self._get_model(bill.id)
        if not model:
            raise ValueError(f"Bill {bill.id} not found")

        model.name = bill.name
        model.due_day = bill.due_day
        model.e_bill_link = bill.e_bill.link if bill.e_bill else None
        model.e_bill_username = bill.e_bill.username if bill.e_bill else None
        model.e_bill_password = bill.e_bill.password if bill.e_bill else None

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete a bill."""
        model = await self._get_model(id)
        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    async def delete_for_profile(self, profile_id: UUID) -> int:
        """Delete all bills of a profile."""
        stmt = delete(BillModel).where(BillModel.profile_id == profile_id)
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def get_counts_for_profiles(self, profile_ids: list[UUID]) -> dict[UUID, int]:
        """Count bills per profile in a single query."""
        if not profile_ids:
            return {}
        stmt = (
            select(BillModel.profile_id, func.count().label("bill_count"))
            .where(BillModel.profile_id.in_(profile_ids))
            .group_by(BillModel.profile_id)
        )
        result = await self._session.execute(stmt)
        return {row.profile_id: row.bill_count for row in result}

    async def _get_model(self, id: UUID) -> BillModel | None:
        stmt = select(BillModel).where(BillModel.id == id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: BillModel) -> Bill:
        """Convert ORM model to domain entity."""
        e_bill = None
        if model.e_bill_link is not None:
            e_bill = EBill(
                link=model.e_bill_link,
                username=model.e_bill_username or "",
                password=model.e_bill_password or "",
            )
        return Bill(
            id=model.id,
            user_id=model.user_id,
            profile_id=model.profile_id,
            name=model.name,
            e_bill=e_bill,
            due_day=model.due_day,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Bill) -> BillModel:
        """Convert domain entity to ORM model."""
        return BillModel(
            id=entity.id,
            user_id=entity.user_id,
            profile_id=entity.profile_id,
            name=entity.name,
            e_bill_link=entity.e_bill.link if entity.e_bill else None,
            e_bill_username=entity.e_bill.username if entity.e_bill else None,
            e_bill_password=entity.e_bill.password if entity.e_bill else None,
            due_day=entity.due_day,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
