"""SQLAlchemy implementation of BillInstance repository."""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateBillInstanceError
from domain.entities.bill_instance import BillInstance
from infrastructure.database.models import BillInstanceModel

# Matches the PostgreSQL constraint name and the SQLite column list
_PERIOD_CONFLICT_MARKERS = (
    "uq_bill_instances_bill_period",
    "bill_instances.bill_id, bill_instances.period",
)


def _is_period_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return any(marker in message for marker in _PERIOD_CONFLICT_MARKERS)


class SQLAlchemyBillInstanceRepository:
    """SQLAlchemy implementation of IBillInstanceRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> BillInstance | None:
        """Get a bill instance by ID."""
        model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def get_for_bill(self, bill_id: UUID) -> list[BillInstance]:
        """Get all instances of a bill."""
        stmt = (
            select(BillInstanceModel)
            .where(BillInstanceModel.bill_id == bill_id)
            .order_by(BillInstanceModel.period, BillInstanceModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_for_bills(self, bill_ids: list[UUID]) -> list[BillInstance]:
        """Get all instances of several bills."""
        if not bill_ids:
            return []
        stmt = (
            select(BillInstanceModel)
            .where(BillInstanceModel.bill_id.in_(bill_ids))
            .order_by(BillInstanceModel.period, BillInstanceModel.due_date)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_all_for_user(
        self, user_id: UUID, period: str | None = None
    ) -> list[BillInstance]:
        """Get a user's instances, optionally for one period only."""
        stmt = select(BillInstanceModel).where(BillInstanceModel.user_id == user_id)
        if period is not None:
            stmt = stmt.where(BillInstanceModel.period == period)
        stmt = stmt.order_by(BillInstanceModel.due_date, BillInstanceModel.period)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, instance: BillInstance) -> BillInstance:
        """Create a new instance, refusing a second one for the same period."""
        model = self._to_model(instance)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            if _is_period_conflict(exc):
                raise DuplicateBillInstanceError(str(instance.bill_id), instance.period) from exc
            raise
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, instance: BillInstance) -> BillInstance:
        """Update an existing instance."""
        model = await self._get_model(instance.id)
        if not model:
            raise ValueError(f"BillInstance {instance.id} not found")

        model.period = instance.period
        model.amount = instance.amount
        model.due_date = instance.due_date
        model.description = instance.description
        model.is_paid = instance.is_paid

        try:
            await self._session.flush()
        except IntegrityError as exc:
            if _is_period_conflict(exc):
                raise DuplicateBillInstanceError(str(instance.bill_id), instance.period) from exc
            raise
        await self._session.refresh(model)
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete an instance."""
        model = await self._get_model(id)
        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    async def delete_for_bills(self, bill_ids: list[UUID]) -> int:
        """Delete every instance of the given bills."""
        if not bill_ids:
            return 0
        stmt = delete(BillInstanceModel).where(BillInstanceModel.bill_id.in_(bill_ids))
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def get_counts_for_bills(self, bill_ids: list[UUID]) -> dict[UUID, int]:
        """Count instances per bill in a single query."""
        if not bill_ids:
            return {}
        stmt = (
            select(BillInstanceModel.bill_id, func.count().label("instance_count"))
            .where(BillInstanceModel.bill_id.in_(bill_ids))
            .group_by(BillInstanceModel.bill_id)
        )
        result = await self._session.execute(stmt)
        return {row.bill_id: row.instance_count for row in result}

    async def _get_model(self, id: UUID) -> BillInstanceModel | None:
        stmt = select(BillInstanceModel).where(BillInstanceModel.id == id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: BillInstanceModel) -> BillInstance:
        """Convert ORM model to domain entity."""
        return BillInstance(
            id=model.id,
            user_id=model.user_id,
            bill_id=model.bill_id,
            period=model.period,
            amount=model.amount,
            due_date=model.due_date,
            description=model.description,
            is_paid=model.is_paid,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: BillInstance) -> BillInstanceModel:
        """Convert domain entity to ORM model."""
        return BillInstanceModel(
            id=entity.id,
            user_id=entity.user_id,
            bill_id=entity.bill_id,
            period=entity.period,
            amount=entity.amount,
            due_date=entity.due_date,
            description=entity.description,
            is_paid=entity.is_paid,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
