"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from domain.services.bill_generation_service import BillGenerationService
from domain.services.bill_instance_service import BillInstanceService
from domain.services.bill_service import BillService
from domain.services.profile_service import ProfileService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(get_uow_factory())


@lru_cache
def get_bill_service() -> BillService:
    """Get Bill service instance."""
    return BillService(get_uow_factory())


@lru_cache
def get_bill_instance_service() -> BillInstanceService:
    """Get BillInstance service instance."""
    return BillInstanceService(get_uow_factory())


@lru_cache
def get_bill_generation_service() -> BillGenerationService:
    """Get the monthly generator used by the scheduler and the CLI."""
    return BillGenerationService(get_uow_factory())
