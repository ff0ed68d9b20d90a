"""Bill instance API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_bill_instance_service
from api.v1.schemas.bill_instance import (
    BillInstanceCreate,
    BillInstanceDetailResponse,
    BillInstanceListResponse,
    BillInstanceResponse,
    BillInstanceUpdate,
    BillInstanceWithNamesListResponse,
    BillInstanceWithNamesResponse,
)
from core.exceptions import AppException, ErrorCode
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.bill_instance import BillInstance, BillInstanceView
from domain.entities.billing_period import BillingPeriod
from domain.services.bill_instance_service import BillInstanceService


def get_period_filter(
    period: str | None = Query(None, description="Billing month, YYYY-MM"),
) -> BillingPeriod | None:
    """Parse the optional ``period`` query parameter."""
    if period is None:
        return None
    try:
        return BillingPeriod.parse(period)
    except ValueError as exc:
        raise AppException(
            ErrorCode.VALIDATION_ERROR,
            str(exc),
            422,
            {"period": period},
        ) from exc


router = APIRouter(prefix="/bill-instances", tags=["bill-instances"])


@router.get(
    "",
    response_model=BillInstanceWithNamesListResponse,
    summary="List bill instances",
    responses={
        200: {"description": "Instances labelled with bill and profile names"},
        422: {"description": "Malformed period"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_bill_instances(
    request: Request,
    user: CurrentUser,
    period: BillingPeriod | None = Depends(get_period_filter),
    service: BillInstanceService = Depends(get_bill_instance_service),
) -> BillInstanceWithNamesListResponse:
    """
    Get the caller's bill instances for the calendar and dashboard views.

    Pass `period=YYYY-MM` to restrict the list to one billing month.
    """
    views = await service.get_all_for_user(user.id, period)
    return BillInstanceWithNamesListResponse(
        data=[_build_view_response(view) for view in views],
        meta={
            "total": len(views),
            "period": period.label if period else None,
        },
    )


@router.get(
    "/{instance_id}",
    response_model=BillInstanceDetailResponse,
    summary="Get a bill instance",
    responses={
        403: {"description": "Instance belongs to another user"},
        404: {"description": "Bill instance not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_bill_instance(
    request: Request,
    instance_id: UUID,
    user: CurrentUser,
    service: BillInstanceService = Depends(get_bill_instance_service),
) -> BillInstanceDetailResponse:
    """Get a single bill instance."""
    instance = await service.get_by_id(instance_id, user.id)
    return BillInstanceDetailResponse(data=_build_instance_response(instance))


@router.patch(
    "/{instance_id}",
    response_model=BillInstanceDetailResponse,
    summary="Update a bill instance",
    responses={
        403: {"description": "Instance belongs to another user"},
        404: {"description": "Bill instance not found"},
        409: {"description": "Bill already has an instance for that period"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_bill_instance(
    request: Request,
    instance_id: UUID,
    body: BillInstanceUpdate,
    user: CurrentUser,
    service: BillInstanceService = Depends(get_bill_instance_service),
) -> BillInstanceDetailResponse:
    """Update amount, due date, description, period or paid status."""
    instance = await service.update(
        instance_id=instance_id,
        user_id=user.id,
        period=BillingPeriod.parse(body.period) if body.period else None,
        amount=body.amount,
        due_date=body.due_date,
        description=body.description,
        is_paid=body.is_paid,
    )
    return BillInstanceDetailResponse(data=_build_instance_response(instance))


@router.post(
    "/{instance_id}/toggle-paid",
    response_model=BillInstanceDetailResponse,
    summary="Toggle paid status",
    responses={
        403: {"description": "Instance belongs to another user"},
        404: {"description": "Bill instance not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def toggle_bill_instance_paid(
    request: Request,
    instance_id: UUID,
    user: CurrentUser,
    service: BillInstanceService = Depends(get_bill_instance_service),
) -> BillInstanceDetailResponse:
    """Mark an unpaid instance paid, or a paid one unpaid."""
    instance = await service.toggle_paid(instance_id, user.id)
    return BillInstanceDetailResponse(data=_build_instance_response(instance))


@router.delete(
    "/{instance_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a bill instance",
    responses={
        204: {"description": "Bill instance deleted"},
        403: {"description": "Instance belongs to another user"},
        404: {"description": "Bill instance not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_bill_instance(
    request: Request,
    instance_id: UUID,
    user: CurrentUser,
    service: BillInstanceService = Depends(get_bill_instance_service),
) -> None:
    """Delete a single bill instance."""
    await service.delete(instance_id, user.id)
    return None


# Instances nested under their bill
bills_instances_router = APIRouter(
    prefix="/bills/{bill_id}/instances", tags=["bill-instances"]
)


@bills_instances_router.get(
    "",
    response_model=BillInstanceListResponse,
    summary="List instances of a bill",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_bill_instances_for_bill(
    request: Request,
    bill_id: UUID,
    user: CurrentUser,
    service: BillInstanceService = Depends(get_bill_instance_service),
) -> BillInstanceListResponse:
    """Get every instance of a bill, oldest period first."""
    instances = await service.get_for_bill(bill_id, user.id)
    return BillInstanceListResponse(data=[_build_instance_response(i) for i in instances])


@bills_instances_router.post(
    "",
    response_model=BillInstanceDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a bill instance",
    responses={
        201: {"description": "Bill instance created"},
        403: {"description": "Bill belongs to another user"},
        404: {"description": "Bill not found"},
        409: {"description": "Bill already has an instance for that period"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_bill_instance(
    request: Request,
    bill_id: UUID,
    body: BillInstanceCreate,
    user: CurrentUser,
    service: BillInstanceService = Depends(get_bill_instance_service),
) -> BillInstanceDetailResponse:
    """Record an unpaid instance of a bill for one billing month."""
    instance = await service.create(
        user_id=user.id,
        bill_id=bill_id,
        period=BillingPeriod.parse(body.period),
        amount=body.amount,
        due_date=body.due_date,
        description=body.description,
    )
    return BillInstanceDetailResponse(data=_build_instance_response(instance))


# Labelled instances of one profile
profile_instances_router = APIRouter(
    prefix="/profiles/{profile_id}/bill-instances", tags=["bill-instances"]
)


@profile_instances_router.get(
    "",
    response_model=BillInstanceWithNamesListResponse,
    summary="List bill instances of a profile",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_profile_bill_instances(
    request: Request,
    profile_id: UUID,
    user: CurrentUser,
    service: BillInstanceService = Depends(get_bill_instance_service),
) -> BillInstanceWithNamesListResponse:
    """Get the instances of every bill of a profile, labelled with bill names."""
    views = await service.get_for_profile(profile_id, user.id)
    return BillInstanceWithNamesListResponse(
        data=[_build_view_response(view) for view in views],
        meta={"total": len(views)},
    )


def _build_instance_response(instance: BillInstance) -> BillInstanceResponse:
    return BillInstanceResponse.model_validate(instance)


def _build_view_response(view: BillInstanceView) -> BillInstanceWithNamesResponse:
    return BillInstanceWithNamesResponse(
        **BillInstanceResponse.model_validate(view.instance).model_dump(),
        bill_name=view.bill_name,
        profile_id=view.profile_id,
        profile_name=view.profile_name,
        profile_color=view.profile_color,
    )
