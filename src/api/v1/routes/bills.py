"""Bill API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_bill_service
from api.v1.schemas.bill import (
    BillCreate,
    BillDetailResponse,
    BillListResponse,
    BillResponse,
    BillUpdate,
    EBillSchema,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.bill import Bill, EBill
from domain.services.bill_service import BillService

router = APIRouter(prefix="/bills", tags=["bills"])


@router.get(
    "/{bill_id}",
    response_model=BillDetailResponse,
    summary="Get a bill",
    responses={
        403: {"description": "Bill belongs to another user"},
        404: {"description": "Bill not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_bill(
    request: Request,
    bill_id: UUID,
    user: CurrentUser,
    service: BillService = Depends(get_bill_service),
) -> BillDetailResponse:
    """Get a bill and its current instance count."""
    item = await service.get_by_id(bill_id, user.id)
    return BillDetailResponse(data=_build_bill_response(item.bill, item.instance_count))


@router.patch(
    "/{bill_id}",
    response_model=BillDetailResponse,
    summary="Update a bill",
    responses={
        403: {"description": "Bill belongs to another user"},
        404: {"description": "Bill not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_bill(
    request: Request,
    bill_id: UUID,
    body: BillUpdate,
    user: CurrentUser,
    service: BillService = Depends(get_bill_service),
) -> BillDetailResponse:
    """Update a bill's name, e-bill account or due day."""
    changes: dict[str, object] = {}
    if "e_bill" in body.model_fields_set:
        changes["e_bill"] = EBill(**body.e_bill.model_dump()) if body.e_bill else None
    if "due_day" in body.model_fields_set:
        changes["due_day"] = body.due_day

    await service.update(bill_id=bill_id, user_id=user.id, name=body.name, **changes)
    item = await service.get_by_id(bill_id, user.id)
    return BillDetailResponse(data=_build_bill_response(item.bill, item.instance_count))


@router.delete(
    "/{bill_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a bill",
    responses={
        204: {"description": "Bill and its instances deleted"},
        403: {"description": "Bill belongs to another user"},
        404: {"description": "Bill not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_bill(
    request: Request,
    bill_id: UUID,
    user: CurrentUser,
    service: BillService = Depends(get_bill_service),
) -> None:
    """Delete a bill together with all of its instances."""
    await service.delete(bill_id, user.id)
    return None


# Bills nested under their profile
profile_bills_router = APIRouter(prefix="/profiles/{profile_id}/bills", tags=["bills"])


@profile_bills_router.get(
    "",
    response_model=BillListResponse,
    summary="List bills of a profile",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_profile_bills(
    request: Request,
    profile_id: UUID,
    user: CurrentUser,
    service: BillService = Depends(get_bill_service),
) -> BillListResponse:
    """Get all bills of a profile with their instance counts."""
    bills = await service.get_for_profile(profile_id, user.id)
    return BillListResponse(
        data=[_build_bill_response(item.bill, item.instance_count) for item in bills]
    )


@profile_bills_router.post(
    "",
    response_model=BillDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a bill",
    responses={
        201: {"description": "Bill created successfully"},
        403: {"description": "Profile belongs to another user"},
        404: {"description": "Profile not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_bill(
    request: Request,
    profile_id: UUID,
    body: BillCreate,
    user: CurrentUser,
    service: BillService = Depends(get_bill_service),
) -> BillDetailResponse:
    """Create a recurring bill under a profile."""
    bill = await service.create(
        user_id=user.id,
        profile_id=profile_id,
        name=body.name,
        e_bill=EBill(**body.e_bill.model_dump()) if body.e_bill else None,
        due_day=body.due_day,
    )
    return BillDetailResponse(data=_build_bill_response(bill, 0))


def _build_bill_response(bill: Bill, instance_count: int) -> BillResponse:
    return BillResponse(
        id=bill.id,
        profile_id=bill.profile_id,
        name=bill.name,
        e_bill=EBillSchema.model_validate(bill.e_bill) if bill.e_bill else None,
        due_day=bill.due_day,
        instance_count=instance_count,
        created_at=bill.created_at,
        updated_at=bill.updated_at,
    )
