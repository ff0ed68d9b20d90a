"""Profile API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_profile_service
from api.v1.schemas.profile import (
    AddressSchema,
    ProfileCreate,
    ProfileDetailResponse,
    ProfileListResponse,
    ProfileResponse,
    ProfileUpdate,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.profile import Address, Profile
from domain.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get(
    "",
    response_model=ProfileListResponse,
    summary="List profiles",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_profiles(
    request: Request,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileListResponse:
    """Get all profiles of the authenticated user with their bill counts."""
    profiles = await service.get_all_for_user(user.id)
    return ProfileListResponse(
        data=[_build_profile_response(item.profile, item.bill_count) for item in profiles]
    )


@router.post(
    "",
    response_model=ProfileDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a profile",
    responses={
        201: {"description": "Profile created successfully"},
        422: {"description": "Validation error"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_profile(
    request: Request,
    body: ProfileCreate,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Create a new profile owned by the caller."""
    profile = await service.create(
        user_id=user.id,
        name=body.name,
        address=Address(**body.address.model_dump()),
        color=body.color,
    )
    return ProfileDetailResponse(data=_build_profile_response(profile, 0))


@router.get(
    "/{profile_id}",
    response_model=ProfileDetailResponse,
    summary="Get a profile",
    responses={
        403: {"description": "Profile belongs to another user"},
        404: {"description": "Profile not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_profile(
    request: Request,
    profile_id: UUID,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Get a profile and its current bill count."""
    item = await service.get_by_id(profile_id, user.id)
    return ProfileDetailResponse(data=_build_profile_response(item.profile, item.bill_count))


@router.patch(
    "/{profile_id}",
    response_model=ProfileDetailResponse,
    summary="Update a profile",
    responses={
        403: {"description": "Profile belongs to another user"},
        404: {"description": "Profile not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_profile(
    request: Request,
    profile_id: UUID,
    body: ProfileUpdate,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Update a profile's name, address or color."""
    await service.update(
        profile_id=profile_id,
        user_id=user.id,
        name=body.name,
        address=Address(**body.address.model_dump()) if body.address else None,
        color=body.color,
    )
    item = await service.get_by_id(profile_id, user.id)
    return ProfileDetailResponse(data=_build_profile_response(item.profile, item.bill_count))


@router.delete(
    "/{profile_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a profile",
    responses={
        204: {"description": "Profile, its bills and their instances deleted"},
        403: {"description": "Profile belongs to another user"},
        404: {"description": "Profile not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_profile(
    request: Request,
    profile_id: UUID,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> None:
    """Delete a profile together with all of its bills and bill instances."""
    await service.delete(profile_id, user.id)
    return None


def _build_profile_response(profile: Profile, bill_count: int) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        name=profile.name,
        address=AddressSchema.model_validate(profile.address),
        color=profile.color,
        bill_count=bill_count,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )
