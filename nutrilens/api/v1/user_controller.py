# Standard library imports
from typing import List

# External package imports
from fastapi import APIRouter, HTTPException, status

# Local application imports
from ...application.dto.user_profile_dto import UserProfileResponse, UserProfileUpsertRequest
from ...application.use_cases.profile.list_profiles import ListProfilesUseCase
from ...application.use_cases.profile.upsert_profile import UpsertProfileUseCase
from ...di.container import get_container


router = APIRouter(tags=["users"])


@router.get("", response_model=List[UserProfileResponse])
async def list_users() -> List[UserProfileResponse]:
    """List every dietary profile"""
    container = get_container()
    list_profiles_use_case = container.get(ListProfilesUseCase)
    return await list_profiles_use_case.execute()


@router.post("", response_model=UserProfileResponse)
async def upsert_user(request: UserProfileUpsertRequest) -> UserProfileResponse:
    """
    Create or update a dietary profile

    Args:
        request: Username, optional diet preference and restrictions text

    Returns:
        UserProfileResponse with the stored profile
    """
    container = get_container()
    upsert_profile_use_case = container.get(UpsertProfileUseCase)

    try:
        return await upsert_profile_use_case.execute(request)
    except ValueError as exception:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exception)
        )
