# Standard library imports
from typing import List

# Local application imports
from ....domain.repositories.user_profile_repository import UserProfileRepository
from ...dto.user_profile_dto import UserProfileResponse
from .profile_mapper import to_profile_response


class ListProfilesUseCase:
    """Use case for listing every dietary profile"""

    def __init__(self, profile_repository: UserProfileRepository) -> None:
        self.profile_repository = profile_repository

    async def execute(self) -> List[UserProfileResponse]:
        profiles = await self.profile_repository.list_all()
        return [to_profile_response(profile) for profile in profiles]
