# Local application imports
from ....domain.models.user_profile import UserDietaryProfile, wrap_restrictions
from ....domain.repositories.user_profile_repository import UserProfileRepository
from ...dto.user_profile_dto import UserProfileResponse, UserProfileUpsertRequest
from .profile_mapper import to_profile_response


class UpsertProfileUseCase:
    """Use case for creating or updating a dietary profile by username"""

    def __init__(self, profile_repository: UserProfileRepository) -> None:
        self.profile_repository = profile_repository

    async def execute(self, request: UserProfileUpsertRequest) -> UserProfileResponse:
        """
        Create or update a profile

        Args:
            request: Username, diet preference and plain-text restrictions

        Returns:
            UserProfileResponse for the stored profile

        Raises:
            ValueError: If the username is blank or the preference is unsupported
        """
        username = request.username.strip()

        existing = await self.profile_repository.find_by_username(username)
        diet_preference = request.diet_preference
        diet_restrictions = wrap_restrictions(request.restrictions)
        if existing is not None:
            # Omitted fields keep their stored values
            if diet_preference is None:
                diet_preference = existing.diet_preference
            if diet_restrictions is None:
                diet_restrictions = existing.diet_restrictions

        profile = UserDietaryProfile(
            id=existing.id if existing else None,
            username=username,
            diet_preference=diet_preference,
            diet_restrictions=diet_restrictions,
        )
        saved = await self.profile_repository.upsert(profile)
        return to_profile_response(saved)
