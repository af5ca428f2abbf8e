from ....domain.models.user_profile import UserDietaryProfile
from ...dto.user_profile_dto import UserProfileResponse


def to_profile_response(profile: UserDietaryProfile) -> UserProfileResponse:
    return UserProfileResponse(
        id=profile.id,
        username=profile.username,
        diet_preference=profile.diet_preference,
        diet_restrictions=profile.diet_restrictions,
        parsed_restrictions=profile.restrictions,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )
