# Standard library imports
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

# External package imports
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument

# Local application imports
from ...domain.repositories.user_profile_repository import UserProfileRepository
from ...domain.models.user_profile import UserDietaryProfile
from ...domain.constants import ProfileFields
from .mongo_connection import get_user_profile_collection


class MongoUserProfileRepository(UserProfileRepository):
    """MongoDB implementation of UserProfileRepository"""

    def __init__(self, profile_collection: Optional[AsyncIOMotorCollection] = None) -> None:
        self.profile_collection = (
            profile_collection if profile_collection is not None else get_user_profile_collection()
        )

    async def find_by_username(self, username: str) -> Optional[UserDietaryProfile]:
        """
        Find profile by username

        Args:
            username: Username to search for

        Returns:
            UserDietaryProfile if found, None otherwise
        """
        if not username:
            return None

        try:
            document = await self.profile_collection.find_one({ProfileFields.USERNAME: username})
        except Exception as e:
            raise RuntimeError(f"Error finding profile by username: {str(e)}")
        if document is None:
            return None
        return self._document_to_profile(document)

    async def list_all(self) -> List[UserDietaryProfile]:
        try:
            cursor = self.profile_collection.find({}).sort(ProfileFields.USERNAME, 1)
            documents = await cursor.to_list(length=None)
        except Exception as e:
            raise RuntimeError(f"Error listing profiles: {str(e)}")
        return [self._document_to_profile(document) for document in documents]

    async def upsert(self, profile: UserDietaryProfile) -> UserDietaryProfile:
        """
        Create or update a profile keyed by username

        Args:
            profile: Profile to store

        Returns:
            Stored profile with ID and timestamps set
        """
        if not profile:
            raise ValueError("Profile cannot be None")

        now = datetime.now(timezone.utc)
        try:
            document = await self.profile_collection.find_one_and_update(
                {ProfileFields.USERNAME: profile.username},
                {
                    "$set": {
                        ProfileFields.DIET_PREFERENCE: profile.diet_preference,
                        ProfileFields.DIET_RESTRICTIONS: profile.diet_restrictions,
                        ProfileFields.UPDATED_AT: now,
                    },
                    "$setOnInsert": {ProfileFields.CREATED_AT: now},
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except Exception as e:
            raise RuntimeError(f"Error saving profile: {str(e)}")

        if document is None:
            raise RuntimeError(f"Profile {profile.username} was saved but could not be retrieved")
        return self._document_to_profile(document)

    def _document_to_profile(self, document: Dict[str, Any]) -> UserDietaryProfile:
        return UserDietaryProfile(
            id=str(document[ProfileFields.MONGO_ID]) if document.get(ProfileFields.MONGO_ID) else None,
            username=document[ProfileFields.USERNAME],
            diet_preference=document.get(ProfileFields.DIET_PREFERENCE),
            diet_restrictions=document.get(ProfileFields.DIET_RESTRICTIONS),
            created_at=document.get(ProfileFields.CREATED_AT),
            updated_at=document.get(ProfileFields.UPDATED_AT),
        )
