from abc import ABC, abstractmethod
from typing import List, Optional
from ..models.user_profile import UserDietaryProfile


class UserProfileRepository(ABC):
    """Repository interface - defines contract for dietary profile data access"""

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[UserDietaryProfile]:
        """Find profile by username"""
        pass

    @abstractmethod
    async def list_all(self) -> List[UserDietaryProfile]:
        """Return every profile"""
        pass

    @abstractmethod
    async def upsert(self, profile: UserDietaryProfile) -> UserDietaryProfile:
        """Create or update a profile keyed by username"""
        pass
