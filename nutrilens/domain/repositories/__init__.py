from .nutrition_repository import NutritionRepository
from .user_profile_repository import UserProfileRepository

__all__ = ["NutritionRepository", "UserProfileRepository"]
