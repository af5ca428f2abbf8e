from .mongo_connection import get_database, get_nutrition_collection, get_user_profile_collection
from .mongo_nutrition_repository import MongoNutritionRepository
from .mongo_user_profile_repository import MongoUserProfileRepository

__all__ = [
    "get_database",
    "get_nutrition_collection",
    "get_user_profile_collection",
    "MongoNutritionRepository",
    "MongoUserProfileRepository",
]
