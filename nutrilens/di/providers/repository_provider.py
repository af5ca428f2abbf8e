from typing import TYPE_CHECKING
from ...domain.repositories.nutrition_repository import NutritionRepository
from ...domain.repositories.user_profile_repository import UserProfileRepository
from ...infrastructure.db.mongo_nutrition_repository import MongoNutritionRepository
from ...infrastructure.db.mongo_user_profile_repository import MongoUserProfileRepository

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class RepositoryProvider:
    """Repository registration provider - wires domain interfaces to infrastructure implementations"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register all repository implementations.
        Gets collections from database provider and creates repository instances.
        """
        container.register_singleton(
            NutritionRepository,
            MongoNutritionRepository(nutrition_collection=container.get("nutrition_collection"))
        )

        container.register_singleton(
            UserProfileRepository,
            MongoUserProfileRepository(profile_collection=container.get("user_profile_collection"))
        )
