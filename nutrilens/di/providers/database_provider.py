from typing import TYPE_CHECKING
from ...infrastructure.db.mongo_connection import (
    get_database,
    get_nutrition_collection,
    get_user_profile_collection,
)

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class DatabaseProvider:
    """Centralized database connection provider - single source of truth for all DB connections"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register all database collections in the container.
        Repositories receive their collection from here.
        """
        container.register_singleton("database", get_database())
        container.register_singleton("nutrition_collection", get_nutrition_collection())
        container.register_singleton("user_profile_collection", get_user_profile_collection())
