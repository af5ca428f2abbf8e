# Standard library imports
from typing import List

# Local application imports
from ....domain.repositories.nutrition_repository import NutritionRepository
from ...dto.nutrition_dto import NutritionRecordResponse


class ListRecentNutritionUseCase:
    """Use case for the dashboard's recent nutrition feed"""

    MAX_LIMIT = 100

    def __init__(self, nutrition_repository: NutritionRepository) -> None:
        self.nutrition_repository = nutrition_repository

    async def execute(self, limit: int = 10) -> List[NutritionRecordResponse]:
        """
        List the most recent nutrition records

        Args:
            limit: Number of records (1..100)

        Returns:
            List of NutritionRecordResponse objects, newest first
        """
        if limit < 1 or limit > self.MAX_LIMIT:
            raise ValueError(f"Limit must be between 1 and {self.MAX_LIMIT}")

        records = await self.nutrition_repository.list_recent(limit)
        return [
            NutritionRecordResponse(
                id=record.id,
                user_id=record.user_id,
                img_url=record.img_url,
                timestamp=record.timestamp,
                **record.analysis.to_dict(),
            )
            for record in records
        ]
