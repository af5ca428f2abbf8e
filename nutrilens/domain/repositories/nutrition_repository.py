from abc import ABC, abstractmethod
from typing import List
from ..models.nutrition import NutritionRecord


class NutritionRepository(ABC):
    """Repository interface - defines contract for nutrition record persistence"""

    @abstractmethod
    async def insert(self, record: NutritionRecord) -> bool:
        """Persist a record. Never raises; failure is reported as False"""
        pass

    @abstractmethod
    async def list_recent(self, limit: int = 10) -> List[NutritionRecord]:
        """Most recent records first"""
        pass
